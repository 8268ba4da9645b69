"""
app.py — Streamlit panel for the Game Booster termination policy.

Launch with:
    streamlit run app.py

The panel auto-detects whether a real Android device is attached via ADB.
If not, it switches to demo mode with a simulated process list.
"""

import sys
import os

# ── Ensure project root is on sys.path so `config` / `modules` resolve ──
_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import logging
from datetime import datetime

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from config import LOG_LEVEL, SELF_PACKAGE
from modules.adb_utils import get_device_info, is_device_connected
from modules.close_policy import ClosePolicy
from modules.demo_data import get_fake_device_info
from modules.errors import CaptureError
from modules.process_reader import ManufacturerVariant

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("booster.app")


# ═══════════════════════════════════════════════════════════════════════
#  PAGE CONFIG
# ═══════════════════════════════════════════════════════════════════════

st.set_page_config(
    page_title="Game Booster",
    page_icon="🎮",
    layout="wide",
)

if "run_log" not in st.session_state:
    st.session_state.run_log = []           # list of {time, mode, terminated, skipped, failed}
if "last_report" not in st.session_state:
    st.session_state.last_report = None


# ═══════════════════════════════════════════════════════════════════════
#  DEVICE / POLICY
# ═══════════════════════════════════════════════════════════════════════

@st.cache_data(ttl=30)
def detect_device():
    """Return (is_live, device_info). Cached so ADB is not hit on every rerun."""
    if is_device_connected():
        return True, get_device_info()
    return False, get_fake_device_info()


is_live, device_info = detect_device()

if is_live:
    policy = ClosePolicy.for_device(device_info.get("manufacturer"), SELF_PACKAGE)
else:
    policy = ClosePolicy.demo(SELF_PACKAGE, seed=7)


# ═══════════════════════════════════════════════════════════════════════
#  SIDEBAR
# ═══════════════════════════════════════════════════════════════════════

with st.sidebar:
    st.title("📱 Device Info")
    st.write(f"**Model:** {device_info['model']}")
    st.write(f"**Manufacturer:** {device_info['manufacturer']}")
    st.write(f"**Android:** {device_info['android_version']}")
    variant = ManufacturerVariant.from_manufacturer(device_info["manufacturer"])
    st.write(f"**Variant:** {variant.value}")
    st.caption("🟢 Live device" if is_live else "🟡 Demo mode (no device)")

    if st.button("🔄 Re-detect Device"):
        detect_device.clear()
        st.rerun()

    st.divider()
    mode = st.radio(
        "Boost mode",
        ["Normal", "Extreme"],
        help="Extreme also closes the launcher and dialer.",
    )


# ═══════════════════════════════════════════════════════════════════════
#  PLAN PREVIEW
# ═══════════════════════════════════════════════════════════════════════

st.title("🎮 Game Booster — Close Background Apps")

try:
    plan = policy.preview(mode)
except CaptureError as exc:
    logger.error("Snapshot failed: %s", exc)
    st.error(f"Cannot read running processes: {exc}")
    st.stop()

st.subheader(f"Plan ({mode})")
st.dataframe(
    pd.DataFrame([{
        "Process": e.record.identifier,
        "Handle": e.record.native_handle,
        "Class": e.classification.value,
        "Close": "✅" if e.should_close else "—",
    } for e in plan]),
    use_container_width=True,
    hide_index=True,
)


# ═══════════════════════════════════════════════════════════════════════
#  RUN
# ═══════════════════════════════════════════════════════════════════════

if st.button("⚡ Boost Now", type="primary"):
    try:
        with st.spinner("Closing background apps..."):
            report = policy.run(mode)
    except CaptureError as exc:
        st.error(f"Boost aborted: {exc}")
    else:
        counts = report.counts()
        st.session_state.last_report = report
        st.session_state.run_log.append({
            "time": datetime.now().strftime("%H:%M:%S"),
            "mode": report.mode,
            **counts,
        })
        st.toast(f"Closed {counts['terminated']} app(s)")

report = st.session_state.last_report
if report is not None:
    st.subheader("Last Report")
    col_table, col_pie = st.columns([3, 2])
    col_table.dataframe(pd.DataFrame(report.to_dicts()), use_container_width=True, hide_index=True)

    counts = report.counts()
    fig_pie = go.Figure(go.Pie(
        labels=list(counts.keys()),
        values=list(counts.values()),
        hole=0.45,
        marker=dict(colors=["#10b981", "#6366f1", "#ef4444"]),
    ))
    fig_pie.update_layout(height=300, margin=dict(t=20, b=20))
    col_pie.plotly_chart(fig_pie, use_container_width=True)

if st.session_state.run_log:
    st.subheader("📋 Run Log")
    st.dataframe(pd.DataFrame(st.session_state.run_log), use_container_width=True, hide_index=True)
