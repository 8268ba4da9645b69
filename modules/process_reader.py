"""
process_reader.py — Build process snapshots from an attached Android device.

Two ADB sources are supported, chosen per manufacturer family:
  • `dumpsys activity processes`  → every app process with PID and OOM level
  • `dumpsys activity recents`    → recent tasks only (restricted OEM builds),
                                    task ids instead of PIDs

Both normalise "is this on screen right now" into ProcessRecord.foreground,
so the policy engine never has to know which OS version or OEM it runs on.
"""

import logging
import re
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Tuple

from config import FOREGROUND_OOM_CODES, MANUFACTURER_VARIANTS
from modules.adb_utils import run_adb
from modules.errors import AdbError, CaptureError, is_permission_denial
from modules.report import ProcessRecord

logger = logging.getLogger(__name__)


class SnapshotProvider(Protocol):
    restricted_enumeration: bool

    def capture(self, self_identifier: str) -> List[ProcessRecord]:
        """Return a de-duplicated snapshot; raise CaptureError if denied."""


# ── Regex ────────────────────────────────────────────────────────────

# Matches lines from `dumpsys activity processes` on Android 10-15:
#   Android <15:  Proc #42: fore  T/A/FGS  trm: 0 3456:com.whatsapp/u0a123 (service)
#   Android 15:   Proc # 0: fg     T/A/TOP  LCMNFUA  t: 0 9993:com.android.settings/1000 (top-activity)
#                 PERS #98: sys    F/ /PER  LCMNFUA  t: 0 2052:system/1000 (fixed)
_RE_PROC_LINE = re.compile(
    r"(?:Proc|PERS)\s+#\s*\d+:\s+(\w+)\s+\S+\s+\S+\s+\S*\s*(?:trm|t):\s+\d+\s+(\d+):(\S+?)(?:/(\S+))?\s+\((.+?)\)"
    , re.MULTILINE
)

# Matches lines from `dumpsys activity recents`:
#   * Recent #0: Task{6e6b2a1 #123 type=standard A=10145:com.whatsapp U=0 …}
#   * Recent #1: TaskRecord{9f1c2d0 #87 A=com.android.chrome U=0 StackId=1 sz=1}
_RE_RECENT_LINE = re.compile(
    r"Recent\s+#\d+:\s+Task(?:Record)?\{\S+\s+#(\d+)\s.*?A=(?:\d+:)?([\w.]+)"
)

# Matches the resumed activity in `dumpsys activity activities`:
#   mResumedActivity: ActivityRecord{a1b2c3 u0 com.tencent.ig/.MainActivity t123}
#   topResumedActivity=ActivityRecord{a1b2c3 u0 com.tencent.ig/.MainActivity t123}
_RE_RESUMED = re.compile(
    r"(?:mResumedActivity|topResumedActivity)[:=]\s*ActivityRecord\{\S+\s+u\d+\s+([\w.]+)/"
)


def _dumpsys(section: str) -> str:
    """Run `dumpsys activity <section>`, translating failures to CaptureError."""
    try:
        raw = run_adb(f"dumpsys activity {section}")
    except AdbError as exc:
        raise CaptureError(f"Cannot enumerate processes: {exc}") from exc
    if is_permission_denial(raw):
        raise CaptureError(f"Process enumeration denied: {raw.strip().splitlines()[0]}")
    return raw


def package_of(identifier: str) -> str:
    """Package part of a process name: "com.foo:remote" → "com.foo"."""
    return identifier.split(":", 1)[0]


def _dedupe(
    entries: Iterable[Tuple[str, Optional[int], bool]],
    self_identifier: str,
) -> List[ProcessRecord]:
    """Build records in input order, keeping the first entry per identifier.

    Foreground and self are decided per package: force-stop takes down
    every process of a package, so a background ":sub" process of the
    on-screen app (or of the booster) must be exempt too.
    """
    entries = list(entries)
    foreground_packages = {package_of(ident) for ident, _, fg in entries if fg}
    self_package = package_of(self_identifier)
    seen = set()
    records: List[ProcessRecord] = []
    for identifier, handle, foreground in entries:
        if identifier in seen:
            continue
        seen.add(identifier)
        package = package_of(identifier)
        records.append(ProcessRecord(
            identifier=identifier,
            native_handle=handle,
            foreground=foreground or package in foreground_packages,
            is_self=package == self_package,
        ))
    return records


# ── Parsers ──────────────────────────────────────────────────────────

def parse_processes(raw: str) -> List[Tuple[str, int, bool]]:
    """Parse `dumpsys activity processes` → [(process name, pid, foreground)]."""
    entries = []
    for m in _RE_PROC_LINE.finditer(raw):
        oom_code = m.group(1)   # e.g. "fore", "bak"
        pid = int(m.group(2))
        entries.append((m.group(3), pid, oom_code in FOREGROUND_OOM_CODES))
    return entries


def parse_recents(raw: str) -> List[Tuple[str, int]]:
    """Parse `dumpsys activity recents` → [(package, task id)]."""
    return [(m.group(2), int(m.group(1))) for m in _RE_RECENT_LINE.finditer(raw)]


def parse_resumed_package(raw: str) -> Optional[str]:
    """Return the package of the resumed (on-screen) activity, if any."""
    m = _RE_RESUMED.search(raw)
    return m.group(1) if m else None


# ── Providers ────────────────────────────────────────────────────────

class AdbProcessProvider:
    """Full process list with real PIDs (stock Android, most OEMs)."""

    restricted_enumeration = False

    def capture(self, self_identifier: str) -> List[ProcessRecord]:
        records = _dedupe(parse_processes(_dumpsys("processes")), self_identifier)
        logger.debug("Captured %d processes", len(records))
        return records


class AdbRecentTasksProvider:
    """Recent-task list for OEM builds that hide other apps' processes.

    Handles are task ids, not PIDs.
    """

    restricted_enumeration = True

    def capture(self, self_identifier: str) -> List[ProcessRecord]:
        tasks = parse_recents(_dumpsys("recents"))
        resumed = parse_resumed_package(_dumpsys("activities"))
        records = _dedupe(
            ((pkg, task_id, pkg == resumed) for pkg, task_id in tasks),
            self_identifier,
        )
        logger.debug("Captured %d recent tasks (resumed: %s)", len(records), resumed)
        return records


# ── Manufacturer selection ───────────────────────────────────────────

class ManufacturerVariant(Enum):
    GENERIC = "generic"
    XIAOMI = "xiaomi"
    SAMSUNG = "samsung"

    @classmethod
    def from_manufacturer(cls, manufacturer: Optional[str]) -> "ManufacturerVariant":
        """Map ro.product.manufacturer (any case) to a variant; unknown → GENERIC."""
        text = (manufacturer or "").strip().lower()
        for variant in cls:
            if variant.value == text:
                return variant
        return cls.GENERIC


_STRATEGIES = {
    "processes": AdbProcessProvider,
    "recents": AdbRecentTasksProvider,
}


def provider_for(manufacturer: Optional[str]) -> SnapshotProvider:
    """Return the snapshot provider suited to *manufacturer*."""
    variant = ManufacturerVariant.from_manufacturer(manufacturer)
    provider = _STRATEGIES[MANUFACTURER_VARIANTS[variant.value]]()
    logger.info("Using %s for manufacturer %r", type(provider).__name__, manufacturer)
    return provider
