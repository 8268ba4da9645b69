"""
Configuration constants for the Game Booster termination policy.
"""

# ── ADB & Logging ────────────────────────────────────────────────────
ADB_TIMEOUT_SECONDS = 10            # Max wait time for any ADB command
LOG_LEVEL = "INFO"

# Package of the booster itself; never closed by its own policy.
SELF_PACKAGE = "com.boostgamefaster"

# ── App Families ─────────────────────────────────────────────────────
# Matched by substring so OEM suffixes (e.g. com.android.launcher3)
# still hit. Case-sensitive.

# NEVER closed, in any mode.
PROTECTED_APPS = frozenset({
    "com.android.systemui",
    "com.android.phone",
    "com.android.settings",
})

# Closed only in Extreme mode.
ESSENTIAL_APPS = frozenset({
    "com.android.launcher",
    "com.android.dialer",
})

# ── Foreground Detection ─────────────────────────────────────────────
# OOM codes from `dumpsys activity processes` that mean "on screen now".
FOREGROUND_OOM_CODES = frozenset({"fore", "fg", "top"})

# ── Manufacturer Variants ────────────────────────────────────────────
# Which snapshot strategy each device family needs. Restricted families
# cannot list other apps' processes, so the snapshot is built from the
# recent-task list and carries task ids instead of PIDs.
MANUFACTURER_VARIANTS = {
    "generic": "processes",
    "xiaomi":  "recents",
    "samsung": "recents",
}

# ── Demo Data Defaults ───────────────────────────────────────────────
# (package, OOM code) — OOM code decides foreground like the live reader.
DEMO_PACKAGES = [
    ("com.tencent.ig",                  "top"),
    ("com.whatsapp",                    "bak"),
    ("com.instagram.android",           "cch"),
    ("com.google.android.youtube",      "prev"),
    ("com.android.chrome",              "cch"),
    ("com.spotify.music",               "bak"),
    ("com.google.android.apps.nexuslauncher", "home"),
    ("com.android.launcher3",           "home"),
    ("com.android.dialer",              "bak"),
    ("com.android.systemui",            "pers"),
    ("com.android.phone",               "pers"),
    ("com.android.settings",            "cch"),
    ("com.facebook.katana",             "cch"),
    ("com.google.android.gms",          "vis"),
    (SELF_PACKAGE,                      "vis"),
]

# Demo terminator refuses these, the way restricted apps throw
# SecurityException on a real device.
DEMO_DENIED_PACKAGES = frozenset({
    "com.google.android.gms",
})
