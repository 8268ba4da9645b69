"""Tests for the ADB snapshot providers and dumpsys parsers."""

import pytest

from modules import process_reader
from modules.errors import AdbError, CaptureError
from modules.process_reader import (
    AdbProcessProvider,
    AdbRecentTasksProvider,
    ManufacturerVariant,
    parse_processes,
    parse_recents,
    parse_resumed_package,
)
from tests.conftest import SUB_PROCESSES_DUMP

PROCESSES_DUMP = """\
ACTIVITY MANAGER RUNNING PROCESSES (dumpsys activity processes)
  PID mappings:
  Process LRU list (sorted by oom_adj, 32 total, non-act at 3, non-svc at 3):
    Proc # 0: fg     T/A/TOP  LCMNFUA  t: 0 9993:com.tencent.ig/u0a201 (top-activity)
    PERS #98: sys    F/ /PER  LCMNFUA  t: 0 2052:system/1000 (fixed)
    PERS #97: pers   F/ /PER  LCMNFUA  t: 0 2310:com.android.systemui/u0a77 (fixed)
    Proc # 5: home   S/ /HOM  LCMNFUA  t: 0 3120:com.android.launcher3/u0a88 (home)
    Proc #42: bak    S/ /LAST trm: 0 3456:com.whatsapp/u0a123 (service)
    Proc #43: cch    S/ /CEM  trm: 0 3457:com.whatsapp/u0a123 (cch-empty)
    Proc #44: cch    S/ /CEM  trm: 0 4100:com.google.android.gms:persistent/u0a12 (cch-empty)
    Proc #45: vis    S/ /FGS  trm: 0 4200:com.boostgamefaster/u0a300 (service)
"""

RECENTS_DUMP = """\
ACTIVITY MANAGER RECENT TASKS (dumpsys activity recents)
  Recent tasks:
  * Recent #0: Task{6e6b2a1 #123 type=standard A=10145:com.tencent.ig U=0 visible=true mode=fullscreen sz=1}
  * Recent #1: TaskRecord{9f1c2d0 #87 A=com.android.chrome U=0 StackId=1 sz=1}
  * Recent #2: Task{11aa22b #90 type=standard A=10146:com.whatsapp U=0 visible=false sz=1}
  * Recent #3: Task{33cc44d #91 type=standard A=10146:com.whatsapp U=0 visible=false sz=1}
"""

ACTIVITIES_DUMP = """\
  ResumedActivity: ActivityRecord{a1b2c3 u0 com.tencent.ig/.MainActivity t123}
  mResumedActivity: ActivityRecord{a1b2c3 u0 com.tencent.ig/.MainActivity t123}
"""


def fake_adb(outputs):
    def run_adb(command):
        return outputs[command]
    return run_adb


class TestParsers:
    def test_parse_processes(self):
        entries = parse_processes(PROCESSES_DUMP)
        assert entries[0] == ("com.tencent.ig", 9993, True)
        assert ("com.android.launcher3", 3120, False) in entries
        assert ("com.google.android.gms:persistent", 4100, False) in entries
        assert len(entries) == 8

    def test_parse_recents(self):
        assert parse_recents(RECENTS_DUMP) == [
            ("com.tencent.ig", 123),
            ("com.android.chrome", 87),
            ("com.whatsapp", 90),
            ("com.whatsapp", 91),
        ]

    def test_parse_resumed_package(self):
        assert parse_resumed_package(ACTIVITIES_DUMP) == "com.tencent.ig"
        assert parse_resumed_package("nothing resumed") is None


class TestAdbProcessProvider:
    def test_capture_dedupes_and_flags(self, monkeypatch):
        monkeypatch.setattr(
            process_reader, "run_adb",
            fake_adb({"dumpsys activity processes": PROCESSES_DUMP}),
        )
        records = AdbProcessProvider().capture("com.boostgamefaster")
        ids = [r.identifier for r in records]
        assert ids.count("com.whatsapp") == 1
        assert records[ids.index("com.whatsapp")].native_handle == 3456
        assert records[0].foreground is True
        assert records[ids.index("com.boostgamefaster")].is_self is True
        assert AdbProcessProvider.restricted_enumeration is False

    def test_adb_failure_becomes_capture_error(self, monkeypatch):
        def broken(command):
            raise AdbError("ADB not found.")
        monkeypatch.setattr(process_reader, "run_adb", broken)
        with pytest.raises(CaptureError):
            AdbProcessProvider().capture("com.boostgamefaster")

    def test_permission_denial_becomes_capture_error(self, monkeypatch):
        monkeypatch.setattr(
            process_reader, "run_adb",
            fake_adb({"dumpsys activity processes": "Permission Denial: can't dump ActivityManager"}),
        )
        with pytest.raises(CaptureError):
            AdbProcessProvider().capture("com.boostgamefaster")

    def test_sub_processes_inherit_foreground_and_self(self, monkeypatch):
        """Force-stop works per package, so ":sub" processes share the package's exemptions."""
        monkeypatch.setattr(
            process_reader, "run_adb",
            fake_adb({"dumpsys activity processes": SUB_PROCESSES_DUMP}),
        )
        records = AdbProcessProvider().capture("com.boostgamefaster")
        assert [(r.identifier, r.foreground, r.is_self) for r in records] == [
            ("com.tencent.ig", True, False),
            ("com.tencent.ig:plugin", True, False),
            ("com.boostgamefaster", False, True),
            ("com.boostgamefaster:remote", False, True),
            ("com.whatsapp:push", False, False),
        ]

    def test_lowercase_permission_denial_becomes_capture_error(self, monkeypatch):
        monkeypatch.setattr(
            process_reader, "run_adb",
            fake_adb({"dumpsys activity processes": "permission denial: not allowed"}),
        )
        with pytest.raises(CaptureError):
            AdbProcessProvider().capture("com.boostgamefaster")


class TestAdbRecentTasksProvider:
    def test_capture_uses_task_ids_and_resumed_activity(self, monkeypatch):
        monkeypatch.setattr(process_reader, "run_adb", fake_adb({
            "dumpsys activity recents": RECENTS_DUMP,
            "dumpsys activity activities": ACTIVITIES_DUMP,
        }))
        records = AdbRecentTasksProvider().capture("com.boostgamefaster")
        assert [(r.identifier, r.native_handle, r.foreground) for r in records] == [
            ("com.tencent.ig", 123, True),
            ("com.android.chrome", 87, False),
            ("com.whatsapp", 90, False),
        ]
        assert AdbRecentTasksProvider.restricted_enumeration is True


class TestManufacturerVariant:
    @pytest.mark.parametrize("text, variant", [
        ("Xiaomi", ManufacturerVariant.XIAOMI),
        ("SAMSUNG ", ManufacturerVariant.SAMSUNG),
        ("OnePlus", ManufacturerVariant.GENERIC),
        ("", ManufacturerVariant.GENERIC),
        (None, ManufacturerVariant.GENERIC),
    ])
    def test_from_manufacturer(self, text, variant):
        assert ManufacturerVariant.from_manufacturer(text) is variant
