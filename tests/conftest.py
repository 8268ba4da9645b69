"""Shared fixtures: in-memory snapshot providers and terminators."""

import pytest

from modules.errors import CaptureError, PermissionDenied, TerminationFailure
from modules.report import ProcessRecord

SELF = "com.app.self"

# `dumpsys activity processes` where packages have ":sub" processes.
SUB_PROCESSES_DUMP = """\
    Proc # 0: fg     T/A/TOP  LCMNFUA  t: 0 9993:com.tencent.ig/u0a201 (top-activity)
    Proc #12: bak    S/ /LAST trm: 0 9994:com.tencent.ig:plugin/u0a201 (service)
    Proc #13: vis    S/ /FGS  trm: 0 4200:com.boostgamefaster/u0a300 (service)
    Proc #14: bak    S/ /LAST trm: 0 4201:com.boostgamefaster:remote/u0a300 (service)
    Proc #15: cch    S/ /CEM  trm: 0 5100:com.whatsapp:push/u0a123 (cch-empty)
"""


class StaticProvider:
    """Returns a fixed snapshot."""

    def __init__(self, records, restricted_enumeration=False):
        self.records = list(records)
        self.restricted_enumeration = restricted_enumeration
        self.captures = 0

    def capture(self, self_identifier):
        self.captures += 1
        return list(self.records)


class FailingProvider:
    restricted_enumeration = False

    def capture(self, self_identifier):
        raise CaptureError("enumeration denied")


class RecordingTerminator:
    """Records every call; denies / fails / crashes on the configured ids."""

    def __init__(self, denied=(), failing=(), crashing=()):
        self.denied = set(denied)
        self.failing = set(failing)
        self.crashing = set(crashing)
        self.calls = []

    def terminate(self, identifier):
        self.calls.append(identifier)
        if identifier in self.denied:
            raise PermissionDenied(identifier)
        if identifier in self.failing:
            raise TerminationFailure(identifier, "process not found")
        if identifier in self.crashing:
            raise OSError("binder died")


def rec(identifier, foreground=False, handle=None):
    return ProcessRecord(
        identifier=identifier,
        native_handle=handle,
        foreground=foreground,
        is_self=identifier == SELF,
    )


@pytest.fixture
def terminator():
    return RecordingTerminator()


@pytest.fixture
def mixed_snapshot():
    return [
        rec(SELF, handle=1),
        rec("com.tencent.ig", foreground=True, handle=2),
        rec("com.android.systemui", handle=3),
        rec("com.android.launcher3", handle=4),
        rec("com.whatsapp", handle=5),
        rec("com.android.dialer", handle=6),
        rec("com.spotify.music", handle=7),
    ]
