"""
demo_data.py — Simulated device for demo / presentation mode.

Activated automatically when no Android device is connected via ADB.
Provides the same provider / terminator interface as the ADB classes so
ClosePolicy does not need any branching.
"""

import logging
import random
from typing import Dict, List, Optional

from config import DEMO_DENIED_PACKAGES, DEMO_PACKAGES, FOREGROUND_OOM_CODES
from modules.errors import PermissionDenied
from modules.report import ProcessRecord

logger = logging.getLogger(__name__)


class DemoProcessProvider:
    """Returns DEMO_PACKAGES as a snapshot, with random PIDs.

    Pass *seed* for reproducible PIDs.
    """

    restricted_enumeration = False

    def __init__(self, packages=None, seed: Optional[int] = None):
        self._packages = list(DEMO_PACKAGES if packages is None else packages)
        self._rng = random.Random(seed)

    def capture(self, self_identifier: str) -> List[ProcessRecord]:
        return [
            ProcessRecord(
                identifier=package,
                native_handle=self._rng.randint(1000, 30000),
                foreground=oom_code in FOREGROUND_OOM_CODES,
                is_self=package == self_identifier,
            )
            for package, oom_code in self._packages
        ]


class DemoTerminator:
    """Pretends to force-stop packages; refuses the ones in *denied*.

    Every call is recorded in ``calls``.
    """

    def __init__(self, denied=None):
        self.denied = frozenset(DEMO_DENIED_PACKAGES if denied is None else denied)
        self.calls: List[str] = []

    def terminate(self, identifier: str) -> None:
        self.calls.append(identifier)
        if identifier in self.denied:
            raise PermissionDenied(identifier, "java.lang.SecurityException (demo)")
        logger.debug("Demo force-stop %s", identifier)


def get_fake_device_info() -> Dict[str, str]:
    """Return demo device metadata."""
    return {
        "model": "Pixel 7 (Demo)",
        "manufacturer": "Google",
        "android_version": "14",
    }
