"""
close_policy.py — Caller-facing "close background apps" operation.

Composes a snapshot provider, the policy engine and a terminator:

    capture → evaluate → apply_plan → TerminationReport

Each run is independent; the object keeps no state between runs. Runs are
expected to be single-flight: callers that may trigger two at once must
serialise them themselves.
"""

import logging
from typing import List, Optional

from config import SELF_PACKAGE
from modules.adb_utils import AdbTerminator
from modules.demo_data import DemoProcessProvider, DemoTerminator
from modules.process_reader import SnapshotProvider, provider_for
from modules.report import TerminationReport
from modules.smart_manager import (
    PlanEntry,
    PolicyConfig,
    Terminator,
    TerminationMode,
    apply_plan,
    evaluate,
)

logger = logging.getLogger(__name__)


class ClosePolicy:

    def __init__(
        self,
        provider: SnapshotProvider,
        terminator: Terminator,
        self_identifier: str = SELF_PACKAGE,
        config: Optional[PolicyConfig] = None,
    ):
        self.provider = provider
        self.terminator = terminator
        self.self_identifier = self_identifier
        self.config = config or PolicyConfig()

    @classmethod
    def for_device(
        cls,
        manufacturer: Optional[str],
        self_identifier: str = SELF_PACKAGE,
        options: Optional[dict] = None,
    ) -> "ClosePolicy":
        """ADB-backed policy for the attached device."""
        return cls(
            provider_for(manufacturer),
            AdbTerminator(),
            self_identifier,
            PolicyConfig.from_options(options),
        )

    @classmethod
    def demo(
        cls,
        self_identifier: str = SELF_PACKAGE,
        options: Optional[dict] = None,
        seed: Optional[int] = None,
    ) -> "ClosePolicy":
        """Policy over the simulated demo device."""
        return cls(
            DemoProcessProvider(seed=seed),
            DemoTerminator(),
            self_identifier,
            PolicyConfig.from_options(options),
        )

    def preview(self, mode="Normal") -> List[PlanEntry]:
        """Capture and classify without closing anything."""
        snapshot = self.provider.capture(self.self_identifier)
        return evaluate(snapshot, mode, self.self_identifier, self.config)

    def run(self, mode="Normal") -> TerminationReport:
        """Close every eligible background process and report per process.

        Raises CaptureError (before anything is closed) if the snapshot
        cannot be taken; all per-process failures end up in the report.
        """
        mode = TerminationMode.parse(mode)
        snapshot = self.provider.capture(self.self_identifier)
        logger.info("Boost run (%s) over %d processes", mode.value, len(snapshot))
        plan = evaluate(snapshot, mode, self.self_identifier, self.config)
        return apply_plan(
            plan,
            self.terminator,
            mode=mode,
            restricted_enumeration=self.provider.restricted_enumeration,
        )
