"""
smart_manager.py — Termination policy engine.

Decides, for every record of a process snapshot, whether the booster may
close it, then drives a terminator over the selected records and collects
one outcome per record:
  • self / foreground / protected apps are never touched
  • essential apps (launcher, dialer) are closed only in Extreme mode
  • everything else is closable

This module is pure logic — the only side effects are the terminator calls
made by apply_plan.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Protocol, Sequence

from config import ESSENTIAL_APPS, PROTECTED_APPS
from modules.errors import (
    INVALID_IDENTIFIER,
    InvalidMode,
    PermissionDenied,
    TerminationFailure,
)
from modules.report import ProcessRecord, TerminationOutcome, TerminationReport

logger = logging.getLogger(__name__)


# ── Enumerations ─────────────────────────────────────────────────────

class TerminationMode(Enum):
    NORMAL = "Normal"
    EXTREME = "Extreme"

    @classmethod
    def parse(cls, value) -> "TerminationMode":
        """Accept a TerminationMode or a case-insensitive "normal"/"extreme"."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for mode in cls:
            if mode.value.lower() == text:
                return mode
        raise InvalidMode(f"Unknown termination mode: {value!r}")


class Classification(Enum):
    PROTECTED = "Protected"
    ESSENTIAL = "Essential"
    FOREGROUND = "Foreground"
    CLOSABLE = "Closable"
    SELF = "self"
    INVALID = "invalid"


class PlanEntry(NamedTuple):
    record: ProcessRecord
    classification: Classification
    should_close: bool


class Terminator(Protocol):
    def terminate(self, identifier: str) -> None:
        """Close one process; raise PermissionDenied / TerminationFailure."""


# ── Configuration ────────────────────────────────────────────────────

_OPTION_KEYS = {"protectedApps", "essentialApps"}


@dataclass(frozen=True)
class PolicyConfig:
    """Membership patterns for the protected and essential app families."""
    protected_apps: frozenset = PROTECTED_APPS
    essential_apps: frozenset = ESSENTIAL_APPS

    def __post_init__(self):
        for name in ("protected_apps", "essential_apps"):
            value = getattr(self, name)
            # frozenset("com.foo") would be single-character patterns
            if isinstance(value, str):
                raise ValueError(f"{name} must be a collection of package names, not a string")
            patterns = frozenset(value)
            if any(not isinstance(p, str) for p in patterns):
                raise ValueError(f"{name} contains a non-string pattern")
            if any(not p for p in patterns):
                # "" is a substring of everything
                raise ValueError(f"{name} contains an empty pattern")
            object.__setattr__(self, name, patterns)

    @classmethod
    def from_options(cls, options: Optional[dict] = None) -> "PolicyConfig":
        """Build from the caller-facing option names (protectedApps, essentialApps)."""
        options = options or {}
        unknown = set(options) - _OPTION_KEYS
        if unknown:
            raise ValueError(f"Unknown policy options: {', '.join(sorted(unknown))}")
        return cls(
            protected_apps=options.get("protectedApps", PROTECTED_APPS),
            essential_apps=options.get("essentialApps", ESSENTIAL_APPS),
        )


DEFAULT_CONFIG = PolicyConfig()


def _matches(identifier: str, patterns: Iterable[str]) -> bool:
    return any(p in identifier for p in patterns)


# ── Classification ───────────────────────────────────────────────────

def classify(
    record: ProcessRecord,
    mode: TerminationMode,
    self_identifier: str,
    config: PolicyConfig = DEFAULT_CONFIG,
) -> PlanEntry:
    """Classify a single record. First matching rule wins."""
    ident = record.identifier
    if not ident:
        return PlanEntry(record, Classification.INVALID, False)
    if record.is_self or ident == self_identifier:
        return PlanEntry(record, Classification.SELF, False)
    # Foreground is exempt on every OS version; providers normalise it.
    if record.foreground:
        return PlanEntry(record, Classification.FOREGROUND, False)
    if _matches(ident, config.protected_apps):
        return PlanEntry(record, Classification.PROTECTED, False)
    if _matches(ident, config.essential_apps):
        return PlanEntry(record, Classification.ESSENTIAL, mode is TerminationMode.EXTREME)
    return PlanEntry(record, Classification.CLOSABLE, True)


def evaluate(
    snapshot: Sequence[ProcessRecord],
    mode,
    self_identifier: str,
    config: Optional[PolicyConfig] = None,
) -> List[PlanEntry]:
    """Return the termination plan for *snapshot*, in snapshot order.

    Pure and deterministic: the same snapshot always yields the same plan.
    Duplicate identifiers are not merged.
    """
    mode = TerminationMode.parse(mode)
    config = config or DEFAULT_CONFIG
    plan = [classify(r, mode, self_identifier, config) for r in snapshot]
    for entry in plan:
        logger.debug(
            "%s → %s (close=%s)",
            entry.record.identifier, entry.classification.value, entry.should_close,
        )
    return plan


# ── Execution ────────────────────────────────────────────────────────

def _attempt(record: ProcessRecord, terminator: Terminator) -> TerminationOutcome:
    """One terminator call. Failures become outcomes, never exceptions."""
    try:
        terminator.terminate(record.identifier)
    except PermissionDenied as exc:
        logger.warning("Permission denied closing %s %s", record.identifier, exc.detail)
        return TerminationOutcome.failed(record, exc.reason)
    except TerminationFailure as exc:
        logger.warning("Failed to close %s: %s", record.identifier, exc.reason)
        return TerminationOutcome.failed(record, exc.reason)
    except Exception as exc:
        logger.exception("Unexpected terminator error for %s", record.identifier)
        return TerminationOutcome.failed(record, str(exc) or type(exc).__name__)
    logger.info("Closed %s", record.identifier)
    return TerminationOutcome.terminated(record)


def apply_plan(
    plan: Sequence[PlanEntry],
    terminator: Terminator,
    mode,
    restricted_enumeration: bool = False,
) -> TerminationReport:
    """Run *terminator* over every closable entry, sequentially, in order.

    *mode* must be the one the plan was evaluated with; it labels the
    report. One attempt per entry, no retries. The report holds exactly
    one outcome per plan entry.
    """
    outcomes: List[TerminationOutcome] = []
    for record, classification, should_close in plan:
        if classification is Classification.INVALID:
            outcomes.append(TerminationOutcome.failed(record, INVALID_IDENTIFIER))
        elif not should_close:
            outcomes.append(TerminationOutcome.skipped(record, classification.value))
        else:
            outcomes.append(_attempt(record, terminator))

    report = TerminationReport(
        outcomes=outcomes,
        mode=TerminationMode.parse(mode).value,
        restricted_enumeration=restricted_enumeration,
    )
    counts = report.counts()
    logger.info(
        "Boost run (%s): %d terminated, %d skipped, %d failed",
        report.mode, counts["terminated"], counts["skipped"], counts["failed"],
    )
    return report
