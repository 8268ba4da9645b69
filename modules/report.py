"""
report.py — Snapshot records and the per-process termination report.

A snapshot is a plain list of ProcessRecord; the report is what the caller
(UI / bridge) receives after a run.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

TERMINATED = "terminated"
SKIPPED = "skipped"
FAILED = "failed"


# ── Snapshot ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProcessRecord:
    """One running process or task as seen at capture time."""
    identifier: str                     # package / process name
    native_handle: Optional[int] = None # pid, or task id on restricted devices
    foreground: bool = False
    is_self: bool = False


# ── Outcomes ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TerminationOutcome:
    identifier: str
    result: str                         # "terminated" | "skipped" | "failed"
    reason: str = ""                    # classification or failure reason
    native_handle: Optional[int] = None

    @property
    def tag(self) -> str:
        """Literal result tag, e.g. ``skipped:Protected``."""
        if self.result == TERMINATED:
            return TERMINATED
        return f"{self.result}:{self.reason}"

    @classmethod
    def terminated(cls, record: ProcessRecord) -> "TerminationOutcome":
        return cls(record.identifier, TERMINATED, "", record.native_handle)

    @classmethod
    def skipped(cls, record: ProcessRecord, classification: str) -> "TerminationOutcome":
        return cls(record.identifier, SKIPPED, classification, record.native_handle)

    @classmethod
    def failed(cls, record: ProcessRecord, reason: str) -> "TerminationOutcome":
        return cls(record.identifier, FAILED, reason, record.native_handle)


@dataclass
class TerminationReport:
    """Ordered outcomes, exactly one per snapshot record."""
    outcomes: List[TerminationOutcome] = field(default_factory=list)
    mode: str = "Normal"
    restricted_enumeration: bool = False

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self):
        return iter(self.outcomes)

    def tags(self) -> List[str]:
        return [o.tag for o in self.outcomes]

    def terminated(self) -> List[str]:
        """Identifiers that were actually closed, in order."""
        return [o.identifier for o in self.outcomes if o.result == TERMINATED]

    def counts(self) -> Dict[str, int]:
        """Number of outcomes per result ({"terminated": 3, "skipped": 5, …})."""
        counter = Counter(o.result for o in self.outcomes)
        return {key: counter.get(key, 0) for key in (TERMINATED, SKIPPED, FAILED)}

    def to_dicts(self) -> List[Dict[str, object]]:
        """Bridge-friendly rows: ``[{"identifier": …, "result": "<tag>"}]``.

        Handles are only included when they are real PIDs; on restricted
        devices they are task ids and would mislead the caller.
        """
        rows = []
        for o in self.outcomes:
            row: Dict[str, object] = {"identifier": o.identifier, "result": o.tag}
            if not self.restricted_enumeration and o.native_handle is not None:
                row["handle"] = o.native_handle
            rows.append(row)
        return rows
