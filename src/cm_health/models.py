from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple


class Status(str, Enum):
    HEALTHY = "Healthy"
    WARNING = "Warning"
    CRITICAL = "Critical"
    MANUAL_CHECK = "ManualCheck"
    UNKNOWN = "Unknown"


# Statuses a classifier may return for a query that succeeded.
CLASSIFIED_STATUSES = frozenset({Status.HEALTHY, Status.WARNING, Status.MANUAL_CHECK})

Classification = Tuple[Status, str]


@dataclass(frozen=True)
class CheckDefinition:
    """One independent query plus the classifier that turns its value into a status."""
    section: str
    name: str
    query: Callable[[Any], Any]
    classify: Callable[[Any], Classification]
    source: str = ""


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single check run."""
    section: str
    name: str
    status: Status
    note: str
    error: Optional[str] = None
    duration_ms: int = 0

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class Section:
    """Collection of related check results."""
    title: str
    results: List[CheckResult] = field(default_factory=list)

    def append(self, result: CheckResult) -> None:
        self.results.append(result)

    def has_critical(self) -> bool:
        return any(r.status in (Status.CRITICAL, Status.UNKNOWN) for r in self.results)


@dataclass
class Report:
    """Ordered sections of results for one target, built by the runner."""
    target: str
    generated_at: datetime
    sections: List[Section] = field(default_factory=list)

    def section(self, title: str) -> Section:
        for s in self.sections:
            if s.title == title:
                return s
        s = Section(title=title)
        self.sections.append(s)
        return s

    def results(self) -> List[CheckResult]:
        return [r for s in self.sections for r in s.results]

    def counts(self) -> Dict[Status, int]:
        out = {status: 0 for status in Status}
        for r in self.results():
            out[r.status] += 1
        return out

    def has_critical(self) -> bool:
        return any(s.has_critical() for s in self.sections)
