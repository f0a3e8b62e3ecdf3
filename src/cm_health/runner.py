from __future__ import annotations
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .checks.base import CheckRegistry
from .errors import NoDataError, QueryError
from .models import CLASSIFIED_STATUSES, CheckDefinition, CheckResult, Report, Status

log = logging.getLogger(__name__)


def _describe(exc: BaseException) -> str:
    text = str(exc).strip()
    if not text:
        return type(exc).__name__
    if isinstance(exc, QueryError):
        return text
    return f"{type(exc).__name__}: {text}"


class Runner:
    """Runs every registered check once, in order, against one connection.

    Each check runs inside its own failure boundary, so a broken query turns
    into a Critical (or Unknown) row instead of aborting the report.
    """

    def __init__(
        self,
        connection: Any,
        target: str,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.connection = connection
        self.target = target
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run(self, registry: CheckRegistry) -> Report:
        report = Report(target=self.target, generated_at=self._clock())
        for title, definitions in registry.grouped():
            section = report.section(title)
            for definition in definitions:
                section.append(self.run_check(definition))
        log.info("Ran %d checks in %d sections", len(report.results()), len(report.sections))
        return report

    def run_check(self, definition: CheckDefinition) -> CheckResult:
        source = definition.source or definition.name
        log.debug("Running %s / %s", definition.section, definition.name)
        started = time.perf_counter()
        stage = "query"
        try:
            raw = definition.query(self.connection)
            stage = "classify"
            status, note = definition.classify(raw)
            if not isinstance(status, Status) or status not in CLASSIFIED_STATUSES:
                raise ValueError(f"classifier returned unsupported status {status!r}")
        except NoDataError as e:
            return self._failed(definition, Status.UNKNOWN, f"no data from {e.source}", _describe(e), started)
        except Exception as e:
            if stage == "query":
                where = e.source if isinstance(e, QueryError) else source
                note = f"query {where} failed"
            else:
                note = f"could not classify result of {source}"
            return self._failed(definition, Status.CRITICAL, note, _describe(e), started)
        return CheckResult(
            section=definition.section,
            name=definition.name,
            status=status,
            note=str(note),
            duration_ms=_elapsed_ms(started),
        )

    def _failed(
        self,
        definition: CheckDefinition,
        status: Status,
        note: str,
        error: str,
        started: float,
    ) -> CheckResult:
        log.warning("%s / %s: %s (%s)", definition.section, definition.name, note, error)
        return CheckResult(
            section=definition.section,
            name=definition.name,
            status=status,
            note=note,
            error=error,
            duration_ms=_elapsed_ms(started),
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
