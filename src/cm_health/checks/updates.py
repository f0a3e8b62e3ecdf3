from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable

from ..classify import above
from ..config import Settings
from ..connection import ManagementConnection
from ..errors import NoDataError
from .base import CheckRegistry
from .rows import SupSyncRow, fetch

SECTION = "Software Updates"


def _sync_age(clock: Callable[[], datetime]):
    """Hours since the oldest successful sync across software update points."""

    def query(conn: ManagementConnection) -> float:
        rows = fetch(
            conn,
            SupSyncRow,
            "SMS_SUPSyncStatus",
            select=["WSUSServerName", "LastSuccessfulSyncTime", "LastSyncState"],
        )
        stamps = [r.last_successful_sync_time for r in rows if r.last_successful_sync_time]
        if not stamps:
            raise NoDataError("SMS_SUPSyncStatus", "no software update point has synchronized yet")
        oldest = min(s if s.tzinfo else s.replace(tzinfo=timezone.utc) for s in stamps)
        return round((clock() - oldest).total_seconds() / 3600.0, 1)

    return query


def register(registry: CheckRegistry, settings: Settings, clock: Callable[[], datetime] | None = None) -> None:
    registry.add(
        SECTION,
        "Last successful sync",
        _sync_age(clock or (lambda: datetime.now(timezone.utc))),
        above(settings.thresholds.sup_sync_age_hours, "last sync age", unit="h"),
        source="SMS_SUPSyncStatus",
    )
