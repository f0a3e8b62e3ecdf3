from __future__ import annotations

from ..classify import manual, no_query
from ..config import Settings
from ..connection import ManagementConnection
from ..models import Classification, Status
from .base import CheckRegistry
from .rows import SiteSystemRow, fetch

SECTION = "Site Database"


def _sql_role(conn: ManagementConnection) -> SiteSystemRow:
    return fetch(
        conn,
        SiteSystemRow,
        "SMS_SiteSystemSummarizer",
        select=["SiteSystem", "Role", "Status"],
        where="Role eq 'SMS SQL Server'",
    )[0]


def _classify_sql(row: SiteSystemRow) -> Classification:
    if row.status == 0:
        return Status.HEALTHY, f"SQL Server role on {row.site_system} is OK"
    return Status.WARNING, f"SQL Server role on {row.site_system} reports status {row.status}"


def register(registry: CheckRegistry, settings: Settings) -> None:
    registry.add(SECTION, "SQL Server role", _sql_role, _classify_sql, source="SMS_SiteSystemSummarizer")
    registry.add(
        SECTION,
        "Database replication",
        no_query,
        manual("Verify replication link status in Monitoring > Database Replication"),
    )
    registry.add(
        SECTION,
        "Index maintenance",
        no_query,
        manual("Confirm the index maintenance job ran and fragmentation is acceptable"),
    )
