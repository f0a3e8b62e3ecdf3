from __future__ import annotations
from typing import List

from ..classify import none_listed
from ..config import Settings
from ..connection import ManagementConnection
from .base import CheckRegistry
from .rows import ComponentRow, SiteSystemRow, fetch

SECTION = "Site Components"

# Status values shared by the SMS_*Summarizer classes.
OK, WARNING, CRITICAL = 0, 1, 2


def _components_in(state: int):
    def query(conn: ManagementConnection) -> List[str]:
        rows = fetch(
            conn,
            ComponentRow,
            "SMS_ComponentSummarizer",
            select=["ComponentName", "MachineName", "Status"],
            where=f"Status eq {state}",
            required=False,
        )
        return sorted({f"{r.component_name} on {r.machine_name}" if r.machine_name else r.component_name for r in rows})

    return query


def _site_systems_degraded(conn: ManagementConnection) -> List[str]:
    rows = fetch(
        conn,
        SiteSystemRow,
        "SMS_SiteSystemSummarizer",
        select=["SiteSystem", "Role", "Status"],
    )
    return [f"{r.role} on {r.site_system}" for r in rows if r.status != OK]


def register(registry: CheckRegistry, settings: Settings) -> None:
    registry.add(
        SECTION,
        "Components in error",
        _components_in(CRITICAL),
        none_listed("components in critical state"),
        source="SMS_ComponentSummarizer",
    )
    registry.add(
        SECTION,
        "Components with warnings",
        _components_in(WARNING),
        none_listed("components in warning state"),
        source="SMS_ComponentSummarizer",
    )
    registry.add(
        SECTION,
        "Site system roles",
        _site_systems_degraded,
        none_listed("site system roles not OK"),
        source="SMS_SiteSystemSummarizer",
    )
