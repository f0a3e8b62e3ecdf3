from __future__ import annotations
from typing import List

from ..classify import none_listed
from ..config import Settings
from ..connection import ManagementConnection
from .base import CheckRegistry
from .rows import DistributionPointRow, PackageDistributionRow, fetch

SECTION = "Distribution Points"

# SMS_PackageStatusDistPointsSummarizer.State: install failed, removal failed
FAILED_STATES = (3, 6)


def _dps_with_errors(conn: ManagementConnection) -> List[str]:
    rows = fetch(
        conn,
        DistributionPointRow,
        "SMS_DPStatusInfo",
        select=["Name", "NumberErrors", "NumberInstalled"],
    )
    return [f"{r.name} ({r.number_errors} errors)" for r in rows if r.number_errors > 0]


def _failed_content(conn: ManagementConnection) -> List[str]:
    where = " or ".join(f"State eq {s}" for s in FAILED_STATES)
    rows = fetch(
        conn,
        PackageDistributionRow,
        "SMS_PackageStatusDistPointsSummarizer",
        select=["PackageID", "ServerNALPath", "State"],
        where=where,
        required=False,
    )
    return [r.package_id for r in rows]


def register(registry: CheckRegistry, settings: Settings) -> None:
    registry.add(
        SECTION,
        "Distribution point status",
        _dps_with_errors,
        none_listed("distribution points reporting errors"),
        source="SMS_DPStatusInfo",
    )
    registry.add(
        SECTION,
        "Content distribution",
        _failed_content,
        none_listed("packages failed to distribute"),
        source="SMS_PackageStatusDistPointsSummarizer",
    )
