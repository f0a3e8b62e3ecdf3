from __future__ import annotations
from typing import List

from ..classify import above, below, none_listed
from ..config import Settings
from ..connection import ManagementConnection
from ..models import Classification, Status
from .base import CheckRegistry
from .rows import OperatingSystemRow, ProcessorRow, ServiceRow, SiteRow, SiteSystemRow, fetch

SECTION = "Site Server"

# SMS_Site.Status
SITE_ACTIVE = 1

CORE_SERVICES = ("SMS_EXECUTIVE", "SMS_SITE_COMPONENT_MANAGER", "CONFIGURATION_MANAGER_UPDATE")


def _site_status(settings: Settings):
    def query(conn: ManagementConnection) -> SiteRow:
        rows = fetch(
            conn,
            SiteRow,
            "SMS_Site",
            select=["SiteCode", "SiteName", "Status", "Version"],
            where=f"SiteCode eq '{settings.site_code}'",
        )
        return rows[0]

    return query


def _classify_site(site: SiteRow) -> Classification:
    label = f"site {site.site_code}"
    if site.version:
        label += f" (version {site.version})"
    if site.status == SITE_ACTIVE:
        return Status.HEALTHY, f"{label} is active"
    return Status.WARNING, f"{label} reports status {site.status}"


def _cpu_load(conn: ManagementConnection) -> float:
    rows = fetch(conn, ProcessorRow, "Win32_Processor", select=["Name", "LoadPercentage"])
    return round(sum(r.load_percentage for r in rows) / len(rows), 1)


def _memory_used(conn: ManagementConnection) -> float:
    os_row = fetch(
        conn,
        OperatingSystemRow,
        "Win32_OperatingSystem",
        select=["TotalVisibleMemorySize", "FreePhysicalMemory"],
    )[0]
    used = os_row.total_visible_memory_kb - os_row.free_physical_memory_kb
    return round(used * 100.0 / os_row.total_visible_memory_kb, 1)


def _disk_free(conn: ManagementConnection) -> float:
    """Lowest free-space percentage across the site server's drives."""
    rows = fetch(
        conn,
        SiteSystemRow,
        "SMS_SiteSystemSummarizer",
        select=["SiteSystem", "Role", "Status", "BytesTotal", "BytesFree", "PercentFree"],
        where="Role eq 'SMS Site Server'",
    )
    values: List[float] = []
    for r in rows:
        if r.percent_free is not None:
            values.append(r.percent_free)
        elif r.bytes_total and r.bytes_free is not None:
            values.append(r.bytes_free * 100.0 / r.bytes_total)
    if not values:
        raise ValueError("SMS_SiteSystemSummarizer rows carry no free-space figures")
    return round(min(values), 1)


def _stopped_services(conn: ManagementConnection) -> List[str]:
    names = " or ".join(f"Name eq '{n}'" for n in CORE_SERVICES)
    rows = fetch(conn, ServiceRow, "Win32_Service", select=["Name", "State"], where=names)
    seen = {r.name.upper(): r.state for r in rows}
    out: List[str] = []
    for name in CORE_SERVICES:
        state = seen.get(name)
        if state is None:
            out.append(f"{name} (missing)")
        elif state.lower() != "running":
            out.append(f"{name} ({state})")
    return out


def register(registry: CheckRegistry, settings: Settings) -> None:
    t = settings.thresholds
    registry.add(SECTION, "Site status", _site_status(settings), _classify_site, source="SMS_Site")
    registry.add(SECTION, "CPU load", _cpu_load, above(t.cpu_percent, "CPU load"), source="Win32_Processor")
    registry.add(
        SECTION,
        "Memory usage",
        _memory_used,
        above(t.memory_percent, "memory in use"),
        source="Win32_OperatingSystem",
    )
    registry.add(
        SECTION,
        "Disk free space",
        _disk_free,
        below(t.disk_free_percent, "lowest free disk space"),
        source="SMS_SiteSystemSummarizer",
    )
    registry.add(
        SECTION,
        "Core services",
        _stopped_services,
        none_listed("core services not running"),
        source="Win32_Service",
    )
