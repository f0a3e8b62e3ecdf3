from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ..connection import ManagementConnection, require_rows

Row = TypeVar("Row", bound=BaseModel)


class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SiteRow(_Row):
    site_code: str = Field(alias="SiteCode")
    site_name: Optional[str] = Field(default=None, alias="SiteName")
    status: int = Field(alias="Status")
    version: Optional[str] = Field(default=None, alias="Version")


class ProcessorRow(_Row):
    name: Optional[str] = Field(default=None, alias="Name")
    load_percentage: float = Field(alias="LoadPercentage")


class OperatingSystemRow(_Row):
    total_visible_memory_kb: float = Field(alias="TotalVisibleMemorySize", gt=0)
    free_physical_memory_kb: float = Field(alias="FreePhysicalMemory", ge=0)


class ServiceRow(_Row):
    name: str = Field(alias="Name")
    state: str = Field(alias="State")


class SiteSystemRow(_Row):
    site_system: str = Field(alias="SiteSystem")
    role: str = Field(alias="Role")
    status: int = Field(alias="Status")
    bytes_total: Optional[float] = Field(default=None, alias="BytesTotal")
    bytes_free: Optional[float] = Field(default=None, alias="BytesFree")
    percent_free: Optional[float] = Field(default=None, alias="PercentFree")


class ComponentRow(_Row):
    component_name: str = Field(alias="ComponentName")
    machine_name: Optional[str] = Field(default=None, alias="MachineName")
    status: int = Field(alias="Status")


class DistributionPointRow(_Row):
    name: str = Field(alias="Name")
    number_errors: int = Field(default=0, alias="NumberErrors")
    number_installed: int = Field(default=0, alias="NumberInstalled")


class PackageDistributionRow(_Row):
    package_id: str = Field(alias="PackageID")
    server_nal_path: Optional[str] = Field(default=None, alias="ServerNALPath")
    state: int = Field(alias="State")


class DeviceRow(_Row):
    name: Optional[str] = Field(default=None, alias="Name")
    is_client: bool = Field(default=False, alias="IsClient")
    client_active_status: Optional[int] = Field(default=None, alias="ClientActiveStatus")


class CollectionEvaluationRow(_Row):
    collection_id: str = Field(alias="CollectionID")
    name: Optional[str] = Field(default=None, alias="Name")
    evaluation_length_ms: float = Field(alias="EvaluationLength", ge=0)


class SupSyncRow(_Row):
    wsus_server_name: str = Field(alias="WSUSServerName")
    last_successful_sync_time: Optional[datetime] = Field(default=None, alias="LastSuccessfulSyncTime")
    last_sync_state: Optional[int] = Field(default=None, alias="LastSyncState")


def fetch(
    conn: ManagementConnection,
    model: Type[Row],
    class_name: str,
    select: Optional[List[str]] = None,
    where: Optional[str] = None,
    required: bool = True,
) -> List[Row]:
    """Query ``class_name`` and validate every row against ``model``.

    A :class:`pydantic.ValidationError` propagates as an unexpected-shape
    failure; an empty result raises :class:`NoDataError` when ``required``.
    """
    rows: List[Any] = conn.query(class_name, select=select, where=where)
    if required:
        require_rows(rows, class_name)
    return [model.model_validate(r) for r in rows]
