from __future__ import annotations

from ..classify import above, below, manual, no_query
from ..config import Settings
from ..connection import ManagementConnection
from .base import CheckRegistry
from .rows import CollectionEvaluationRow, DeviceRow, fetch

CLIENTS = "Clients"
COLLECTIONS = "Collections"


def _active_percent(conn: ManagementConnection) -> float:
    rows = fetch(
        conn,
        DeviceRow,
        "SMS_CombinedDeviceResources",
        select=["Name", "IsClient", "ClientActiveStatus"],
        where="IsClient eq true",
    )
    active = sum(1 for r in rows if r.client_active_status == 1)
    return round(active * 100.0 / len(rows), 1)


def _slowest_evaluation(conn: ManagementConnection) -> float:
    rows = fetch(
        conn,
        CollectionEvaluationRow,
        "SMS_CollectionEvaluationStats",
        select=["CollectionID", "Name", "EvaluationLength"],
    )
    return round(max(r.evaluation_length_ms for r in rows) / 1000.0, 1)


def register(registry: CheckRegistry, settings: Settings) -> None:
    t = settings.thresholds
    registry.add(
        CLIENTS,
        "Active clients",
        _active_percent,
        below(t.client_active_percent, "active clients"),
        source="SMS_CombinedDeviceResources",
    )
    registry.add(
        CLIENTS,
        "Client health evaluation",
        no_query,
        manual("Review ccmeval results for clients failing remediation"),
    )
    registry.add(
        COLLECTIONS,
        "Collection evaluation time",
        _slowest_evaluation,
        above(t.collection_eval_seconds, "slowest collection evaluation", unit="s"),
        source="SMS_CollectionEvaluationStats",
    )
