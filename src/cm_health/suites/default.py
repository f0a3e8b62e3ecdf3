from __future__ import annotations

from ..checks import clients, components, database, distribution, manual, site_server, updates
from ..checks.base import CheckGroup, CheckRegistry
from ..config import Settings

# Report order, top to bottom.
GROUPS: tuple[CheckGroup, ...] = (site_server, components, database, distribution, clients, updates, manual)


def build_registry(settings: Settings) -> CheckRegistry:
    """
    Full site report:
      - Site server status, load, disk and services
      - Site components and site system roles
      - Site database (role status, manual replication/maintenance review)
      - Distribution points and content
      - Clients and collections
      - Software update point synchronization
      - Manual review items (backup, boundaries, logs)
    """
    registry = CheckRegistry()
    for group in GROUPS:
        group.register(registry, settings)
    return registry
