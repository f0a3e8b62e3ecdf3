from __future__ import annotations

from ..classify import manual, no_query
from ..config import Settings
from .base import CheckRegistry

# Items with no dependable automated signal; they keep the report's coverage complete.
MANUAL_ITEMS = (
    ("Site Backup", "Last site backup", "Check smsbkup.log for a successful backup within the expected window"),
    ("Site Backup", "Backup destination", "Confirm the backup destination has room for the next backup set"),
    ("Boundaries", "Boundary group coverage", "Verify every subnet in use is covered by a boundary group with a site assignment"),
    ("Logs", "Site server logs", "Review sitecomp.log and smsexec.log for repeated errors"),
    ("Logs", "Client push", "Review ccm.log for client push installation failures"),
)


def register(registry: CheckRegistry, settings: Settings) -> None:
    for section, name, instruction in MANUAL_ITEMS:
        registry.add(section, name, no_query, manual(instruction))
