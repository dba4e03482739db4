"""
Incident history (audit log). Entries are appended, never edited.
"""
import logging
from typing import List, Optional

from roadwatch.models.incident import IncidentHistory
from roadwatch.services.incident_store import IncidentStore

logger = logging.getLogger(__name__)

# Action labels written by the automation engine
ACTION_REPORT_GENERATED = "Smart report generated"
ACTION_SERVICES_ROUTED = "Services routed"
ACTION_STATUS_UPDATED = "Status updated"
ACTION_REPORT_SENT = "Report sent"


def record(
    store: IncidentStore,
    incident_id: int,
    action: str,
    details: Optional[str] = None,
    performed_by: Optional[int] = None,
) -> int:
    """Append one history entry. performed_by=None marks an automated action."""
    entry_id = store.insert(
        IncidentHistory,
        incident_id=incident_id,
        action=action,
        details=details,
        performed_by=performed_by,
    )
    logger.debug(f"[HISTORY] Incident #{incident_id}: {action} ({details})")
    return entry_id


def get_history(store: IncidentStore, incident_id: int) -> List[IncidentHistory]:
    entries = store.list_by(IncidentHistory, "incident_id", incident_id)
    return sorted(entries, key=lambda e: (e.created_at, e.id))
