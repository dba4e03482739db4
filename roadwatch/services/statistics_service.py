"""
Incident statistics computed from the store.
"""
from typing import Dict, Optional

from pydantic import BaseModel
from sqlalchemy import func, select

from roadwatch.models.incident import Incident, IncidentParty, IncidentStatus, IncidentType
from roadwatch.services.incident_store import IncidentStore


class IncidentStatistics(BaseModel):
    total_incidents: int = 0
    by_type: Dict[str, int] = {}
    by_status: Dict[str, int] = {}
    average_fault_percentage: Optional[float] = None


def calculate_statistics(store: IncidentStore) -> IncidentStatistics:
    """Counts per type and status plus the mean computed party fault."""
    if not store.available:
        return IncidentStatistics()

    db = store.session
    by_type = {t.value: 0 for t in IncidentType}
    for incident_type, count in db.execute(
        select(Incident.incident_type, func.count(Incident.id)).group_by(Incident.incident_type)
    ):
        by_type[IncidentType(incident_type).value] = count

    by_status = {s.value: 0 for s in IncidentStatus}
    for status, count in db.execute(
        select(Incident.status, func.count(Incident.id)).group_by(Incident.status)
    ):
        by_status[IncidentStatus(status).value] = count

    average = db.scalar(
        select(func.avg(IncidentParty.fault_percentage)).where(IncidentParty.fault_percentage.is_not(None))
    )

    return IncidentStatistics(
        total_incidents=sum(by_type.values()),
        by_type=by_type,
        by_status=by_status,
        average_fault_percentage=round(float(average), 1) if average is not None else None,
    )
