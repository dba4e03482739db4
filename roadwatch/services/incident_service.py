"""
Incident Service: operator and reporter actions.

Reporters may create incidents; every other mutation needs an operator or
admin. Each mutation appends a history entry naming the actor.
"""
import logging
from typing import List, Optional

from roadwatch.core.exceptions import InvalidStatusTransition, NotFoundError, Unauthorized
from roadwatch.models.incident import (
    Incident, IncidentMedia, IncidentParty, IncidentSeverity, IncidentStatus,
    Service, ServiceStatus,
)
from roadwatch.models.user import OPERATOR_ROLES, User
from roadwatch.schemas.incident import (
    IncidentCreate, IncidentFullDetails, IncidentResponse, MediaCreate,
    MediaResponse, PartyCreate, PartyResponse, ServiceCreate, ServiceResponse,
)
from roadwatch.services import history_service
from roadwatch.services.incident_store import IncidentStore

logger = logging.getLogger(__name__)

# Forward-only service progression; cancellation is allowed from any non-terminal state
SERVICE_STATUS_ORDER = [
    ServiceStatus.PENDING,
    ServiceStatus.ASSIGNED,
    ServiceStatus.EN_ROUTE,
    ServiceStatus.ARRIVED,
    ServiceStatus.COMPLETED,
]
SERVICE_TERMINAL_STATUSES = frozenset({ServiceStatus.COMPLETED, ServiceStatus.CANCELLED})


def ensure_operator(actor: User) -> None:
    if actor.role not in OPERATOR_ROLES:
        raise Unauthorized("Only operators and admins can modify incidents")


def _require_incident(store: IncidentStore, incident_id: int) -> Incident:
    incident = store.get(Incident, incident_id)
    if incident is None:
        raise NotFoundError("Incident", incident_id)
    return incident


# ============================================
# INCIDENTS
# ============================================

def create_incident(store: IncidentStore, data: IncidentCreate, reporter: User) -> int:
    """Open a new incident in 'pending'. Any authenticated user may report."""
    incident_id = store.insert(
        Incident,
        reporter_id=reporter.id,
        incident_type=data.incident_type,
        location=data.location,
        latitude=data.latitude,
        longitude=data.longitude,
        description=data.description,
        severity=data.severity or IncidentSeverity.MEDIUM,
        status=IncidentStatus.PENDING,
    )
    history_service.record(
        store,
        incident_id,
        "Incident created",
        f"Incident of type {data.incident_type.value} reported at {data.location}",
        performed_by=reporter.id,
    )
    logger.info(f"[INCIDENT] #{incident_id} created ({data.incident_type.value}) by user {reporter.id}")
    return incident_id


def get_incident(store: IncidentStore, incident_id: int) -> Optional[Incident]:
    return store.get(Incident, incident_id)


def list_incidents(store: IncidentStore, limit: int = 50, offset: int = 0) -> List[Incident]:
    return store.list_all(Incident, limit=limit, offset=offset)


def get_full_details(store: IncidentStore, incident_id: int) -> Optional[IncidentFullDetails]:
    """Incident with its services, parties and media, or None if it does not exist."""
    incident = store.get(Incident, incident_id)
    if incident is None:
        return None

    return IncidentFullDetails(
        incident=IncidentResponse.model_validate(incident),
        services=[ServiceResponse.model_validate(s) for s in get_services(store, incident_id)],
        parties=[PartyResponse.model_validate(p) for p in get_parties(store, incident_id)],
        media=[MediaResponse.model_validate(m) for m in get_media(store, incident_id)],
    )


def update_incident_status(
    store: IncidentStore,
    incident_id: int,
    status: IncidentStatus,
    actor: User,
) -> None:
    """
    Set the incident status. Any enumerated value is accepted; reopening a
    closed incident is allowed but logged.
    """
    ensure_operator(actor)
    incident = _require_incident(store, incident_id)
    status = IncidentStatus(status)

    if incident.status == IncidentStatus.CLOSED and status != IncidentStatus.CLOSED:
        logger.warning(f"[INCIDENT] #{incident_id} reopened from closed to {status.value} by user {actor.id}")

    store.update(Incident, incident_id, status=status)
    history_service.record(
        store,
        incident_id,
        history_service.ACTION_STATUS_UPDATED,
        f"Status changed to {status.value}",
        performed_by=actor.id,
    )


# ============================================
# PARTIES
# ============================================

def add_party(store: IncidentStore, incident_id: int, data: PartyCreate, actor: User) -> int:
    ensure_operator(actor)
    _require_incident(store, incident_id)

    party_id = store.insert(
        IncidentParty,
        incident_id=incident_id,
        party_name=data.party_name,
        phone=data.phone,
        vehicle_number=data.vehicle_number,
    )
    history_service.record(
        store,
        incident_id,
        "Party added",
        f"Party {data.party_name} added to incident",
        performed_by=actor.id,
    )
    return party_id


def get_parties(store: IncidentStore, incident_id: int) -> List[IncidentParty]:
    return store.list_by(IncidentParty, "incident_id", incident_id)


def update_fault_percentage(
    store: IncidentStore,
    party_id: int,
    incident_id: int,
    fault_percentage: int,
    actor: User,
) -> None:
    """Operator override of a party's fault percentage (0-100)."""
    ensure_operator(actor)
    if not 0 <= fault_percentage <= 100:
        raise ValueError(f"fault percentage must be between 0 and 100, got {fault_percentage}")

    party = store.get(IncidentParty, party_id)
    if party is None or party.incident_id != incident_id:
        raise NotFoundError("Party", party_id)

    store.update(IncidentParty, party_id, fault_percentage=int(fault_percentage))
    history_service.record(
        store,
        incident_id,
        "Fault percentage updated",
        f"Fault percentage set to {int(fault_percentage)}%",
        performed_by=actor.id,
    )


# ============================================
# SERVICES
# ============================================

def create_service(store: IncidentStore, incident_id: int, data: ServiceCreate, actor: User) -> int:
    """Manually request a service for an incident."""
    ensure_operator(actor)
    _require_incident(store, incident_id)

    service_id = store.insert(
        Service,
        incident_id=incident_id,
        service_type=data.service_type,
        status=ServiceStatus.PENDING,
        assigned_to=data.assigned_to,
    )
    history_service.record(
        store,
        incident_id,
        "Service requested",
        f"{data.service_type.value} service requested",
        performed_by=actor.id,
    )
    return service_id


def get_services(store: IncidentStore, incident_id: int) -> List[Service]:
    return store.list_by(Service, "incident_id", incident_id)


def check_service_transition(current: ServiceStatus, target: ServiceStatus) -> None:
    current, target = ServiceStatus(current), ServiceStatus(target)
    if current == target:
        return
    if current in SERVICE_TERMINAL_STATUSES:
        raise InvalidStatusTransition("Service", current.value, target.value, "service is closed")
    if target == ServiceStatus.CANCELLED:
        return
    if SERVICE_STATUS_ORDER.index(target) < SERVICE_STATUS_ORDER.index(current):
        raise InvalidStatusTransition("Service", current.value, target.value, "status only moves forward")


def update_service_status(
    store: IncidentStore,
    service_id: int,
    incident_id: int,
    status: ServiceStatus,
    actor: User,
) -> None:
    ensure_operator(actor)
    service = store.get(Service, service_id)
    if service is None or service.incident_id != incident_id:
        raise NotFoundError("Service", service_id)

    status = ServiceStatus(status)
    check_service_transition(service.status, status)

    store.update(Service, service_id, status=status)
    history_service.record(
        store,
        incident_id,
        "Service status updated",
        f"Service status changed to {status.value}",
        performed_by=actor.id,
    )


# ============================================
# MEDIA
# ============================================

def add_media(store: IncidentStore, incident_id: int, data: MediaCreate, actor: User) -> int:
    ensure_operator(actor)
    _require_incident(store, incident_id)

    media_id = store.insert(
        IncidentMedia,
        incident_id=incident_id,
        media_type=data.media_type,
        media_url=data.media_url,
        description=data.description,
        is_simulated=data.is_simulated,
    )
    history_service.record(
        store,
        incident_id,
        "Media added",
        f"{data.media_type.value} media added to incident",
        performed_by=actor.id,
    )
    return media_id


def get_media(store: IncidentStore, incident_id: int) -> List[IncidentMedia]:
    return store.list_by(IncidentMedia, "incident_id", incident_id)
