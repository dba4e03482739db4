"""
Service Router
Chooses the primary action, priority and ETA for an incident, lists the
secondary services worth calling, and writes the resulting Service rows.
"""
import logging
from typing import Dict, List, Optional, Tuple

from roadwatch.models.incident import IncidentType, Service, ServiceStatus, ServiceType
from roadwatch.schemas.report import (
    AIDecision, DecisionAction, DecisionPriority, RecommendedService,
    SmartReport, VideoAnalysis,
)
from roadwatch.services.fault_engine import IncidentTypeLike
from roadwatch.services.incident_store import IncidentStore

logger = logging.getLogger(__name__)

# action, priority, estimated response minutes
DEFAULT_DECISIONS: Dict[IncidentType, Tuple[DecisionAction, DecisionPriority, int]] = {
    IncidentType.INJURY: (DecisionAction.AMBULANCE, DecisionPriority.IMMEDIATE, 3),
    IncidentType.BREAKDOWN: (DecisionAction.TOW_TRUCK, DecisionPriority.URGENT, 10),
    IncidentType.TRAFFIC: (DecisionAction.TRAFFIC_CONTROL, DecisionPriority.NORMAL, 5),
}
FALLBACK_DECISION = (DecisionAction.TRAFFIC_CONTROL, DecisionPriority.NORMAL, 5)

IMMEDIATE_FAULT_THRESHOLD = 80
URGENT_FAULT_THRESHOLD = 60
IMMEDIATE_ETA_REDUCTION = 2
MIN_RESPONSE_MINUTES = 2

RECOMMENDED_SERVICES: Dict[IncidentType, List[RecommendedService]] = {
    IncidentType.INJURY: [
        RecommendedService.AMBULANCE,
        RecommendedService.TRAFFIC,
        RecommendedService.POLICE,
        RecommendedService.RED_CRESCENT,
    ],
    IncidentType.BREAKDOWN: [RecommendedService.TOW_TRUCK, RecommendedService.TRAFFIC],
    IncidentType.TRAFFIC: [RecommendedService.TRAFFIC],
}
FALLBACK_RECOMMENDATIONS = [RecommendedService.TRAFFIC]

# Red Crescent is alerted through the medical channel, not dispatched as a Service row
RECOMMENDATION_SERVICE_TYPES: Dict[RecommendedService, Optional[ServiceType]] = {
    RecommendedService.AMBULANCE: ServiceType.AMBULANCE,
    RecommendedService.TOW_TRUCK: ServiceType.TOW_TRUCK,
    RecommendedService.TRAFFIC: ServiceType.TRAFFIC_CONTROL,
    RecommendedService.POLICE: ServiceType.POLICE,
    RecommendedService.RED_CRESCENT: None,
}

ACTION_SERVICE_TYPES: Dict[DecisionAction, Optional[ServiceType]] = {
    DecisionAction.AMBULANCE: ServiceType.AMBULANCE,
    DecisionAction.TOW_TRUCK: ServiceType.TOW_TRUCK,
    DecisionAction.TRAFFIC_CONTROL: ServiceType.TRAFFIC_CONTROL,
    DecisionAction.POLICE: ServiceType.POLICE,
    DecisionAction.NONE: None,
}


def make_decision(
    incident_type: IncidentTypeLike,
    fault_percentage: int,
    video_analysis: Optional[VideoAnalysis] = None,  # noqa: ARG001
) -> AIDecision:
    """Type default first, then the fault-based priority overlay."""
    kind = IncidentType.parse(incident_type)
    action, priority, eta = DEFAULT_DECISIONS.get(kind, FALLBACK_DECISION)

    if fault_percentage > IMMEDIATE_FAULT_THRESHOLD:
        priority = DecisionPriority.IMMEDIATE
        eta = max(MIN_RESPONSE_MINUTES, eta - IMMEDIATE_ETA_REDUCTION)
    elif fault_percentage > URGENT_FAULT_THRESHOLD:
        priority = DecisionPriority.URGENT

    return AIDecision(action=action, priority=priority, estimated_response_time=eta)


def recommend(incident_type: IncidentTypeLike) -> List[RecommendedService]:
    kind = IncidentType.parse(incident_type)
    return list(RECOMMENDED_SERVICES.get(kind, FALLBACK_RECOMMENDATIONS))


def services_to_dispatch(report: SmartReport) -> List[ServiceType]:
    """Primary service first, then every recommendation that adds a new type."""
    primary = ACTION_SERVICE_TYPES[report.ai_decision.action]
    planned: List[ServiceType] = [primary] if primary is not None else []

    for recommendation in report.recommended_services:
        service_type = RECOMMENDATION_SERVICE_TYPES[recommendation]
        if service_type is None:
            logger.debug(f"[ROUTER] '{recommendation.value}' has no dispatchable service, skipped")
            continue
        if service_type not in planned:
            planned.append(service_type)
    return planned


def route_services(store: IncidentStore, report: SmartReport) -> List[int]:
    """Create a pending Service row for each planned service. Returns the new ids."""
    service_ids = []
    for service_type in services_to_dispatch(report):
        service_id = store.insert(
            Service,
            incident_id=report.incident_id,
            service_type=service_type,
            status=ServiceStatus.PENDING,
        )
        service_ids.append(service_id)
        logger.info(f"[ROUTER] {service_type.value} dispatched to incident #{report.incident_id}")
    return service_ids
