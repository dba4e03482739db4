import pytest

from roadwatch.models.incident import Incident, IncidentType, Service, ServiceStatus, ServiceType
from roadwatch.schemas.report import DecisionAction, DecisionPriority, RecommendedService
from roadwatch.services import report_generator, service_router
from roadwatch.services.report_generator import build_report
from roadwatch.services.service_router import make_decision, recommend, services_to_dispatch


@pytest.mark.parametrize(
    "incident_type,action,priority,eta",
    [
        (IncidentType.INJURY, DecisionAction.AMBULANCE, DecisionPriority.IMMEDIATE, 3),
        (IncidentType.BREAKDOWN, DecisionAction.TOW_TRUCK, DecisionPriority.URGENT, 10),
        (IncidentType.TRAFFIC, DecisionAction.TRAFFIC_CONTROL, DecisionPriority.NORMAL, 5),
        ("landslide", DecisionAction.TRAFFIC_CONTROL, DecisionPriority.NORMAL, 5),
    ],
)
def test_type_defaults(incident_type, action, priority, eta):
    decision = make_decision(incident_type, 0)
    assert decision.action == action
    assert decision.priority == priority
    assert decision.estimated_response_time == eta


@pytest.mark.parametrize(
    "incident_type,expected_eta",
    [
        (IncidentType.INJURY, 2),
        (IncidentType.BREAKDOWN, 8),
        (IncidentType.TRAFFIC, 3),
        ("unknown", 3),
    ],
)
def test_fault_above_eighty_escalates_to_immediate(incident_type, expected_eta):
    decision = make_decision(incident_type, 85)
    assert decision.priority == DecisionPriority.IMMEDIATE
    assert decision.estimated_response_time == expected_eta


@pytest.mark.parametrize("incident_type", list(IncidentType) + ["unknown"])
def test_fault_above_sixty_is_urgent(incident_type):
    decision = make_decision(incident_type, 65)
    assert decision.priority == DecisionPriority.URGENT


def test_thresholds_are_strict():
    assert make_decision(IncidentType.TRAFFIC, 80).priority == DecisionPriority.URGENT
    assert make_decision(IncidentType.TRAFFIC, 80).estimated_response_time == 5
    assert make_decision(IncidentType.TRAFFIC, 60).priority == DecisionPriority.NORMAL


def test_eta_never_below_two():
    for incident_type in list(IncidentType) + ["other"]:
        for fault in range(0, 101):
            assert make_decision(incident_type, fault).estimated_response_time >= 2


def test_recommendations():
    assert recommend(IncidentType.INJURY) == [
        RecommendedService.AMBULANCE,
        RecommendedService.TRAFFIC,
        RecommendedService.POLICE,
        RecommendedService.RED_CRESCENT,
    ]
    assert recommend(IncidentType.BREAKDOWN) == [RecommendedService.TOW_TRUCK, RecommendedService.TRAFFIC]
    assert recommend(IncidentType.TRAFFIC) == [RecommendedService.TRAFFIC]
    assert recommend("sandstorm") == [RecommendedService.TRAFFIC]


def test_every_incident_type_has_routing_entries():
    for incident_type in IncidentType:
        assert incident_type in service_router.DEFAULT_DECISIONS
        assert incident_type in service_router.RECOMMENDED_SERVICES
        for labels in report_generator.INCIDENT_TYPE_LABELS.values():
            assert incident_type in labels
    for recommendation in RecommendedService:
        assert recommendation in service_router.RECOMMENDATION_SERVICE_TYPES
    for action in DecisionAction:
        assert action in service_router.ACTION_SERVICE_TYPES


def _report(store, make_incident, settings, rng, incident_type):
    incident_id = make_incident(incident_type)
    return build_report(store.get(Incident, incident_id), rng=rng, settings=settings)


def test_injury_dispatch_skips_primary_duplicate_and_red_crescent(store, make_incident, settings, fixed_random):
    report = _report(store, make_incident, settings, fixed_random(0.5), IncidentType.INJURY)
    assert services_to_dispatch(report) == [
        ServiceType.AMBULANCE,
        ServiceType.TRAFFIC_CONTROL,
        ServiceType.POLICE,
    ]


def test_breakdown_and_traffic_dispatch(store, make_incident, settings, fixed_random):
    breakdown = _report(store, make_incident, settings, fixed_random(0.5), IncidentType.BREAKDOWN)
    assert services_to_dispatch(breakdown) == [ServiceType.TOW_TRUCK, ServiceType.TRAFFIC_CONTROL]

    traffic = _report(store, make_incident, settings, fixed_random(0.5), IncidentType.TRAFFIC)
    assert services_to_dispatch(traffic) == [ServiceType.TRAFFIC_CONTROL]


def test_route_services_creates_pending_rows(store, make_incident, settings, fixed_random):
    report = _report(store, make_incident, settings, fixed_random(0.5), IncidentType.BREAKDOWN)

    service_ids = service_router.route_services(store, report)

    rows = store.list_by(Service, "incident_id", report.incident_id)
    assert [row.id for row in rows] == service_ids
    assert [row.service_type for row in rows] == [ServiceType.TOW_TRUCK, ServiceType.TRAFFIC_CONTROL]
    assert all(row.status == ServiceStatus.PENDING for row in rows)
