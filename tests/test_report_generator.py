import random

import pytest

from roadwatch.core.exceptions import NotFoundError
from roadwatch.models.incident import (
    IncidentHistory, IncidentSeverity, IncidentType, ReportSend, Service,
)
from roadwatch.schemas.report import DecisionAction, DecisionPriority
from roadwatch.services.report_generator import generate_smart_report


def test_missing_incident_raises(store, settings):
    with pytest.raises(NotFoundError):
        generate_smart_report(store, 999, settings=settings)


def test_injury_report(store, make_incident, settings):
    incident_id = make_incident(IncidentType.INJURY, location="Exit 9, Northern Ring Rd")

    report = generate_smart_report(store, incident_id, rng=random.Random(3), settings=settings)

    assert report.incident_id == incident_id
    assert report.location == "Exit 9, Northern Ring Rd"
    assert report.video_analysis.estimated_speed == 85
    # base 65-85 plus the speed penalty
    assert 75 <= report.fault_percentage <= 95
    assert report.ai_decision.action == DecisionAction.AMBULANCE
    assert report.ai_decision.priority in (DecisionPriority.IMMEDIATE, DecisionPriority.URGENT)
    assert report.analysis_time == 3000


def test_summary_mentions_location_fault_and_eta(store, make_incident, settings, fixed_random):
    incident_id = make_incident(IncidentType.TRAFFIC, location="Olaya St")

    report = generate_smart_report(store, incident_id, rng=fixed_random(0.5), settings=settings)

    assert report.fault_percentage == 60
    assert report.severity == IncidentSeverity.MEDIUM
    assert report.report_summary.splitlines() == [
        "Smart report - Traffic management",
        "Location: Olaya St",
        "Fault percentage: 60%",
        "Action taken: Traffic control dispatched",
        "Priority: Normal",
        "Estimated response time: 5 minutes",
    ]


def test_arabic_summary(store, make_incident, settings, fixed_random):
    incident_id = make_incident(IncidentType.BREAKDOWN, location="طريق الملك فهد")
    arabic = settings.model_copy(update={"REPORT_LOCALE": "ar"})

    report = generate_smart_report(store, incident_id, rng=fixed_random(0.5), settings=arabic)

    assert "تعطل سيارة" in report.report_summary
    assert "تم توجيه السطحة" in report.report_summary
    assert "عاجل" in report.report_summary
    assert "طريق الملك فهد" in report.report_summary


def test_generation_writes_nothing(store, make_incident, settings):
    incident_id = make_incident(IncidentType.INJURY)

    generate_smart_report(store, incident_id, settings=settings)

    assert store.list_by(Service, "incident_id", incident_id) == []
    assert store.list_by(IncidentHistory, "incident_id", incident_id) == []
    assert store.list_by(ReportSend, "incident_id", incident_id) == []
