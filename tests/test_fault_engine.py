import random

import pytest

from roadwatch.models.incident import IncidentSeverity, IncidentType
from roadwatch.schemas.report import VideoAnalysis
from roadwatch.services import fault_engine
from roadwatch.services.fault_engine import (
    VIDEO_ANALYSES, calculate_fault_percentage, determine_severity, estimate,
    simulate_video_analysis,
)


def _analysis(speed):
    return VideoAnalysis(vehicle_count=2, impact_point="front", trajectory_analysis="n/a", estimated_speed=speed)


def test_simulated_analysis_table_values():
    injury = simulate_video_analysis(IncidentType.INJURY)
    assert (injury.vehicle_count, injury.estimated_speed) == (2, 85)

    breakdown = simulate_video_analysis("breakdown")
    assert (breakdown.vehicle_count, breakdown.estimated_speed) == (1, 0)

    traffic = simulate_video_analysis(IncidentType.TRAFFIC)
    assert (traffic.vehicle_count, traffic.estimated_speed) == (3, 30)


def test_unknown_type_uses_traffic_analysis():
    assert simulate_video_analysis("flood") == VIDEO_ANALYSES[IncidentType.TRAFFIC]


def test_unknown_type_fault_is_fixed_fifty():
    analysis = simulate_video_analysis("flood")
    for seed in range(20):
        assert calculate_fault_percentage("flood", analysis, random.Random(seed)) == 50
    assert determine_severity("flood", 50) == IncidentSeverity.MEDIUM


def test_breakdown_is_always_no_fault_and_low():
    analysis = simulate_video_analysis(IncidentType.BREAKDOWN)
    for seed in range(50):
        result = estimate(IncidentType.BREAKDOWN, analysis, random.Random(seed))
        assert result.fault_percentage == 0
        assert result.severity == IncidentSeverity.LOW


def test_fault_is_integer_in_range_for_any_input():
    types = list(IncidentType) + ["unknown", ""]
    rng = random.Random(1234)
    for seed in range(300):
        incident_type = rng.choice(types)
        speed = rng.uniform(0, 250)
        fault = calculate_fault_percentage(incident_type, _analysis(speed), random.Random(seed))
        assert isinstance(fault, int)
        assert 0 <= fault <= 100


def test_traffic_base_range(fixed_random):
    analysis = _analysis(30)
    assert calculate_fault_percentage(IncidentType.TRAFFIC, analysis, fixed_random(0.0)) == 45
    assert calculate_fault_percentage(IncidentType.TRAFFIC, analysis, fixed_random(0.999999)) == 75


def test_rounds_half_up(fixed_random):
    # 45 + 0.25 * 30 = 52.5
    assert calculate_fault_percentage(IncidentType.TRAFFIC, _analysis(30), fixed_random(0.25)) == 53


def test_speed_penalty_only_above_eighty(fixed_random):
    rng = fixed_random(0.5)  # traffic base = 60
    assert calculate_fault_percentage(IncidentType.TRAFFIC, _analysis(80), rng) == 60
    assert calculate_fault_percentage(IncidentType.TRAFFIC, _analysis(81), rng) == 70


def test_injury_at_ninety_kmh():
    for seed in range(100):
        result = estimate(IncidentType.INJURY, _analysis(90), random.Random(seed))
        assert 75 <= result.fault_percentage <= 95
        expected = IncidentSeverity.CRITICAL if result.fault_percentage > 80 else IncidentSeverity.HIGH
        assert result.severity == expected


@pytest.mark.parametrize(
    "incident_type,fault,expected",
    [
        (IncidentType.INJURY, 81, IncidentSeverity.CRITICAL),
        (IncidentType.INJURY, 80, IncidentSeverity.HIGH),
        (IncidentType.BREAKDOWN, 100, IncidentSeverity.LOW),
        (IncidentType.TRAFFIC, 71, IncidentSeverity.HIGH),
        (IncidentType.TRAFFIC, 70, IncidentSeverity.MEDIUM),
    ],
)
def test_severity_thresholds(incident_type, fault, expected):
    assert determine_severity(incident_type, fault) == expected


def test_same_seed_same_result():
    analysis = simulate_video_analysis(IncidentType.INJURY)
    first = estimate(IncidentType.INJURY, analysis, random.Random(7))
    second = estimate(IncidentType.INJURY, analysis, random.Random(7))
    assert first == second


def test_every_incident_type_has_table_entries():
    for incident_type in IncidentType:
        assert incident_type in fault_engine.VIDEO_ANALYSES
        assert incident_type in fault_engine.BASE_FAULT_RANGES
