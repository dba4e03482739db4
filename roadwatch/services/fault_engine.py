"""
Fault & Severity Engine

  simulate_video_analysis : stand-in for the video/satellite analysis pipeline
  calculate_fault_percentage: type-dependent base score plus a speed penalty
  determine_severity      : severity class from type and fault score
  estimate                : both of the above in one value

Randomness comes from an injected random.Random so results can be reproduced.
"""
import logging
import math
import random
from typing import Dict, Optional, Tuple, Union

from roadwatch.models.incident import IncidentSeverity, IncidentType
from roadwatch.schemas.report import FaultEstimate, VideoAnalysis

logger = logging.getLogger(__name__)

IncidentTypeLike = Union[IncidentType, str]

# ─────────────────────── Video analysis table ───────────────────────

VIDEO_ANALYSES: Dict[IncidentType, VideoAnalysis] = {
    IncidentType.INJURY: VideoAnalysis(
        vehicle_count=2,
        impact_point="Front impact point",
        trajectory_analysis="Vehicle A was travelling at high speed",
        estimated_speed=85,
    ),
    IncidentType.BREAKDOWN: VideoAnalysis(
        vehicle_count=1,
        impact_point="Vehicle engine",
        trajectory_analysis="The vehicle stopped suddenly",
        estimated_speed=0,
    ),
    IncidentType.TRAFFIC: VideoAnalysis(
        vehicle_count=3,
        impact_point="Minor collision",
        trajectory_analysis="Minor collision between vehicles",
        estimated_speed=30,
    ),
}

# ─────────────────────── Fault scoring ───────────────────────

# (low, high) bounds of the uniform base fault draw
BASE_FAULT_RANGES: Dict[IncidentType, Tuple[float, float]] = {
    IncidentType.INJURY: (65, 85),
    IncidentType.BREAKDOWN: (0, 0),  # a breakdown is a no-fault classification
    IncidentType.TRAFFIC: (45, 75),
}
UNKNOWN_TYPE_BASE_FAULT = 50

HIGH_SPEED_THRESHOLD_KMH = 80
HIGH_SPEED_PENALTY = 10


def simulate_video_analysis(incident_type: IncidentTypeLike) -> VideoAnalysis:
    """Look up the simulated analysis; unknown types get the traffic entry."""
    kind = IncidentType.parse(incident_type) or IncidentType.TRAFFIC
    return VIDEO_ANALYSES[kind]


def _base_fault(incident_type: IncidentTypeLike, rng) -> float:
    kind = IncidentType.parse(incident_type)
    if kind is None:
        return float(UNKNOWN_TYPE_BASE_FAULT)
    low, high = BASE_FAULT_RANGES[kind]
    if low == high:
        return float(low)
    return low + rng.random() * (high - low)


def calculate_fault_percentage(
    incident_type: IncidentTypeLike,
    video_analysis: VideoAnalysis,
    rng: Optional[random.Random] = None,
) -> int:
    """Return an integer fault percentage in [0, 100]."""
    rng = rng or random
    score = _base_fault(incident_type, rng)

    if video_analysis.estimated_speed > HIGH_SPEED_THRESHOLD_KMH:
        score += HIGH_SPEED_PENALTY

    score = min(100.0, max(0.0, score))
    # round half up
    return int(math.floor(score + 0.5))


def determine_severity(incident_type: IncidentTypeLike, fault_percentage: int) -> IncidentSeverity:
    kind = IncidentType.parse(incident_type)
    if kind == IncidentType.INJURY:
        return IncidentSeverity.CRITICAL if fault_percentage > 80 else IncidentSeverity.HIGH
    if kind == IncidentType.BREAKDOWN:
        return IncidentSeverity.LOW
    # traffic and anything unrecognised
    return IncidentSeverity.HIGH if fault_percentage > 70 else IncidentSeverity.MEDIUM


def estimate(
    incident_type: IncidentTypeLike,
    video_analysis: VideoAnalysis,
    rng: Optional[random.Random] = None,
) -> FaultEstimate:
    fault = calculate_fault_percentage(incident_type, video_analysis, rng)
    severity = determine_severity(incident_type, fault)
    logger.debug(f"[FAULT] type={incident_type} speed={video_analysis.estimated_speed} -> {fault}% {severity.value}")
    return FaultEstimate(fault_percentage=fault, severity=severity)
