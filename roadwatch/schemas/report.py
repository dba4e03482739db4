"""
Smart Report Schemas
Value objects produced by the analysis, estimation and routing steps. None of
these are persisted; a report is rebuilt on every request.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from roadwatch.models.incident import IncidentSeverity, IncidentType


class DecisionAction(str, Enum):
    AMBULANCE = "ambulance"
    TOW_TRUCK = "tow_truck"
    TRAFFIC_CONTROL = "traffic_control"
    POLICE = "police"
    NONE = "none"


class DecisionPriority(str, Enum):
    IMMEDIATE = "immediate"
    URGENT = "urgent"
    NORMAL = "normal"


class RecommendedService(str, Enum):
    AMBULANCE = "ambulance"
    TOW_TRUCK = "tow truck"
    TRAFFIC = "traffic"
    POLICE = "police"
    RED_CRESCENT = "red crescent"


class VideoAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    vehicle_count: int
    impact_point: str
    trajectory_analysis: str
    estimated_speed: float


class FaultEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    fault_percentage: int = Field(..., ge=0, le=100)
    severity: IncidentSeverity


class AIDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: DecisionAction
    priority: DecisionPriority
    estimated_response_time: int  # minutes


class SmartReport(BaseModel):
    incident_id: int
    location: str
    incident_type: IncidentType
    severity: IncidentSeverity
    fault_percentage: int = Field(..., ge=0, le=100)
    recommended_services: List[RecommendedService]
    analysis_time: int  # milliseconds, nominal
    video_analysis: VideoAnalysis
    ai_decision: AIDecision
    report_summary: str


class Alert(BaseModel):
    recipient: str
    message: str
    priority: DecisionPriority
