from roadwatch.services.incident_store import IncidentStore
from roadwatch.services.automation_engine import AutomationEngine, proximity_alert
from roadwatch.services.report_generator import generate_smart_report
from roadwatch.services.vision_service import VisionService
from roadwatch.services import (
    fault_engine,
    service_router,
    report_dispatcher,
    history_service,
    incident_service,
    statistics_service,
    vision_service,
)

__all__ = [
    "IncidentStore",
    "AutomationEngine",
    "proximity_alert",
    "generate_smart_report",
    "VisionService",
    "fault_engine",
    "service_router",
    "report_dispatcher",
    "history_service",
    "incident_service",
    "statistics_service",
    "vision_service",
]
