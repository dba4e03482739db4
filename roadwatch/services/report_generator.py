"""
Smart Report Generator
Runs analysis -> fault/severity -> routing for one incident and composes the
human-readable summary. The report is returned to the caller, never stored.
"""
import logging
import random
from typing import Dict, Optional

from roadwatch.core.config import Settings, get_settings
from roadwatch.core.exceptions import NotFoundError
from roadwatch.models.incident import Incident, IncidentType
from roadwatch.schemas.report import AIDecision, DecisionAction, DecisionPriority, SmartReport
from roadwatch.services import fault_engine, service_router
from roadwatch.services.incident_store import IncidentStore

logger = logging.getLogger(__name__)

# ─────────────────────── Summary labels ───────────────────────

INCIDENT_TYPE_LABELS: Dict[str, Dict[IncidentType, str]] = {
    "en": {
        IncidentType.INJURY: "Injury accident",
        IncidentType.BREAKDOWN: "Vehicle breakdown",
        IncidentType.TRAFFIC: "Traffic management",
    },
    "ar": {
        IncidentType.INJURY: "حادث إصابات",
        IncidentType.BREAKDOWN: "تعطل سيارة",
        IncidentType.TRAFFIC: "تسيير حركة",
    },
}

ACTION_LABELS: Dict[str, Dict[DecisionAction, str]] = {
    "en": {
        DecisionAction.AMBULANCE: "Ambulance dispatched",
        DecisionAction.TOW_TRUCK: "Tow truck dispatched",
        DecisionAction.TRAFFIC_CONTROL: "Traffic control dispatched",
        DecisionAction.POLICE: "Police dispatched",
        DecisionAction.NONE: "No services required",
    },
    "ar": {
        DecisionAction.AMBULANCE: "تم توجيه الإسعاف",
        DecisionAction.TOW_TRUCK: "تم توجيه السطحة",
        DecisionAction.TRAFFIC_CONTROL: "تم توجيه المرور",
        DecisionAction.POLICE: "تم توجيه الشرطة",
        DecisionAction.NONE: "لا توجد خدمات مطلوبة",
    },
}

PRIORITY_LABELS: Dict[str, Dict[DecisionPriority, str]] = {
    "en": {
        DecisionPriority.IMMEDIATE: "Immediate",
        DecisionPriority.URGENT: "Urgent",
        DecisionPriority.NORMAL: "Normal",
    },
    "ar": {
        DecisionPriority.IMMEDIATE: "فوري",
        DecisionPriority.URGENT: "عاجل",
        DecisionPriority.NORMAL: "عادي",
    },
}

SUMMARY_TEMPLATES: Dict[str, str] = {
    "en": (
        "Smart report - {type_label}\n"
        "Location: {location}\n"
        "Fault percentage: {fault}%\n"
        "Action taken: {action_label}\n"
        "Priority: {priority_label}\n"
        "Estimated response time: {eta} minutes"
    ),
    "ar": (
        "تقرير ذكي - {type_label}\n"
        "الموقع: {location}\n"
        "نسبة الخطأ: {fault}%\n"
        "الإجراء المتخذ: {action_label}\n"
        "الأولوية: {priority_label}\n"
        "الوقت المتوقع للاستجابة: {eta} دقائق"
    ),
}
DEFAULT_LOCALE = "en"


def generate_report_summary(
    incident: Incident,
    fault_percentage: int,
    ai_decision: AIDecision,
    locale: str = DEFAULT_LOCALE,
) -> str:
    if locale not in SUMMARY_TEMPLATES:
        logger.warning(f"[REPORT] Unknown locale '{locale}', using '{DEFAULT_LOCALE}'")
        locale = DEFAULT_LOCALE

    kind = IncidentType.parse(incident.incident_type)
    type_label = INCIDENT_TYPE_LABELS[locale].get(kind, str(incident.incident_type))

    return SUMMARY_TEMPLATES[locale].format(
        type_label=type_label,
        location=incident.location,
        fault=fault_percentage,
        action_label=ACTION_LABELS[locale][ai_decision.action],
        priority_label=PRIORITY_LABELS[locale][ai_decision.priority],
        eta=ai_decision.estimated_response_time,
    )


def build_report(
    incident: Incident,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> SmartReport:
    """Compose a report from an already-loaded incident."""
    settings = settings or get_settings()
    incident_type = incident.incident_type

    video_analysis = fault_engine.simulate_video_analysis(incident_type)
    estimate = fault_engine.estimate(incident_type, video_analysis, rng)
    ai_decision = service_router.make_decision(incident_type, estimate.fault_percentage, video_analysis)

    return SmartReport(
        incident_id=incident.id,
        location=incident.location,
        incident_type=incident_type,
        severity=estimate.severity,
        fault_percentage=estimate.fault_percentage,
        recommended_services=service_router.recommend(incident_type),
        analysis_time=settings.ANALYSIS_TIME_MS,
        video_analysis=video_analysis,
        ai_decision=ai_decision,
        report_summary=generate_report_summary(
            incident, estimate.fault_percentage, ai_decision, settings.REPORT_LOCALE
        ),
    )


def generate_smart_report(
    store: IncidentStore,
    incident_id: int,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> SmartReport:
    """
    Analyse an incident and return its smart report.

    Raises:
        NotFoundError: the incident id does not resolve in the store.
    """
    incident = store.get(Incident, incident_id)
    if incident is None:
        raise NotFoundError("Incident", incident_id)

    report = build_report(incident, rng=rng, settings=settings)
    logger.info(
        f"[REPORT] Incident #{incident_id}: fault={report.fault_percentage}% "
        f"severity={report.severity.value} action={report.ai_decision.action.value} "
        f"priority={report.ai_decision.priority.value}"
    )
    return report
