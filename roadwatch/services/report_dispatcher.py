"""
Report Dispatcher
Fans a report out to its recipients. Each recipient gets its own ReportSend row
starting in "pending"; delivery feedback later moves it to sent/read/failed.
Actual message transport happens outside this service.
"""
import logging
from typing import List, Optional

from roadwatch.core.exceptions import InvalidStatusTransition, NotFoundError
from roadwatch.db.base import utcnow
from roadwatch.models.incident import Incident, ReportSend, ReportSendStatus
from roadwatch.schemas.incident import Recipient
from roadwatch.schemas.report import SmartReport
from roadwatch.services import history_service
from roadwatch.services.incident_store import IncidentStore

logger = logging.getLogger(__name__)


def send_report(
    store: IncidentStore,
    incident_id: int,
    recipients: List[Recipient],
    performed_by: Optional[int] = None,
    report: Optional[SmartReport] = None,
) -> int:
    """
    Queue the incident report for every recipient.

    Returns:
        Number of ReportSend rows created.
    """
    if store.get(Incident, incident_id) is None:
        raise NotFoundError("Incident", incident_id)

    sent_count = 0
    for recipient in recipients:
        store.insert(
            ReportSend,
            incident_id=incident_id,
            recipient_type=recipient.type,
            recipient_email=recipient.email,
            recipient_phone=recipient.phone,
            recipient_name=recipient.name,
            status=ReportSendStatus.PENDING,
        )
        sent_count += 1
        logger.info(
            f"[DISPATCH] Incident #{incident_id} -> {recipient.type.value} "
            f"'{recipient.name or ''}' <{recipient.email or recipient.phone}>"
        )

    if report is not None:
        logger.info(
            f"[DISPATCH] fault={report.fault_percentage}% | "
            f"services={', '.join(s.value for s in report.recommended_services)} | "
            f"action={report.ai_decision.action.value}"
        )

    history_service.record(
        store,
        incident_id,
        history_service.ACTION_REPORT_SENT,
        f"Report sent to {sent_count} recipients",
        performed_by=performed_by,
    )
    return sent_count


def get_status(store: IncidentStore, incident_id: int) -> List[ReportSend]:
    return store.list_by(ReportSend, "incident_id", incident_id)


def update_status(
    store: IncidentStore,
    report_send_id: int,
    status: ReportSendStatus,
    failure_reason: Optional[str] = None,
) -> ReportSend:
    """Apply delivery feedback to one ReportSend row."""
    report_send = store.get(ReportSend, report_send_id)
    if report_send is None:
        raise NotFoundError("ReportSend", report_send_id)

    current = ReportSendStatus(report_send.status)
    status = ReportSendStatus(status)
    patch = {"status": status}

    if status == ReportSendStatus.PENDING:
        if current != ReportSendStatus.PENDING:
            raise InvalidStatusTransition(
                "ReportSend", current.value, status.value, "pending is only an initial state"
            )
        return report_send
    if status == ReportSendStatus.SENT:
        patch["sent_at"] = utcnow()
    elif status == ReportSendStatus.READ:
        patch["read_at"] = utcnow()
    elif status == ReportSendStatus.FAILED:
        if not failure_reason or not failure_reason.strip():
            raise InvalidStatusTransition(
                "ReportSend", current.value, status.value, "a failure reason is required"
            )
        patch["failure_reason"] = failure_reason.strip()

    store.update(ReportSend, report_send_id, **patch)
    logger.info(f"[DISPATCH] ReportSend #{report_send_id}: {current.value} -> {status.value}")
    return report_send
