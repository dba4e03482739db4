"""
Automation Engine
Drives an incident through automatic processing:

  1. generate the smart report
  2. route services (Service rows)
  3. alert the stakeholder channels
  4. move the incident to in_progress
  5. send the report to the parties

Each step commits on its own; a failure part-way leaves earlier effects in
place. monitor_pending() sweeps every pending incident with per-item isolation
and is meant to be triggered on an external schedule.
"""
import logging
import random
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Set, Tuple

from roadwatch.core.config import Settings, get_settings
from roadwatch.core.exceptions import ProcessingInProgress, StoreUnavailable
from roadwatch.models.incident import (
    Incident, IncidentParty, IncidentStatus, RecipientType, ServiceType,
)
from roadwatch.schemas.incident import Recipient
from roadwatch.schemas.report import Alert, SmartReport
from roadwatch.services import history_service, report_dispatcher, service_router
from roadwatch.services.incident_store import IncidentStore
from roadwatch.services.report_generator import generate_smart_report

logger = logging.getLogger(__name__)

# (channel, message template): one alert per channel on every automatic run
STAKEHOLDER_CHANNELS: List[Tuple[str, str]] = [
    ("Traffic Authority", "New incident at {location}"),
    ("Red Crescent", "Incident requiring ambulance at {location}"),
    ("Najm", "Incident requiring tow truck at {location}"),
    ("Police", "Traffic incident at {location}"),
]

# distance threshold (km) -> message, checked nearest first
PROXIMITY_ALERTS: Dict[int, str] = {
    0: "Service has arrived at the incident location",
    1: "Service is 1 km away - high readiness",
    2: "Service is 2 km away - prepare to receive",
    5: "Service is 5 km away from the incident location",
}


class IncidentLockRegistry:
    """Single-flight guard: at most one automatic run per incident id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: Set[int] = set()

    @contextmanager
    def hold(self, incident_id: int) -> Iterator[None]:
        with self._lock:
            if incident_id in self._in_flight:
                raise ProcessingInProgress(incident_id)
            self._in_flight.add(incident_id)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(incident_id)

    def is_processing(self, incident_id: int) -> bool:
        with self._lock:
            return incident_id in self._in_flight


# Shared by every engine in the process; each request builds its own engine
processing_locks = IncidentLockRegistry()


def proximity_alert(service_type: ServiceType, distance_km: float) -> Optional[str]:
    """Message for the nearest threshold at or above *distance_km*, None beyond 5 km."""
    for threshold in sorted(PROXIMITY_ALERTS):
        if distance_km <= threshold:
            message = PROXIMITY_ALERTS[threshold]
            logger.info(f"[AUTOMATION][PROXIMITY] {ServiceType(service_type).value}: {message}")
            return message
    return None


class AutomationEngine:
    """Runs automatic processing for incidents held in *store*."""

    def __init__(
        self,
        store: IncidentStore,
        rng: Optional[random.Random] = None,
        settings: Optional[Settings] = None,
        locks: Optional[IncidentLockRegistry] = None,
    ):
        self.store = store
        self.rng = rng
        self.settings = settings or get_settings()
        self.locks = locks or processing_locks

    # ──────────────────────────── Public API ────────────────────────────

    def process_incident(self, incident_id: int) -> SmartReport:
        """
        Process one incident end to end.

        Raises:
            StoreUnavailable: no database session is attached.
            NotFoundError: the incident does not exist (nothing is written).
            ProcessingInProgress: another run for this incident is active.
        """
        if not self.store.available:
            raise StoreUnavailable("Database not available")

        with self.locks.hold(incident_id):
            logger.info(f"[AUTOMATION] Processing incident #{incident_id}...")
            try:
                report = generate_smart_report(self.store, incident_id, rng=self.rng, settings=self.settings)
                history_service.record(
                    self.store,
                    incident_id,
                    history_service.ACTION_REPORT_GENERATED,
                    f"Fault {report.fault_percentage}%, severity {report.severity.value}, "
                    f"analysis time {report.analysis_time}ms",
                )

                self._route_services(report)
                self.send_alerts(report)
                self._mark_in_progress(report)
                self._send_report_to_parties(report)
            except Exception as exc:
                logger.error(f"[AUTOMATION] Error processing incident #{incident_id}: {exc}")
                raise

            logger.info(f"[AUTOMATION] Incident #{incident_id} processed successfully")
            return report

    def monitor_pending(self) -> int:
        """
        Process every pending incident. A failure on one incident is logged
        and the sweep moves on.

        Returns:
            Number of incidents processed successfully.
        """
        if not self.store.available:
            raise StoreUnavailable("Database not available")

        pending = self.store.list_by(Incident, "status", IncidentStatus.PENDING)
        logger.info(f"[AUTOMATION] Monitoring {len(pending)} pending incident(s)...")

        processed = 0
        for incident_id in [incident.id for incident in pending]:
            try:
                self.process_incident(incident_id)
                processed += 1
            except Exception as exc:
                logger.error(f"[AUTOMATION] Incident #{incident_id} failed during sweep: {exc}")

        logger.info(f"[AUTOMATION] Sweep done: {processed}/{len(pending)} processed")
        return processed

    def send_alerts(self, report: SmartReport) -> List[Alert]:
        """One alert per stakeholder channel. Delivery is external; alerts are logged."""
        alerts = [
            Alert(
                recipient=channel,
                message=template.format(location=report.location),
                priority=report.ai_decision.priority,
            )
            for channel, template in STAKEHOLDER_CHANNELS
        ]
        for alert in alerts:
            logger.info(
                f"[AUTOMATION][ALERT] {alert.recipient}: {alert.message} "
                f"(priority={alert.priority.value})"
            )
        return alerts

    # ─────────────────────────── Steps ───────────────────────────

    def _route_services(self, report: SmartReport) -> List[int]:
        service_ids = service_router.route_services(self.store, report)
        planned = service_router.services_to_dispatch(report)
        history_service.record(
            self.store,
            report.incident_id,
            history_service.ACTION_SERVICES_ROUTED,
            ", ".join(s.value for s in planned) or "no services required",
        )
        return service_ids

    def _mark_in_progress(self, report: SmartReport) -> None:
        self.store.update(
            Incident,
            report.incident_id,
            status=IncidentStatus.IN_PROGRESS,
            severity=report.severity,
        )
        for party in self.store.list_by(IncidentParty, "incident_id", report.incident_id):
            if party.fault_percentage is None:
                self.store.update(IncidentParty, party.id, fault_percentage=report.fault_percentage)

        history_service.record(
            self.store,
            report.incident_id,
            history_service.ACTION_STATUS_UPDATED,
            f"Status changed to {IncidentStatus.IN_PROGRESS.value} (automatic processing)",
        )

    def _build_recipients(self, incident_id: int) -> List[Recipient]:
        recipients = []
        for party in self.store.list_by(IncidentParty, "incident_id", incident_id):
            if not party.phone:
                logger.warning(
                    f"[AUTOMATION] Party #{party.id} ({party.party_name}) on incident #{incident_id} "
                    f"has no phone number, skipping report dispatch"
                )
                continue
            recipients.append(Recipient(type=RecipientType.PARTY, phone=party.phone, name=party.party_name))
        if self.settings.NAJM_REPORT_EMAIL:
            recipients.append(
                Recipient(type=RecipientType.NAJM, email=self.settings.NAJM_REPORT_EMAIL, name="Najm")
            )
        if self.settings.INSURANCE_REPORT_EMAIL:
            recipients.append(
                Recipient(type=RecipientType.INSURANCE, email=self.settings.INSURANCE_REPORT_EMAIL)
            )
        return recipients

    def _send_report_to_parties(self, report: SmartReport) -> int:
        recipients = self._build_recipients(report.incident_id)
        if not recipients:
            logger.info(f"[AUTOMATION] Incident #{report.incident_id} has no reachable recipients")
            return 0
        return report_dispatcher.send_report(self.store, report.incident_id, recipients, report=report)
