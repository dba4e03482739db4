"""
Incident Models
Incidents plus the rows hanging off them: parties, dispatched services, media,
the append-only history log and per-recipient report deliveries.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roadwatch.db.base import Base, TimestampMixin, utcnow


# ============================================
# ENUMS
# ============================================

class IncidentType(str, Enum):
    INJURY = "injury"
    BREAKDOWN = "breakdown"
    TRAFFIC = "traffic"

    @classmethod
    def parse(cls, value) -> Optional["IncidentType"]:
        """Return the member for *value*, or None for unrecognised types."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ServiceType(str, Enum):
    AMBULANCE = "ambulance"
    TOW_TRUCK = "tow_truck"
    TRAFFIC_CONTROL = "traffic_control"
    POLICE = "police"
    FIRE = "fire"


class ServiceStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    EN_ROUTE = "en_route"
    ARRIVED = "arrived"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class RecipientType(str, Enum):
    PARTY = "party"
    INSURANCE = "insurance"
    NAJM = "najm"
    OPERATOR = "operator"


class ReportSendStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    READ = "read"


# ============================================
# INCIDENT
# ============================================

class Incident(Base, TimestampMixin):
    __tablename__ = "incidents"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    reporter_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    incident_type: Mapped[IncidentType] = mapped_column(SQLEnum(IncidentType), nullable=False, index=True)

    location: Mapped[str] = mapped_column(String(500), nullable=False)
    latitude: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    longitude: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    severity: Mapped[IncidentSeverity] = mapped_column(
        SQLEnum(IncidentSeverity), default=IncidentSeverity.MEDIUM, nullable=False
    )
    status: Mapped[IncidentStatus] = mapped_column(
        SQLEnum(IncidentStatus), default=IncidentStatus.PENDING, nullable=False, index=True
    )

    # Relationships
    parties = relationship("IncidentParty", back_populates="incident", order_by="IncidentParty.id")
    services = relationship("Service", back_populates="incident", order_by="Service.id")
    media = relationship("IncidentMedia", back_populates="incident", order_by="IncidentMedia.id")
    history = relationship("IncidentHistory", back_populates="incident", order_by="IncidentHistory.id")
    report_sends = relationship("ReportSend", back_populates="incident", order_by="ReportSend.id")


class IncidentParty(Base, TimestampMixin):
    __tablename__ = "incident_parties"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    incident_id: Mapped[int] = mapped_column(ForeignKey("incidents.id"), nullable=False, index=True)
    party_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    vehicle_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # 0-100, NULL until estimated or set by an operator
    fault_percentage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    incident = relationship("Incident", back_populates="parties")


class Service(Base, TimestampMixin):
    __tablename__ = "services"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    incident_id: Mapped[int] = mapped_column(ForeignKey("incidents.id"), nullable=False, index=True)
    service_type: Mapped[ServiceType] = mapped_column(SQLEnum(ServiceType), nullable=False)
    status: Mapped[ServiceStatus] = mapped_column(
        SQLEnum(ServiceStatus), default=ServiceStatus.PENDING, nullable=False
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    incident = relationship("Incident", back_populates="services")


class IncidentMedia(Base):
    __tablename__ = "incident_media"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    incident_id: Mapped[int] = mapped_column(ForeignKey("incidents.id"), nullable=False, index=True)
    media_type: Mapped[MediaType] = mapped_column(SQLEnum(MediaType), nullable=False)
    media_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_simulated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    incident = relationship("Incident", back_populates="media")


class IncidentHistory(Base):
    """Append-only audit trail. Rows are never updated."""
    __tablename__ = "incident_history"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    incident_id: Mapped[int] = mapped_column(ForeignKey("incidents.id"), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    performed_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)  # NULL = automation
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )

    incident = relationship("Incident", back_populates="history")


class ReportSend(Base, TimestampMixin):
    __tablename__ = "report_sends"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    incident_id: Mapped[int] = mapped_column(ForeignKey("incidents.id"), nullable=False, index=True)
    recipient_type: Mapped[RecipientType] = mapped_column(SQLEnum(RecipientType), nullable=False)
    recipient_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    recipient_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    recipient_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[ReportSendStatus] = mapped_column(
        SQLEnum(ReportSendStatus), default=ReportSendStatus.PENDING, nullable=False
    )
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    incident = relationship("Incident", back_populates="report_sends")
