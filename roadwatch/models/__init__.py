# Import all models so they're registered with Base
from roadwatch.models.user import User, UserRole, OPERATOR_ROLES
from roadwatch.models.incident import (
    Incident,
    IncidentParty,
    Service,
    IncidentMedia,
    IncidentHistory,
    ReportSend,
    IncidentType,
    IncidentSeverity,
    IncidentStatus,
    ServiceType,
    ServiceStatus,
    MediaType,
    RecipientType,
    ReportSendStatus,
)

__all__ = [
    "User",
    "UserRole",
    "OPERATOR_ROLES",
    "Incident",
    "IncidentParty",
    "Service",
    "IncidentMedia",
    "IncidentHistory",
    "ReportSend",
    "IncidentType",
    "IncidentSeverity",
    "IncidentStatus",
    "ServiceType",
    "ServiceStatus",
    "MediaType",
    "RecipientType",
    "ReportSendStatus",
]
