"""
Incident Schemas - Pydantic validation for operator and reporter input
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from roadwatch.core.config import EMAIL_PATTERN
from roadwatch.models.incident import (
    IncidentSeverity, IncidentStatus, IncidentType, MediaType,
    RecipientType, ReportSendStatus, ServiceStatus, ServiceType,
)


# ============================================
# REQUEST SCHEMAS
# ============================================

class IncidentCreate(BaseModel):
    incident_type: IncidentType
    location: str = Field(..., min_length=1, max_length=500)
    latitude: str
    longitude: str
    description: Optional[str] = None
    severity: Optional[IncidentSeverity] = None


class PartyCreate(BaseModel):
    party_name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = None
    vehicle_number: Optional[str] = None


class ServiceCreate(BaseModel):
    service_type: ServiceType
    assigned_to: Optional[str] = None


class MediaCreate(BaseModel):
    media_type: MediaType
    media_url: str = Field(..., pattern=r"^https?://\S+$")
    description: Optional[str] = None
    is_simulated: bool = False


class Recipient(BaseModel):
    """A single report destination. Contact fields are opaque identifiers."""
    type: RecipientType
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN.pattern)
    phone: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def require_contact(self):
        if not self.email and not self.phone:
            raise ValueError("recipient needs an email or a phone number")
        return self


# ============================================
# RESPONSE SCHEMAS
# ============================================

class IncidentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reporter_id: Optional[int]
    incident_type: IncidentType
    location: str
    latitude: Optional[str]
    longitude: Optional[str]
    description: Optional[str]
    severity: IncidentSeverity
    status: IncidentStatus
    created_at: datetime
    updated_at: datetime


class PartyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    incident_id: int
    party_name: str
    phone: Optional[str]
    vehicle_number: Optional[str]
    fault_percentage: Optional[int]


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    incident_id: int
    service_type: ServiceType
    status: ServiceStatus
    assigned_to: Optional[str]


class MediaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    incident_id: int
    media_type: MediaType
    media_url: str
    description: Optional[str]
    is_simulated: bool
    created_at: datetime


class ReportSendResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    incident_id: int
    recipient_type: RecipientType
    recipient_email: Optional[str]
    recipient_phone: Optional[str]
    recipient_name: Optional[str]
    status: ReportSendStatus
    sent_at: Optional[datetime]
    read_at: Optional[datetime]
    failure_reason: Optional[str]


class IncidentFullDetails(BaseModel):
    incident: IncidentResponse
    services: List[ServiceResponse] = []
    parties: List[PartyResponse] = []
    media: List[MediaResponse] = []
