import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import roadwatch.models  # noqa: F401  (registers tables)
from roadwatch.core.config import Settings
from roadwatch.db.base import Base
from roadwatch.models import (
    Incident, IncidentParty, IncidentStatus, IncidentType, User, UserRole,
)
from roadwatch.services.automation_engine import IncidentLockRegistry
from roadwatch.services.incident_store import IncidentStore

TEST_DATABASE_URL = "sqlite://"


class FixedRandom:
    """Stand-in rng whose random() always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return IncidentStore(db)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        REPORT_LOCALE="en",
        ANALYSIS_TIME_MS=3000,
        VISION_API_URL="https://vision.test/v1/chat/completions",
        VISION_API_KEY="test-key",
        NAJM_REPORT_EMAIL=None,
        INSURANCE_REPORT_EMAIL=None,
    )


@pytest.fixture
def locks():
    return IncidentLockRegistry()


@pytest.fixture
def operator(store):
    user_id = store.insert(User, name="Duty Operator", email="operator@example.com", role=UserRole.OPERATOR)
    return store.get(User, user_id)


@pytest.fixture
def reporter(store):
    user_id = store.insert(User, name="Citizen", email="citizen@example.com", role=UserRole.USER)
    return store.get(User, user_id)


@pytest.fixture
def make_incident(store):
    def _make(
        incident_type=IncidentType.TRAFFIC,
        status=IncidentStatus.PENDING,
        location="King Fahd Rd, Riyadh",
        parties=(),
    ) -> int:
        incident_id = store.insert(
            Incident,
            incident_type=incident_type,
            location=location,
            latitude="24.7136",
            longitude="46.6753",
            status=status,
        )
        for name, phone in parties:
            store.insert(IncidentParty, incident_id=incident_id, party_name=name, phone=phone)
        return incident_id

    return _make


@pytest.fixture
def fixed_random():
    return FixedRandom
