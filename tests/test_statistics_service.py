from roadwatch.models.incident import IncidentParty, IncidentStatus, IncidentType
from roadwatch.services.incident_store import IncidentStore
from roadwatch.services.statistics_service import calculate_statistics


def test_statistics(store, make_incident):
    injury = make_incident(IncidentType.INJURY)
    make_incident(IncidentType.TRAFFIC, status=IncidentStatus.CLOSED)
    make_incident(IncidentType.TRAFFIC)
    store.insert(IncidentParty, incident_id=injury, party_name="A", fault_percentage=80)
    store.insert(IncidentParty, incident_id=injury, party_name="B", fault_percentage=45)
    store.insert(IncidentParty, incident_id=injury, party_name="C")

    stats = calculate_statistics(store)

    assert stats.total_incidents == 3
    assert stats.by_type == {"injury": 1, "breakdown": 0, "traffic": 2}
    assert stats.by_status["pending"] == 2
    assert stats.by_status["closed"] == 1
    assert stats.average_fault_percentage == 62.5


def test_statistics_without_store():
    stats = calculate_statistics(IncidentStore(None))
    assert stats.total_incidents == 0
    assert stats.average_fault_percentage is None
