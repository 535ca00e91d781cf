"""Tests for the record store – runs against in-memory SQLite."""

from conftest import PATIENT_FIXTURE_PUBPID_PREFIX, PATIENT_FIXTURES
from patient_fhir.mapping.patient import PatientResourceMapper
from patient_fhir.models.patient import PatientData
from patient_fhir.services.encryption import EncryptionService
from patient_fhir.services.record_store import PatientRecordStore


def _store(db_session):
    return PatientRecordStore(db_session, EncryptionService())


def test_add_assigns_sequential_pids(db_session):
    store = _store(db_session)
    pids = [store.add(record)["pid"] for record in PATIENT_FIXTURES]
    assert pids == ["1", "2", "3"]
    assert store.next_pid() == 4


def test_get_returns_stored_record(db_session, patient_fixture):
    store = _store(db_session)
    stored = store.add(patient_fixture)
    loaded = store.get(int(stored["pid"]))

    assert loaded == stored
    for field, value in patient_fixture.items():
        assert loaded[field] == value, field
    assert loaded["uuid"]


def test_ssn_is_encrypted_at_rest(db_session, patient_fixture):
    store = _store(db_session)
    stored = store.add(patient_fixture)

    row = db_session.query(PatientData).filter(PatientData.pid == int(stored["pid"])).one()
    assert row.encrypted_ss
    assert patient_fixture["ss"] not in row.encrypted_ss


def test_record_uuid_is_kept(db_session, patient_fixture):
    patient_fixture["uuid"] = "90cde167-7b9b-4ed1-bd55-533925cb2605"
    assert _store(db_session).add(patient_fixture)["uuid"] == patient_fixture["uuid"]


def test_get_unknown_pid(db_session):
    assert _store(db_session).get(999) is None


def test_remove_by_pubpid_prefix(db_session):
    store = _store(db_session)
    for record in PATIENT_FIXTURES:
        store.add(record)
    store.add({"pubpid": "clinic-0001", "fname": "Kept"})

    removed = store.remove_by_pubpid_prefix(PATIENT_FIXTURE_PUBPID_PREFIX)

    assert removed == len(PATIENT_FIXTURES)
    assert db_session.query(PatientData).count() == 1


def test_stored_record_maps_to_resource(db_session, patient_fixture):
    stored = _store(db_session).add(patient_fixture)
    resource = PatientResourceMapper().to_resource(stored)

    assert resource["id"] == stored["uuid"]
    assert resource["identifier"][0]["value"] == patient_fixture["ss"]


def test_remove_treats_wildcards_in_prefix_literally(db_session):
    store = _store(db_session)
    store.add({"pubpid": "test_a-001", "fname": "Matched"})
    store.add({"pubpid": "testXa-002", "fname": "Kept"})
    store.add({"pubpid": "test%-003", "fname": "Kept"})

    assert store.remove_by_pubpid_prefix("test_a") == 1
    remaining = [row.pubpid for row in db_session.query(PatientData).order_by(PatientData.pid)]
    assert remaining == ["testXa-002", "test%-003"]
