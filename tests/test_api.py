"""API tests – the database dependency is swapped for in-memory SQLite."""

import pytest
from fastapi.testclient import TestClient

from conftest import FHIR_PATIENT_FIXTURES
from patient_fhir.main import app
from patient_fhir.mapping.lookup import find_matching_entries
from patient_fhir.models.database import get_db
from patient_fhir.models.patient import AuditLog


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_record_to_resource(client, patient_fixture):
    response = client.post("/api/v1/fhir/Patient/$from-record", json=patient_fixture)

    assert response.status_code == 200
    resource = response.json()
    assert resource["resourceType"] == "Patient"
    assert resource["name"][0]["given"] == [patient_fixture["fname"], patient_fixture["mname"]]
    email = find_matching_entries(resource["telecom"], system="email", use="home")
    assert email[0]["value"] == patient_fixture["email"]


def test_resource_to_record(client, fhir_patient_fixture):
    response = client.post("/api/v1/fhir/Patient/$to-record", json=fhir_patient_fixture)

    assert response.status_code == 200
    record = response.json()
    assert record["lname"] == fhir_patient_fixture["name"][0]["family"]
    assert record["DOB"] == fhir_patient_fixture["birthDate"]


def test_unmappable_resource_is_rejected(client):
    resource = dict(FHIR_PATIENT_FIXTURES[0], name=[])
    response = client.post("/api/v1/fhir/Patient/$to-record", json=resource)

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["message"] == "Patient resource cannot be mapped to a record"
    assert detail["errors"][0].startswith("name: ")


def test_create_then_read_patient(client, db_session, fhir_patient_fixture):
    created = client.post("/api/v1/fhir/Patient", json=fhir_patient_fixture)
    assert created.status_code == 201
    created_resource = created.json()

    read = client.get("/api/v1/fhir/Patient/1")
    assert read.status_code == 200
    resource = read.json()

    assert resource["id"] == created_resource["id"]
    assert resource["name"][0]["family"] == fhir_patient_fixture["name"][0]["family"]
    ssn = find_matching_entries(resource["identifier"], system="http://hl7.org/fhir/sid/us-ssn")
    expected = find_matching_entries(
        fhir_patient_fixture["identifier"], system="http://hl7.org/fhir/sid/us-ssn"
    )
    assert ssn[0]["value"] == expected[0]["value"]

    actions = [entry.action for entry in db_session.query(AuditLog).order_by(AuditLog.id)]
    assert actions == ["create", "read"]


def test_read_unknown_patient(client):
    response = client.get("/api/v1/fhir/Patient/404")
    assert response.status_code == 404


def test_record_with_numeric_pid(client):
    response = client.post("/api/v1/fhir/Patient/$from-record", json={"fname": "A", "pid": 42})

    assert response.status_code == 200
    same_pid = client.post("/api/v1/fhir/Patient/$from-record", json={"fname": "B", "pid": "42"})
    assert response.json()["id"] == same_pid.json()["id"]
