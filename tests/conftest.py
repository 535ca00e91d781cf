"""Shared fixtures: sample records, sample FHIR resources and a throwaway database."""

import copy
import json
import os
from pathlib import Path

# Must be set before patient_fhir.config is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from patient_fhir.models.database import Base  # noqa: E402
from patient_fhir.models import patient as _tables  # noqa: E402,F401

FIXTURE_DIR = Path(__file__).parent / "fixtures"

# Prefix shared by every sample record so they can be removed in bulk.
PATIENT_FIXTURE_PUBPID_PREFIX = "test-fixture"


def load_fixture(file_name: str) -> list[dict]:
    return json.loads((FIXTURE_DIR / file_name).read_text(encoding="utf-8"))


PATIENT_FIXTURES = load_fixture("patients.json")
FHIR_PATIENT_FIXTURES = load_fixture("fhir-patients.json")


@pytest.fixture(params=PATIENT_FIXTURES, ids=lambda record: record["pubpid"])
def patient_fixture(request):
    return copy.deepcopy(request.param)


@pytest.fixture(params=FHIR_PATIENT_FIXTURES, ids=lambda resource: resource["id"])
def fhir_patient_fixture(request):
    return copy.deepcopy(request.param)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
