"""
FastAPI routes – the FHIR Patient surface.

- Stateless mapping endpoints ($from-record / $to-record)
- Create/read against the record store, with an audit entry per PHI access
- MappingError is reported as 422 with every schema violation listed
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from patient_fhir.config import settings
from patient_fhir.mapping.errors import MappingError
from patient_fhir.mapping.patient import PatientResourceMapper
from patient_fhir.models.database import get_db
from patient_fhir.schemas.api import (
    FhirResource,
    HealthResponse,
    MappingErrorResponse,
    PatientRecord,
)
from patient_fhir.services.audit import log_action
from patient_fhir.services.encryption import EncryptionService
from patient_fhir.services.record_store import PatientRecordStore

logger = logging.getLogger(__name__)

router = APIRouter()

mapper = PatientResourceMapper()
encryption = EncryptionService()


def get_record_store(db: Session = Depends(get_db)) -> PatientRecordStore:
    return PatientRecordStore(db, encryption)


def _map_to_record(resource: dict[str, Any]) -> dict[str, str]:
    try:
        return mapper.to_record(resource)
    except MappingError as exc:
        logger.info("Rejected Patient resource: %s", exc)
        raise HTTPException(
            status_code=422,
            detail=MappingErrorResponse(
                message="Patient resource cannot be mapped to a record",
                errors=exc.errors or [str(exc)],
            ).model_dump(),
        ) from exc


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Basic health endpoint – verifies DB connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.exception("Database health check failed")
        db_status = "disconnected"
    return HealthResponse(
        status="healthy",
        environment=settings.ENVIRONMENT,
        database=db_status,
    )


# ---------------------------------------------------------------------------
# Stateless mapping
# ---------------------------------------------------------------------------

@router.post("/fhir/Patient/$from-record")
def record_to_resource(record: PatientRecord) -> FhirResource:
    """Map a flat patient record to a FHIR Patient resource."""
    return mapper.to_resource(record.model_dump(exclude_none=True))


@router.post("/fhir/Patient/$to-record", response_model=PatientRecord)
def resource_to_record(resource: FhirResource = Body(...)):
    """Map a FHIR Patient resource back to a flat patient record."""
    return PatientRecord(**_map_to_record(resource))


# ---------------------------------------------------------------------------
# Record store backed (audited)
# ---------------------------------------------------------------------------

@router.post("/fhir/Patient", status_code=201)
def create_patient(
    resource: FhirResource = Body(...),
    store: PatientRecordStore = Depends(get_record_store),
) -> FhirResource:
    """Store the record carried by a Patient resource and return it as stored."""
    stored = store.add(_map_to_record(resource))
    log_action(
        store.db,
        actor="api_user",
        action="create",
        resource_type="Patient",
        resource_id=stored["uuid"],
        detail={"pid": stored["pid"]},
    )
    store.db.commit()
    return mapper.to_resource(stored)


@router.get("/fhir/Patient/{pid}")
def read_patient(pid: int, store: PatientRecordStore = Depends(get_record_store)) -> FhirResource:
    record = store.get(pid)
    if record is None:
        raise HTTPException(status_code=404, detail="Patient not found")

    log_action(
        store.db,
        actor="api_user",
        action="read",
        resource_type="Patient",
        resource_id=record["uuid"],
    )
    store.db.commit()
    return mapper.to_resource(record)
