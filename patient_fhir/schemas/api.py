"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Flat patient record
# ---------------------------------------------------------------------------

class PatientRecord(BaseModel):
    """Flat ``patient_data`` record as exchanged with the record store."""
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    fname: str = ""
    mname: str = ""
    lname: str = ""
    DOB: str = ""
    sex: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country_code: str = ""
    phone_home: str = ""
    phone_biz: str = ""
    phone_cell: str = ""
    email: str = ""
    ss: str = ""
    pid: int | str | None = None
    pubpid: str | None = None
    uuid: str | None = None


class MappingErrorResponse(BaseModel):
    message: str
    errors: list[str]


# FHIR resources travel as plain JSON objects; the mapper owns their shape.
FhirResource = dict[str, Any]


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
    database: str = "connected"
