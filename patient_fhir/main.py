"""
FastAPI application entrypoint.

Run locally:  uvicorn patient_fhir.main:app --reload
"""

import logging

from fastapi import FastAPI

from patient_fhir.api.routes import router
from patient_fhir.config import settings
from patient_fhir.models.database import Base, engine

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s")

app = FastAPI(
    title="Patient FHIR Mapper API",
    description=(
        "Maps flat EMR patient records to HL7 FHIR R4 Patient resources and "
        "back, with an audited, PHI-encrypted record store."
    ),
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
