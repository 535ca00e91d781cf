"""
Tables backing the record store.

PatientData mirrors the flat EMR ``patient_data`` row the mapper reads and
writes. The SSN is the only column held encrypted; everything the FHIR
resource needs in clear text stays in plain columns.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text

from patient_fhir.models.database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Patient – flat demographic record (contains PHI)
# ---------------------------------------------------------------------------
class PatientData(Base):
    __tablename__ = "patient_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pid = Column(Integer, unique=True, nullable=False, comment="EMR patient id")
    pubpid = Column(String(255), nullable=False, default="", comment="Public/external patient id")
    uuid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid4()))

    title = Column(String(255), default="")
    fname = Column(String(255), default="")
    mname = Column(String(255), default="")
    lname = Column(String(255), default="")
    DOB = Column("DOB", String(10), default="")
    sex = Column(String(255), default="")

    street = Column(String(255), default="")
    city = Column(String(255), default="")
    state = Column(String(255), default="")
    postal_code = Column(String(255), default="")
    country_code = Column(String(255), default="")

    phone_home = Column(String(255), default="")
    phone_biz = Column(String(255), default="")
    phone_cell = Column(String(255), default="")
    email = Column(String(255), default="")

    encrypted_ss = Column(Text, nullable=True, comment="Fernet-encrypted SSN")

    created_at = Column(DateTime, default=_utc_now, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now)

    __table_args__ = (Index("ix_patient_data_pubpid", "pubpid"),)


# ---------------------------------------------------------------------------
# Audit Log – immutable compliance trail
# ---------------------------------------------------------------------------
class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor = Column(String(128), nullable=False, comment="User or service identity")
    action = Column(String(64), nullable=False, comment="create | read | update | delete")
    resource_type = Column(String(64), nullable=False)
    resource_id = Column(String(64), nullable=False)
    detail = Column(JSON, comment="Context for the action")
    timestamp = Column(DateTime, default=_utc_now, nullable=False)

    __table_args__ = (Index("ix_audit_timestamp", "timestamp"),)
