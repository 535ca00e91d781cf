"""
Record store adapter for flat patient records.

The store never opens its own connection: callers hand it the session to
work in (a request-scoped session in the API, an in-memory one in tests)
and own the commit.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import func
from sqlalchemy.orm import Session

from patient_fhir.mapping.constants import (
    ADDRESS_FIELDS,
    NAME_FIELDS,
    OPTIONAL_ADDRESS_FIELDS,
    SCALAR_FIELDS,
    TELECOM_RULES,
)
from patient_fhir.mapping.lookup import field_text
from patient_fhir.models.patient import PatientData
from patient_fhir.services.encryption import EncryptionService

logger = logging.getLogger(__name__)

# Record fields stored as plain columns of the same name. ``ss`` is the
# exception and lives encrypted in ``encrypted_ss``.
PLAIN_FIELDS: tuple[str, ...] = (
    tuple(field for field, _ in NAME_FIELDS + ADDRESS_FIELDS + OPTIONAL_ADDRESS_FIELDS)
    + tuple(field for field, _ in SCALAR_FIELDS)
    + tuple(rule.field for rule in TELECOM_RULES)
)


class PatientRecordStore:
    """Reads and writes flat patient records in ``patient_data``."""

    def __init__(self, db: Session, cipher: EncryptionService):
        self.db = db
        self.cipher = cipher

    def next_pid(self) -> int:
        current = self.db.query(func.max(PatientData.pid)).scalar()
        return (current or 0) + 1

    def add(self, record: Mapping[str, Any]) -> dict[str, str]:
        """Insert a record under the next free pid and return it as stored."""
        row = PatientData(
            pid=self.next_pid(),
            pubpid=field_text(record, "pubpid"),
            encrypted_ss=self.cipher.encrypt(field_text(record, "ss")),
            **{field: field_text(record, field) for field in PLAIN_FIELDS},
        )
        if field_text(record, "uuid"):
            row.uuid = field_text(record, "uuid")
        self.db.add(row)
        self.db.flush()
        logger.info("Stored patient record pid=%s", row.pid)
        return self._to_record(row)

    def get(self, pid: int) -> dict[str, str] | None:
        row = self.db.query(PatientData).filter(PatientData.pid == pid).first()
        return self._to_record(row) if row else None

    def remove_by_pubpid_prefix(self, prefix: str) -> int:
        """Delete every record whose pubpid starts with ``prefix``."""
        removed = (
            self.db.query(PatientData)
            .filter(PatientData.pubpid.startswith(prefix, autoescape=True))
            .delete(synchronize_session=False)
        )
        logger.info("Removed %d patient records with pubpid prefix '%s'", removed, prefix)
        return removed

    def _to_record(self, row: PatientData) -> dict[str, str]:
        record = {field: getattr(row, field) or "" for field in PLAIN_FIELDS}
        record["ss"] = self.cipher.decrypt(row.encrypted_ss)
        record["pid"] = str(row.pid)
        record["pubpid"] = row.pubpid or ""
        record["uuid"] = row.uuid
        return record
