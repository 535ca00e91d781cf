"""
Bidirectional mapping between flat ``patient_data`` records and FHIR R4
Patient resources.

Both directions walk the same field table (see ``constants``), so a field
added there is written by ``to_resource`` and read back by ``to_record``.

Forward mapping never fails for a record of strings. Reverse mapping first
checks the resource against FHIR_PATIENT_SCHEMA and raises MappingError
with every violation found; it never returns a partially filled record.
"""

from __future__ import annotations

import html
import json
import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable

from patient_fhir.config import settings
from patient_fhir.mapping import codec
from patient_fhir.mapping.constants import (
    ADDRESS_FIELDS,
    IDENTIFIER_RULES,
    INITIAL_VERSION_ID,
    NAME_FIELDS,
    OPTIONAL_ADDRESS_FIELDS,
    RESOURCE_TYPE,
    SCALAR_FIELDS,
    TELECOM_RULES,
    XHTML_NAMESPACE,
    AdministrativeGender,
    NameUse,
    NarrativeStatus,
    Path,
)
from patient_fhir.mapping.errors import MappingError
from patient_fhir.mapping.lookup import field_text, find_matching_entries
from patient_fhir.schemas.fhir import FHIR_PATIENT_SCHEMA
from patient_fhir.services.validation import validate_against_schema

logger = logging.getLogger(__name__)

Record = dict[str, str]

_GENDERS = {gender.value for gender in AdministrativeGender}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _place(target: dict[str, Any], path: Path, value: str) -> None:
    """Write ``value`` at ``(key,)`` or ``(key, slot)``, padding list slots."""
    key, *rest = path
    if not rest:
        target[key] = value
        return
    slot = rest[0]
    slots = target.setdefault(key, [])
    while len(slots) <= slot:
        slots.append("")
    slots[slot] = value


def _pluck(source: Mapping[str, Any], path: Path) -> str:
    key, *rest = path
    value = source.get(key)
    if rest:
        slot = rest[0]
        value = value[slot] if isinstance(value, list) and len(value) > slot else None
    return "" if value is None else str(value)


def _gender(sex: str) -> str:
    normalized = sex.strip().lower()
    return normalized if normalized in _GENDERS else AdministrativeGender.UNKNOWN.value


class PatientResourceMapper:
    """
    Maps patient records to FHIR Patient resources and back.

    Usage:
        mapper = PatientResourceMapper()
        resource = mapper.to_resource(record)
        payload = mapper.to_resource(record, encode=True)   # JSON text
        record = mapper.to_record(resource)

    Instances only hold the id namespace and the clock, so one mapper can
    be shared between threads.
    """

    def __init__(
        self,
        id_namespace: str | uuid.UUID | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._namespace = uuid.UUID(str(id_namespace or settings.FHIR_ID_NAMESPACE))
        self._clock = clock or _utc_now

    # ------------------------------------------------------------------
    # Record -> Resource
    # ------------------------------------------------------------------

    def to_resource(
        self, record: Mapping[str, Any], encode: bool = False
    ) -> dict[str, Any] | str:
        """
        Build a Patient resource from a flat record.
        With ``encode=True`` the JSON text of the resource is returned instead.
        """
        resource: dict[str, Any] = {
            "resourceType": RESOURCE_TYPE,
            "id": self.resource_id(record),
            "meta": {
                "versionId": INITIAL_VERSION_ID,
                "lastUpdated": self._clock().isoformat(timespec="microseconds"),
            },
            "text": {
                "status": NarrativeStatus.GENERATED.value,
                "div": self._narrative(record),
            },
            "active": True,
        }

        identifiers = [
            {"system": rule.system, "value": field_text(record, rule.field)}
            for rule in IDENTIFIER_RULES
            if field_text(record, rule.field)
        ]
        if identifiers:
            resource["identifier"] = identifiers

        name: dict[str, Any] = {"use": NameUse.OFFICIAL.value}
        for field, path in NAME_FIELDS:
            _place(name, path, field_text(record, field))
        resource["name"] = [name]

        telecom = [
            {"system": rule.system, "use": rule.use, "value": field_text(record, rule.field)}
            for rule in TELECOM_RULES
            if field_text(record, rule.field)
        ]
        if telecom:
            resource["telecom"] = telecom

        if field_text(record, "sex"):
            resource["gender"] = _gender(field_text(record, "sex"))
        if field_text(record, "DOB"):
            resource["birthDate"] = field_text(record, "DOB")

        address: dict[str, Any] = {}
        for field, path in ADDRESS_FIELDS:
            _place(address, path, field_text(record, field))
        for field, path in OPTIONAL_ADDRESS_FIELDS:
            if field_text(record, field):
                _place(address, path, field_text(record, field))
        resource["address"] = [address]

        logger.debug("Mapped patient record to Patient/%s", resource["id"])
        if encode:
            return codec.encode(resource)
        return resource

    def resource_id(self, record: Mapping[str, Any]) -> str:
        """
        The record's own uuid when it has one, otherwise a name-based UUID
        from its pid/pubpid, otherwise from its full content.
        """
        own_uuid = field_text(record, "uuid")
        if own_uuid:
            return own_uuid
        for key in ("pid", "pubpid"):
            value = field_text(record, key)
            if value:
                return str(uuid.uuid5(self._namespace, f"{key}:{value}"))
        canonical = json.dumps({key: field_text(record, key) for key in record}, sort_keys=True)
        return str(uuid.uuid5(self._namespace, canonical))

    def _narrative(self, record: Mapping[str, Any]) -> str:
        display = " ".join(
            part
            for part in (field_text(record, f) for f in ("title", "fname", "mname", "lname"))
            if part
        )
        paragraphs = [f"<p>{html.escape(display or 'Unnamed patient')}</p>"]
        if field_text(record, "DOB"):
            paragraphs.append(f"<p>Born {html.escape(field_text(record, 'DOB'))}</p>")
        if field_text(record, "sex"):
            paragraphs.append(f"<p>Gender {html.escape(_gender(field_text(record, 'sex')))}</p>")
        return f'<div xmlns="{XHTML_NAMESPACE}">{"".join(paragraphs)}</div>'

    # ------------------------------------------------------------------
    # Resource -> Record
    # ------------------------------------------------------------------

    def to_record(self, resource: dict[str, Any]) -> Record:
        """Recover the flat record fields from a decoded Patient resource."""
        errors = validate_against_schema(resource, FHIR_PATIENT_SCHEMA)
        if errors:
            raise MappingError("Patient resource cannot be mapped to a record", errors)

        name = resource["name"][0]
        address = resource["address"][0]
        record: Record = {}

        for field, path in NAME_FIELDS:
            record[field] = _pluck(name, path)
        for field, path in ADDRESS_FIELDS + OPTIONAL_ADDRESS_FIELDS:
            record[field] = _pluck(address, path)
        for field, element in SCALAR_FIELDS:
            record[field] = field_text(resource, element)
        for rule in IDENTIFIER_RULES:
            record[rule.field] = self._first_value(resource.get("identifier"), rule.field, rule.tags)
        for rule in TELECOM_RULES:
            record[rule.field] = self._first_value(resource.get("telecom"), rule.field, rule.tags)

        logger.debug("Mapped Patient/%s to a patient record", resource.get("id", "<no id>"))
        return record

    @staticmethod
    def _first_value(entries: Any, field: str, tags: dict[str, str]) -> str:
        matches = find_matching_entries(entries, **tags)
        if not matches:
            return ""
        if len(matches) > 1:
            logger.warning(
                "%d entries match %s for '%s'; using the first", len(matches), tags, field
            )
        return field_text(matches[0], "value")
