"""
Coded systems, use-qualifier vocabularies and the field-mapping table
shared by both mapping directions.

The table is the single source of truth for where each flat
``patient_data`` field lives inside a FHIR R4 Patient resource:

- NAME_FIELDS / ADDRESS_FIELDS: cardinality-one structures, addressed by a
  path inside the single ``name`` / ``address`` entry. An integer path
  element is a slot in a list that is always present.
- TELECOM_RULES / IDENTIFIER_RULES: repeated entries, addressed by their
  coded tags rather than by position.
- SCALAR_FIELDS: top-level passthrough elements.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SSN_SYSTEM = "http://hl7.org/fhir/sid/us-ssn"
XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"

RESOURCE_TYPE = "Patient"
INITIAL_VERSION_ID = 1


class NameUse(str, Enum):
    OFFICIAL = "official"


class NarrativeStatus(str, Enum):
    GENERATED = "generated"


class ContactPointSystem(str, Enum):
    PHONE = "phone"
    EMAIL = "email"


class ContactPointUse(str, Enum):
    HOME = "home"
    WORK = "work"
    MOBILE = "mobile"


class AdministrativeGender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ContactPointRule:
    """A flat field stored as one ``telecom`` entry tagged system/use."""

    field: str
    system: str
    use: str

    @property
    def tags(self) -> dict[str, str]:
        return {"system": self.system, "use": self.use}


@dataclass(frozen=True)
class IdentifierRule:
    """A flat field stored as one ``identifier`` entry tagged by system."""

    field: str
    system: str

    @property
    def tags(self) -> dict[str, str]:
        return {"system": self.system}


Path = tuple[str | int, ...]

NAME_FIELDS: tuple[tuple[str, Path], ...] = (
    ("title", ("prefix", 0)),
    ("fname", ("given", 0)),
    ("mname", ("given", 1)),
    ("lname", ("family",)),
)

ADDRESS_FIELDS: tuple[tuple[str, Path], ...] = (
    ("street", ("line", 0)),
    ("city", ("city",)),
    ("state", ("state",)),
    ("postal_code", ("postalCode",)),
)

# Address elements only written when the source has a value.
OPTIONAL_ADDRESS_FIELDS: tuple[tuple[str, Path], ...] = (
    ("country_code", ("country",)),
)

TELECOM_RULES: tuple[ContactPointRule, ...] = (
    ContactPointRule("phone_home", ContactPointSystem.PHONE.value, ContactPointUse.HOME.value),
    ContactPointRule("phone_biz", ContactPointSystem.PHONE.value, ContactPointUse.WORK.value),
    ContactPointRule("phone_cell", ContactPointSystem.PHONE.value, ContactPointUse.MOBILE.value),
    ContactPointRule("email", ContactPointSystem.EMAIL.value, ContactPointUse.HOME.value),
)

IDENTIFIER_RULES: tuple[IdentifierRule, ...] = (
    IdentifierRule("ss", SSN_SYSTEM),
)

SCALAR_FIELDS: tuple[tuple[str, str], ...] = (
    ("DOB", "birthDate"),
    ("sex", "gender"),
)
