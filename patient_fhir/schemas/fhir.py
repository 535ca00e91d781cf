"""
JSON Schema for inbound FHIR Patient resources.

This is not a validator for the full FHIR R4 Patient definition. It pins
down the structure the record mapper reads from: one official name with a
prefix and two given names, one address, and well-formed telecom and
identifier lists. Everything else is allowed through untouched.
"""

_STRING_LIST: dict = {"type": "array", "items": {"type": "string"}}

_CODED_ENTRY: dict = {
    "type": "object",
    "properties": {
        "system": {"type": "string"},
        "use": {"type": "string"},
        "value": {"type": "string"},
    },
}

FHIR_PATIENT_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "FHIR Patient (record mapping subset)",
    "description": "Shape of an HL7 FHIR R4 Patient the record mapper can read.",
    "type": "object",
    "required": ["name", "address"],
    "properties": {
        "resourceType": {
            "type": "string",
            "const": "Patient",
            "description": "Must be 'Patient' when present.",
        },
        "name": {
            "type": "array",
            "minItems": 1,
            "description": "HumanName list; only the first entry is mapped.",
            "items": [
                {
                    "type": "object",
                    "required": ["prefix", "given"],
                    "properties": {
                        "use": {"type": "string"},
                        "family": {"type": "string"},
                        "prefix": {**_STRING_LIST, "minItems": 1},
                        "given": {**_STRING_LIST, "minItems": 2},
                    },
                }
            ],
        },
        "address": {
            "type": "array",
            "minItems": 1,
            "description": "Address list; only the first entry is mapped.",
            "items": [
                {
                    "type": "object",
                    "properties": {
                        "line": _STRING_LIST,
                        "city": {"type": "string"},
                        "state": {"type": "string"},
                        "postalCode": {"type": "string"},
                        "country": {"type": "string"},
                    },
                }
            ],
        },
        "telecom": {"type": "array", "items": _CODED_ENTRY},
        "identifier": {"type": "array", "items": _CODED_ENTRY},
        "birthDate": {"type": "string"},
        "gender": {"type": "string"},
    },
}
