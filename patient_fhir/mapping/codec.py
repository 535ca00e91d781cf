"""JSON wire form of FHIR resources."""

from __future__ import annotations

import json
from typing import Any

from patient_fhir.mapping.errors import MappingError


def encode(resource: dict[str, Any]) -> str:
    return json.dumps(resource, ensure_ascii=False)


def decode(text: str | bytes) -> dict[str, Any]:
    """Parse JSON text into a resource dict."""
    try:
        resource = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MappingError("Resource is not valid JSON", [str(exc)]) from exc
    if not isinstance(resource, dict):
        raise MappingError(
            "Resource must be a JSON object",
            [f"got {type(resource).__name__}"],
        )
    return resource
