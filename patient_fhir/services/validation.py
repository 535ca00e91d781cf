"""
JSON Schema validation service.

Collects all errors rather than failing on the first one, and prefixes each
message with the JSON path of the offending element.
"""

from typing import Any

import jsonschema


def _format_error(error: jsonschema.ValidationError) -> str:
    path = "/".join(str(part) for part in error.absolute_path)
    return f"{path or '<root>'}: {error.message}"


def validate_against_schema(data: Any, schema: dict[str, Any]) -> list[str]:
    """
    Validate a document against a JSON schema.
    Returns a list of error messages (empty list = valid), ordered by path.
    """
    validator = jsonschema.Draft7Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.absolute_path)))
    return [_format_error(error) for error in errors]
