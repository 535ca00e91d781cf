"""Errors raised while mapping between patient records and FHIR resources."""

from __future__ import annotations


class MappingError(ValueError):
    """The resource does not have the shape this mapper relies on.

    ``errors`` holds every individual violation found, so callers can
    report all of them at once.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = list(errors or [])
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)
