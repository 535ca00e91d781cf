"""Lookup of repeated FHIR elements by their coded tags, and of plain field values."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def find_matching_entries(
    entries: Iterable[Any] | None, **tags: str
) -> list[Mapping[str, Any]]:
    """
    Return the entries whose fields equal every given tag, in list order.

        find_matching_entries(resource.get("telecom"), system="phone", use="mobile")

    A missing sequence and non-mapping entries simply produce no match.
    """
    if not entries:
        return []
    return [
        entry
        for entry in entries
        if isinstance(entry, Mapping)
        and all(entry.get(key) == value for key, value in tags.items())
    ]


def field_text(source: Mapping[str, Any], key: str) -> str:
    """Read a field as text; missing and None both read as an empty string."""
    value = source.get(key)
    return "" if value is None else str(value)
