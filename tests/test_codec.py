"""Tests for the JSON wire form."""

import pytest

from patient_fhir.mapping.codec import decode, encode
from patient_fhir.mapping.errors import MappingError


def test_encode_keeps_non_ascii_text():
    text = encode({"name": [{"family": "Müller"}]})
    assert "Müller" in text
    assert decode(text) == {"name": [{"family": "Müller"}]}


def test_decode_accepts_bytes():
    assert decode(b'{"resourceType": "Patient"}') == {"resourceType": "Patient"}


def test_decode_rejects_invalid_json():
    with pytest.raises(MappingError, match="not valid JSON"):
        decode("{not json")


def test_decode_rejects_non_object():
    with pytest.raises(MappingError, match="JSON object") as excinfo:
        decode("[1, 2]")
    assert excinfo.value.errors == ["got list"]


def test_decode_rejects_invalid_utf8():
    with pytest.raises(MappingError, match="not valid JSON"):
        decode(b'{"name": "\xff"}')
