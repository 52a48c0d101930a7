"""
Test cases for result canonicalization.
"""

import json
from dataclasses import dataclass
from datetime import datetime

import pytest
from pydantic import BaseModel

from conduit.agents.actions.result_normalizer import (
    parse_result, canonical_text, TextResult, TextContentResult,
    ContentEnvelopeResult, RecordResult, ScalarResult
)


class TextBlock(BaseModel):
    type: str
    text: str


class CallResult(BaseModel):
    content: list


@dataclass
class Page:
    name: str
    description: str


class Forecast:
    """Plain object with neither model nor dataclass support."""

    def __init__(self):
        self.city = "Oslo"
        self.temperature = -3
        self._cache = object()


class Summary:
    def __init__(self):
        self.name = "Weekly"
        self.description = "Sales summary"


class TestParseResult:
    """Test cases for variant selection in priority order."""

    def test_text(self):
        result = parse_result("Paris is the capital of France")
        assert isinstance(result, TextResult)
        assert result.canonical_text() == "Paris is the capital of France"

    def test_text_content(self):
        result = parse_result({"content": [{"type": "text", "text": "42"}]})
        assert isinstance(result, TextContentResult)
        assert result.canonical_text() == "42"

    def test_only_first_block_is_used(self):
        raw = {"content": [{"type": "text", "text": "first"}, {"type": "text", "text": "second"}]}
        assert canonical_text(raw) == "first"

    def test_text_content_from_models(self):
        raw = CallResult(content=[TextBlock(type="text", text="from a model")])
        assert canonical_text(raw) == "from a model"

    @pytest.mark.parametrize("raw", [
        {"content": [{"type": "image", "data": "abc"}]},
        {"content": [{"type": "text", "text": 7}]},
        {"content": []},
        {"content": "plain"},
        {"content": None, "name": "x"},
    ])
    def test_content_envelope(self, raw):
        assert isinstance(parse_result(raw), ContentEnvelopeResult)

    def test_record(self):
        assert isinstance(parse_result({"name": "x"}), RecordResult)

    @pytest.mark.parametrize("raw", [42, 3.5, True, None, [1, 2]])
    def test_scalar(self, raw):
        assert isinstance(parse_result(raw), ScalarResult)


class TestCanonicalText:
    """Test cases for the canonical text of each variant."""

    def test_empty_string_stays_empty(self):
        assert canonical_text("") == ""

    def test_envelope_is_serialized_compactly(self):
        raw = {"content": [{"type": "image", "data": "abc"}]}
        assert canonical_text(raw) == '{"content":[{"type":"image","data":"abc"}]}'

    def test_record_digest(self):
        raw = {
            "uuid": "doc-1",
            "name": "Report",
            "text": "Quarterly numbers",
            "description": "Q3 report",
            "metadata": {"description": "Finance", "source": "erp"},
            "source": "https://example.com/report",
            "ignored": "value",
        }

        assert canonical_text(raw) == (
            "uuid: doc-1\n"
            "name: Report\n"
            "content: Quarterly numbers\n"
            "description: Q3 report\n"
            "metadata_description: Finance\n"
            "metadata_source: erp\n"
            "original_source: https://example.com/report"
        )

    def test_record_digest_skips_absent_fields(self):
        assert canonical_text({"name": "Report", "description": None}) == "name: Report"

    def test_record_digest_uses_id(self):
        assert canonical_text({"id": 7, "name": "Report"}) == "uuid: 7\nname: Report"

    def test_record_digest_from_dataclass(self):
        assert canonical_text(Page(name="Home", description="Landing page")) == (
            "name: Home\ndescription: Landing page"
        )

    def test_record_without_known_fields_is_serialized(self):
        assert canonical_text({"temperature": 21, "unit": "C"}) == '{"temperature":21,"unit":"C"}'

    def test_non_ascii_is_preserved(self):
        assert canonical_text({"city": "Kraków"}) == '{"city":"Kraków"}'

    @pytest.mark.parametrize("raw, expected", [
        (42, "42"),
        (True, "true"),
        (None, "null"),
        ([1, "a"], '[1,"a"]'),
    ])
    def test_scalars(self, raw, expected):
        assert canonical_text(raw) == expected


class TestUnusualResults:
    """Test cases for results that are neither text nor plain data."""

    def test_plain_object_is_serialized_from_its_attributes(self):
        result = parse_result(Forecast())

        assert isinstance(result, RecordResult)
        assert result.canonical_text() == '{"city":"Oslo","temperature":-3}'

    def test_plain_object_with_known_fields_gets_a_digest(self):
        assert canonical_text(Summary()) == "name: Weekly\ndescription: Sales summary"

    def test_datetime_is_serialized_not_text(self):
        result = parse_result(datetime(2024, 1, 1))

        assert isinstance(result, ScalarResult)
        assert result.canonical_text() == '"2024-01-01T00:00:00"'

    def test_invalid_utf8_bytes(self):
        result = parse_result(b"\xff\xfe")

        assert isinstance(result, ScalarResult)
        assert isinstance(json.loads(result.canonical_text()), str)

    def test_bytes_inside_a_record(self):
        text = canonical_text({"name": "blob", "data": b"\xff"})
        assert text == "name: blob"
