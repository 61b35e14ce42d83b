"""Tests for strict generation-response parsing."""

from __future__ import annotations

import pytest

from fieldforge.core.exceptions import (
    InvalidJson,
    InvalidStructure,
    MalformedResponse,
    ResponseError,
)
from fieldforge.generation.response import parse_generation_response, strip_code_fences


class TestParse:
    def test_fenced_empty_fields(self):
        assert parse_generation_response('```json\n{"fields":[]}\n```') == {"fields": []}

    def test_plain_fence(self):
        raw = '```\n{"fields": [{"apiName": "A__c"}]}\n```'
        assert parse_generation_response(raw) == {"fields": [{"apiName": "A__c"}]}

    def test_prose_around_object_is_sliced(self):
        raw = 'Here you go:\n{"objectName": "Case", "fields": []}\nHope that helps!'
        assert parse_generation_response(raw) == {"objectName": "Case", "fields": []}

    def test_slice_is_normalized(self):
        raw = '{"fields": [], "note": "it\u2019s\u00a0fine"}'
        assert parse_generation_response(raw)["note"] == "it's fine"

    def test_no_brace(self):
        with pytest.raises(MalformedResponse):
            parse_generation_response("I could not find any fields.")

    def test_inverted_braces(self):
        with pytest.raises(MalformedResponse):
            parse_generation_response("} nothing {")

    def test_empty_response(self):
        with pytest.raises(MalformedResponse):
            parse_generation_response("")

    def test_invalid_json(self):
        with pytest.raises(InvalidJson) as exc_info:
            parse_generation_response('{"fields": [,]}')
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_no_lenient_repair(self):
        with pytest.raises(InvalidJson):
            parse_generation_response('{"fields": [{"apiName": "A__c",}]}')

    @pytest.mark.parametrize(
        "raw",
        ['{"objectName": "Case"}', '{"fields": {}}', '{"fields": "none"}'],
    )
    def test_invalid_structure(self, raw):
        with pytest.raises(InvalidStructure):
            parse_generation_response(raw)

    def test_errors_share_base(self):
        with pytest.raises(ResponseError) as exc_info:
            parse_generation_response("nothing")
        assert exc_info.value.stage == "parsing"


class TestStripFences:
    def test_strips_all_markers(self):
        assert strip_code_fences("```json\nA\n```\n```\nB\n```") == "A\nB"

    def test_no_fences(self):
        assert strip_code_fences("  {}  ") == "{}"
