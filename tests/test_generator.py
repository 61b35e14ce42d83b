"""Tests for FieldGenerator — the generation stage machine."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fieldforge.core.config import ForgeConfig
from fieldforge.core.exceptions import (
    ExtractionFailure,
    InvalidJson,
    InvalidStructure,
    MalformedResponse,
    ServiceFailure,
)
from fieldforge.core.hooks import GenerationHooks
from fieldforge.generation.generator import FieldGenerator, GenerationStage
from fieldforge.generation.providers import LLMAPIError, LLMResponse, OpenAIClient
from fieldforge.schemas.base import UsageInfo

DOCUMENT = "\n".join([
    "# Patient Intake",
    "## 1. Patient_Name__c",
    "- Type: Text",
    "## 2. Status__c",
    "- Type: Picklist",
])

PAYLOAD = {
    "objectName": "Patient__c",
    "fields": [
        {"apiName": "Patient_Name__c", "label": "Patient Name", "type": "Text", "length": 255},
        {"apiName": "Status__c", "label": "Status", "type": "Picklist",
         "picklistValues": [{"fullName": "Open", "default": True}]},
    ],
}


def _client(content: str | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.complete = AsyncMock(side_effect=error)
    else:
        usage = UsageInfo(prompt_tokens=100, completion_tokens=50, total_tokens=150, model="test")
        client.complete = AsyncMock(return_value=LLMResponse(content=content, usage=usage))
    return client


def _generator(client, hooks=None) -> FieldGenerator:
    return FieldGenerator(client=client, config=ForgeConfig.for_development(), hooks=hooks)


# -- success ---------------------------------------------------------------


class TestSuccess:
    @pytest.mark.asyncio
    async def test_fields_returned(self):
        result = await _generator(_client(json.dumps(PAYLOAD))).run_async(DOCUMENT)
        assert result.ok
        assert result.stage is GenerationStage.DONE
        assert result.error is None
        assert result.error_kind is None
        assert [f.api_name for f in result.fields] == ["Patient_Name__c", "Status__c"]
        assert result.object_name == "Patient__c"
        assert result.payload == PAYLOAD
        assert result.usage.total_tokens == 150
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_fenced_response(self):
        content = "```json\n" + json.dumps(PAYLOAD) + "\n```"
        result = await _generator(_client(content)).run_async(DOCUMENT)
        assert result.ok
        assert len(result.fields) == 2

    @pytest.mark.asyncio
    async def test_default_object_name(self):
        result = await _generator(_client('{"fields": []}')).run_async("plain notes")
        assert result.ok
        assert result.object_name == "Custom_Object__c"

    @pytest.mark.asyncio
    async def test_single_request_with_prompt(self):
        client = _client(json.dumps(PAYLOAD))
        await _generator(client).run_async(DOCUMENT)
        client.complete.assert_awaited_once()
        kwargs = client.complete.await_args.kwargs
        prompt = kwargs["messages"][0]["content"]
        assert f"<field_specifications>\n{DOCUMENT}\n</field_specifications>" in prompt
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["temperature"] == 0.0
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_json_mode_off(self):
        client = _client(json.dumps(PAYLOAD))
        config = ForgeConfig(json_mode=False)
        await FieldGenerator(client=client, config=config).run_async(DOCUMENT)
        assert client.complete.await_args.kwargs["response_format"] is None

    @pytest.mark.asyncio
    async def test_input_is_normalized(self):
        client = _client('{"fields": []}')
        await _generator(client).run_async("\u201cStatus\u201d\r\nType \u2013 Picklist")
        prompt = client.complete.await_args.kwargs["messages"][0]["content"]
        assert '"Status"\nType - Picklist' in prompt

    @pytest.mark.asyncio
    async def test_reduced_text_recorded(self):
        result = await _generator(_client('{"fields": []}')).run_async(DOCUMENT + "\r\n")
        assert result.reduced_text == DOCUMENT + "\n"


    @pytest.mark.asyncio
    async def test_non_checkbox_default_does_not_fail(self):
        payload = {"fields": [
            PAYLOAD["fields"][0],
            {"apiName": "Visit_Date__c", "label": "Visit Date", "type": "Date", "defaultValue": "TODAY()"},
        ]}
        result = await _generator(_client(json.dumps(payload))).run_async(DOCUMENT)
        assert result.ok
        assert result.fields[1].default_value == "TODAY()"


class TestTruncationWarning:
    @pytest.mark.asyncio
    async def test_fewer_fields_than_headings(self, caplog):
        payload = {"fields": PAYLOAD["fields"][:1]}
        result = await _generator(_client(json.dumps(payload))).run_async(DOCUMENT)
        assert result.ok
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.kind == "possible_truncation"
        assert (warning.expected, warning.actual) == (2, 1)
        assert "may be truncated" in caplog.text

    @pytest.mark.asyncio
    async def test_no_warning_when_counts_match(self):
        result = await _generator(_client(json.dumps(PAYLOAD))).run_async(DOCUMENT)
        assert result.warnings == []


# -- failures --------------------------------------------------------------


class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   \n  "])
    async def test_empty_input(self, text):
        client = _client('{"fields": []}')
        result = await _generator(client).run_async(text)
        assert result.stage is GenerationStage.FAILED
        assert isinstance(result.error, ExtractionFailure)
        client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nothing_left_after_cutoff(self):
        client = _client('{"fields": []}')
        result = await _generator(client).run_async("# Summary\nThe project wraps up in March.")
        assert isinstance(result.error, ExtractionFailure)
        assert result.error.stage == "extracting"
        client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_service_failure(self):
        error = LLMAPIError("upstream unavailable", status_code=503)
        result = await _generator(_client(error=error)).run_async(DOCUMENT)
        assert not result.ok
        assert isinstance(result.error, ServiceFailure)
        assert result.error.status_code == 503
        assert "upstream unavailable" in str(result.error)
        assert result.error_kind == "ServiceFailure"

    @pytest.mark.asyncio
    async def test_service_failure_generic_message(self):
        result = await _generator(_client(error=LLMAPIError(""))).run_async(DOCUMENT)
        assert "Could not connect" in str(result.error)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content, error_type",
        [
            ("Sorry, no fields here.", MalformedResponse),
            ('{"fields": [}', InvalidJson),
            ('{"objects": []}', InvalidStructure),
            ('{"fields": [{"apiName": "A__c", "type": "Blob"}]}', InvalidStructure),
        ],
    )
    async def test_response_errors(self, content, error_type):
        result = await _generator(_client(content)).run_async(DOCUMENT)
        assert result.stage is GenerationStage.FAILED
        assert isinstance(result.error, error_type)
        assert result.fields == []
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_no_retry(self):
        client = _client(error=LLMAPIError("rate limited", status_code=429, is_rate_limit=True))
        await _generator(client).run_async(DOCUMENT)
        assert client.complete.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self):
        client = _client(error=KeyError("bug"))
        with pytest.raises(KeyError):
            await _generator(client).run_async(DOCUMENT)


# -- hooks -----------------------------------------------------------------


class TestStageHooks:
    @pytest.mark.asyncio
    async def test_success_stages(self):
        stages: list[str] = []
        hooks = GenerationHooks(on_stage_change=lambda e: stages.append(e.stage))
        await _generator(_client(json.dumps(PAYLOAD)), hooks).run_async(DOCUMENT)
        assert stages == ["normalizing", "extracting", "awaiting_response", "parsing", "done"]

    @pytest.mark.asyncio
    async def test_failure_stages(self):
        events = []
        hooks = GenerationHooks(on_stage_change=events.append)
        await _generator(_client("no json"), hooks).run_async(DOCUMENT)
        assert [e.stage for e in events][-2:] == ["parsing", "failed"]
        assert events[-1].previous == "parsing"

    @pytest.mark.asyncio
    async def test_complete_hook_gets_result(self):
        completed = []
        hooks = GenerationHooks(on_complete=AsyncMock(side_effect=completed.append))
        result = await _generator(_client(json.dumps(PAYLOAD)), hooks).run_async(DOCUMENT)
        assert completed[0].result is result
        assert completed[0].elapsed_seconds >= 0

    @pytest.mark.asyncio
    async def test_hook_errors_do_not_fail_generation(self):
        def broken(event):
            raise RuntimeError("observer bug")

        hooks = GenerationHooks(on_stage_change=broken, on_complete=broken)
        result = await _generator(_client(json.dumps(PAYLOAD)), hooks).run_async(DOCUMENT)
        assert result.ok


# -- entry points ----------------------------------------------------------


class TestEntryPoints:
    def test_run_sync(self):
        result = _generator(_client(json.dumps(PAYLOAD))).run(DOCUMENT)
        assert result.ok

    @pytest.mark.asyncio
    async def test_run_inside_event_loop_refused(self):
        with pytest.raises(RuntimeError, match="run_async"):
            _generator(_client("{}")).run(DOCUMENT)

    def test_client_built_from_config(self):
        generator = FieldGenerator(config=ForgeConfig(api_key="key"))
        assert isinstance(generator.client, OpenAIClient)

    def test_provider_client_not_created_eagerly(self):
        with patch("openai.AsyncOpenAI") as mock_cls:
            FieldGenerator(config=ForgeConfig(api_key="key"))
        mock_cls.assert_not_called()
