"""Tests for parsing and validating the model's suggestions."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from server.core.SuggestionGenerator import SuggestionGenerator
from shared.errors import GenerationError, ValidationError
from shared.models.suggestion import SuggestionType


def _llm(text: str | None = None, error: Exception | None = None):
    client = MagicMock()
    client.do_generate = AsyncMock(return_value=text, side_effect=error)
    return client


def _generator(helper_config, llm) -> SuggestionGenerator:
    return SuggestionGenerator(helper_config=helper_config, llm_client=llm, system_instruction="system")


@pytest.mark.asyncio
async def test_valid_suggestions_in_model_order(helper_config):
    answer = json.dumps({
        "suggestions": [
            {"type": "contradiction", "text": "The minutes say March 10th.", "file_id": "F1", "location": "Page 2",
             "quote": "rescheduled to March 10th"},
            {"type": "question", "text": "Which date is authoritative?"},
        ]
    })
    llm = _llm(answer)

    suggestions = await _generator(helper_config, llm).generate("prompt")

    assert [s.type for s in suggestions] == [SuggestionType.CONTRADICTION, SuggestionType.QUESTION]
    assert suggestions[0].file_id == "F1"
    assert suggestions[1].file_id is None
    llm.do_generate.assert_awaited_once_with("prompt", system_instruction="system", json_output=True)


@pytest.mark.asyncio
async def test_unknown_type_is_dropped_individually(helper_config):
    answer = json.dumps({
        "suggestions": [
            {"type": "opinion", "text": "I like it."},
            {"type": "support", "text": "Backed by the minutes."},
            {"type": "question"},
        ]
    })

    suggestions = await _generator(helper_config, _llm(answer)).generate("prompt")

    assert len(suggestions) == 1
    assert suggestions[0].type == SuggestionType.SUPPORT


@pytest.mark.asyncio
async def test_lenient_field_forms_are_accepted(helper_config):
    answer = json.dumps({
        "suggestions": [{"type": " Elaborate ", "text": "Add a source.", "fileId": 42, "location": "", "quote": None}]
    })

    suggestions = await _generator(helper_config, _llm(answer)).generate("prompt")

    assert suggestions[0].type == SuggestionType.ELABORATE
    assert suggestions[0].file_id == "42"
    assert suggestions[0].location is None


@pytest.mark.asyncio
async def test_code_fenced_answer_is_parsed(helper_config):
    answer = '```json\n{"suggestions": [{"type": "support", "text": "ok"}]}\n```'

    suggestions = await _generator(helper_config, _llm(answer)).generate("prompt")

    assert len(suggestions) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "answer",
    [
        "Here are my suggestions: support the claim.",
        '{"suggestions": {"type": "support"}}',
        '{"items": []}',
        '["support"]',
    ],
)
async def test_malformed_answer_yields_empty_list(helper_config, answer):
    assert await _generator(helper_config, _llm(answer)).generate("prompt") == []


@pytest.mark.asyncio
async def test_empty_suggestion_array_is_valid(helper_config):
    assert await _generator(helper_config, _llm('{"suggestions": []}')).generate("prompt") == []


@pytest.mark.asyncio
async def test_generation_error_propagates(helper_config):
    llm = _llm(error=GenerationError("no candidates"))

    with pytest.raises(GenerationError):
        await _generator(helper_config, llm).generate("prompt")


def test_parse_items_raises_validation_error(helper_config):
    with pytest.raises(ValidationError):
        _generator(helper_config, _llm()).parse_items("not json")


@pytest.mark.asyncio
async def test_whitespace_only_text_is_dropped(helper_config):
    answer = json.dumps({
        "suggestions": [
            {"type": "question", "text": "   \n "},
            {"type": "support", "text": "  Backed by the minutes.  "},
        ]
    })

    suggestions = await _generator(helper_config, _llm(answer)).generate("prompt")

    assert len(suggestions) == 1
    assert suggestions[0].text == "Backed by the minutes."
