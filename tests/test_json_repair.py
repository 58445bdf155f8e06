"""Tests for salvaging JSON from LLM output."""

import pytest

from health_vitals.services.json_repair import (
    balance_json,
    parse_llm_json,
    strip_code_fences,
)


def test_strip_code_fences() -> None:
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n[1]\n```') == "[1]"


def test_parses_fenced_json() -> None:
    assert parse_llm_json('```json\n{"score": 4, "reasoning": "ok"}\n```') == {
        "score": 4,
        "reasoning": "ok",
    }


def test_parses_top_level_array() -> None:
    assert parse_llm_json('[{"title": "Walk"}]') == [{"title": "Walk"}]


def test_extracts_object_from_surrounding_prose() -> None:
    assert parse_llm_json('Sure! Here you go: {"calories": 95} Enjoy.') == {
        "calories": 95
    }


def test_takes_first_complete_object_when_several_follow() -> None:
    assert parse_llm_json('Result: {"a": 1} and also {"b": 2}') == {"a": 1}


def test_closes_truncated_string_and_object() -> None:
    assert parse_llm_json('{"score": 4, "reasoning": "Lots of veg') == {
        "score": 4,
        "reasoning": "Lots of veg",
    }


def test_drops_dangling_key() -> None:
    assert parse_llm_json('{"calories": 250, "protein":') == {"calories": 250}


def test_falls_back_to_last_complete_item() -> None:
    assert parse_llm_json('{"items": [{"a": 1}, {"b": ') == {"items": [{"a": 1}]}


def test_brackets_inside_strings_are_ignored() -> None:
    assert parse_llm_json('{"text": "use {curly} [braces]", "n": 1') == {
        "text": "use {curly} [braces]",
        "n": 1,
    }


def test_escaped_quotes_stay_inside_string() -> None:
    assert parse_llm_json(r'{"note": "say \"hi\"", "n": 2') == {
        "note": 'say "hi"',
        "n": 2,
    }


def test_truncated_after_backslash() -> None:
    assert balance_json('{"a": "line\\') == {"a": "line"}


@pytest.mark.parametrize("text", [None, "", "```json\n```", "no json here"])
def test_unrecoverable_input_returns_none(text: str | None) -> None:
    assert parse_llm_json(text) is None


def test_balance_json_without_brackets() -> None:
    assert balance_json("plain words") is None


def test_truncated_recommendation_list_is_closed() -> None:
    assert parse_llm_json('{"recommendations":[{"title":"x"') == {
        "recommendations": [{"title": "x"}]
    }


def test_prose_after_closing_fence_is_ignored() -> None:
    text = '```json\n{"score": 4}\n```\nHope this helps with your meals!'

    assert parse_llm_json(text) == {"score": 4}
