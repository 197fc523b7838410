from __future__ import annotations

import json

import pytest

from cropadvisor.models.enums import ConfidenceEnum, LevelEnum, MarketTrendEnum
from cropadvisor.services.response_sanitizer import (
    advisory_entries,
    clean_label,
    clean_number,
    clean_text_list,
    extract,
    listed_objects,
    strip_wrappers,
)


def test_plain_json_parses_in_first_stage() -> None:
    assert extract('[{"name": "Rice"}]') == [{"name": "Rice"}]
    assert extract('{"crops": []}') == {"crops": []}


def test_fenced_json_with_chatter_is_recovered() -> None:
    raw = 'Sure! ```json [ {"name":"Rice"} ] ``` Hope that helps'
    assert extract(raw) == [{"name": "Rice"}]


def test_multiline_fence_and_null_bytes() -> None:
    raw = '```json\n[{"name": "Wheat",\x00 "reason": "cool season"}]\n```'
    assert extract(raw) == [{"name": "Wheat", "reason": "cool season"}]


def test_slice_stage_handles_unknown_chatter() -> None:
    raw = 'Based on your soil, my picks are: {"crops": [{"name": "Maize"}]} -- good luck with the season!'
    assert extract(raw) == {"crops": [{"name": "Maize"}]}


def test_strip_wrappers_removes_fences_and_closers() -> None:
    assert strip_wrappers('Here is the JSON: ```json\n[1]\n``` Let me know if you need more.') == "[1]"


@pytest.mark.parametrize(
    "raw",
    [None, "", "no json here at all", "[unterminated", '{"name": "Rice"', "42", '"just a string"', "] backwards ["],
)
def test_unparseable_text_returns_none(raw: str | None) -> None:
    assert extract(raw) is None


def test_entries_validate_field_by_field() -> None:
    parsed = [
        {
            "Name": " Rice ",
            "reason": "High rainfall suits paddy",
            "pros": ["Staple demand", "", 7, "Assured procurement"],
            "cons": 123,
            "growth": {"nested": "object"},
            "thresholds": {"pH_range": "5.5-7"},
            "confidence": "High (based on input completeness)",
        },
        "not an object",
        {"crop": "Jute", "confidence": "certain", "reason": "   "},
    ]
    entries = advisory_entries(parsed)
    assert len(entries) == 2

    rice, jute = entries
    assert rice.name == "Rice"
    assert rice.reason == "High rainfall suits paddy"
    assert rice.pros == "Staple demand; Assured procurement"
    assert rice.cons is None
    assert rice.growth is None
    assert rice.thresholds == {"pH_range": "5.5-7"}
    assert rice.confidence is ConfidenceEnum.high

    assert jute.name == "Jute"
    assert jute.confidence is None
    assert jute.reason is None


def test_entries_accept_wrapped_and_single_objects() -> None:
    assert [e.name for e in advisory_entries({"recommendations": [{"name": "Tea"}]})] == ["Tea"]
    assert [e.name for e in advisory_entries({"name": "Coffee"})] == ["Coffee"]
    assert advisory_entries("text") == []
    assert advisory_entries(None) == []


def test_round_trip_through_extract() -> None:
    payload = [{"name": "Rice", "reason": "wet"}, {"name": "Jute", "reason": "fibre"}]
    raw = f"Okay, here you go:\n```json\n{json.dumps(payload, indent=2)}\n```\nHope this helps!"
    assert extract(raw) == payload


def test_field_cleaners() -> None:
    assert clean_text_list(" one ") == ["one"]
    assert clean_text_list(["a", " ", 3, "b "]) == ["a", "b"]
    assert clean_text_list([]) is None
    assert clean_text_list({"a": 1}) is None

    assert clean_number(2400) == 2400.0
    assert clean_number("Rs 2,350 per quintal") == 2350.0
    assert clean_number(float("nan")) is None
    assert clean_number(True) is None
    assert clean_number("unknown") is None

    assert clean_label("rising fast", MarketTrendEnum) is MarketTrendEnum.rising
    assert clean_label("HIGH.", ConfidenceEnum) is ConfidenceEnum.high
    assert clean_label("volatile", MarketTrendEnum) is None
    assert clean_label(3, LevelEnum) is None


def test_listed_objects_unwraps_custom_keys() -> None:
    parsed = {"rotation_options": [{"next_crop": "Gram"}, "junk"]}
    assert listed_objects(parsed, ("rotation_options",)) == [{"next_crop": "Gram"}]
    assert listed_objects(parsed) == [parsed]
    assert listed_objects("text") == []
