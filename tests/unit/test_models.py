"""Unit tests for the Pydantic domain models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
from pydantic import ValidationError

from gifpicker.models.generation import GenerationRecord, new_group_id
from gifpicker.models.identity import Anonymous, Authenticated
from gifpicker.models.strategy import (
    Candidate,
    Perspective,
    SelectionChoice,
    Strategy,
    StrategySet,
    perspective_rank,
)


# ======================================================================
# Perspective rank
# ======================================================================


class TestPerspectiveRank:
    def test_fixed_order(self) -> None:
        assert perspective_rank("emotional") < perspective_rank("literal") < perspective_rank("sarcastic")

    def test_accepts_enum_members(self) -> None:
        assert perspective_rank(Perspective.LITERAL) == 1

    @pytest.mark.parametrize("value", [None, "", "wholesome"])
    def test_unknown_sorts_last(self, value: str | None) -> None:
        assert perspective_rank(value) == 3


# ======================================================================
# Strategy / StrategySet
# ======================================================================


class TestStrategy:
    def test_search_query_joins_keywords_and_topic(self) -> None:
        s = Strategy(perspective="emotional", keywords=["relieved", "happy"], topic="coding")
        assert s.search_query() == "relieved happy coding"

    def test_search_query_without_topic(self) -> None:
        s = Strategy(perspective="literal", keywords=["facepalm"])
        assert s.search_query() == "facepalm"

    def test_blank_topic_becomes_none(self) -> None:
        s = Strategy(perspective="literal", keywords=["facepalm"], topic="   ")
        assert s.topic is None

    @pytest.mark.parametrize("keywords", [[], ["a", "b", "c", "d"], ["ok", "  "]])
    def test_rejects_bad_keyword_lists(self, keywords: list[str]) -> None:
        with pytest.raises(ValidationError):
            Strategy(perspective="literal", keywords=keywords)

    def test_rejects_unknown_perspective(self) -> None:
        with pytest.raises(ValidationError):
            Strategy(perspective="wholesome", keywords=["hug"])

    def test_is_frozen(self) -> None:
        s = Strategy(perspective="literal", keywords=["facepalm"])
        with pytest.raises(ValidationError):
            s.topic = "x"  # type: ignore[misc]


class TestStrategySet:
    def test_sorted_into_rank_order(self, strategy_payload: dict[str, Any]) -> None:
        strategy_set = StrategySet.model_validate(strategy_payload)
        assert [s.perspective for s in strategy_set.strategies] == [
            Perspective.EMOTIONAL,
            Perspective.LITERAL,
            Perspective.SARCASTIC,
        ]

    def test_rejects_duplicate_perspective(self, strategy_payload: dict[str, Any]) -> None:
        strategy_payload["strategies"][0]["perspective"] = "emotional"
        with pytest.raises(ValidationError):
            StrategySet.model_validate(strategy_payload)

    def test_rejects_two_strategies(self, strategy_payload: dict[str, Any]) -> None:
        strategy_payload["strategies"].pop()
        with pytest.raises(ValidationError):
            StrategySet.model_validate(strategy_payload)

    def test_rejects_four_strategies(self, strategy_payload: dict[str, Any]) -> None:
        strategy_payload["strategies"].append(dict(strategy_payload["strategies"][0]))
        with pytest.raises(ValidationError):
            StrategySet.model_validate(strategy_payload)


# ======================================================================
# Selection contract
# ======================================================================


class TestSelectionChoice:
    def test_parses_camel_case_key(self) -> None:
        choice = SelectionChoice.model_validate({"selectedIndex": 2, "reasoning": "best"})
        assert choice.selected_index == 2

    def test_rejects_negative_index(self) -> None:
        with pytest.raises(ValidationError):
            SelectionChoice.model_validate({"selectedIndex": -1})

    def test_rejects_missing_index(self) -> None:
        with pytest.raises(ValidationError):
            SelectionChoice.model_validate({"reasoning": "no index"})


# ======================================================================
# Identity / records
# ======================================================================


class TestIdentity:
    def test_authenticated_requires_id(self) -> None:
        with pytest.raises(ValidationError):
            Authenticated(external_id="")

    def test_anonymous_host_optional(self) -> None:
        assert Anonymous().client_host is None


class TestGenerationRecord:
    def test_group_key_prefers_group_id(self) -> None:
        r = GenerationRecord(
            owner_id="u", group_id="group_x", input_text="t", reasoning="r",
            media_url="https://m/1.gif", title="t",
        )
        assert r.group_key == "group_x"

    def test_legacy_record_is_its_own_group(self) -> None:
        r = GenerationRecord(
            id="legacy-1", owner_id="u", group_id=None, input_text="t",
            reasoning="r", media_url="https://m/1.gif", title="t",
        )
        assert r.group_key == "legacy-1"

    def test_created_at_defaults_to_utc(self) -> None:
        r = GenerationRecord(
            owner_id="u", input_text="t", reasoning="r", media_url="https://m/1.gif", title="t",
        )
        assert r.created_at.tzinfo is not None
        assert r.created_at <= datetime.now(tz=timezone.utc)


def test_group_ids_are_unique() -> None:
    ids = {new_group_id() for _ in range(10_000)}
    assert len(ids) == 10_000
    assert all(i.startswith("group_") for i in ids)


def test_candidate_defaults() -> None:
    c = Candidate(media_url="https://m/1.gif")
    assert c.title == ""
    assert c.alt_text == ""
