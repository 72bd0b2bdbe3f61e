"""Shared pytest fixtures for the gifpicker test suite."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from gifpicker.interfaces.generation_store import IGenerationStore
from gifpicker.interfaces.llm_provider import ILLMProvider
from gifpicker.interfaces.media_search_provider import IMediaSearchProvider
from gifpicker.interfaces.quota_provider import IQuotaProvider
from gifpicker.models.generation import QuotaDecision, UserRecord
from gifpicker.models.identity import Anonymous, Authenticated, UserProfile
from gifpicker.models.strategy import Candidate, StrategySet

# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

RESET_AT = datetime(2025, 1, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def strategy_payload() -> dict[str, Any]:
    """A contract-conforming strategy reply, deliberately out of rank order."""
    return {
        "strategies": [
            {
                "perspective": "sarcastic",
                "keywords": ["this is fine"],
                "topic": None,
                "reasoning": "Ironic calm about a small victory",
            },
            {
                "perspective": "emotional",
                "keywords": ["relieved", "happy"],
                "topic": "programming",
                "reasoning": "Relief after a long struggle",
            },
            {
                "perspective": "literal",
                "keywords": ["typing fast", "computer"],
                "reasoning": "Someone at a keyboard",
            },
        ]
    }


@pytest.fixture
def strategy_json(strategy_payload: dict[str, Any]) -> str:
    return json.dumps(strategy_payload)


@pytest.fixture
def strategy_set(strategy_payload: dict[str, Any]) -> StrategySet:
    return StrategySet.model_validate(strategy_payload)


@pytest.fixture
def candidates() -> list[Candidate]:
    return [
        Candidate(title="Happy Dance", alt_text="a man dancing", media_url="https://media.example/1.gif"),
        Candidate(title="Relief", alt_text="", media_url="https://media.example/2.gif"),
        Candidate(title="Phew", alt_text="wiping sweat", media_url="https://media.example/3.gif"),
    ]


@pytest.fixture
def authenticated() -> Authenticated:
    return Authenticated(
        external_id="user_123",
        profile=UserProfile(email="dev@example.com", first_name="Dev"),
    )


@pytest.fixture
def anonymous() -> Anonymous:
    return Anonymous(client_host="203.0.113.7")


# ---------------------------------------------------------------------------
# Mock provider fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider.

    Override with ``mock_llm_provider.complete.return_value = "..."`` or
    ``mock_llm_provider.complete.side_effect = [...]`` per test.
    """
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.complete = AsyncMock(return_value='{"selectedIndex": 0, "reasoning": "ok"}')
    return mock


@pytest.fixture
def mock_search_provider(candidates: list[Candidate]) -> IMediaSearchProvider:
    """Mock IMediaSearchProvider returning the sample candidates for any query."""
    mock = MagicMock(spec=IMediaSearchProvider)
    mock.get_provider_name.return_value = "mock-search"
    mock.is_available.return_value = True
    mock.search = AsyncMock(return_value=list(candidates))
    return mock


@pytest.fixture
def mock_quota_provider() -> IQuotaProvider:
    """Mock IQuotaProvider admitting with 9 remaining."""
    mock = MagicMock(spec=IQuotaProvider)
    mock.get_provider_name.return_value = "mock-quota"
    mock.initialize = AsyncMock()
    mock.check = AsyncMock(
        return_value=QuotaDecision(admitted=True, limit=10, remaining=9, reset_at=RESET_AT)
    )
    return mock


@pytest.fixture
def mock_generation_store() -> IGenerationStore:
    """Mock IGenerationStore whose upsert returns a fixed user row."""
    created = RESET_AT - timedelta(days=3)
    mock = MagicMock(spec=IGenerationStore)
    mock.get_provider_name.return_value = "mock-store"
    mock.initialize = AsyncMock()
    user = UserRecord(
        id="internal-1",
        external_id="user_123",
        email="dev@example.com",
        created_at=created,
        updated_at=created,
    )
    mock.upsert_user = AsyncMock(return_value=user)
    mock.get_user = AsyncMock(return_value=user)
    mock.append_generation = AsyncMock(side_effect=lambda record: record)
    mock.append_generations = AsyncMock(side_effect=lambda records: list(records))
    mock.list_generations = AsyncMock(return_value=[])
    return mock
