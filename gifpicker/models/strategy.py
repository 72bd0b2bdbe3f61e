"""Strategy, candidate and branch models for the generation pipeline.

Defines Pydantic v2 models for everything that flows through one request:

    1. The reasoning service turns text into a StrategySet  (contract A)
    2. Each Strategy is searched                            → BranchOutcome
    3. Each BranchOutcome with candidates is judged         → SelectionChoice (contract B)
    4. The judged branch becomes a                          → Selection

All models are frozen; stages build new instances instead of mutating.
The :class:`StrategySet` validator is the schema contract with the
reasoning service: a response that does not carry exactly one strategy
per perspective never becomes a StrategySet.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Perspective(str, Enum):  # noqa: UP042
    """The fixed analytical lenses applied to the same input text."""

    EMOTIONAL = "emotional"
    LITERAL = "literal"
    SARCASTIC = "sarcastic"


# Display / ordering rank.  Anything outside the fixed set (legacy rows
# with a null or unknown perspective) sorts last.
PERSPECTIVE_RANK: dict[str, int] = {
    Perspective.EMOTIONAL.value: 0,
    Perspective.LITERAL.value: 1,
    Perspective.SARCASTIC.value: 2,
}
UNKNOWN_PERSPECTIVE_RANK = 3

REQUESTED_PERSPECTIVES = len(Perspective)


def perspective_rank(perspective: str | Perspective | None) -> int:
    """Return the sort rank of *perspective* (``emotional < literal < sarcastic < other``)."""
    if isinstance(perspective, Perspective):
        perspective = perspective.value
    if perspective is None:
        return UNKNOWN_PERSPECTIVE_RANK
    return PERSPECTIVE_RANK.get(perspective, UNKNOWN_PERSPECTIVE_RANK)


class SearchErrorKind(str, Enum):  # noqa: UP042
    """Why a branch search produced no candidates."""

    SEARCH_FAILED = "search_failed"          # non-2xx from the search service
    NETWORK_ERROR = "network_error"          # transport-level failure
    TIMEOUT = "timeout"                      # branch exceeded its time budget
    MALFORMED_RESPONSE = "malformed_response"  # 2xx with an unusable payload


SEARCH_ERROR_DESCRIPTIONS: dict[SearchErrorKind, str] = {
    SearchErrorKind.SEARCH_FAILED: "Search failed",
    SearchErrorKind.NETWORK_ERROR: "Network error",
    SearchErrorKind.TIMEOUT: "Search timed out",
    SearchErrorKind.MALFORMED_RESPONSE: "Malformed search response",
}

NO_RESULTS_REASONING = "No GIFs found for this perspective"
DEGRADED_SELECTION_REASONING = "AI selection failed, using top result"


# ---------------------------------------------------------------------------
# Contract A: strategy derivation
# ---------------------------------------------------------------------------
class Strategy(BaseModel):
    """A perspective-tagged search plan derived from the input text."""

    model_config = ConfigDict(frozen=True)

    perspective: Perspective
    keywords: list[str] = Field(min_length=1, max_length=3)
    topic: str | None = None
    reasoning: str = ""

    @field_validator("keywords")
    @classmethod
    def _strip_keywords(cls, value: list[str]) -> list[str]:
        cleaned = [k.strip() for k in value]
        if any(not k for k in cleaned):
            raise ValueError("keywords must be non-empty strings")
        return cleaned

    @field_validator("topic")
    @classmethod
    def _blank_topic_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def search_query(self) -> str:
        """Keywords joined by spaces, with the topic appended when present."""
        query = " ".join(self.keywords)
        if self.topic:
            query = f"{query} {self.topic}"
        return query


class StrategySet(BaseModel):
    """Exactly one strategy per perspective, in perspective-rank order."""

    model_config = ConfigDict(frozen=True)

    strategies: list[Strategy] = Field(min_length=3, max_length=3)

    @field_validator("strategies")
    @classmethod
    def _one_per_perspective(cls, value: list[Strategy]) -> list[Strategy]:
        seen = sorted(s.perspective.value for s in value)
        if seen != sorted(p.value for p in Perspective):
            raise ValueError(
                "strategies must cover emotional, literal and sarcastic exactly once"
            )
        # Downstream stages never depend on the order the model answered in.
        return sorted(value, key=lambda s: perspective_rank(s.perspective))


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------
class Candidate(BaseModel):
    """One media item returned by the search capability."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    alt_text: str = ""
    media_url: str


class BranchOutcome(BaseModel):
    """Result of searching one strategy: candidates, or a captured error."""

    model_config = ConfigDict(frozen=True)

    strategy: Strategy
    candidates: list[Candidate] = Field(default_factory=list)
    search_error: SearchErrorKind | None = None

    @property
    def has_candidates(self) -> bool:
        return bool(self.candidates)


# ---------------------------------------------------------------------------
# Contract B: selection
# ---------------------------------------------------------------------------
class SelectionChoice(BaseModel):
    """The reasoning service's pick for one branch."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    selected_index: int = Field(alias="selectedIndex", ge=0)
    reasoning: str = ""


class Selection(BaseModel):
    """Final per-branch outcome after selection.

    ``degraded`` is True whenever a deterministic fallback replaced the
    reasoning service (failure, bad index, or nothing to choose from).
    """

    model_config = ConfigDict(frozen=True)

    strategy: Strategy
    chosen: Candidate | None = None
    reasoning: str
    degraded: bool = False

    @property
    def succeeded(self) -> bool:
        return self.chosen is not None
