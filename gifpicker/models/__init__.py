"""Domain models for gifpicker.

- **strategy** -- perspectives, strategies, candidates, branch outcomes and
  selections: everything one request produces on its way through the
  pipeline.
- **identity** -- the ``Anonymous | Authenticated`` caller union.
- **generation** -- pipeline output, persisted records and the derived
  history groups.
"""

from gifpicker.models.generation import (
    Admission,
    GenerationGroup,
    GenerationOutcome,
    GenerationRecord,
    GenerationResult,
    HistoryPage,
    QuotaDecision,
    UsageStats,
    UserRecord,
    new_group_id,
)
from gifpicker.models.identity import Anonymous, Authenticated, Identity, UserProfile
from gifpicker.models.strategy import (
    BranchOutcome,
    Candidate,
    Perspective,
    SearchErrorKind,
    Selection,
    SelectionChoice,
    Strategy,
    StrategySet,
    perspective_rank,
)

__all__ = [
    "Admission",
    "Anonymous",
    "Authenticated",
    "BranchOutcome",
    "Candidate",
    "GenerationGroup",
    "GenerationOutcome",
    "GenerationRecord",
    "GenerationResult",
    "HistoryPage",
    "Identity",
    "Perspective",
    "QuotaDecision",
    "SearchErrorKind",
    "Selection",
    "SelectionChoice",
    "Strategy",
    "StrategySet",
    "UsageStats",
    "UserProfile",
    "UserRecord",
    "new_group_id",
    "perspective_rank",
]
