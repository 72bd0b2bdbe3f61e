"""Write one request's successful selections as a generation group.

Each call mints a fresh group id and writes one record per successful
perspective, all sharing that id, the input text, the owner and a single
timestamp.

Two write modes:

- **independent** (default) -- one insert per record, fired concurrently.
  A failed insert leaves the group with fewer records; nothing repairs it.
- **atomic** -- the whole group goes through
  :meth:`IGenerationStore.append_generations` in one transaction.

Every write is bounded by a timeout.  In both modes failures are logged as ``generation_persist_failed`` and
swallowed: the caller already has their GIFs and keeps them.
"""

from __future__ import annotations

from datetime import datetime, timezone

from gifpicker.interfaces.generation_store import IGenerationStore
from gifpicker.models.generation import GenerationRecord, GenerationResult, new_group_id
from gifpicker.utils.concurrency import bounded, isolated_gather
from gifpicker.utils.logging import get_logger


def build_group_records(
    owner_id: str,
    input_text: str,
    result: GenerationResult,
    group_id: str,
    created_at: datetime,
) -> list[GenerationRecord]:
    """One record per successful selection, in perspective-rank order."""
    return [
        GenerationRecord(
            owner_id=owner_id,
            group_id=group_id,
            input_text=input_text,
            perspective=selection.strategy.perspective.value,
            keywords=list(selection.strategy.keywords),
            topic=selection.strategy.topic,
            reasoning=selection.reasoning,
            media_url=selection.chosen.media_url,
            title=selection.chosen.title,
            created_at=created_at,
        )
        for selection in result.selections
        if selection.chosen is not None
    ]


class SessionPersister:
    """Persists generation groups for authenticated callers."""

    def __init__(self, store: IGenerationStore, atomic: bool = False, timeout: float | None = 5.0) -> None:
        self._store = store
        self._atomic = atomic
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def persist(self, owner_id: str, input_text: str, result: GenerationResult) -> str | None:
        """Write the group and return its id, or ``None`` if nothing was stored."""
        group_id = new_group_id()
        created_at = datetime.now(tz=timezone.utc)  # noqa: UP017
        records = build_group_records(owner_id, input_text, result, group_id, created_at)
        if not records:
            return None

        if self._atomic:
            written = await self._write_atomic(group_id, records)
        else:
            written = await self._write_independent(group_id, records)

        if written:
            self._logger.info(
                "generation_group_persisted",
                group_id=group_id,
                owner_id=owner_id,
                records=written,
                expected=len(records),
                atomic=self._atomic,
            )
            return group_id
        return None

    async def _write_independent(self, group_id: str, records: list[GenerationRecord]) -> int:
        results = await isolated_gather(
            [self._store.append_generation(r) for r in records],
            timeout=self._timeout,
        )
        written = 0
        for record, outcome in zip(records, results):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                self._logger.error(
                    "generation_persist_failed",
                    group_id=group_id,
                    record_id=record.id,
                    perspective=record.perspective,
                    error=str(outcome) or type(outcome).__name__,
                )
            else:
                written += 1
        return written

    async def _write_atomic(self, group_id: str, records: list[GenerationRecord]) -> int:
        try:
            await bounded(self._store.append_generations(records), self._timeout)
        except Exception as exc:
            self._logger.error(
                "generation_persist_failed",
                group_id=group_id,
                records=len(records),
                atomic=True,
                error=str(exc) or type(exc).__name__,
            )
            return 0
        return len(records)
