"""SQLite-backed identity and generation record store.

Persists users and their generation records to a local SQLite database
(``data/gifpicker.db`` by default).  Uses ``aiosqlite`` for async I/O.

Two tables:

- ``users`` -- one row per external identity, upserted on every admitted
  request so profile fields stay fresh.
- ``generations`` -- append-only, one row per successful perspective.
  ``owner_id`` references ``users(id)`` with ``ON DELETE CASCADE``;
  ``keywords`` is stored as a JSON array.  ``group_id`` and
  ``perspective`` are nullable so rows written before grouping existed
  still load.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from gifpicker.interfaces.generation_store import IGenerationStore
from gifpicker.models.generation import GenerationRecord, UserRecord, new_record_id
from gifpicker.models.identity import UserProfile
from gifpicker.utils.errors import PersistenceFailure

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/gifpicker.db")

_CREATE_USERS_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS users (
    id           TEXT PRIMARY KEY,
    external_id  TEXT NOT NULL UNIQUE,
    email        TEXT,
    first_name   TEXT,
    last_name    TEXT,
    image_url    TEXT,
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL
);
"""

_CREATE_GENERATIONS_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS generations (
    id           TEXT PRIMARY KEY,
    owner_id     TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    group_id     TEXT,
    input_text   TEXT NOT NULL,
    perspective  TEXT,
    keywords     TEXT NOT NULL DEFAULT '[]',
    topic        TEXT,
    reasoning    TEXT NOT NULL,
    media_url    TEXT NOT NULL,
    title        TEXT NOT NULL,
    created_at   TEXT NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_generations_owner ON generations(owner_id);",
    "CREATE INDEX IF NOT EXISTS idx_generations_group ON generations(group_id);",
    "CREATE INDEX IF NOT EXISTS idx_generations_created ON generations(created_at);",
]

_UPSERT_USER_SQL = """\
INSERT INTO users (id, external_id, email, first_name, last_name, image_url, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(external_id)
DO UPDATE SET email      = COALESCE(excluded.email, users.email),
              first_name = COALESCE(excluded.first_name, users.first_name),
              last_name  = COALESCE(excluded.last_name, users.last_name),
              image_url  = COALESCE(excluded.image_url, users.image_url),
              updated_at = excluded.updated_at;
"""

_SELECT_USER_SQL = """\
SELECT id, external_id, email, first_name, last_name, image_url, created_at, updated_at
FROM users
WHERE external_id = ?;
"""

_INSERT_GENERATION_SQL = """\
INSERT INTO generations
    (id, owner_id, group_id, input_text, perspective, keywords, topic,
     reasoning, media_url, title, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_GENERATIONS_SQL = """\
SELECT id, owner_id, group_id, input_text, perspective, keywords, topic,
       reasoning, media_url, title, created_at
FROM generations
WHERE owner_id = ?
ORDER BY created_at DESC, rowid DESC;
"""


def _utc_iso(value: datetime) -> str:
    """Normalise to UTC so stored timestamps sort lexicographically."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)  # noqa: UP017
    return value.astimezone(timezone.utc).isoformat()  # noqa: UP017


def _record_params(record: GenerationRecord) -> tuple[Any, ...]:
    return (
        record.id,
        record.owner_id,
        record.group_id,
        record.input_text,
        record.perspective,
        json.dumps(record.keywords),
        record.topic,
        record.reasoning,
        record.media_url,
        record.title,
        _utc_iso(record.created_at),
    )


def _row_to_record(row: aiosqlite.Row) -> GenerationRecord:
    data = dict(row)
    data["keywords"] = json.loads(data["keywords"]) if data["keywords"] else []
    return GenerationRecord.model_validate(data)


class SQLiteGenerationStore(IGenerationStore):
    """SQLite-backed users + generations persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the users and generations tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_USERS_TABLE_SQL)
            await db.execute(_CREATE_GENERATIONS_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("generation_db_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def upsert_user(self, external_id: str, profile: UserProfile) -> UserRecord:
        now = _utc_iso(datetime.now(tz=timezone.utc))  # noqa: UP017
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                await db.execute(
                    _UPSERT_USER_SQL,
                    (
                        new_record_id(),
                        external_id,
                        profile.email,
                        profile.first_name,
                        profile.last_name,
                        profile.image_url,
                        now,
                        now,
                    ),
                )
                await db.commit()
                cursor = await db.execute(_SELECT_USER_SQL, (external_id,))
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise PersistenceFailure(
                message=f"Failed to upsert user: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("user_upserted", external_id=external_id)
        return UserRecord.model_validate(dict(row))

    async def get_user(self, external_id: str) -> UserRecord | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_USER_SQL, (external_id,))
            row = await cursor.fetchone()
        if row is None:
            return None
        return UserRecord.model_validate(dict(row))

    # ------------------------------------------------------------------
    # Generations
    # ------------------------------------------------------------------

    async def append_generation(self, record: GenerationRecord) -> GenerationRecord:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute("PRAGMA foreign_keys = ON;")
                await db.execute(_INSERT_GENERATION_SQL, _record_params(record))
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceFailure(
                message=f"Failed to insert generation {record.id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return record

    async def append_generations(self, records: list[GenerationRecord]) -> list[GenerationRecord]:
        if not records:
            return []
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute("PRAGMA foreign_keys = ON;")
                try:
                    await db.executemany(
                        _INSERT_GENERATION_SQL,
                        [_record_params(r) for r in records],
                    )
                    await db.commit()
                except aiosqlite.Error:
                    await db.rollback()
                    raise
        except aiosqlite.Error as exc:
            raise PersistenceFailure(
                message=f"Failed to insert generation group: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return list(records)

    async def list_generations(self, owner_id: str) -> list[GenerationRecord]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_GENERATIONS_SQL, (owner_id,))
            rows = await cursor.fetchall()
        return [_row_to_record(r) for r in rows]

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return "sqlite_generations"
