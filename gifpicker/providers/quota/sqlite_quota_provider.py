"""SQLite-backed sliding-window quota provider.

Keeps a log of admitted request timestamps per key in a local SQLite
database.  A check prunes entries older than the window, counts what is
left and records a new entry when there is room, all inside one
``BEGIN IMMEDIATE`` transaction so that two concurrent checks for the
same key cannot both take the last slot.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import structlog

from gifpicker.interfaces.quota_provider import IQuotaProvider
from gifpicker.models.generation import QuotaDecision

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/gifpicker.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS quota_hits (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    key      TEXT    NOT NULL,
    hit_at   REAL    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_quota_hits_key_time ON quota_hits(key, hit_at);",
]

_PRUNE_SQL = "DELETE FROM quota_hits WHERE key = ? AND hit_at <= ?;"

_WINDOW_SQL = "SELECT COUNT(*), MIN(hit_at) FROM quota_hits WHERE key = ?;"

_INSERT_SQL = "INSERT INTO quota_hits (key, hit_at) VALUES (?, ?);"


class SQLiteQuotaProvider(IQuotaProvider):
    """Sliding-window log quota (default: 10 requests per trailing 24 hours).

    Parameters
    ----------
    db_path:
        SQLite file holding the ``quota_hits`` table.  May be shared with
        the generation store.
    limit:
        Requests admitted per key inside one window.
    window_seconds:
        Length of the trailing window.
    clock:
        Returns the current UNIX time; injectable for tests.
    """

    def __init__(
        self,
        db_path: str | Path = _DEFAULT_DB_PATH,
        limit: int = 10,
        window_seconds: int = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = Path(db_path)
        self._limit = limit
        self._window = window_seconds
        self._clock = clock

    async def initialize(self) -> None:
        """Create the quota table and index if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info(
            "quota_db_initialized",
            path=str(self._db_path),
            limit=self._limit,
            window_seconds=self._window,
        )

    async def check(self, key: str) -> QuotaDecision:
        now = self._clock()
        window_start = now - self._window

        # isolation_level=None hands transaction control to the explicit
        # BEGIN IMMEDIATE below, which takes the write lock up front.
        async with aiosqlite.connect(str(self._db_path), isolation_level=None) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                await db.execute(_PRUNE_SQL, (key, window_start))
                cursor = await db.execute(_WINDOW_SQL, (key,))
                count, oldest = await cursor.fetchone()
                admitted = count < self._limit
                if admitted:
                    await db.execute(_INSERT_SQL, (key, now))
                    count += 1
                    if oldest is None:
                        oldest = now
                await db.execute("COMMIT")
            except BaseException:
                await db.execute("ROLLBACK")
                raise

        decision = QuotaDecision(
            admitted=admitted,
            limit=self._limit,
            remaining=max(0, self._limit - count),
            reset_at=datetime.fromtimestamp(oldest + self._window, tz=timezone.utc),  # noqa: UP017
        )
        logger.debug(
            "quota_checked",
            key=key,
            admitted=decision.admitted,
            remaining=decision.remaining,
        )
        return decision

    def get_provider_name(self) -> str:
        return "sqlite_quota"
