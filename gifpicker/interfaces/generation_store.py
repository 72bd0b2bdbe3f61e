"""Abstract base class for the identity and generation record store.

The store holds two kinds of rows: users (keyed by the opaque external
identity id) and generation records (append-only, owned by one user).
No update operation on generation records is ever exercised; deletion
only happens by cascading from a deleted user.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gifpicker.models.generation import GenerationRecord, UserRecord
from gifpicker.models.identity import UserProfile


# Concrete implementation: SQLiteGenerationStore (gifpicker/providers/store/)
class IGenerationStore(ABC):
    """Contract for identity + generation persistence.

    All operations are async to support network-backed stores.
    """

    @abstractmethod
    async def upsert_user(self, external_id: str, profile: UserProfile) -> UserRecord:
        """Create or refresh the user keyed by *external_id*.

        Idempotent: repeated calls with the same id update profile fields
        and return the same internal ``id``.
        """

    @abstractmethod
    async def get_user(self, external_id: str) -> UserRecord | None:
        """Return the user keyed by *external_id*, or ``None``."""

    @abstractmethod
    async def append_generation(self, record: GenerationRecord) -> GenerationRecord:
        """Insert one generation record as an independent write.

        Raises
        ------
        gifpicker.utils.errors.PersistenceFailure
            If the write fails.
        """

    @abstractmethod
    async def append_generations(self, records: list[GenerationRecord]) -> list[GenerationRecord]:
        """Insert *records* in a single transaction (all or nothing).

        Raises
        ------
        gifpicker.utils.errors.PersistenceFailure
            If the transaction fails; nothing is written.
        """

    @abstractmethod
    async def list_generations(self, owner_id: str) -> list[GenerationRecord]:
        """Return every record owned by *owner_id*, newest first."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
