"""Record store providers."""

from gifpicker.providers.store.sqlite_generation_store import SQLiteGenerationStore

__all__ = ["SQLiteGenerationStore"]
