"""Quota providers."""

from gifpicker.providers.quota.sqlite_quota_provider import SQLiteQuotaProvider

__all__ = ["SQLiteQuotaProvider"]
