"""Giphy search provider implementing IMediaSearchProvider.

Queries the Giphy ``/gifs/search`` REST endpoint through an injected
``httpx.AsyncClient``.  Each result's original-size rendition URL becomes
a :class:`Candidate`; results without one are dropped.

Unlike most search adapters this one raises instead of returning an empty
list on failure, so the calling branch can tell "nothing matched" apart
from "the service was down".
"""

from __future__ import annotations

from typing import Any

import httpx

from gifpicker.config.settings import Settings
from gifpicker.interfaces.media_search_provider import IMediaSearchProvider
from gifpicker.models.strategy import SEARCH_ERROR_DESCRIPTIONS, Candidate, SearchErrorKind
from gifpicker.utils.errors import BranchSearchError
from gifpicker.utils.logging import get_logger

_DEFAULT_LANG = "en"
_DEFAULT_TIMEOUT = 8.0


class GiphySearchProvider(IMediaSearchProvider):
    """Media search backed by the Giphy API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    settings:
        Supplies ``giphy_api_key`` and ``giphy_base_url``.
    lang:
        Two-letter language hint forwarded to Giphy.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        lang: str = _DEFAULT_LANG,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._api_key = settings.giphy_api_key
        self._search_url = f"{settings.giphy_base_url.rstrip('/')}/gifs/search"
        self._lang = lang
        self._timeout = timeout
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IMediaSearchProvider implementation
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        limit: int = 5,
        rating: str = "pg-13",
    ) -> list[Candidate]:
        params = {
            "api_key": self._api_key,
            "q": query,
            "limit": limit,
            "rating": rating,
            "lang": self._lang,
        }

        try:
            response = await self._http.get(
                self._search_url, params=params, timeout=self._timeout
            )
        except httpx.TimeoutException as exc:
            self._logger.warning("giphy_request_timeout", query=query)
            raise self._error(SearchErrorKind.TIMEOUT) from exc
        except httpx.HTTPError as exc:
            self._logger.warning("giphy_request_failed", query=query, error=str(exc))
            raise self._error(SearchErrorKind.NETWORK_ERROR) from exc

        if not response.is_success:
            self._logger.warning(
                "giphy_unexpected_status",
                query=query,
                status=response.status_code,
            )
            raise self._error(SearchErrorKind.SEARCH_FAILED)

        try:
            payload = response.json()
        except ValueError as exc:
            raise self._error(SearchErrorKind.MALFORMED_RESPONSE) from exc

        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise self._error(SearchErrorKind.MALFORMED_RESPONSE)

        candidates = [c for c in (self._to_candidate(item) for item in items) if c]
        self._logger.debug(
            "giphy_search",
            query=query,
            result_count=len(candidates),
        )
        return candidates[:limit]

    def get_provider_name(self) -> str:
        return "giphy"

    def is_available(self) -> bool:
        return bool(self._api_key)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _error(self, kind: SearchErrorKind) -> BranchSearchError:
        return BranchSearchError(
            kind=kind.value,
            message=SEARCH_ERROR_DESCRIPTIONS[kind],
            provider_name=self.get_provider_name(),
        )

    @staticmethod
    def _to_candidate(item: Any) -> Candidate | None:
        """Map one Giphy ``data[]`` entry to a Candidate, or ``None``."""
        if not isinstance(item, dict):
            return None
        images = item.get("images") or {}
        original = images.get("original") or {}
        url = original.get("url")
        if not url:
            return None
        return Candidate(
            title=item.get("title") or "",
            alt_text=item.get("alt_text") or "",
            media_url=url,
        )
