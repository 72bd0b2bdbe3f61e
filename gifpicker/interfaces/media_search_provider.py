"""Abstract base class for media-search service providers.

Defines the contract for the external GIF search capability queried once
per branch.  Implementations wrap Giphy today; Tenor or any other
keyword-searchable media API could be added behind the same interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gifpicker.models.strategy import Candidate


# Concrete implementation: GiphySearchProvider (gifpicker/providers/search/)
class IMediaSearchProvider(ABC):
    """Contract for media-search services used during branch search."""

    @abstractmethod
    async def search(
        self,
        query: str,
        limit: int = 5,
        rating: str = "pg-13",
    ) -> list[Candidate]:
        """Search for media matching *query*.

        Parameters
        ----------
        query:
            The search query string.
        limit:
            Maximum number of candidates to return.
        rating:
            Content-safety tier passed through to the service.

        Returns
        -------
        list[Candidate]
            Zero or more candidates ordered by the service's relevance.

        Raises
        ------
        gifpicker.utils.errors.BranchSearchError
            On non-2xx responses, transport failures or malformed payloads.
            Unlike most search providers, failures are raised rather than
            swallowed so the branch can record *why* it came back empty.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"giphy"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured."""
