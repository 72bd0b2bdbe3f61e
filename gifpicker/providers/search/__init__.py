"""Media search providers."""

from gifpicker.providers.search.giphy_provider import GiphySearchProvider

__all__ = ["GiphySearchProvider"]
