# src/errors.py
"""Error taxonomy shared by the search and filter pipeline."""


class SearchAggregatorError(Exception):
    """Base class for every error raised by the pipeline."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SearchAggregatorError, ValueError):
    """Bad caller input, detected before any network call."""


class ProviderError(SearchAggregatorError):
    """Google CSE transport or API failure. Aborts the whole aggregation."""


class FilterBackendUnavailable(SearchAggregatorError):
    """A filter toggle was requested but no Gemini backend is configured."""


class FilterBackendError(SearchAggregatorError):
    """The configured Gemini backend call itself failed."""


class FilterParseError(SearchAggregatorError):
    """Internal only: the backend reply held no usable JSON array."""
