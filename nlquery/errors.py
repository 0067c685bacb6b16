"""
Error types for natural language query extraction and trace analysis.

Every failure in the pipeline is raised as one of these so callers can tell
which stage failed without inspecting provider internals.
"""


class NLQueryError(Exception):
    """Base class for all nlquery errors."""


class ValidationError(NLQueryError):
    """Input failed validation (malformed duration, missing required field)."""


class NotFoundError(NLQueryError):
    """A session does not exist or has expired."""


class ProviderError(NLQueryError):
    """The model call failed or produced no output."""


class ParseError(NLQueryError):
    """Model output did not match the expected structure."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class ConfigurationError(NLQueryError):
    """Configuration is inconsistent or a component could not be built from it."""


class QueryServiceError(NLQueryError):
    """The trace query backend could not be reached or returned an error."""
