"""
Error taxonomy for the catalog API.

Each error carries the HTTP status it maps to and the message the caller
is allowed to see.
"""

GENERIC_ERROR_MESSAGE = "Something went wrong."


class ListdError(Exception):
    """Base class for errors raised by the catalog core."""

    status_code: int = 500

    @property
    def public_message(self) -> str:
        return GENERIC_ERROR_MESSAGE


class ValidationError(ListdError):
    """A request parameter is missing, malformed or out of its domain.

    Attributes:
        field: Name of the offending parameter
        reason: Human-readable reason
    """

    status_code = 400

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"[{field}]: {reason}")

    @property
    def public_message(self) -> str:
        return f"[{self.field}]: {self.reason}".lower()


class ConfigurationError(ListdError):
    """A required external endpoint or credential is absent."""

    status_code = 500

    @property
    def public_message(self) -> str:
        return str(self)


class ExecutionError(ListdError):
    """The listing store or cache failed during a read or write."""

    status_code = 500


class NotFoundError(ListdError):
    """A single-resource lookup found nothing."""

    status_code = 404

    @property
    def public_message(self) -> str:
        return str(self)


class RecordingError(ExecutionError):
    """Persisting a valuation snapshot failed; the estimate itself is intact."""
