# core/errors.py
from typing import Optional


class FinCoachError(Exception):
    """
    Base class for every failure the assistant classifies.
    The API layer renders these into the failure envelope.
    """

    status_code: int = 500
    error_type: str = "internal_error"


class UnauthenticatedError(FinCoachError):
    """The data service rejected the session token. Always forces logout."""

    status_code = 401
    error_type = "unauthenticated"


class UnsupportedEnvironmentError(FinCoachError):
    """No speech engine is available on this platform."""

    status_code = 501
    error_type = "unsupported_environment"


class ParseFailure(FinCoachError):
    """
    Expense or goal text did not match the grammar.
    Recovered locally as a hint message, never surfaced as a system error.
    """

    status_code = 422
    error_type = "parse_failure"


class CapabilityError(FinCoachError):
    """Any other failure of a remote capability (network, 5xx, timeout)."""

    status_code = 502
    error_type = "capability_error"

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
