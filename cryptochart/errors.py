"""Exception types for CryptoChart."""

from typing import Optional


class ChartError(Exception):
    """Base class for all CryptoChart errors."""


class NetworkFailure(ChartError):
    """A REST fetch or stream transport failed.

    Raised once per failed one-shot fetch; callers keep their last good
    data and offer a manual retry.
    """

    def __init__(self, operation: str, message: str, status: Optional[int] = None):
        self.operation = operation
        self.status = status
        detail = f"{operation} failed: {message}"
        if status is not None:
            detail = f"{operation} failed (HTTP {status}): {message}"
        super().__init__(detail)


class MalformedData(ChartError):
    """A whole payload did not have the expected shape.

    Individual bad records are filtered out, not raised.
    """


class UserInputRejected(ChartError):
    """A user action was refused by a UI guard (shown as a notice)."""
