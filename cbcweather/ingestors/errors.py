"""Exceptions raised by upstream service clients."""

from __future__ import annotations


class UpstreamServiceError(RuntimeError):
    """Base error for a failed upstream request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeoutError(UpstreamServiceError):
    """The upstream service did not answer in time."""


class UpstreamResponseError(UpstreamServiceError):
    """The upstream service answered with an error status or unusable body."""


__all__ = ["UpstreamResponseError", "UpstreamServiceError", "UpstreamTimeoutError"]
