"""Exceptions raised by the console API client."""
from typing import Optional


class APIError(Exception):
    """Failure envelope (or transport failure) from the admin API."""

    def __init__(self, message: str, kind: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind or 'Unexpected'
        self.status = status


class AuthError(APIError):
    """Missing, invalid or expired session; the session has been invalidated."""

    def __init__(self, message: str = 'Not authenticated', status: Optional[int] = 401):
        super().__init__(message, kind='Unauthenticated', status=status)


class TransportError(APIError):
    """The server could not be reached or answered with something other than the envelope."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message, kind='Unexpected', status=status)


__all__ = ['APIError', 'AuthError', 'TransportError']
