"""Errors raised by the authenticated Kite API gateway."""

from typing import Optional


class KiteAPIError(Exception):
    """A single gateway call failed; no retry is attempted."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_type: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
