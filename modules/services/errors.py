"""Errors raised by the generated-images API client."""

from __future__ import annotations

from typing import Optional


class ImageApiError(RuntimeError):
    """A request to the generated-images API failed.

    ``status_code`` is None for transport and validation failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
