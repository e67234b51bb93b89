"""Custom exceptions for Drawcast.

All modules should raise subclasses of DrawcastError instead of generic ones.
The FastAPI exception handlers in main.py catch DrawcastError and return
structured JSON error responses.
"""

from __future__ import annotations


class DrawcastError(Exception):
    """Base exception for all Drawcast errors.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured data for logging/debugging.
    """

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message
