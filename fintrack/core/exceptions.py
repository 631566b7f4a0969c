from typing import Optional, Dict, Any


class FinTrackException(Exception):
    """Base exception for the FinTrack backend."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ResourceNotFoundError(FinTrackException):
    """Raised when a requested resource is not found."""

    pass
