"""Error types raised by the SyncDev client state layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class SyncDevError(Exception):
    """Base class for SyncDev client errors."""


class InvalidIntentError(SyncDevError, ValueError):
    """A UI intent was rejected before it reached any state cell."""


class ConfigValidationError(InvalidIntentError):
    """A configuration draft failed validation.

    Attributes:
        errors: pydantic error dicts (``loc``, ``msg``, ``type``) for each bad field
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @property
    def fields(self) -> List[str]:
        """Dotted names of the offending fields."""
        return [".".join(str(part) for part in err.get("loc", ())) for err in self.errors]


class MalformedPayloadError(SyncDevError, ValueError):
    """A backend event could not be turned into a valid cell value."""
