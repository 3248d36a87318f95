"""Autosave coordination for editable buffers."""

from .coordinator import (
    SaveCoordinator,
    SaveFailedError,
    SaveStatus,
    trimmed_text_differs,
)

__all__ = [
    "SaveCoordinator",
    "SaveFailedError",
    "SaveStatus",
    "trimmed_text_differs",
]
