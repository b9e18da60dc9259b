"""Enums for file operations."""

from enum import Enum


class CopyState(Enum):
    """Lifecycle states of a stream copy operation."""

    NOT_STARTED = "not_started"
    COPYING = "copying"
    FINISHED = "finished"
