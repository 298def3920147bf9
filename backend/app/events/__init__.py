"""Change-feed event primitives."""

from app.events.change_events import ChangeEvent, ChangeType

__all__ = [
    "ChangeEvent",
    "ChangeType",
]
