"""Row-level change events delivered by the realtime feed."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """
    Advisory notice that a row changed.

    Only ``table`` and ``record_id`` are trusted; consumers re-read the row
    instead of applying any payload carried by the feed.
    """

    table: str
    change_type: ChangeType
    record_id: str
    commit_timestamp: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ChangeEvent":
        """
        Build an event from a feed payload shaped like
        ``{"table", "eventType", "new": {...}, "old": {...}, "commit_timestamp"}``.

        Raises:
            ValueError: Unknown event type or no row id in the payload
        """
        change_type = ChangeType(str(payload.get("eventType", "")).upper())
        row: Dict[str, Any] = dict(payload.get("new") or {})
        if change_type == ChangeType.DELETE or not row.get("id"):
            row = dict(payload.get("old") or {}) or row
        record_id = row.get("id")
        table = payload.get("table")
        if not record_id or not table:
            raise ValueError("Change payload carries no table or record id")

        committed = payload.get("commit_timestamp")
        if isinstance(committed, str):
            committed = datetime.fromisoformat(committed.replace("Z", "+00:00"))
        return cls(
            table=str(table),
            change_type=change_type,
            record_id=str(record_id),
            commit_timestamp=committed,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "change_type": self.change_type.value,
            "record_id": self.record_id,
            "commit_timestamp": self.commit_timestamp.isoformat() if self.commit_timestamp else None,
        }
