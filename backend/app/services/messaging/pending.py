# backend/app/services/messaging/pending.py
"""
Client-side pending list for optimistic message sends.

A message is shown immediately under a ``client_ref`` and sent with that
reference. When the stored message comes back (from the send response or the
change feed) the pending entry is dropped and the confirmed id recorded, so
the same message is never rendered twice. Sends that failed stay listed and
can be retried with the same reference; the server returns the already
stored message for a repeated ``(sender, client_ref)``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Dict, Iterable, List, Optional, Protocol

import ulid

logger = logging.getLogger(__name__)


class PendingState(str, Enum):
    SENDING = "sending"
    FAILED = "failed"


class StoredMessage(Protocol):
    id: str
    client_ref: Optional[str]


@dataclass
class PendingMessage:
    client_ref: str
    conversation_id: str
    content: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    state: PendingState = PendingState.SENDING
    error: Optional[str] = None


class PendingMessageLog:
    """Pending optimistic sends for one sender, keyed by ``client_ref``."""

    def __init__(self) -> None:
        self._pending: Dict[str, PendingMessage] = {}
        self._confirmed: Dict[str, str] = {}

    def add(
        self, conversation_id: str, content: str, client_ref: Optional[str] = None
    ) -> PendingMessage:
        ref = client_ref or str(ulid.ULID())
        if ref in self._confirmed:
            raise ValueError(f"client_ref {ref} was already confirmed")
        entry = PendingMessage(client_ref=ref, conversation_id=conversation_id, content=content)
        self._pending[ref] = entry
        return entry

    def mark_failed(self, client_ref: str, error: str) -> None:
        entry = self._pending.get(client_ref)
        if entry is None:
            return
        entry.state = PendingState.FAILED
        entry.error = error
        logger.debug(f"Pending message {client_ref} failed: {error}")

    def retry(self, client_ref: str) -> PendingMessage:
        """Flip a failed entry back to sending; the reference is unchanged."""
        entry = self._pending[client_ref]
        entry.state = PendingState.SENDING
        entry.error = None
        return entry

    def confirm(self, message: StoredMessage) -> Optional[PendingMessage]:
        """
        Reconcile one stored message.

        Returns the pending entry it replaced, or None when the message was
        not ours or had already been confirmed.
        """
        ref = message.client_ref
        if not ref:
            return None
        entry = self._pending.pop(ref, None)
        if entry is not None:
            self._confirmed[ref] = message.id
        return entry

    def reconcile(self, messages: Iterable[StoredMessage]) -> List[PendingMessage]:
        return [entry for entry in (self.confirm(m) for m in messages) if entry is not None]

    def is_duplicate(self, message: StoredMessage) -> bool:
        """True when the message is the stored copy of a send already confirmed."""
        ref = message.client_ref
        return bool(ref) and self._confirmed.get(ref) == message.id and ref not in self._pending

    def confirmed_id(self, client_ref: str) -> Optional[str]:
        return self._confirmed.get(client_ref)

    def outstanding(self, conversation_id: Optional[str] = None) -> List[PendingMessage]:
        entries = sorted(self._pending.values(), key=lambda e: e.created_at)
        if conversation_id is None:
            return entries
        return [e for e in entries if e.conversation_id == conversation_id]

    def __len__(self) -> int:
        return len(self._pending)
