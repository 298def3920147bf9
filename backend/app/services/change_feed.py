# backend/app/services/change_feed.py
"""
Targeted invalidation driven by the realtime change feed.

Each event names one row. The handler re-reads only that row and hands the
fresh copy to the listeners registered for its table; a delete (or a row
that no longer exists) evicts it instead. Events are advisory, so stale or
out-of-order deliveries simply re-read the current state.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..events.change_events import ChangeEvent, ChangeType
from ..models.booking import StreamingBooking
from ..models.content import ContentPost
from ..models.conversation import Conversation
from ..models.message import Message
from ..models.purchase import UserPurchasedContent
from ..models.streaming_session import StreamingSession
from ..models.subscription import Subscription
from ..repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)

# Listener receives the event and the fresh row, or None when it was evicted
ChangeListener = Callable[[ChangeEvent, Optional[Any]], None]

TRACKED_MODELS: Dict[str, Type[Any]] = {
    model.__tablename__: model
    for model in (
        StreamingBooking,
        StreamingSession,
        Conversation,
        Message,
        ContentPost,
        Subscription,
        UserPurchasedContent,
    )
}


class ChangeFeedHandler:
    """Re-reads changed rows and fans them out to per-table listeners."""

    def __init__(self, db: Session):
        self.db = db
        self._listeners: Dict[str, List[ChangeListener]] = {}
        self._rows: Dict[Tuple[str, str], Any] = {}

    def register(self, table: str, listener: ChangeListener) -> None:
        if table not in TRACKED_MODELS:
            raise ValueError(f"Table {table} is not tracked by the change feed")
        self._listeners.setdefault(table, []).append(listener)

    def unregister(self, table: str, listener: ChangeListener) -> None:
        self._listeners[table] = [
            existing for existing in self._listeners.get(table, []) if existing is not listener
        ]

    def cached(self, table: str, record_id: str) -> Optional[Any]:
        """Last row delivered for ``(table, record_id)``."""
        return self._rows.get((table, record_id))

    def handle(self, event: ChangeEvent) -> Optional[Any]:
        """
        Process one event. Returns the fresh row, or None when it was evicted
        or the table is not tracked. Never raises.
        """
        model = TRACKED_MODELS.get(event.table)
        if model is None:
            logger.debug(f"Ignoring change on untracked table {event.table}")
            return None

        key = (event.table, event.record_id)
        row: Optional[Any] = None
        if event.change_type != ChangeType.DELETE:
            try:
                row = RepositoryFactory.create_base_repository(self.db, model).get_fresh(
                    event.record_id
                )
            except RepositoryException:
                logger.warning(
                    f"Could not re-read {event.table} {event.record_id} after {event.change_type.value}",
                    exc_info=True,
                )
                return None

        if row is None:
            self._rows.pop(key, None)
        else:
            self._rows[key] = row

        self._dispatch(event, row)
        return row

    def handle_payload(self, payload: Dict[str, Any]) -> Optional[Any]:
        try:
            event = ChangeEvent.from_payload(payload)
        except ValueError as exc:
            logger.warning(f"Dropping malformed change payload: {exc}")
            return None
        return self.handle(event)

    def _dispatch(self, event: ChangeEvent, row: Optional[Any]) -> None:
        for listener in list(self._listeners.get(event.table, [])):
            try:
                listener(event, row)
            except Exception:
                logger.exception(f"Change feed listener failed for {event.table} {event.record_id}")
