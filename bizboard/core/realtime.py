"""
Realtime row-change notifications.

Changes are captured on the ORM session: ``after_flush`` records which rows
were inserted, updated or deleted, ``after_commit`` publishes them to the
``RealtimeHub`` and ``after_rollback`` throws them away, so subscribers only
ever see committed data. A soft delete is an UPDATE that sets ``deleted_at``.

Subscribers receive ``ChangeEvent`` objects through bounded asyncio queues.
When a subscriber falls behind, its oldest buffered event is dropped.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set, Type

from pydantic import BaseModel, Field
from sqlalchemy import event
from sqlalchemy.orm import Session
from sqlmodel import SQLModel

from bizboard.core.database.base import utc_now
from bizboard.core.database.entities import DailyEntry, Goal, Payment
from bizboard.core.logging_config import get_logger
from bizboard.core.models.domain import ChangeEventType

logger = get_logger(__name__)

_PENDING_KEY = "bizboard_realtime_pending"
ALL_TABLES = "*"

# Child tables without a business_id column belong to the business of their parent row.
PARENT_LINKS: Dict[str, Type[SQLModel]] = {"payment_id": Payment, "daily_entry_id": DailyEntry, "goal_id": Goal}


class ChangeEvent(BaseModel):
    """A committed change of one row."""

    table: str
    event: ChangeEventType
    record_id: Optional[str] = None
    business_id: Optional[str] = None
    record: Dict[str, Any] = Field(default_factory=dict)
    committed_at: datetime = Field(default_factory=utc_now)


class Subscription:
    """One listener's filter and buffer."""

    def __init__(self, tables: Iterable[str], business_ids: Optional[Iterable[str]], queue_size: int) -> None:
        self.tables: Set[str] = set(tables) or {ALL_TABLES}
        # None means every business; an empty set means none.
        self.business_ids: Optional[Set[str]] = None if business_ids is None else set(business_ids)
        self.queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=queue_size)
        self.dropped = 0

    def matches(self, change: ChangeEvent) -> bool:
        if ALL_TABLES not in self.tables and change.table not in self.tables:
            return False
        if self.business_ids is not None and change.business_id not in self.business_ids:
            return False
        return True

    def offer(self, change: ChangeEvent) -> None:
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
            logger.warning(f"Realtime subscriber queue full, dropped oldest event (total dropped: {self.dropped})")
        self.queue.put_nowait(change)

    async def get(self) -> ChangeEvent:
        return await self.queue.get()


class RealtimeHub:
    """Fan-out of committed change events to subscribers."""

    def __init__(self, queue_size: int = 1000) -> None:
        self.queue_size = queue_size
        self._subscriptions: List[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, tables: Iterable[str] = (), business_ids: Optional[Iterable[str]] = None) -> Subscription:
        subscription = Subscription(tables, business_ids, self.queue_size)
        self._subscriptions.append(subscription)
        logger.debug(
            f"Realtime subscription added: tables={sorted(subscription.tables)}, businesses={subscription.business_ids}"
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            logger.debug("Realtime subscription removed")

    def publish(self, change: ChangeEvent) -> int:
        """Deliver ``change`` to every matching subscriber; returns how many got it."""
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.matches(change):
                subscription.offer(change)
                delivered += 1
        return delivered


hub = RealtimeHub()


def _business_id_of(table: str, obj: SQLModel, session: Optional[Session] = None) -> Optional[str]:
    if table == "businesses":
        return getattr(obj, "id", None)
    business_id = getattr(obj, "business_id", None)
    if business_id is not None or session is None:
        return business_id
    for column, parent_model in PARENT_LINKS.items():
        parent_id = getattr(obj, column, None)
        if parent_id is None:
            continue
        with session.no_autoflush:
            parent = session.get(parent_model, parent_id)
        return getattr(parent, "business_id", None)
    return None


def build_change_event(obj: SQLModel, kind: ChangeEventType, session: Optional[Session] = None) -> Optional[ChangeEvent]:
    table = getattr(obj, "__tablename__", None)
    if table is None:
        return None
    record = obj.model_dump(mode="json", exclude={"password_hash", "token"})
    return ChangeEvent(
        table=table,
        event=kind,
        record_id=getattr(obj, "id", None),
        business_id=_business_id_of(table, obj, session),
        record=record,
    )


def _collect_changes(session: Session, flush_context: Any) -> None:
    pending: List[ChangeEvent] = session.info.setdefault(_PENDING_KEY, [])
    groups = (
        (session.new, ChangeEventType.insert),
        ((obj for obj in session.dirty if session.is_modified(obj)), ChangeEventType.update),
        (session.deleted, ChangeEventType.delete),
    )
    for objects, kind in groups:
        for obj in objects:
            change = build_change_event(obj, kind, session)
            if change is not None:
                pending.append(change)


def _publish_changes(session: Session) -> None:
    pending: List[ChangeEvent] = session.info.pop(_PENDING_KEY, [])
    if not pending:
        return
    committed_at = utc_now()
    for change in pending:
        change.committed_at = committed_at
        hub.publish(change)
    logger.debug(f"Published {len(pending)} realtime change event(s)")


def _discard_changes(session: Session) -> None:
    session.info.pop(_PENDING_KEY, None)


def install_change_capture() -> None:
    """Register the session listeners; calling it again is harmless."""
    if event.contains(Session, "after_flush", _collect_changes):
        return
    event.listen(Session, "after_flush", _collect_changes)
    event.listen(Session, "after_commit", _publish_changes)
    event.listen(Session, "after_rollback", _discard_changes)
    logger.info("Realtime change capture installed")
