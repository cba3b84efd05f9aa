"""
Realtime Change Stream.

Server-Sent Events stream of committed row changes. Clients subscribe to a
set of tables, optionally limited to one business, and refresh their views
when matching events arrive. Each event is named after the change kind
(``INSERT``, ``UPDATE``, ``DELETE``) and carries the ``ChangeEvent`` as JSON.
"""

from typing import List, Optional, Set

from fastapi import APIRouter, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from bizboard.core.database.entities import Profile
from bizboard.core.errors import ServiceUnavailableError
from bizboard.core.logging_config import get_logger
from bizboard.core.realtime import hub
from bizboard.server.core.config import settings
from bizboard.server.services.access import accessible_business_ids, require_business
from bizboard.server.services.deps import CurrentUserDep, SessionDep

logger = get_logger(__name__)

router = APIRouter(tags=["realtime"])


def parse_tables(tables: Optional[str]) -> List[str]:
    return [name.strip() for name in (tables or "").split(",") if name.strip()]


async def change_events(request: Request, tables: List[str], business_ids: Optional[Set[str]]):
    """Yield SSE messages of matching changes until the client goes away."""
    subscription = hub.subscribe(tables, business_ids)
    try:
        while True:
            if await request.is_disconnected():
                logger.info("Realtime client disconnected")
                break
            change = await subscription.get()
            yield {"event": change.event.value, "data": change.model_dump_json()}
    finally:
        hub.unsubscribe(subscription)


async def visible_business_ids(session: AsyncSession, user: Profile, business_id: Optional[str]) -> Optional[Set[str]]:
    """Businesses whose changes ``user`` may watch; None means every business."""
    if business_id is not None:
        await require_business(session, user, business_id)
        return {business_id}
    if user.is_admin:
        return None
    return set(await accessible_business_ids(session, user))


@router.get(
    "",
    summary="Stream Row Changes",
    responses={503: {"description": "Realtime updates are turned off"}},
)
async def stream_changes(
    request: Request,
    user: CurrentUserDep,
    session: SessionDep,
    tables: Optional[str] = Query(default=None, description="Comma-separated table names"),
    business_id: Optional[str] = None,
):
    """
    Stream changes of the requested tables.

    Without ``tables`` every table is streamed. When ``business_id`` is given the
    caller must have access to it and only that business's rows are sent.
    Otherwise admins see every business and other users see the businesses
    they are members of.
    """
    if settings.realtime.disabled:
        raise ServiceUnavailableError("עדכונים בזמן אמת אינם זמינים")
    business_ids = await visible_business_ids(session, user, business_id)
    names = parse_tables(tables)
    logger.info(f"User {user.id} subscribed to realtime changes: tables={names or 'all'}")

    return EventSourceResponse(change_events(request, names, business_ids), ping=settings.realtime.ping_seconds)
