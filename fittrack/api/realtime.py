"""
Websocket stream of goal and preference changes for the signed-in user.

The client connects to /api/realtime/{table}?token=<access token> and gets
one JSON message per change: {"table", "event", "new", "old"}.
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from fittrack.core.errors import AuthError
from fittrack.deps import get_auth_service, get_change_feed, get_db
from fittrack.models.user_goals import UserGoals
from fittrack.models.user_preferences import UserPreferences
from fittrack.services.auth import AuthService
from fittrack.services.realtime import ChangeFeed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/realtime", tags=["realtime"])

STREAMABLE_TABLES = (UserGoals.__tablename__, UserPreferences.__tablename__)


@router.websocket("/{table}")
async def stream_changes(
    websocket: WebSocket,
    table: str,
    token: str = "",
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    feed: ChangeFeed = Depends(get_change_feed),
):
    if table not in STREAMABLE_TABLES:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    try:
        session = auth.get_session(db, token)
    except AuthError as e:
        logger.info(f"[REALTIME] Rejected websocket for {table}: {e}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    finally:
        db.close()

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    # publish() runs in the threadpool of sync handlers
    def on_change(payload):
        loop.call_soon_threadsafe(queue.put_nowait, payload)

    # subscribe before accept so no change between the two is lost
    unsubscribe = feed.subscribe(table, f"user_id=eq.{session.user_id}", on_change)
    receiver = None
    try:
        await websocket.accept()
        logger.info(f"[REALTIME] user_id={session.user_id} subscribed to {table}")

        receiver = asyncio.ensure_future(websocket.receive_text())
        while True:
            getter = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
            if getter in done:
                await websocket.send_json(getter.result())
            else:
                getter.cancel()
            if receiver in done:
                # client messages are ignored; a disconnect ends the stream
                receiver.result()
                receiver = asyncio.ensure_future(websocket.receive_text())
    except WebSocketDisconnect:
        logger.info(f"[REALTIME] user_id={session.user_id} disconnected from {table}")
    finally:
        if receiver is not None:
            receiver.cancel()
        unsubscribe()
