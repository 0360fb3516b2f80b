"""Process-wide Socket.IO server, room router and gateway.

Mounted by ``config.asgi`` at ``settings.REALTIME_SOCKETIO_PATH``. The web
client connects with ``socket.io-client`` and passes its JWT access token as
``query.token`` (or ``auth: { token }``).

The ``emit_event_to_*`` helpers are safe to call from sync Django code
(signals, views, Celery tasks). When nobody is connected they are no-ops.
"""

from __future__ import annotations

from typing import Any

import socketio
from asgiref.sync import async_to_sync
from django.conf import settings

from vibesync.realtime.gateway import ConnectionGateway
from vibesync.realtime.router import RoomRouter
from vibesync.realtime.router import room_for_conversation
from vibesync.realtime.typing_state import TYPING_TIMEOUT


def _cors_allowed_origins() -> str | list[str]:
    origins = list(getattr(settings, "REALTIME_CORS_ALLOWED_ORIGINS", ["*"]))
    return "*" if origins == ["*"] else origins


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=_cors_allowed_origins(),
    logger=False,
    engineio_logger=False,
)

router = RoomRouter(sio.emit, disconnect=sio.disconnect)

gateway = ConnectionGateway(
    sio,
    router,
    typing_timeout=getattr(settings, "REALTIME_TYPING_TIMEOUT", TYPING_TIMEOUT),
    trust_client_user_id=getattr(settings, "REALTIME_TRUST_CLIENT_USER_ID", False),
)
gateway.register()


def emit_event_to_room(room: str, event: str, payload: Any) -> int:
    """Emit an event to a room from sync Django code."""

    return async_to_sync(router.broadcast)(room, event, payload)


def emit_event_to_conversation(conversation_id: str, event: str, payload: Any) -> int:
    return emit_event_to_room(room_for_conversation(conversation_id), event, payload)


def emit_event_to_user(user_id: int, event: str, payload: Any) -> int:
    return async_to_sync(router.notify_user)(user_id, event, payload)
