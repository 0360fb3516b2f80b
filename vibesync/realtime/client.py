"""Python counterpart of the web client's realtime hook.

Used by integration scripts and bots that take part in conversations:

    client = RealtimeClient("https://vibesync.example", token)
    client.on("new-message", handle_message)
    await client.connect()
    await client.join("3-7")

The client re-sends its token and re-joins its conversations on every
(re)connect, so a dropped transport heals without caller involvement. Typing
is debounced: the first keystroke of a burst sends ``typing: true``, further
keystrokes only refresh the local 3 second timer (and re-send at most every
half timeout so the server's own timer never lapses mid-burst), and silence
sends ``typing: false``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import socketio

from vibesync.realtime import constants as events
from vibesync.realtime.typing_state import TYPING_TIMEOUT
from vibesync.realtime.typing_state import TypingTracker

logger = logging.getLogger(__name__)

# The tracker is keyed by (conversation, user); locally there is only us.
_SELF = 0


class RealtimeClient:
    def __init__(  # noqa: PLR0913
        self,
        url: str,
        token: str,
        *,
        socketio_path: str = "socket.io",
        sio: Any | None = None,
        typing_timeout: float = TYPING_TIMEOUT,
        scheduler: Any | None = None,
    ):
        self.url = url
        self.token = token
        self.socketio_path = socketio_path
        self.sio = sio or socketio.AsyncClient(
            reconnection=True,
            reconnection_delay=1,
            reconnection_delay_max=5,
        )
        self.user_id: int | None = None
        self.conversations: set[str] = set()
        self.connected = False
        self._scheduler = scheduler
        self._typing = TypingTracker(
            self._typing_expired,
            timeout=typing_timeout,
            scheduler=scheduler,
        )
        self._typing_sent_at: dict[str, float] = {}
        self._pending: set[asyncio.Future] = set()

        self.sio.on("connect", self._on_connect)
        self.sio.on("disconnect", self._on_disconnect)

    def on(self, event: str, handler) -> None:
        self.sio.on(event, handler)

    async def connect(self) -> None:
        await self.sio.connect(
            self.url,
            auth={"token": self.token},
            socketio_path=self.socketio_path,
            transports=["websocket", "polling"],
        )

    async def disconnect(self) -> None:
        self._reset_typing()
        await self.sio.disconnect()

    # Conversations
    # ------------------------------------------------------------------

    async def join(self, conversation_id: str, *, mark_read: bool = True) -> None:
        self.conversations.add(conversation_id)
        if not self.connected:
            # Joined on the next connect.
            return
        await self.sio.emit(
            events.JOIN_CONVERSATION, {"conversationId": conversation_id}
        )
        if mark_read:
            await self.mark_read(conversation_id)

    async def leave(self, conversation_id: str) -> None:
        self.conversations.discard(conversation_id)
        await self.stop_typing(conversation_id)
        if self.connected:
            await self.sio.emit(
                events.LEAVE_CONVERSATION, {"conversationId": conversation_id}
            )

    async def mark_read(self, conversation_id: str) -> None:
        if self.connected:
            await self.sio.emit(
                events.MARK_MESSAGES_READ, {"conversationId": conversation_id}
            )

    # Typing
    # ------------------------------------------------------------------

    async def keystroke(self, conversation_id: str) -> None:
        started = self._typing.start(conversation_id, _SELF)
        now = self._now()
        last_sent = self._typing_sent_at.get(conversation_id)
        if started or last_sent is None or now - last_sent >= self._typing.timeout / 2:
            self._typing_sent_at[conversation_id] = now
            await self._send_typing(conversation_id, is_typing=True)

    async def stop_typing(self, conversation_id: str) -> None:
        self._typing_sent_at.pop(conversation_id, None)
        if self._typing.stop(conversation_id, _SELF):
            await self._send_typing(conversation_id, is_typing=False)

    def is_typing(self, conversation_id: str) -> bool:
        return self._typing.is_typing(conversation_id, _SELF)

    # Socket.IO handlers
    # ------------------------------------------------------------------

    async def _on_connect(self) -> None:
        self.connected = True
        # No `call()` here: acks cannot arrive while the connect handler runs.
        await self.sio.emit(
            events.AUTHENTICATE,
            {"token": self.token},
            callback=self._on_authenticated,
        )
        for conversation_id in sorted(self.conversations):
            await self.sio.emit(
                events.JOIN_CONVERSATION, {"conversationId": conversation_id}
            )

    async def _on_disconnect(self, reason: Any = None) -> None:
        self.connected = False
        self._reset_typing()
        logger.info("Realtime connection lost (%s)", reason)

    def _on_authenticated(self, ack: Any = None) -> None:
        if isinstance(ack, dict) and ack.get("ok"):
            self.user_id = ack.get("userId")
        else:
            logger.warning("Realtime authentication rejected: %s", ack)

    # Internals
    # ------------------------------------------------------------------

    async def _send_typing(self, conversation_id: str, *, is_typing: bool) -> None:
        if not self.connected:
            return
        await self.sio.emit(
            events.TYPING,
            {"conversationId": conversation_id, "isTyping": is_typing},
        )

    def _typing_expired(self, conversation_id: str, user_id: int, owner_sid) -> None:
        self._typing_sent_at.pop(conversation_id, None)
        task = asyncio.ensure_future(
            self._send_typing(conversation_id, is_typing=False)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _reset_typing(self) -> None:
        self._typing.clear()
        self._typing_sent_at.clear()

    def _now(self) -> float:
        if self._scheduler is not None:
            return self._scheduler.time()
        return asyncio.get_running_loop().time()
