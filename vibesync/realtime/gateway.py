"""Socket.IO event handlers binding connections to users and rooms.

The gateway is the only place that talks to the Socket.IO server about
connection lifecycle. Membership and fan-out live in :class:`RoomRouter`.

Identity comes from a verified JWT access token, sent in the handshake or in a
later ``authenticate`` event. A connection without a user can stay open but
every other client event is rejected until it authenticates.

Client events are acknowledged with ``{"ok": True, ...}`` or
``{"ok": False, "error": <code>}``; clients that do not ask for an ack simply
never hear about rejections.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import TYPE_CHECKING
from typing import Any

from channels.db import database_sync_to_async
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.exceptions import TokenError
from socketio import exceptions as sio_exceptions

from vibesync.messaging.conversations import is_participant
from vibesync.messaging.services import mark_conversation_read
from vibesync.realtime import constants as events
from vibesync.realtime.auth import authenticate_access_token
from vibesync.realtime.auth import extract_token
from vibesync.realtime.auth import refusal_reason
from vibesync.realtime.exceptions import Forbidden
from vibesync.realtime.exceptions import InvalidPayload
from vibesync.realtime.exceptions import NotJoined
from vibesync.realtime.exceptions import RealtimeError
from vibesync.realtime.exceptions import Unauthenticated
from vibesync.realtime.payloads import build_unread_payload
from vibesync.realtime.payloads import call_signal_payload
from vibesync.realtime.payloads import messages_read_payload
from vibesync.realtime.payloads import typing_payload
from vibesync.realtime.router import room_for_conversation
from vibesync.realtime.serializers import AuthenticateEventSerializer
from vibesync.realtime.serializers import CallAnswerSerializer
from vibesync.realtime.serializers import CallOfferSerializer
from vibesync.realtime.serializers import CallSignalSerializer
from vibesync.realtime.serializers import ConversationEventSerializer
from vibesync.realtime.serializers import IceCandidateSerializer
from vibesync.realtime.serializers import TypingEventSerializer
from vibesync.realtime.typing_state import TYPING_TIMEOUT
from vibesync.realtime.typing_state import TypingTracker

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Callable

    from vibesync.realtime.router import Connection
    from vibesync.realtime.router import RoomRouter

logger = logging.getLogger(__name__)


@database_sync_to_async
def _mark_conversation_read(conversation_id: str, user_id: int) -> int:
    return mark_conversation_read(conversation_id, user_id)


_unread_counts = database_sync_to_async(build_unread_payload)


def _acknowledged(handler):
    @functools.wraps(handler)
    async def wrapper(self, sid: str, *args: Any) -> dict[str, Any]:
        try:
            result = await handler(self, sid, *args)
        except RealtimeError as exc:
            logger.debug("Rejected %s from %s: %s", handler.__name__, sid, exc.code)
            return exc.as_ack()
        return {"ok": True, **(result or {})}

    return wrapper


class ConnectionGateway:
    def __init__(  # noqa: PLR0913
        self,
        server: Any,
        router: RoomRouter,
        *,
        authenticate_token: Callable[[str], Any] | None = None,
        mark_read: Callable[[str, int], Any] | None = None,
        unread_counts: Callable[[int], Any] | None = None,
        typing_timeout: float = TYPING_TIMEOUT,
        scheduler: Any | None = None,
        trust_client_user_id: bool = False,
    ):
        self.server = server
        self.router = router
        self.trust_client_user_id = trust_client_user_id
        self._authenticate_token = authenticate_token or authenticate_access_token
        self._mark_read = mark_read or _mark_conversation_read
        self._unread_counts = unread_counts or _unread_counts
        self.typing = TypingTracker(
            self._typing_expired,
            timeout=typing_timeout,
            scheduler=scheduler,
        )
        self._pending: set[asyncio.Future] = set()

    def handlers(self) -> dict[str, Callable[..., Any]]:
        return {
            "connect": self.on_connect,
            "disconnect": self.on_disconnect,
            events.AUTHENTICATE: self.on_authenticate,
            events.JOIN_CONVERSATION: self.on_join_conversation,
            events.LEAVE_CONVERSATION: self.on_leave_conversation,
            events.TYPING: self.on_typing,
            events.MARK_MESSAGES_READ: self.on_mark_messages_read,
            events.CALL_OFFER: self.on_call_offer,
            events.CALL_ANSWER: self.on_call_answer,
            events.ICE_CANDIDATE: self.on_ice_candidate,
            events.CALL_END: self.on_call_end,
        }

    def register(self) -> None:
        for event, handler in self.handlers().items():
            self.server.on(event, handler)

    # Lifecycle
    # ------------------------------------------------------------------

    async def on_connect(self, sid: str, environ: dict, auth: Any | None = None):
        # `auth` may be omitted depending on the client/transport.
        token = extract_token(environ, auth)
        user_id = None
        if token:
            try:
                user_id = await self._authenticate_token(token)
            except (TokenError, AuthenticationFailed) as exc:
                reason = refusal_reason(exc)
                raise sio_exceptions.ConnectionRefusedError(reason) from exc
            except Exception as exc:
                logger.exception("Socket.IO connect error")
                reason = "server_error"
                raise sio_exceptions.ConnectionRefusedError(reason) from exc

        self.router.register(sid)
        if user_id is not None:
            self.router.bind_user(sid, user_id)
        logger.debug("Connected %s (user=%s)", sid, user_id)

    async def on_disconnect(self, sid: str, reason: Any = None):
        # The router may already have dropped `sid` after a failed delivery.
        self.router.drop(sid)
        for conversation_id, user_id in self.typing.cancel_owned_by(sid):
            await self.router.broadcast(
                room_for_conversation(conversation_id),
                events.USER_TYPING,
                typing_payload(conversation_id, user_id, is_typing=False),
            )
        logger.debug("Disconnected %s (%s)", sid, reason)

    # Client events
    # ------------------------------------------------------------------

    @_acknowledged
    async def on_authenticate(self, sid: str, data: Any = None):
        conn = self.router.register(sid)
        if isinstance(data, (int, str)) and not isinstance(data, bool):
            data = {"userId": data}
        attrs = self._validate(AuthenticateEventSerializer, data)

        if "token" in attrs:
            try:
                user_id = await self._authenticate_token(attrs["token"])
            except (TokenError, AuthenticationFailed) as exc:
                raise Unauthenticated(refusal_reason(exc)) from exc
            if conn.is_authenticated and conn.user_id != user_id:
                msg = "Connection is bound to another user."
                raise Forbidden(msg)
        else:
            user_id = attrs["userId"]
            if conn.is_authenticated:
                if conn.user_id != user_id:
                    msg = "Connection is bound to another user."
                    raise Forbidden(msg)
            elif not self.trust_client_user_id:
                msg = "A verified token is required."
                raise Unauthenticated(msg)

        self.router.bind_user(sid, user_id)
        return {"userId": user_id}

    @_acknowledged
    async def on_join_conversation(self, sid: str, conversation_id=None, user_id=None):
        conn = self._require_user(sid)
        attrs = self._validate(
            ConversationEventSerializer,
            self._conversation_args(conversation_id, user_id),
        )
        self._check_claimed_user(conn, attrs)
        conversation_id = attrs["conversationId"]
        if not is_participant(conversation_id, conn.user_id):
            msg = "Not a participant of this conversation."
            raise Forbidden(msg)
        self.router.join(room_for_conversation(conversation_id), sid)
        return {"conversationId": conversation_id}

    @_acknowledged
    async def on_leave_conversation(self, sid: str, conversation_id=None, user_id=None):
        conn = self._require_user(sid)
        attrs = self._validate(
            ConversationEventSerializer,
            self._conversation_args(conversation_id, user_id),
        )
        self._check_claimed_user(conn, attrs)
        conversation_id = attrs["conversationId"]
        room_id = room_for_conversation(conversation_id)
        if self.router.leave(room_id, sid) and self.typing.stop(
            conversation_id, conn.user_id
        ):
            await self.router.broadcast(
                room_id,
                events.USER_TYPING,
                typing_payload(conversation_id, conn.user_id, is_typing=False),
            )
        return {"conversationId": conversation_id}

    @_acknowledged
    async def on_typing(self, sid: str, data: Any = None):
        conn = self._require_user(sid)
        attrs = self._validate(TypingEventSerializer, data)
        self._check_claimed_user(conn, attrs)
        conversation_id = attrs["conversationId"]
        room_id = room_for_conversation(conversation_id)
        if room_id not in conn.rooms:
            raise NotJoined(conversation_id)

        is_typing = attrs["isTyping"]
        if is_typing:
            self.typing.start(conversation_id, conn.user_id, sid)
        else:
            self.typing.stop(conversation_id, conn.user_id)
        await self.router.broadcast(
            room_id,
            events.USER_TYPING,
            typing_payload(conversation_id, conn.user_id, is_typing=is_typing),
            skip_sid=sid,
        )
        return {}

    @_acknowledged
    async def on_mark_messages_read(self, sid: str, data: Any = None):
        conn = self._require_user(sid)
        attrs = self._validate(ConversationEventSerializer, data)
        self._check_claimed_user(conn, attrs)
        conversation_id = attrs["conversationId"]
        if not is_participant(conversation_id, conn.user_id):
            msg = "Not a participant of this conversation."
            raise Forbidden(msg)
        updated = await self._mark_read(conversation_id, conn.user_id)
        await self.router.broadcast(
            room_for_conversation(conversation_id),
            events.MESSAGES_READ,
            messages_read_payload(conversation_id, conn.user_id),
        )
        await self.router.notify_user(
            conn.user_id,
            events.UNREAD_COUNT,
            await self._unread_counts(conn.user_id),
        )
        return {"updated": updated}

    # Call signaling
    # ------------------------------------------------------------------

    @_acknowledged
    async def on_call_offer(self, sid: str, data: Any = None):
        return await self._relay_call_signal(
            sid, events.CALL_OFFER, CallOfferSerializer, data, "offer"
        )

    @_acknowledged
    async def on_call_answer(self, sid: str, data: Any = None):
        return await self._relay_call_signal(
            sid, events.CALL_ANSWER, CallAnswerSerializer, data, "answer"
        )

    @_acknowledged
    async def on_ice_candidate(self, sid: str, data: Any = None):
        return await self._relay_call_signal(
            sid, events.ICE_CANDIDATE, IceCandidateSerializer, data, "candidate"
        )

    @_acknowledged
    async def on_call_end(self, sid: str, data: Any = None):
        return await self._relay_call_signal(
            sid, events.CALL_END, CallSignalSerializer, data
        )

    async def _relay_call_signal(
        self,
        sid: str,
        event: str,
        serializer_class,
        data: Any,
        *fields: str,
    ) -> dict[str, Any]:
        """Forward a signaling message to every tab of the callee.

        The sender is taken from the connection, never from the payload.
        """
        conn = self._require_user(sid)
        attrs = self._validate(serializer_class, data)
        recipient_id = attrs["to"]
        if recipient_id == conn.user_id:
            msg = "Cannot call yourself."
            raise Forbidden(msg)
        payload = call_signal_payload(
            conn.user_id,
            attrs["callId"],
            **{name: attrs[name] for name in fields},
        )
        delivered = await self.router.notify_user(recipient_id, event, payload)
        return {"delivered": delivered}

    # Helpers
    # ------------------------------------------------------------------

    def _require_user(self, sid: str) -> Connection:
        conn = self.router.connection(sid)
        if conn is None or not conn.is_authenticated:
            raise Unauthenticated
        return conn

    @staticmethod
    def _validate(serializer_class, data: Any) -> dict[str, Any]:
        serializer = serializer_class(data=data)
        if not serializer.is_valid():
            raise InvalidPayload(serializer.errors)
        return serializer.validated_data

    @staticmethod
    def _conversation_args(conversation_id: Any, user_id: Any) -> Any:
        # Accept both `emit(event, conversationId, userId)` and a single dict.
        if isinstance(conversation_id, dict):
            return conversation_id
        data = {"conversationId": conversation_id}
        if user_id is not None:
            data["userId"] = user_id
        return data

    @staticmethod
    def _check_claimed_user(conn: Connection, attrs: dict[str, Any]) -> None:
        claimed = attrs.get("userId")
        if claimed is not None and claimed != conn.user_id:
            msg = "userId does not match the authenticated user."
            raise Forbidden(msg)

    def _typing_expired(
        self,
        conversation_id: str,
        user_id: int,
        owner_sid: str | None,
    ) -> None:
        self._spawn(
            self.router.broadcast(
                room_for_conversation(conversation_id),
                events.USER_TYPING,
                typing_payload(conversation_id, user_id, is_typing=False),
                skip_sid=owner_sid,
            )
        )

    def _spawn(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
