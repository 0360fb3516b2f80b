"""Room membership and fan-out for realtime connections.

The router owns three mappings for the lifetime of the server process:

- room id -> sids of the connections that joined it
- user id -> sids of the connections bound to that user
- sid -> :class:`Connection`

It knows nothing about Django or Socket.IO. Delivery goes through the ``emit``
coroutine given at construction (``AsyncServer.emit`` in production), always
addressed to a single sid so the router, not the transport, decides who is a
member of what.

A connection whose transport fails is forgotten and, when a ``disconnect``
coroutine was given (``AsyncServer.disconnect``), closed so the client notices
and reconnects. A payload that cannot be encoded is the caller's bug: it is
raised before anyone is dropped.

All bookkeeping runs on one event loop; handlers run to completion between
awaits, so there is no locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Awaitable
    from collections.abc import Callable

    Emitter = Callable[..., Awaitable[Any]]
    Disconnector = Callable[[str], Awaitable[Any]]

logger = logging.getLogger(__name__)


def room_for_conversation(conversation_id: str) -> str:
    return f"conversation_{conversation_id}"


@dataclass
class Connection:
    sid: str
    user_id: int | None = None
    rooms: set[str] = field(default_factory=set)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


class RoomRouter:
    def __init__(self, emit: Emitter, disconnect: Disconnector | None = None):
        self._emit = emit
        self._disconnect = disconnect
        self._connections: dict[str, Connection] = {}
        self._rooms: dict[str, set[str]] = {}
        self._users: dict[int, set[str]] = {}

    # Connections
    # ------------------------------------------------------------------

    def register(self, sid: str) -> Connection:
        conn = self._connections.get(sid)
        if conn is None:
            conn = Connection(sid=sid)
            self._connections[sid] = conn
        return conn

    def connection(self, sid: str) -> Connection | None:
        return self._connections.get(sid)

    def bind_user(self, sid: str, user_id: int) -> Connection:
        """Bind a connection to a user id, replacing any previous binding."""
        conn = self.register(sid)
        if conn.user_id is not None and conn.user_id != user_id:
            self._discard_user_sid(conn.user_id, sid)
        conn.user_id = int(user_id)
        self._users.setdefault(conn.user_id, set()).add(sid)
        return conn

    def drop(self, sid: str) -> Connection | None:
        """Forget a connection: every room membership and its user binding."""
        conn = self._connections.pop(sid, None)
        if conn is None:
            return None
        for room_id in list(conn.rooms):
            self._discard_member(room_id, sid)
        conn.rooms.clear()
        if conn.user_id is not None:
            self._discard_user_sid(conn.user_id, sid)
        return conn

    # Rooms
    # ------------------------------------------------------------------

    def join(self, room_id: str, sid: str) -> bool:
        """Add ``sid`` to ``room_id``. Returns False if nothing changed."""
        conn = self._connections.get(sid)
        if conn is None:
            return False
        members = self._rooms.setdefault(room_id, set())
        if sid in members:
            return False
        members.add(sid)
        conn.rooms.add(room_id)
        return True

    def leave(self, room_id: str, sid: str) -> bool:
        conn = self._connections.get(sid)
        if conn is None or room_id not in conn.rooms:
            return False
        conn.rooms.discard(room_id)
        self._discard_member(room_id, sid)
        return True

    def members(self, room_id: str) -> frozenset[str]:
        return frozenset(self._rooms.get(room_id, ()))

    def connections_for_user(self, user_id: int) -> frozenset[str]:
        return frozenset(self._users.get(int(user_id), ()))

    def stats(self) -> dict[str, int]:
        return {
            "connections": len(self._connections),
            "rooms": len(self._rooms),
            "users": len(self._users),
        }

    # Fan-out
    # ------------------------------------------------------------------

    async def broadcast(
        self,
        room_id: str,
        event: str,
        payload: Any,
        skip_sid: str | None = None,
    ) -> int:
        """Deliver ``event`` to the members of ``room_id`` at call time.

        Returns the number of connections the event was handed to.
        """
        targets = [sid for sid in self.members(room_id) if sid != skip_sid]
        return await self._deliver_all(targets, event, payload)

    async def notify_user(self, user_id: int, event: str, payload: Any) -> int:
        """Deliver ``event`` to every connection bound to ``user_id``."""
        targets = list(self.connections_for_user(user_id))
        return await self._deliver_all(targets, event, payload)

    async def _deliver_all(self, sids: list[str], event: str, payload: Any) -> int:
        delivered = 0
        for sid in sids:
            # A previous delivery in this loop may have dropped it.
            if sid in self._connections and await self._deliver(sid, event, payload):
                delivered += 1
        return delivered

    async def _deliver(self, sid: str, event: str, payload: Any) -> bool:
        try:
            await self._emit(event, payload, to=sid)
        except (TypeError, ValueError):
            # Unencodable payload, not a transport failure.
            raise
        except Exception:  # noqa: BLE001 - one broken transport must not stop fan-out
            logger.debug("Dropping connection %s after failed %s", sid, event)
            self.drop(sid)
            await self._close(sid)
            return False
        return True

    async def _close(self, sid: str) -> None:
        if self._disconnect is None:
            return
        try:
            await self._disconnect(sid)
        except Exception:  # noqa: BLE001 - the transport is already gone
            logger.debug("Could not close connection %s", sid, exc_info=True)

    # Internals
    # ------------------------------------------------------------------

    def _discard_member(self, room_id: str, sid: str) -> None:
        members = self._rooms.get(room_id)
        if members is None:
            return
        members.discard(sid)
        if not members:
            del self._rooms[room_id]

    def _discard_user_sid(self, user_id: int, sid: str) -> None:
        sids = self._users.get(user_id)
        if sids is None:
            return
        sids.discard(sid)
        if not sids:
            del self._users[user_id]
