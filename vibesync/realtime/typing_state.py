"""Typing indicator state per (room, user).

``idle -> typing -> idle``. A ``typing`` state lasts until an explicit stop or
until ``timeout`` seconds pass without a refresh, at which point ``on_expire``
is called with ``(room_id, user_id, owner_sid)``.

The timer source only needs ``call_later(delay, callback, *args)`` returning a
handle with ``cancel()``; by default that is the running asyncio loop.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Callable

TYPING_TIMEOUT = 3.0


@dataclass
class _TypingEntry:
    owner_sid: str | None
    handle: Any


class TypingTracker:
    def __init__(
        self,
        on_expire: Callable[[str, int, str | None], None],
        *,
        timeout: float = TYPING_TIMEOUT,
        scheduler: Any | None = None,
    ):
        self.timeout = timeout
        self._on_expire = on_expire
        self._scheduler = scheduler
        self._entries: dict[tuple[str, int], _TypingEntry] = {}

    def start(self, room_id: str, user_id: int, owner_sid: str | None = None) -> bool:
        """Enter or refresh ``typing``. Returns True on the idle -> typing edge."""
        key = (room_id, user_id)
        entry = self._entries.get(key)
        if entry is not None:
            entry.handle.cancel()
        handle = self._get_scheduler().call_later(self.timeout, self._expire, key)
        self._entries[key] = _TypingEntry(owner_sid=owner_sid, handle=handle)
        return entry is None

    def stop(self, room_id: str, user_id: int) -> bool:
        """Return to ``idle``. Returns True if the user was typing."""
        entry = self._entries.pop((room_id, user_id), None)
        if entry is None:
            return False
        entry.handle.cancel()
        return True

    def is_typing(self, room_id: str, user_id: int) -> bool:
        return (room_id, user_id) in self._entries

    def cancel_owned_by(self, sid: str) -> list[tuple[str, int]]:
        """Cancel every timer started from ``sid`` without firing ``on_expire``."""
        keys = [k for k, e in self._entries.items() if e.owner_sid == sid]
        for key in keys:
            self._entries.pop(key).handle.cancel()
        return keys

    def clear(self) -> None:
        for entry in self._entries.values():
            entry.handle.cancel()
        self._entries.clear()

    def _expire(self, key: tuple[str, int]) -> None:
        entry = self._entries.pop(key, None)
        if entry is None:
            return
        room_id, user_id = key
        self._on_expire(room_id, user_id, entry.owner_sid)

    def _get_scheduler(self):
        if self._scheduler is not None:
            return self._scheduler
        return asyncio.get_running_loop()
