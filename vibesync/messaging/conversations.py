"""Conversation identifiers.

A conversation is the direct-message thread between two users. Its id is
derived from the two user ids, smaller first, so both sides compute the same
value without touching the database: users 7 and 3 talk in ``"3-7"``.
"""

from __future__ import annotations

import re

_CONVERSATION_ID_RE = re.compile(r"^(\d+)-(\d+)$")

CONVERSATION_ID_PATTERN = r"\d+-\d+"


class InvalidConversationId(ValueError):
    pass


def conversation_id_for(user_a: int, user_b: int) -> str:
    low, high = sorted((int(user_a), int(user_b)))
    if low == high:
        msg = "A conversation needs two distinct users."
        raise InvalidConversationId(msg)
    return f"{low}-{high}"


def participants(conversation_id: str) -> tuple[int, int]:
    match = _CONVERSATION_ID_RE.match(str(conversation_id).strip())
    if match is None:
        msg = f"Malformed conversation id: {conversation_id!r}"
        raise InvalidConversationId(msg)
    low, high = int(match.group(1)), int(match.group(2))
    if low >= high:
        msg = f"Non-canonical conversation id: {conversation_id!r}"
        raise InvalidConversationId(msg)
    return low, high


def is_participant(conversation_id: str, user_id: int) -> bool:
    try:
        return int(user_id) in participants(conversation_id)
    except InvalidConversationId:
        return False


def other_participant(conversation_id: str, user_id: int) -> int:
    low, high = participants(conversation_id)
    if int(user_id) == low:
        return high
    if int(user_id) == high:
        return low
    msg = f"User {user_id} is not part of conversation {conversation_id}"
    raise InvalidConversationId(msg)
