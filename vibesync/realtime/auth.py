"""Identity for realtime connections.

The web client sends its JWT access token either as ``query.token`` in the
Socket.IO handshake or as ``auth: { token }``; the token is verified with
simplejwt, the same way the REST API authenticates requests.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError

REASON_UNAUTHORIZED = "unauthorized"
REASON_EXPIRED = "jwt_expired"


def extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract the JWT from Socket.IO environ/auth.

    python-socketio passes different shapes depending on async mode:
    - ASGI: ``environ`` is the ASGI scope with ``query_string: bytes``
    - WSGI: ``environ`` is a WSGI environ with ``QUERY_STRING: str``
    - Some servers nest the scope under ``asgi.scope``
    """
    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token

    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    return None


def user_id_for_access_token(token: str) -> int:
    """Return the id of the active user owning ``token``.

    Raises ``TokenError`` for invalid/expired tokens and ``AuthenticationFailed``
    when the user is missing or inactive.
    """
    jwt_auth = JWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    user = jwt_auth.get_user(validated)
    return int(user.id)


authenticate_access_token = database_sync_to_async(user_id_for_access_token)


def refusal_reason(exc: Exception) -> str:
    """Map an authentication failure to the reason string the client expects."""
    # The web client refreshes its token when it sees exactly "jwt_expired".
    # simplejwt wraps TokenError in InvalidToken, keeping the message in detail.
    if isinstance(exc, (TokenError, AuthenticationFailed)):
        message = str(getattr(exc, "detail", exc))
        if "is expired" in message.lower():
            return REASON_EXPIRED
    return REASON_UNAUTHORIZED
