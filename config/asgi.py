"""
ASGI config for the vibesync project.

It exposes the ASGI callable as a module-level variable named ``application``.
Socket.IO wraps the Django application: Engine.IO needs both HTTP long-polling
and WebSocket upgrades on ``settings.REALTIME_SOCKETIO_PATH``, everything else
falls through to Django.
"""

import os
import sys
from pathlib import Path

from django.core.asgi import get_asgi_application

# This allows easy placement of apps within the interior
# vibesync directory.
BASE_DIR = Path(__file__).resolve(strict=True).parent.parent
sys.path.append(str(BASE_DIR / "vibesync"))

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.local")

django_application = get_asgi_application()

from django.conf import settings  # noqa: E402
from socketio import ASGIApp  # noqa: E402

from vibesync.realtime.socketio import sio  # noqa: E402

application = ASGIApp(
    sio,
    other_asgi_app=django_application,
    socketio_path=settings.REALTIME_SOCKETIO_PATH,
)
