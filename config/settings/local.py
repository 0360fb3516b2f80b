from .base import *  # noqa: F403
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
DEBUG = True
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="8XWmMsc4Vv1Quh9ht5u2fCZ3bYRxYfYcPJ4q9F3MpWnS2E0tLkAoD7Gk6HbNjR1e",
)
ALLOWED_HOSTS = ["localhost", "0.0.0.0", "127.0.0.1"]  # noqa: S104

# EMAIL
# ------------------------------------------------------------------------------
EMAIL_BACKEND = env(
    "DJANGO_EMAIL_BACKEND",
    default="django.core.mail.backends.console.EmailBackend",
)

# CELERY
# ------------------------------------------------------------------------------
CELERY_TASK_EAGER_PROPAGATES = True

# REALTIME
# ------------------------------------------------------------------------------
REALTIME_LOG_LEVEL = "DEBUG"
LOGGING["loggers"]["vibesync.realtime"]["level"] = REALTIME_LOG_LEVEL  # noqa: F405
