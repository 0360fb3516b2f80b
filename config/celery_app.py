import os

from celery import Celery
from celery.signals import setup_logging

# Deployed workers run with the default (local) settings unless told otherwise.
# Tests set DJANGO_SETTINGS_MODULE explicitly (pytest uses config.settings.test
# via --ds), so setdefault won't override them.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.local")

app = Celery("vibesync")

# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")


@setup_logging.connect
def config_loggers(*args, **kwargs):
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


# Load task modules from all registered Django app configs.
app.autodiscover_tasks()
