import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("villastay")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Cancel pending requests the host never answered - every 15 minutes
    "expire-pending-reservations": {
        "task": "bookings.expire_pending_reservations",
        "schedule": crontab(minute="*/15"),
        "options": {"expires": 600},
    },
}
