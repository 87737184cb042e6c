import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("reservations")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Removes bookings of deleted resources and refreshes today's counters
    "reconcile-all-organizations": {
        "task": "bookings.reconcile_all_organizations",
        "schedule": float(os.environ.get("RECONCILE_INTERVAL_SECONDS", 900)),
        "options": {"expires": 600},
    },
}
