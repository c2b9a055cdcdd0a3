from celery import Celery

from dms_api.core.config import settings

celery_app = Celery(
    "dms_api",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["dms_api.workers.tasks"],
)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    result_expires=settings.celery_result_expires_seconds,
    beat_schedule={
        "expire-signature-requests": {
            "task": "dms_api.workers.tasks.process_expired_signature_requests",
            "schedule": float(settings.expiry_sweep_interval_seconds),
        },
        "send-signature-reminders": {
            "task": "dms_api.workers.tasks.send_signature_reminders",
            "schedule": float(settings.reminder_sweep_interval_seconds),
        },
    },
)
