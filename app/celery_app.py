from celery import Celery

from .core.config import get_settings

settings = get_settings()

# Create Celery instance
celery_app = Celery(
    "hireme",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["app.tasks"]
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    result_expires=3600,  # 1 hour
    task_routes={
        "app.tasks.dispatch_notifications": {"queue": "emails"},
    },
    beat_schedule={
        "dispatch-notifications-every-minute": {
            "task": "app.tasks.dispatch_notifications",
            "schedule": 60.0,
        },
    },
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    worker_max_tasks_per_child=1000,
)
