from celery import Celery

from brandscope.core.config import settings
from brandscope.core.sentry import init_sentry

celery_app = Celery(
    "brandscope",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
    task_default_queue=settings.analysis_queue,
)

init_sentry(component="worker")

# Auto-discover tasks from tasks modules
celery_app.autodiscover_tasks(["brandscope.tasks"])

# Explicit include as fallback for autodiscover (needed for CLI worker startup)
celery_app.conf.include = [
    "brandscope.tasks.analysis_tasks",
]
