"""Celery worker for campaign letter batches."""

from celery import Celery

from app.config import get_settings

settings = get_settings()

celery_app = Celery(
    "stem_outreach",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks.letter_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Africa/Johannesburg",
    # Letter batches are slow and rate limited; keep them off any shared queue
    task_routes={"app.tasks.letter_tasks.*": {"queue": "letters"}},
    task_track_started=True,
    # 3s pacing per school plus up to 21s of backoff
    task_time_limit=3600,
    task_soft_time_limit=3300,
    worker_prefetch_multiplier=1,
    worker_concurrency=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    # Campaign pages poll task status by id
    result_extended=True,
    result_expires=24 * 3600,
    broker_connection_retry_on_startup=True,
)
