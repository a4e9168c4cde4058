"""Celery application configuration."""

from celery import Celery

from traveltrek.config import settings

# Create Celery app
celery_app = Celery(
    "traveltrek",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["traveltrek.tasks.notifications"],
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=120,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_always_eager=settings.celery_task_always_eager,
    task_ignore_result=True,
)
