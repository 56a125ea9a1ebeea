from celery import Celery

from solarcrm.core.config import settings

celery_app = Celery(
    "solarcrm",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["solarcrm.worker.tasks"],
)

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_ignore_result=True,
    timezone=settings.TZ,
)

celery_app.conf.task_routes = {
    "notifications.*": {"queue": "notifications"},
}
