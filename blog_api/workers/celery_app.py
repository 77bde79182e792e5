"""
Celery application for background jobs.

Start a worker with::

    celery -A blog_api.workers.celery_app worker --loglevel=info
"""

import logging

from celery import Celery

from blog_api.core.config import get_settings

logger = logging.getLogger(__name__)


def create_celery_app() -> Celery:
    settings = get_settings()
    app = Celery(
        "blog_api",
        broker=settings.celery_broker_url,
        include=["blog_api.workers.tasks"],
    )
    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        task_ignore_result=True,
        task_always_eager=settings.celery_task_always_eager,
        timezone="UTC",
        enable_utc=True,
    )
    broker = settings.celery_broker_url
    logger.debug("Celery app created with broker: %s", broker.split("@")[-1] if "@" in broker else broker)
    return app


celery_app = create_celery_app()
