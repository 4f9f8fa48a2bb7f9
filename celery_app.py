"""
Celery Application for Files API

Task queue for:
- Thumbnail rendering of uploaded images
"""

from celery import Celery
import logging
from config import settings

logger = logging.getLogger(__name__)

# Celery Application Singleton
app = Celery(
    'files_api',
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        'tasks.thumbnails',
    ]
)

# Celery Configuration
app.conf.update(
    # Task Settings
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,

    # Worker Settings
    worker_prefetch_multiplier=4,
    worker_max_tasks_per_child=200,  # Pillow buffers; recycle workers periodically

    # Retry Settings
    task_acks_late=True,  # Acknowledge task AFTER completion (ensures retry on crash)
    task_reject_on_worker_lost=True,  # Re-queue task if worker dies

    # Result Backend
    result_expires=3600,  # Keep results for 1 hour

    # Monitoring
    task_track_started=True,
    task_send_sent_event=True,
)

# Task Routes
app.conf.task_routes = {
    'tasks.thumbnails.generate_thumbnails': {'queue': settings.THUMBNAIL_QUEUE},
}


def ping_broker() -> bool:
    """True when the Redis broker accepts a connection."""
    try:
        with app.connection_for_write() as conn:
            conn.ensure_connection(max_retries=1, interval_start=0)
        return True
    except Exception as e:
        logger.warning(f"Broker unreachable: {e}")
        return False


if __name__ == '__main__':
    app.start()
