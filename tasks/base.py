"""
Base task for thumbnail rendering

Only storage errors are retried; a malformed message or a file that no
longer exists will not get better on a second attempt.
"""

from celery import Task
from typing import Any, Optional
import logging
from database import SessionLocal
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# Raised by render_thumbnails for messages that can never succeed
PERMANENT_ERRORS = (ValueError, LookupError)


class ThumbnailTask(Task):
    """Celery task owning one database session per run."""

    autoretry_for = (OSError,)
    max_retries = 3
    default_retry_delay = 30
    time_limit = 300

    _db_session: Optional[Session] = None

    @property
    def db(self) -> Session:
        if self._db_session is None:
            self._db_session = SessionLocal()
        return self._db_session

    def on_retry(self, exc: Exception, task_id: str, args: tuple, kwargs: dict, einfo) -> None:
        logger.warning(f"🔄 Storage error on {task_id}, retrying: {exc}")

    def on_failure(self, exc: Exception, task_id: str, args: tuple, kwargs: dict, einfo) -> None:
        if isinstance(exc, PERMANENT_ERRORS):
            logger.warning(f"Dropping thumbnail message {args}: {exc}")
        else:
            logger.error(f"❌ Thumbnails failed for {task_id}: {exc}")

    def after_return(self, status: str, retval: Any, task_id: str, args: tuple, kwargs: dict, einfo) -> None:
        """Runs after every attempt, retried or not."""
        if self._db_session is None:
            return
        try:
            self._db_session.close()
        except Exception as e:
            logger.error(f"Error closing database session: {e}")
        finally:
            self._db_session = None
