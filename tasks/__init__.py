"""
Task Registry for Files API Celery Tasks
"""

from .thumbnails import (
    generate_thumbnails,
)

__all__ = [
    'generate_thumbnails',
]
