from typing import Any, List, Optional

from models import File, MAX_ROW_ID
from storage.metadata import MetadataStore

PAGE_SIZE = 20


def coerce_page(raw: Any) -> int:
    """Lenient page parsing: anything that is not a non-negative integer becomes 0."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 0
    return page if page >= 0 else 0


def list_page(
    metadata: MetadataStore,
    parent_id: int,
    page: Any = 0,
    requester_id: Optional[int] = None,
) -> List[File]:
    """Files directly under ``parent_id`` (root sentinel matched literally), one page at a time.

    Ordering follows insertion; concurrent inserts may shift items between pages.
    """
    page = coerce_page(page)
    offset = page * PAGE_SIZE
    if offset > MAX_ROW_ID:
        # Past any row the table can hold
        return []
    return metadata.list_children(
        parent_id,
        offset=offset,
        limit=PAGE_SIZE,
        visible_to=requester_id,
    )
