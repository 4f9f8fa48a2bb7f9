from typing import Optional

from models import File


def can_read(file: File, requester_id: Optional[int]) -> bool:
    """Owners always read their files; anyone (even anonymous) reads public ones."""
    if file.is_public:
        return True
    return requester_id is not None and requester_id == file.user_id


def is_owner(file: File, requester_id: Optional[int]) -> bool:
    return requester_id is not None and requester_id == file.user_id
