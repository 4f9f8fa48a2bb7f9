from __future__ import annotations

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import File, ROOT_PARENT_ID


class MetadataStore:
    """CRUD over ``File`` rows. Each call is a single atomic store operation."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def insert(
        self,
        *,
        user_id: int,
        name: str,
        type: str,
        parent_id: int = ROOT_PARENT_ID,
        is_public: bool = False,
        local_path: Optional[str] = None,
    ) -> File:
        record = File(
            user_id=user_id,
            name=name,
            type=type,
            parent_id=parent_id,
            is_public=is_public,
            local_path=local_path,
        )
        self.db.add(record)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def get(self, file_id: int) -> Optional[File]:
        return self.db.get(File, file_id)

    def find_one(self, **criteria) -> Optional[File]:
        return self.db.query(File).filter_by(**criteria).first()

    def list_children(
        self,
        parent_id: int,
        *,
        offset: int,
        limit: int,
        visible_to: Optional[int] = None,
    ) -> List[File]:
        q = self.db.query(File).filter(File.parent_id == parent_id)
        if visible_to is not None:
            q = q.filter(or_(File.user_id == visible_to, File.is_public.is_(True)))
        return q.order_by(File.id.asc()).offset(offset).limit(limit).all()

    def set_public(self, record: File, is_public: bool) -> File:
        record.is_public = is_public
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def count(self) -> int:
        return self.db.query(File).count()
