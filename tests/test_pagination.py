"""Tests for parent-scoped pagination and the visibility gate."""

import pytest

from models import File
from storage.access import can_read, is_owner
from storage.metadata import MetadataStore
from storage.pagination import PAGE_SIZE, coerce_page, list_page


class TestCoercePage:
  @pytest.mark.parametrize("raw,expected", [(0, 0), (3, 3), ("2", 2), ("7", 7)])
  def test_valid(self, raw, expected):
    assert coerce_page(raw) == expected

  @pytest.mark.parametrize("raw", [None, "", "abc", "-1", -5, "1.5"])
  def test_lenient_fallback(self, raw):
    assert coerce_page(raw) == 0


class TestListPage:
  @pytest.fixture
  def owner(self, make_user):
    user, _ = make_user("owner@example.com")
    return user

  @pytest.fixture
  def metadata(self, db_session):
    return MetadataStore(db_session)

  def _fill(self, metadata, owner, parent_id, count, **kwargs):
    return [
      metadata.insert(user_id=owner.id, name=f"f{i}", type="folder", parent_id=parent_id, **kwargs)
      for i in range(count)
    ]

  def test_pages_of_twenty(self, metadata, owner):
    folder = metadata.insert(user_id=owner.id, name="docs", type="folder")
    created = self._fill(metadata, owner, folder.id, 25)

    page0 = list_page(metadata, folder.id, 0, requester_id=owner.id)
    page1 = list_page(metadata, folder.id, 1, requester_id=owner.id)
    page2 = list_page(metadata, folder.id, 2, requester_id=owner.id)

    assert PAGE_SIZE == 20
    assert len(page0) == 20
    assert len(page1) == 5
    assert page2 == []
    assert [f.id for f in page0 + page1] == [f.id for f in created]

  def test_root_sentinel_is_literal(self, metadata, owner):
    folder = metadata.insert(user_id=owner.id, name="docs", type="folder")
    self._fill(metadata, owner, folder.id, 3)

    root_files = list_page(metadata, 0, 0, requester_id=owner.id)

    assert [f.id for f in root_files] == [folder.id]
    assert all(f.parent_id == 0 for f in root_files)

  def test_invalid_page_means_first_page(self, metadata, owner):
    self._fill(metadata, owner, 0, 2)

    assert len(list_page(metadata, 0, "nope", requester_id=owner.id)) == 2

  def test_page_past_any_row(self, metadata, owner):
    self._fill(metadata, owner, 0, 2)

    assert list_page(metadata, 0, 10**20, requester_id=owner.id) == []

  def test_hides_private_files_of_others(self, metadata, owner, make_user):
    other, _ = make_user("other@example.com")
    self._fill(metadata, owner, 0, 2)
    public = metadata.insert(user_id=owner.id, name="pub", type="folder", is_public=True)

    seen = list_page(metadata, 0, 0, requester_id=other.id)

    assert [f.id for f in seen] == [public.id]


class TestVisibility:
  def test_owner_reads_private(self):
    assert can_read(File(user_id=1, is_public=False), 1)

  def test_stranger_blocked_from_private(self):
    assert not can_read(File(user_id=1, is_public=False), 2)

  def test_anonymous_blocked_from_private(self):
    assert not can_read(File(user_id=1, is_public=False), None)

  @pytest.mark.parametrize("requester", [None, 1, 2])
  def test_public_readable_by_anyone(self, requester):
    assert can_read(File(user_id=1, is_public=True), requester)

  def test_ownership(self):
    record = File(user_id=1, is_public=True)

    assert is_owner(record, 1)
    assert not is_owner(record, 2)
    assert not is_owner(record, None)
