import os
import tempfile

# Keep the module-level engine and blob root away from system paths
_TMP_DIR = tempfile.mkdtemp(prefix="files-api-tests-")
os.environ.setdefault("STORAGE_DATA_DIR", _TMP_DIR)
os.environ.setdefault("STORAGE_DATABASE_URL", f"sqlite:///{_TMP_DIR}/files.db")
os.environ.setdefault("FOLDER_PATH", os.path.join(_TMP_DIR, "files"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth import SessionResolver
from celery_app import ping_broker
from database import get_db
from main import app
from models import Base, User
from storage.blob_store import BlobStore
from storage.service import get_blob_store, get_thumbnail_queue
from tests.fakes import RecordingQueue


@pytest.fixture
def db_session():
  """Fresh in-memory database per test."""
  engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
  )
  Base.metadata.create_all(bind=engine)
  TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
  session = TestingSessionLocal()
  yield session
  session.close()
  engine.dispose()


@pytest.fixture
def blob_store(tmp_path):
  return BlobStore(tmp_path / "files")


@pytest.fixture
def queue():
  return RecordingQueue()


@pytest.fixture
def client(db_session, blob_store, queue):
  """Test client wired to the in-memory database, temp blob root and recording queue.

  The broker ping is stubbed to report Redis as reachable.
  """

  def override_get_db():
    yield db_session

  app.dependency_overrides[get_db] = override_get_db
  app.dependency_overrides[get_blob_store] = lambda: blob_store
  app.dependency_overrides[get_thumbnail_queue] = lambda: queue
  app.dependency_overrides[ping_broker] = lambda: True

  yield TestClient(app)

  app.dependency_overrides = {}


@pytest.fixture
def make_user(db_session):
  """Create a user with an open session; returns (user, auth headers)."""

  def _make(email):
    user = User(email=email, password_hash="unused")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    token = SessionResolver(db_session).open(user.id)
    return user, {"X-Token": token}

  return _make
