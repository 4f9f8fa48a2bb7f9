from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
import logging
import os
from config import settings

logger = logging.getLogger(__name__)

_IS_SQLITE = settings.DATABASE_URL.startswith("sqlite")

# Database setup
_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "40"))
_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "10"))
_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "1800"))
_ECHO_POOL = os.getenv("DB_ECHO_POOL", "false").lower() == "true"

if _IS_SQLITE:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=_POOL_SIZE,
        max_overflow=_MAX_OVERFLOW,
        pool_timeout=_POOL_TIMEOUT,
        pool_recycle=_POOL_RECYCLE,
        pool_pre_ping=True,
        echo_pool='debug' if _ECHO_POOL else False,
    )

# Enable WAL and reasonable SQLite pragmas to improve concurrent access
if _IS_SQLITE:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA busy_timeout=5000;")
            cursor.execute("PRAGMA foreign_keys=ON;")
        except Exception as exc:
            # In-memory databases reject WAL; the remaining pragmas are optional
            logger.debug(f"SQLite pragma setup skipped: {exc}")
        finally:
            cursor.close()

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables():
    """Create all database tables"""
    from models import Base  # Import here to avoid circular dependency
    try:
        Base.metadata.create_all(bind=engine)
    except OperationalError as exc:
        message = str(exc).lower()
        # Ignore concurrent creation attempts when tables already exist (SQLite multi-worker startup)
        if "already exists" in message:
            logger.info(f"Ignoring table creation race condition: {exc}")
        else:
            raise


def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping_db(db) -> bool:
    """Return True when the database answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.warning(f"Database ping failed: {exc}")
        return False


async def connect_db():
    """Prepare the schema (for startup)"""
    create_tables()


async def disconnect_db():
    """Release pooled connections (for shutdown)"""
    engine.dispose()
