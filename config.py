import os
from pathlib import Path
from dotenv import load_dotenv
from typing import List

# Load .env robustly (try project root and CWD)
_ROOT = Path(__file__).resolve().parent
_candidates = [
    _ROOT / ".env",
    Path.cwd() / ".env",
]
for p in _candidates:
    try:
        if p.exists():
            load_dotenv(p, override=False)
    except OSError:
        pass

_DATA_DIR_ENV = os.getenv("STORAGE_DATA_DIR")
if _DATA_DIR_ENV:
    _DATA_DIR = Path(_DATA_DIR_ENV).expanduser()
else:
    _DATA_DIR = Path("/var/lib/files-api")

_DATABASE_URL_ENV = os.getenv("STORAGE_DATABASE_URL") or os.getenv("DATABASE_URL")
if not _DATABASE_URL_ENV:
    try:
        _DATA_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    default_sqlite_path = _DATA_DIR / "files.db"
    _DATABASE_URL_ENV = f"sqlite:///{default_sqlite_path}"

_REDIS_URL_ENV = os.getenv("REDIS_URL", "redis://localhost:6379").rstrip("/")


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    # Database
    DATABASE_URL: str = _DATABASE_URL_ENV
    DATA_DIR: str = str(_DATA_DIR)

    # Blob storage root; variants are written next to the originals
    FOLDER_PATH: str = os.getenv("FOLDER_PATH", "/tmp/files_manager")
    MAX_FILE_SIZE: int = int(os.getenv("STORAGE_MAX_FILE_SIZE", os.getenv("MAX_FILE_SIZE", "524288000")))  # 500MB default

    # Thumbnail queue (Celery on Redis)
    REDIS_URL: str = _REDIS_URL_ENV
    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", f"{_REDIS_URL_ENV}/0")
    CELERY_RESULT_BACKEND: str = os.getenv("CELERY_RESULT_BACKEND", f"{_REDIS_URL_ENV}/1")
    THUMBNAIL_QUEUE: str = os.getenv("THUMBNAIL_QUEUE", "fileQueue")

    # Sessions
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "86400"))  # 24h

    # HTTP
    CORS_ORIGINS: List[str] = _split_csv(os.getenv("CORS_ORIGINS", "*"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
