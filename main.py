"""
Files API - Multi-tenant File Storage Service

Handles:
- Uploads of folders, files and images (content stored on local disk)
- Hierarchical, paginated listings
- Public/private visibility per file
- Content delivery, including image thumbnails rendered by the Celery worker
- User signup and session tokens
"""
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storage import routes as storage_routes
from accounts import routes as account_routes
from database import connect_db, disconnect_db, get_db, ping_db
from models import User
from storage.metadata import MetadataStore
from config import settings
from celery_app import ping_broker

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Files API",
    version="1.0.0",
    description="Multi-tenant file storage with public sharing and image thumbnails"
)

# Database lifecycle events
@app.on_event("startup")
async def startup():
    await connect_db()

@app.on_event("shutdown")
async def shutdown():
    await disconnect_db()


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(storage_routes.router, prefix="/files", tags=["Files"])
app.include_router(account_routes.router, tags=["Accounts"])

@app.get("/")
def root():
    return {
        "service": "files-api",
        "version": "1.0.0",
        "description": "Multi-tenant file storage service"
    }

@app.get("/health")
def health(db: Session = Depends(get_db), redis: bool = Depends(ping_broker)):
    db_alive = ping_db(db)
    status = "healthy" if db_alive and redis else "degraded"
    return {"status": status, "service": "files-api", "db": db_alive, "redis": redis}

@app.get("/stats")
def stats(db: Session = Depends(get_db)):
    return {"users": db.query(User).count(), "files": MetadataStore(db).count()}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
