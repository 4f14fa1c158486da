from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartcv.core.config import settings
from smartcv.core.errors import register_exception_handlers
from smartcv.db.base import Base
from smartcv.db.session import engine

# Import all models so SQLAlchemy can discover them for table creation
from smartcv.models import User, Cv  # noqa: F401

# Import API router
from smartcv.api.api import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup."""
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Upload a CV, get it back as structured data",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# CORS Middleware - allowlist from env (comma-separated)
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in settings.BACKEND_CORS_ORIGINS.split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {"message": f"{settings.APP_NAME} API"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint (no authentication)."""
    return {
        "status": "ok",
        "message": f"{settings.APP_NAME} API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(api_router)
