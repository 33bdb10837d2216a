"""FastAPI application entry point.

Configures CORS, structured logging, lifespan events, and router
registration.  Dashboard and candidate-management routers require an
admin bearer token; landing routes are public.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.auth.verify import auth_dependency
from app.core.config import settings
from app.core.logging import setup_logging
from app.routers import auth, candidates, dashboard, health, landing

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup and shutdown hooks."""
    setup_logging()
    logger.info("Application starting up")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Candidate Registration API",
    description="Applicant registration, self-edit window, and admin dashboard backend",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    # Re-edit tickets are cookies; browsers refuse credentials with "*"
    allow_credentials=_allowed_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
_admin = [Depends(auth_dependency)]

app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(landing.router, prefix="/api/v1/landing", tags=["Landing"])
app.include_router(
    candidates.router,
    prefix="/api/v1/candidates",
    tags=["Candidates"],
    dependencies=_admin,
)
app.include_router(
    dashboard.router,
    prefix="/api/v1/dashboard",
    tags=["Dashboard"],
    dependencies=_admin,
)
