"""
InventoMax Backend: raw-material and finished-goods inventory valuation.

ARCHITECTURE:
- FastAPI Backend: validation, the valuation engine, persistence
- SQLite DB (any SQLAlchemy URL): source of truth for every transaction
- Web frontend: data-entry forms and ledgers, talks to this API

VALUATION MODEL:
- Stock and average prices are never stored; they are recomputed from the
  vouchers, processes, outputs and sales on every read
- Every create/update/delete is all-or-nothing and leaves the derived
  figures consistent with the new history
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from app.api.routes import auth, inventory, outputs, processes, sales, vouchers
from app.api.routes import settings as settings_routes
from app.core.config import settings
from app.core.rate_limiter import RateLimitMiddleware
from app.db.init_db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the default account on startup."""
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="InventoMax API",
    description="Raw materials, production processes, outputs and sales with live stock valuation.",
    version="0.1.0",
    lifespan=lifespan,
)

# SECURITY: Trust only specific hosts
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type"],
)

# SECURITY: Throttle login/register against brute force
app.add_middleware(RateLimitMiddleware)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if settings.SECURE_COOKIES:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(vouchers.router, prefix="/vouchers", tags=["vouchers"])
app.include_router(processes.router, prefix="/processes", tags=["processes"])
app.include_router(outputs.router, prefix="/outputs", tags=["outputs"])
app.include_router(sales.router, prefix="/sales", tags=["sales"])
app.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
app.include_router(settings_routes.router, prefix="/settings", tags=["settings"])


@app.get("/health")
def health():
    return {"status": "ok"}
