"""FastAPI application entry point."""

import logging
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from dineflow.api.routes import api_router
from dineflow.core.cache import cache
from dineflow.core.config import settings
from dineflow.core.exceptions import DineFlowError
from dineflow.core.rate_limit import limiter
from dineflow.core.rbac import load_user_record
from dineflow.core.security import decode_access_token
from dineflow.db.base import Base
from dineflow.db.session import SessionLocal, engine
import dineflow.models  # noqa: F401  registers tables on Base.metadata
from dineflow.services.realtime_service import business_channel, ws_manager
from dineflow.services.storage_service import UPLOAD_URL_PREFIX

# Paths under /api/v1 that do NOT require authentication
PUBLIC_API_PATHS = [
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/auth/federated",
]

# Configure logging - JSON lines in production, human-readable in dev
root_logger = logging.getLogger()
root_logger.setLevel(getattr(logging, settings.log_level))
root_logger.handlers.clear()

if settings.debug:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
else:
    import json as _json

    class JSONFormatter(logging.Formatter):
        def format(self, record):
            return _json.dumps({
                "ts": self.formatTime(record, self.datefmt),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
                "module": record.module,
                "line": record.lineno,
            })

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

root_logger.addHandler(handler)
logger = logging.getLogger(__name__)
request_logger = logging.getLogger("requests")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class AuthEnforcementMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated /api/v1/* requests before they reach a route.

    Route dependencies re-check the token and load the caller's role; this
    layer only guarantees that no endpoint is reachable anonymously.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if request.method == "OPTIONS" or not path.startswith("/api/v1/"):
            return await call_next(request)
        if any(path.startswith(p) for p in PUBLIC_API_PATHS):
            return await call_next(request)

        payload = None
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1]
            if token:
                payload = decode_access_token(token)

        if payload is None or not payload.get("sub"):
            return JSONResponse(
                status_code=401,
                content={"detail": "Authentication required"},
                headers={"WWW-Authenticate": "Bearer"},
            )
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging all HTTP requests and responses."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in ["/health", "/health/ready", "/docs", "/openapi.json"]:
            return await call_next(request)

        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            request_logger.error(
                f"Error: {request.method} {request.url.path} - "
                f"Exception: {str(e)} - Time: {process_time:.3f}s - Client: {client_ip}"
            )
            raise

        process_time = time.time() - start_time
        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        request_logger.log(
            log_level,
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - Time: {process_time:.3f}s - Client: {client_ip}"
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting DineFlow POS")

    # Create tables for SQLite; other databases are migrated with Alembic
    if settings.database_url.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created (SQLite mode)")

    yield

    cache.clear()
    logger.info("Shutting down DineFlow POS")


app = FastAPI(
    title="DineFlow POS",
    description="Restaurant point-of-sale API: tables, menu, orders, kitchen, billing and reports",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Rate limiting setup
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(DineFlowError)
async def dineflow_error_handler(request: Request, exc: DineFlowError):
    """Domain errors become a short notice for the user."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Store failures surface as a generic notice; the user retries manually."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Operation failed. Please try again."},
    )


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuthEnforcementMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware - added last so it runs first (Starlette LIFO order)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    max_age=600,
)

app.include_router(api_router, prefix=settings.api_v1_prefix)

Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/health")
def health_check():
    """Basic liveness check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/health/ready")
def readiness_check():
    """Readiness probe with database and WebSocket checks."""
    checks = {"database": "unknown", "websocket_manager": "unknown"}

    db = None
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        checks["database"] = "unhealthy"
    finally:
        if db:
            db.close()

    checks["websocket_manager"] = f"healthy ({ws_manager.get_connection_count()} connections)"
    checks["cache"] = f"healthy ({cache.stats()['valid_keys']} keys)"

    all_healthy = all(c.startswith("healthy") for c in checks.values())
    return {
        "status": "ready" if all_healthy else "degraded",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }


async def _authenticate_websocket(websocket: WebSocket, token: Optional[str]) -> Optional[dict]:
    """Resolve the caller of a WebSocket handshake. Returns the user record or None (rejected)."""
    payload = decode_access_token(token) if token else None
    if not payload or not payload.get("sub"):
        logger.warning("WebSocket rejected: no valid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None

    db = SessionLocal()
    try:
        record = load_user_record(db, int(payload["sub"]))
    finally:
        db.close()

    if record is None or not record["is_active"] or record["business_id"] is None:
        logger.warning(f"WebSocket rejected for user {payload['sub']}: no active business membership")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None
    return record


@app.websocket("/ws/business")
async def websocket_business(websocket: WebSocket, token: Optional[str] = Query(None)):
    """Change feed for the caller's business. Requires JWT token."""
    record = await _authenticate_websocket(websocket, token)
    if record is None:
        return

    channel = business_channel(record["business_id"])
    if not await ws_manager.connect(websocket, channel, user_id=record["id"]):
        return

    try:
        await websocket.send_json({
            "event": "connected",
            "business_id": record["business_id"],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                ws_manager.update_ping(websocket)
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        ws_manager.disconnect(websocket, channel)
    except Exception as e:
        logger.error(f"WebSocket error in {channel}: {e}", exc_info=True)
        ws_manager.disconnect(websocket, channel)
