import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import routers
from app.api.routes import auth, dashboard, ratings, stores, users
from app.core.config import APP_NAME, APP_VERSION, CORS_ALLOWED_ORIGINS
from app.core.exceptions import StoreRatingError
from app.core.logging_config import setup_logging
from app.db.get_db import SessionLocal, get_db, init_db
from app.db.seed import seed_admin
from app.utils.error_codes import ERROR_CODES, HTTP_STATUS_TO_ERROR_CODE
from app.utils.helpers import error_response, integrity_error_kind

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()
    logger.info("%s %s started", APP_NAME, APP_VERSION)
    yield


app = FastAPI(
    title=APP_NAME,
    description="FastAPI backend for rating stores",
    version=APP_VERSION,
    lifespan=lifespan
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %s (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


API_PREFIX = "/api"

# Root route
@app.get("/")
def root():
    return {
        "success": True,
        "message": f"Welcome to the {APP_NAME}",
        "version": APP_VERSION,
        "endpoints": {
            "auth": f"{API_PREFIX}/auth",
            "users": f"{API_PREFIX}/users",
            "stores": f"{API_PREFIX}/stores",
            "ratings": f"{API_PREFIX}/ratings",
            "dashboard": f"{API_PREFIX}/dashboard",
            "health": "/health",
        },
    }


@app.get("/health")
def health(db: Session = Depends(get_db)):
    uptime = round(time.monotonic() - STARTED_AT, 3)
    timestamp = datetime.utcnow().isoformat()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={
                "status": "Error",
                "timestamp": timestamp,
                "uptime": uptime,
                "database": "Disconnected",
                "error": str(exc),
            },
        )
    return {"status": "OK", "timestamp": timestamp, "uptime": uptime, "database": "Connected"}


# Include routers
app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["Users"])
app.include_router(stores.router, prefix=f"{API_PREFIX}/stores", tags=["Stores"])
app.include_router(ratings.router, prefix=f"{API_PREFIX}/ratings", tags=["Ratings"])
app.include_router(dashboard.router, prefix=f"{API_PREFIX}/dashboard", tags=["Dashboard"])


@app.exception_handler(StoreRatingError)
async def store_rating_exception_handler(request: Request, exc: StoreRatingError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message, exc.details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error_code = HTTP_STATUS_TO_ERROR_CODE.get(exc.status_code, ERROR_CODES["SERVER_ERROR"])
    message = "Route not found" if exc.status_code == 404 and exc.detail == "Not Found" else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(error_code, message),
        headers=getattr(exc, "headers", None),
    )


def _error_field(location) -> str:
    parts = [str(part) for part in location if part not in ("body", "query", "path")]
    return ".".join(parts) or "request"


def _error_message(error: dict) -> str:
    message = error.get("msg", "Invalid value")
    # pydantic prefixes messages raised from custom validators
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": _error_field(error.get("loc", ())), "message": _error_message(error)}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_response(ERROR_CODES["VALIDATION_ERROR"], "Validation failed", details),
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    kind = integrity_error_kind(exc)
    logger.warning("Integrity error (%s) on %s %s: %s", kind, request.method, request.url.path, exc.orig)
    if kind in ("foreign_key", "not_null"):
        return JSONResponse(
            status_code=400,
            content=error_response(ERROR_CODES["VALIDATION_ERROR"], "Invalid reference or missing required field"),
        )
    return JSONResponse(
        status_code=409,
        content=error_response(ERROR_CODES["CONFLICT"], "A record with this information already exists"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_response(ERROR_CODES["SERVER_ERROR"], "Internal server error"),
    )


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)
