"""
Main application entry point - FastAPI app factory and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn app.main:create_app --factory --reload

The app is only built when create_app() is called: Settings() refuses to
load without JWT_SECRET, and importing this module should not require it.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request  # The FastAPI framework
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware  # Cross-Origin Resource Sharing
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings  # Application settings
from app.core.logging import configure_logging
from app.core.middleware import RequestLoggingMiddleware
from app.db.session import build_engine, build_session_factory, init_db
from app.environments.google import GoogleAuthClient
from app.routers import calendar_mux, google_auth, users  # Route handlers (endpoints)


logger = logging.getLogger("family_calendar.main")


# ---------------------------------------------------------------------------
# ERROR ENVELOPE
# ---------------------------------------------------------------------------
# Every JSON error looks like {"error": "<message>"}, optionally with a
# "fields" map. The auth endpoints answer in plain text and never get here.


def error_response(
    status_code: int,
    message: str,
    fields: Optional[dict[str, str]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    content: dict = {"error": message}
    if fields:
        content["fields"] = fields
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def validation_message(error: dict) -> str:
    """Turn one pydantic error into the short message clients display."""
    loc = tuple(error.get("loc", ()))
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    # The body as a whole was unreadable (bad JSON, not an object, absent)
    if error_type == "json_invalid" or loc == ("body",):
        return "Invalid request body"

    if error_type == "missing":
        return "This field is required"

    if error_type == "string_too_short":
        if ctx.get("min_length") == 1:
            return "This field is required"
        return f"Value too small (min: {ctx.get('min_length')})"

    if error_type == "string_too_long":
        return f"Value too large (max: {ctx.get('max_length')})"

    return "Invalid value"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Request validation failures are 400s carrying the first field's message.

    fields maps each failing field name to its message.
    """
    errors = exc.errors()
    if not errors:
        return error_response(400, "Invalid request body")

    fields = {}
    for error in errors:
        message = validation_message(error)
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        if loc and message != "Invalid request body":
            fields.setdefault(".".join(loc), message)

    return error_response(400, validation_message(errors[0]), fields=fields)


# ---------------------------------------------------------------------------
# APPLICATION FACTORY
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration to use; loaded from the environment (and
                  .env) when omitted

    Raises:
        pydantic.ValidationError: JWT_SECRET is missing or empty
        ValueError: DB_TYPE is not supported
    """
    if settings is None:
        settings = Settings()

    configure_logging(settings.LOG_LEVEL)

    # -----------------------------------------------------------------------
    # DATABASE
    # -----------------------------------------------------------------------
    engine = build_engine(settings)
    init_db(engine)
    logger.info(f"Database ready ({settings.DB_TYPE})")

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.provider_client = GoogleAuthClient(settings.auth_config())

    # -----------------------------------------------------------------------
    # MIDDLEWARE
    # -----------------------------------------------------------------------
    # CORS: only the configured frontend origin may call the API with
    # credentials (cookies and the Authorization header)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ALLOWED_ORIGIN],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # -----------------------------------------------------------------------
    # REGISTER ROUTERS
    # -----------------------------------------------------------------------
    # google_auth.router: /auth/google, /auth/google/login, /auth/google/callback
    # users.router: /api/userinfo
    # calendar_mux.router: /api/calendar-mux CRUD
    app.include_router(google_auth.router)
    app.include_router(users.router)
    app.include_router(calendar_mux.router)

    # -----------------------------------------------------------------------
    # HEALTH CHECK ENDPOINT
    # -----------------------------------------------------------------------
    @app.get("/health", tags=["health"])
    def health_check():
        """
        Simple health check endpoint.

        Does NOT check database connectivity.

        Returns:
            {"status": "ok"}
        """
        return {"status": "ok"}

    if not settings.allowed_callbacks:
        logger.warning("ALLOWED_CALLBACKS is empty: logins with a callback URL will be rejected")

    logger.info(f"{settings.APP_NAME} started")
    return app
