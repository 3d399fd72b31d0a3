"""
SocialHub

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from socialhub.api.errors import render_error
from socialhub.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from socialhub.api.routes import router as api_router
from socialhub.config import get_settings
from socialhub.database import close_db, init_db
from socialhub.kernel.errors import DomainError
from socialhub.logging_config import configure_logging, get_logger
from socialhub.schemas.common import ErrorResponse, HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    SocialHub - posts, comments, friends and access-controlled sharing.

    ## Features

    - **Posts**: single-author posts publish immediately; group posts wait for every co-author's approval
    - **Sharing**: every post and comment has an access list with optional access requests
    - **User lists**: grant access to a named group of users at once
    - **Friends**: friend requests and friendships
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# Last added = outermost; CORS wraps everything
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _request_headers(request: Request) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return {REQUEST_ID_HEADER: req_id} if req_id else {}


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Render kernel errors with usernames in place of user ids."""
    detail = await render_error(exc)
    logger.info(
        "Request rejected",
        extra={"error": type(exc).__name__, "status_code": exc.status_code},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": detail, "error": type(exc).__name__},
        headers=_request_headers(request),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    headers = _request_headers(request)
    if exc.headers:
        headers.update(exc.headers)
    content = {"detail": exc.detail}
    if headers.get(REQUEST_ID_HEADER) and exc.status_code >= 500:
        content["request_id"] = headers[REQUEST_ID_HEADER]
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    headers = _request_headers(request)
    content = {"detail": "Validation error", "errors": errors}
    if headers:
        content["request_id"] = headers[REQUEST_ID_HEADER]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
        headers=headers,
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = getattr(request.state, "request_id", None)
    if settings.debug:
        content = {
            "detail": str(exc),
            "type": type(exc).__name__,
            "request_id": req_id,
        }
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_request_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        database="connected",
    )


app.include_router(
    api_router,
    prefix=settings.api_prefix,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "socialhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
