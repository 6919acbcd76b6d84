from dotenv import load_dotenv
load_dotenv()

import time
import uuid
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from api.v1.content_model import router as v1_content_model_router
from core.exceptions import (
    BadStateError,
    ContentRepositoryError,
    ContentValidationError,
    InvalidArgumentError,
    NotFoundError,
    StorageError,
)
from core.logging_config import LogContext, get_logger, setup_logging
from core.settings import settings

setup_logging()
logger = get_logger(__name__)

# Domain errors reaching the HTTP layer, most specific first
ERROR_STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
    (ContentValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (BadStateError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_502_BAD_GATEWAY),
)


def drop_health_checks(event, hint):
    """Sentry before_send hook, health checks are never reported"""
    if "/health" in event.get("transaction", ""):
        return None
    return event


if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        attach_stacktrace=True,
        send_default_pii=False,
        before_send=drop_health_checks,
        auto_enabling_integrations=False,
    )
    logger.info_ctx("Sentry error tracking enabled", environment=settings.SENTRY_ENVIRONMENT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from services.field_type_loader_service import get_field_type_loader

    field_types = get_field_type_loader().get_all_field_types()
    logger.info_ctx(
        "Content field API starting up",
        field_types=sorted(field_types),
        image_storage=settings.IMAGE_STORAGE_BACKEND,
    )

    yield

    logger.info("Content field API shutting down")

app = FastAPI(title="Content Field API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(ContentRepositoryError)
async def content_repository_error_handler(request: Request, exc: ContentRepositoryError):
    status_code = next(
        (code for error_class, code in ERROR_STATUS_CODES if isinstance(exc, error_class)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    content = {"detail": str(exc)}
    if isinstance(exc, ContentValidationError) and exc.errors:
        content["errors"] = [error.model_dump() for error in exc.errors]

    logger.warning_ctx(
        "Content repository error",
        error_type=type(exc).__name__,
        status_code=status_code,
    )
    return JSONResponse(status_code=status_code, content=content)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    if request.url.path == "/health":
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    start_time = time.time()
    with LogContext(request_id=request_id, path=request.url.path, method=request.method):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Request exception: {request.method} {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"detail": "Internal server error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        duration = round(time.time() - start_time, 3)
        with LogContext(status_code=response.status_code, duration=duration):
            if response.status_code >= 500:
                logger.error(f"{request.method} {request.url.path} - {response.status_code} in {duration}s")
            elif response.status_code >= 400:
                logger.warning(f"{request.method} {request.url.path} - {response.status_code} in {duration}s")
            else:
                logger.info(f"{request.method} {request.url.path} - {response.status_code} in {duration}s")

    response.headers["X-Request-ID"] = request_id
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_content_model_router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "content-field-api"}
