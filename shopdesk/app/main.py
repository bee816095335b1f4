import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopdesk.app.api.v1.api import api_router
from shopdesk.app.core.config import settings
from shopdesk.app.core.database import dispose_engine, get_db
from shopdesk.app.core.exceptions import ShopdeskError, ValidationError
from shopdesk.app.middleware.request_id import RequestIDMiddleware
from shopdesk.app.services.activity_log import DatabaseLogSink, report_failure

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    dispose_engine()


app = FastAPI(title="Shopdesk Inventory, Billing & Credit Ledger", lifespan=lifespan)

# ─── CORS: restrict to configured origins ────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

# ─── Custom middleware (outermost executes first) ─────────────────────────────
app.add_middleware(RequestIDMiddleware)


# ─── Error responses: always {"error": message} ──────────────────────────────


def _record_rejected_request(request: Request, message: str) -> None:
    """Log an ``error`` entry for a mutating request refused before any service ran."""
    # The request's own session is already closed here, so open a fresh one
    provider = request.app.dependency_overrides.get(get_db, get_db)
    sessions = provider()
    try:
        report_failure(
            DatabaseLogSink(next(sessions)),
            f"{request.method} {request.url.path}",
            ValidationError(message),
        )
    except Exception:
        logger.exception("Could not record rejected %s request", request.method)
    finally:
        sessions.close()


@app.exception_handler(ShopdeskError)
async def shopdesk_error_handler(request: Request, exc: ShopdeskError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        # Drop the "body"/"query" prefix from the location
        field = ".".join(str(part) for part in first["loc"][1:]) or str(first["loc"][0])
        message = f"Invalid {field}: {first['msg']}"
    else:
        message = "Invalid request"
    if request.method in MUTATING_METHODS:
        await run_in_threadpool(_record_rejected_request, request, message)
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500, content={"error": "An unexpected error occurred"}
    )


app.include_router(api_router)
app.mount(
    "/uploads",
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)
