"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from employee_registry import database
from employee_registry.config import settings
from employee_registry.errors import RegistryError
from employee_registry.logging_config import RequestIdMiddleware, setup_logging
from employee_registry.messages import GeneralMessages
from employee_registry.routes import departments, employees
from employee_registry.schemas import ApiResponse, HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, create tables and seed data on startup."""
    setup_logging()
    database.init_db()
    if settings.SEED_DEPARTMENTS:
        database.seed_departments()
    logger.info("Employee Registry API %s started", settings.APP_VERSION)
    yield
    database.engine.dispose()


app = FastAPI(
    title="Employee Registry API",
    description=(
        "Manage employees and departments with search, pagination, "
        "soft delete/restore and a full audit trail. Every response uses the "
        "same envelope: `isSuccess`, `message`, `data`, `errors`, `statusCode`."
    ),
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)


def envelope(message: str, status_code: int, errors: list[str] | None = None) -> JSONResponse:
    body = ApiResponse[None].failure(message, status_code, errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, mode="json"))


def _describe(error: dict) -> str:
    field = next((str(part) for part in reversed(error.get("loc", ())) if not isinstance(part, int)), "request")
    message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
    return f"{field}: {message}"


@app.exception_handler(RegistryError)
async def registry_error_handler(request: Request, exc: RegistryError):
    return envelope(exc.message, exc.status_code, exc.errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return envelope(GeneralMessages.RESOURCE_NOT_FOUND, 404)
    return envelope(str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [_describe(error) for error in exc.errors()]
    logger.info("Request validation failed on %s: %s", request.url.path, errors)
    return envelope(GeneralMessages.VALIDATION_FAILED, 400, errors)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return envelope(GeneralMessages.INTERNAL_ERROR, 500)


# --- Health Check ---

@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health Check",
    description="Check if the API is running and its database is reachable.",
)
def health_check():
    db_status = "ok"
    try:
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        db_status = "unavailable"
    return HealthResponse(
        status="healthy" if db_status == "ok" else "degraded",
        version=settings.APP_VERSION,
        database=db_status,
        timestamp=datetime.now(UTC),
    )


app.include_router(employees.router, prefix=settings.API_V1_STR)
app.include_router(departments.router, prefix=settings.API_V1_STR)
