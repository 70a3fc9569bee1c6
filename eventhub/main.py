"""Events Manager Web Application."""
import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session

from eventhub.core.config import settings
from eventhub.core.database import check_connection, create_db_and_tables, get_session
from eventhub.core.errors import AppError, ErrorCode
from eventhub.core.responses import app_error_response, error_response, validation_details
from eventhub.routes import events, profile

# Configure logging
settings.log_dir.mkdir(parents=True, exist_ok=True)
log_file = settings.log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Events Manager application")
    create_db_and_tables()
    yield
    logger.info("Events Manager application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Create, publish, search and manage events",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(events.router)
app.include_router(profile.router)


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError):
    """Map typed service errors onto the JSON error envelope."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc.__cause__)
    return app_error_response(exc)


@app.exception_handler(RequestValidationError)
@app.exception_handler(PydanticValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError | PydanticValidationError):
    return error_response(
        "Validation failed",
        ErrorCode.VALIDATION_ERROR,
        details=validation_details(exc.errors()),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.method} {request.url.path}")
    return error_response("An unexpected error occurred", ErrorCode.INTERNAL_ERROR)


@app.get("/health")
async def health(session: Session = Depends(get_session)):
    """Health check endpoint."""
    connected = check_connection(session)
    return {
        "status": "healthy",
        "app": settings.app_name,
        "timestamp": datetime.now(UTC).isoformat(),
        "database": "connected" if connected else "disconnected",
    }


if __name__ == "__main__":
    uvicorn.run("eventhub.main:app", host=settings.host, port=settings.port, reload=settings.debug)
