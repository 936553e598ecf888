"""FastAPI server for LabelQ smart labels"""

from __future__ import annotations

import os
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from labelq.api.routes.health import router as health_router
from labelq.api.routes.smart_labels import router as smart_labels_router
from labelq.config import APP_VERSION, LABELQ_ENV
from labelq.infrastructure.database import init_database
from labelq.observability.logging import get_logger
from labelq.observability.telemetry import counter
from labelq.utils.redaction import redact

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Initialize the database schema (idempotent) before serving."""
    try:
        logger.info("Initializing database schema...")
        init_database()
        logger.info("Database initialization complete")
    except sqlite3.OperationalError as e:
        logger.critical("Database schema error: %s", e)
        raise RuntimeError(f"Database initialization failed: {e}") from e
    yield


app = FastAPI(title="LabelQ API", version=APP_VERSION, lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Return field names only, never the validation rules themselves.

    Side Effects:
        - Logs the full validation errors (URL redacted)
        - Increments api.validation_errors
    """
    logger.warning("Validation error on %s: %s", redact(str(request.url)), exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


app.include_router(health_router)
app.include_router(smart_labels_router)


def main() -> None:
    """Run the API with uvicorn (labelq-api console script)."""
    import uvicorn

    uvicorn.run(
        "labelq.api.app:app",
        host=os.getenv("LABELQ_HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=LABELQ_ENV == "development",
    )


if __name__ == "__main__":
    main()
