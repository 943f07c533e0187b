"""Main FastAPI application."""
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from exam_prep.core.config import settings
from exam_prep.core.errors import QuestionBankError
from exam_prep.core.logging import setup_logging, get_logger, bind_context, log_request, log_response
from exam_prep.db.session import Database, get_db_session
from exam_prep.domain.schemas import HealthResponse
from exam_prep.api.v1 import routes_questions

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("application_starting", version=settings.app_version)

    database = Database.from_settings(settings)
    if settings.db_create_all:
        await database.create_all()
    await database.ping()
    app.state.db = database

    logger.info("application_ready")

    yield

    logger.info("application_shutting_down")
    await database.dispose()
    logger.info("application_stopped")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Question bank for exam preparation: browse, drill and import questions",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log all requests and responses."""
    request_id = uuid.uuid4().hex
    bind_context(request_id=request_id)

    start_time = time.time()
    log_request(request_id, request.method, request.url.path)

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    log_response(request_id, response.status_code, duration_ms)

    return response


@app.exception_handler(QuestionBankError)
async def question_bank_exception_handler(request: Request, exc: QuestionBankError):
    """Render domain errors as ``{"message": ...}``."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep the ``{"message": ...}`` error shape for framework errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
    )


@app.get("/healthz", response_model=HealthResponse, tags=["health"])
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """Health check endpoint.

    Checks database connectivity.
    """
    try:
        await session.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        logger.error("health_check_db_failed", error=str(e))
        db_status = f"unhealthy: {str(e)}"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        database=db_status,
        timestamp=datetime.utcnow(),
    )


app.include_router(routes_questions.router)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/healthz",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
