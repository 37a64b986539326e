import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command  # type: ignore
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from attendance_tracker.cache import init_cache, shutdown_cache
from attendance_tracker.config import settings
from attendance_tracker.database import AsyncSessionLocal, engine
from attendance_tracker.exceptions import AttendanceError
from attendance_tracker.routers import (
    attendance_router,
    classes_router,
    health_router,
    reports_router,
    rfid_router,
    roster_router,
)
from attendance_tracker.seed import seed_demo_data
from attendance_tracker.utils.logging import get_logger

logger = get_logger(__name__)

ROOT_DIR = Path(__file__).resolve().parent.parent


def run_migrations() -> None:
    alembic_cfg = Config(str(ROOT_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(ROOT_DIR / "alembic"))
    command.upgrade(alembic_cfg, "head")


# Lifecycle Manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Server starting up... DB URL: %s", settings.DATABASE_URL.split("@")[-1])
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.info("Checking for database migrations...")
        # env.py runs its own event loop, so keep it off this one
        await asyncio.to_thread(run_migrations)
        logger.info("Database is up to date.")

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection established.")
    except SQLAlchemyError as e:
        logger.critical("Database connection failed! %s", e)
        raise

    if settings.SEED_DEMO_DATA:
        async with AsyncSessionLocal() as session:
            await seed_demo_data(session, settings.DEMO_TEACHER_USERNAME)

    await init_cache()

    yield

    logger.info("Server shutting down...")
    await shutdown_cache()
    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {details}"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


# --- Register Routers ---
app.include_router(attendance_router)
app.include_router(rfid_router)
app.include_router(classes_router)
app.include_router(roster_router)
app.include_router(reports_router)
app.include_router(health_router)


def start():
    import uvicorn

    uvicorn.run(
        "attendance_tracker.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "docs": "/docs",
        "version": settings.VERSION,
    }
