import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from fundflow import __version__
from fundflow.api import admin, auth, beneficiaries, transactions
from fundflow.config import settings
from fundflow.database import Base, SessionLocal, engine
from fundflow.exceptions import BankError
from fundflow.logging_config import setup_logging

import fundflow.models  # noqa: F401  registers the tables on Base.metadata

logger = setup_logging(settings.LOG_LEVEL)


def wait_for_db(max_retries=30, delay=2):
    """Waits until the database accepts connections"""
    for i in range(max_retries):
        try:
            with engine.connect():
                pass
            logger.info("database connected")
            return True
        except OperationalError as e:
            if i < max_retries - 1:
                logger.info("waiting for database (%s/%s)", i + 1, max_retries)
                time.sleep(delay)
            else:
                logger.error("could not connect to database: %s", e)
                return False
    return False


def seed_admin():
    """Creates the configured administrator if it does not exist yet"""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return

    from fundflow.services.admin_service import ensure_admin

    db = SessionLocal()
    try:
        admin_user = ensure_admin(
            db,
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            mobile=settings.ADMIN_MOBILE,
        )
        logger.info("administrator account ready: %s", admin_user.email)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown"""
    logger.info("starting %s", settings.APP_NAME)

    if not settings.SKIP_DB_CHECK:
        if wait_for_db():
            Base.metadata.create_all(bind=engine)
            logger.info("database tables ready")
            seed_admin()
        else:
            logger.warning("started without a database connection")
    else:
        logger.info("database check skipped (SKIP_DB_CHECK=True)")

    yield
    logger.info("shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="Banking API: registration with admin approval, beneficiaries and fund transfers",
    version=__version__,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    """Service information"""
    return {
        "message": settings.APP_NAME,
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
def health_check():
    """Liveness probe"""
    return {"status": "healthy"}


@app.exception_handler(BankError)
async def bank_error_handler(request: Request, exc: BankError):
    """Business-rule failures carry their own status and error code"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Malformed or missing input.

    Returns 400 with one entry per offending field so the frontend can
    highlight it.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "validation_error"),
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "ValidationError",
            "detail": errors,
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Internal details stay in the log"""
    logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "InternalError", "detail": "An unexpected error occurred."},
    )


app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(beneficiaries.router)
app.include_router(transactions.router)
