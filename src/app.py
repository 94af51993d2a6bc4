"""
Main FastAPI application factory and startup configuration
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.auth_routes import router as auth_router
from src.api.book_review_routes import router as review_router
from src.api.book_routes import router as book_router
from src.api.health_routes import router as health_router
from src.config.database import MongoDatabase
from src.core.config import APP_CONFIG
from src.database.collection_setup import setup_database
from src.exceptions import BookshelfError, ServerError, ValidationError
from src.services.rating_aggregator import RatingAggregator
from src.utils.logger import setup_logger
from src.utils.response_utils import format_validation_errors

logger = setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    STARTUP/SHUTDOWN: MongoDB client and shared services
    """
    # ===== STARTUP =====
    logger.info("🚀 Starting Bookshelf API...")
    logger.info(f"   Debug: {APP_CONFIG['debug']}")
    logger.info(f"   Database: {APP_CONFIG['mongodb_name']}")

    mongo = MongoDatabase(APP_CONFIG["mongodb_uri"], APP_CONFIG["mongodb_name"])
    try:
        db = await mongo.connect()
        await setup_database(db)
    except Exception as e:
        logger.error(f"❌ Startup error: {e}")
        mongo.close()
        raise

    app.state.mongo = mongo
    # One aggregator per process so per-book locks are shared by all requests
    app.state.rating_aggregator = RatingAggregator(db)
    logger.info("✅ Application startup completed")

    yield

    # ===== SHUTDOWN =====
    logger.info("🛑 Shutting down Bookshelf API...")
    mongo.close()
    logger.info("✅ Shutdown completed")


def register_exception_handlers(app: FastAPI):
    """Map domain errors, validation errors and crashes to JSON responses"""

    @app.exception_handler(BookshelfError)
    async def bookshelf_error_handler(request: Request, exc: BookshelfError):
        if exc.status_code >= 500:
            logger.error(
                f"❌ {exc.error_code} on {request.method} {request.url.path}",
                exc_info=exc,
            )
        else:
            logger.warning(
                f"⚠️ {exc.error_code} on {request.method} {request.url.path}: {exc.message}"
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Log validation errors and answer 400 with field-level messages"""
        error = ValidationError(errors=format_validation_errors(exc.errors()))
        logger.warning(
            f"⚠️ Validation failed on {request.method} {request.url.path}: "
            f"{len(error.errors)} error(s)"
        )
        for item in error.errors:
            logger.debug(f"   {item['field']}: {item['message']}")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = "Route not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "HTTP_ERROR", "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Never leak internals; details go to the log only"""
        logger.error(
            f"❌ Unhandled error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        error = ServerError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    """
    FastAPI application factory
    """
    app = FastAPI(
        title="Bookshelf API",
        description="Book catalogue with user reviews and automatically maintained ratings",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if APP_CONFIG["debug"] else None,
        redoc_url="/redoc" if APP_CONFIG["debug"] else None,
        redirect_slashes=False,
    )

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=APP_CONFIG["cors_origins"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ===== SECURITY MIDDLEWARE =====
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Add security headers to all responses"""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        return response

    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(book_router)
    app.include_router(review_router)

    return app


# Create the FastAPI application instance
app = create_app()
