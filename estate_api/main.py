"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
import logging

from estate_api.config import settings
from estate_api.database import create_tables, close_db_connection
from estate_api.routers import (
    auth_router,
    properties_router,
    images_router,
    favorites_router,
    health_router
)
from estate_api.utils.exceptions import APIException
from estate_api.services.error_handler import ErrorHandlerService
from estate_api.middleware.validation import ValidationMiddleware

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    try:
        await create_tables()
    except (SQLAlchemyError, OSError) as e:
        # The health endpoint reports the outage; requests fail until the database is back
        logger.error(f"Failed to initialize database on startup: {e}")

    yield

    # Shutdown
    logger.info("Shutting down application")
    await close_db_connection()


# Create FastAPI application instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    REST API for real-estate sale and rental listings.

    ## Features

    * **Properties**: CRUD for listings with a filtered search
    * **Images**: Multi-file upload stored in the database, linked to listings by id
    * **Favorites**: Per-user bookmarks of listings
    * **Authentication**: JWT bearer tokens with admin, agent and user roles

    ## Authentication

    Register or log in through `/api/auth/register` and `/api/auth/login`, then
    send the returned token in the Authorization header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Authentication",
            "description": "Registration, login and user administration"
        },
        {
            "name": "Properties",
            "description": "Property listing management and search operations"
        },
        {
            "name": "Images",
            "description": "Image upload and serving"
        },
        {
            "name": "Favorites",
            "description": "Bookmarked listings of the current user"
        },
        {
            "name": "Health",
            "description": "Service and database status"
        }
    ],
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Add validation middleware
app.add_middleware(
    ValidationMiddleware,
    max_request_size=settings.max_request_size,
    enable_request_logging=settings.debug
)

# Include API routers
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(properties_router, prefix=settings.api_prefix)
app.include_router(images_router, prefix=settings.api_prefix)
app.include_router(favorites_router, prefix=settings.api_prefix)
app.include_router(health_router, prefix=settings.api_prefix)


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed request data is reported as 400 with field details."""
    return ErrorHandlerService.handle_validation_error(exc.errors(), request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    """Handle Pydantic validation errors raised inside handlers."""
    return ErrorHandlerService.handle_validation_error(exc.errors(), request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle framework HTTP exceptions with structured error responses."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with secure error responses."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint providing basic API information and the endpoint map.
    """
    prefix = settings.api_prefix
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "endpoints": {
            "auth": f"{prefix}/auth",
            "properties": f"{prefix}/properties",
            "upload": f"{prefix}/upload/images",
            "images": f"{prefix}/images/{{id}}",
            "favorites": f"{prefix}/favorites",
            "health": f"{prefix}/health"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "estate_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
