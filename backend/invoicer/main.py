from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI
import logging
import sys

from invoicer import __version__
from invoicer.config import Settings, settings as default_settings
from invoicer.database import create_session_factory
from invoicer.exceptions import (
    ColumnEditError,
    ColumnNotFoundError,
    DuplicateColumnError,
    PermissionDeniedError,
    PersistenceError,
    RecordNotFoundError,
    StorageError,
)
from invoicer.routers import clients, company_profile, dashboard, invoices, templates
from invoicer.services.storage_service import StorageService
from invoicer.services.template_service import TemplateService

logger = logging.getLogger(__name__)

# Permission failures are reported here instead of as user-facing errors
diagnostics_logger = logging.getLogger("invoicer.diagnostics")


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parse_cors_origins(origins_str: str) -> list:
    """Parse CORS origins string into a list"""
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(ColumnEditError)
    async def column_edit_error_handler(request: Request, exc: ColumnEditError):
        if isinstance(exc, DuplicateColumnError):
            status_code = 409
        elif isinstance(exc, ColumnNotFoundError):
            status_code = 404
        else:
            status_code = 400
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(PermissionDeniedError)
    async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
        diagnostics_logger.warning(f"Permission denied: {exc.operation} on {exc.path} ({request.method} {request.url.path})")
        return JSONResponse(status_code=403, content={"detail": "Permission denied"})

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error(f"Persistence failure during {exc.operation} on {exc.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage failure: {exc}")
        return JSONResponse(status_code=502, content={"detail": "Logo storage is unavailable"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Optional[Settings] = None, openai_client: Optional[AsyncOpenAI] = None) -> FastAPI:
    """
    Build the API with its store, storage and AI handles.

    The handles are created once here and reach request handlers through
    app.state, so tests and scripts can build isolated apps.
    """
    settings = settings or default_settings
    engine, session_factory = create_session_factory(settings.database_url, echo=settings.database_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        engine.dispose()

    app = FastAPI(
        title="Invoicer API",
        description="Invoices with custom columns, payments and AI-generated templates",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.storage_service = StorageService(settings)
    app.state.template_service = TemplateService(settings, client=openai_client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    app.include_router(clients.router)
    app.include_router(invoices.router)
    app.include_router(company_profile.router)
    app.include_router(templates.router)
    app.include_router(dashboard.router)
    register_exception_handlers(app)

    @app.get("/")
    def root():
        return {"message": "Invoicer API", "version": __version__}

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "template_generation": app.state.template_service.enabled
        }

    return app


configure_logging(default_settings.log_level)

logger.info("=" * 60)
logger.info("Starting Invoicer API")
logger.info("=" * 60)
logger.info(f"OpenAI API Key configured: {bool(default_settings.openai_api_key)}")
logger.info(f"OpenAI Model: {default_settings.openai_model}")
logger.info("=" * 60)

app = create_app()
