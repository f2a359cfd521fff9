import logging
import sqlite3

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from expense_portal.core import errors
from expense_portal.core.config import Settings, get_settings
from expense_portal.core.logging import init_logging, request_context_middleware
from expense_portal.db.gateway import ExpenseGateway
from expense_portal.db.migrate import apply_migrations
from expense_portal.db.seed import seed_sample_expenses
from expense_portal.routers import chat, expenses, ui
from expense_portal.services.assistant import build_assistant
from expense_portal.services.expense_service import ExpenseService

logger = logging.getLogger("app")


def _prepare_database(settings: Settings) -> None:
    try:
        version = apply_migrations(settings.db_path)  # type: ignore[arg-type]
        logger.info("database at schema version %s", version)
        if settings.seed_sample_expenses:
            seeded = seed_sample_expenses(settings.db_path)  # type: ignore[arg-type]
            if seeded:
                logger.info("seeded %s sample expenses", seeded)
    except (sqlite3.Error, OSError):
        # Pages and API degrade to demo data while the store is unavailable
        logger.exception("failed to prepare database on startup")


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    """
    if settings_override is not None:
        settings = settings_override
        settings.init_post_load()
    else:
        settings = get_settings()
    init_logging(debug=settings.debug)

    _prepare_database(settings)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )

    service = ExpenseService(
        ExpenseGateway(settings.db_path),  # type: ignore[arg-type]
        default_user_id=settings.default_user_id,
        currency=settings.default_currency,
    )
    app.state.settings = settings
    app.state.expense_service = service
    app.state.assistant = build_assistant(settings, service)

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.ValidationError, errors.domain_validation_handler)
    app.add_exception_handler(errors.NotFoundError, errors.domain_not_found_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(expenses.router)
    app.include_router(chat.router)
    app.include_router(ui.router)

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok", "app": settings.app_name, "version": settings.version}

    return app


app = create_app()
