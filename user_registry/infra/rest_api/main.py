from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from ..config import Settings
from ..di import DIContainer
from ..logging_config import LoggingMiddleware, get_logger, setup_logging
from ...domain.exception.user_exceptions import UserException
from .routers.users import router as users_router
from .error_handlers import (
    UserFriendlyError,
    handle_generic_error,
    handle_user_exception,
    handle_user_friendly_error,
    handle_validation_exception,
)

logger = get_logger("app")


def create_app(settings: Optional[Settings] = None, container: Optional[DIContainer] = None) -> FastAPI:
    """アプリケーションを組み立てる。設定は起動時に一度だけ構築して渡す"""
    settings = settings or (container.settings if container else Settings())
    container = container or DIContainer(settings)
    setup_logging(settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up", extra={"run_address": settings.run_address})
        # 失敗した場合は例外がそのまま伝播し起動が中止される
        await container.startup()
        try:
            yield
        finally:
            await container.shutdown()
            logger.info("server stopped successfully")

    app = FastAPI(
        title="User Registry API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(LoggingMiddleware)

    app.include_router(users_router)

    @app.get("/healthcheck")
    async def health_check():
        """ヘルスチェックエンドポイント"""
        return {"message": "I am alive!"}

    app.add_exception_handler(UserException, handle_user_exception)
    app.add_exception_handler(UserFriendlyError, handle_user_friendly_error)
    app.add_exception_handler(RequestValidationError, handle_validation_exception)
    app.add_exception_handler(Exception, handle_generic_error)

    return app
