# -*- coding: utf-8 -*-
"""
Точка входа FastAPI приложения админ-панели.

Запуск:
    python run_admin.py
    uvicorn store_admin.main:app --host 0.0.0.0 --port 8082
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from store_admin.auth.codes import CodeStore, build_code_store
from store_admin.auth.exceptions import (
    AdminAuthError,
    ConfigurationError,
    InvalidCredentials,
    InvalidRequest,
    InvalidSessionToken,
)
from store_admin.auth.guard import AdminRouteGuardMiddleware, clear_session_cookie
from store_admin.auth.tokens import SessionTokenService
from store_admin.config import AdminSettings, admin_settings
from store_admin.database import build_engine, build_session_factory, close_db, init_db
from store_admin.routers.auth import TOKEN_AND_CODE_REQUIRED_MESSAGE

_logging_configured = False


def setup_logging(settings: AdminSettings) -> None:
    """Настраивает логирование для админ-панели."""
    global _logging_configured
    if _logging_configured:
        return

    log_dir = Path(settings.ADMIN_LOG_FILE).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_level = getattr(logging, settings.ADMIN_LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # Файловый хэндлер с ротацией
    file_handler = RotatingFileHandler(
        settings.ADMIN_LOG_FILE,
        maxBytes=settings.ADMIN_LOG_MAX_SIZE_MB * 1024 * 1024,
        backupCount=settings.ADMIN_LOG_BACKUP_COUNT,
        encoding="utf-8",
        delay=True,
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(log_level)
    root_logger.addHandler(file_handler)

    logging.getLogger("store_admin").setLevel(log_level)
    _logging_configured = True


logger = logging.getLogger("store_admin.main")


def validation_error_for(path: str) -> AdminAuthError:
    """
    Ошибка для тела запроса, не прошедшего валидацию.

    Неполный вход отвечает так же, как неверный пароль.
    """
    if path == "/api/admin/auth":
        return InvalidCredentials()
    if path == "/api/admin/verify-code":
        return InvalidRequest(TOKEN_AND_CODE_REQUIRED_MESSAGE)
    return InvalidRequest()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AdminAuthError)
    async def auth_error_handler(request: Request, exc: AdminAuthError):
        """Ошибки аутентификации → {"message": ...} с нужным статусом."""
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__}: {exc.message} ({request.url.path})")
        else:
            logger.info(f"{type(exc).__name__}: {exc.message} ({request.url.path})")

        response = JSONResponse(status_code=exc.status_code, content={"message": exc.message})
        if isinstance(exc, InvalidSessionToken):
            clear_session_cookie(response, request.app.state.settings)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Некорректное тело запроса → {"message": ...} вместо списка ошибок pydantic."""
        # Значения полей не логируем: в них может быть пароль
        fields = [".".join(str(part) for part in error.get("loc", ())) for error in exc.errors()]
        logger.info(f"Некорректный запрос {request.url.path}: {fields}")
        return await auth_error_handler(request, validation_error_for(request.url.path))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Глобальный обработчик необработанных исключений."""
        logger.error(f"Необработанное исключение: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "Внутренняя ошибка сервера"},
        )


def register_frontend(app: FastAPI, settings: AdminSettings) -> None:
    """
    Раздаёт собранный фронтенд под /admin (если он собран).

    Доступ к страницам проверяет AdminRouteGuardMiddleware.
    """
    frontend_dist = Path(settings.ADMIN_FRONTEND_DIST)
    if not (frontend_dist.exists() and frontend_dist.is_dir()):
        return

    logger.info(f"Раздача статических файлов из: {frontend_dist}")

    assets_path = frontend_dist / "assets"
    if assets_path.exists():
        app.mount("/assets", StaticFiles(directory=str(assets_path)), name="assets")

    index_path = frontend_dist / "index.html"

    @app.get("/admin", include_in_schema=False)
    @app.get("/admin/{full_path:path}", include_in_schema=False)
    async def serve_spa(full_path: str = ""):
        """Отдаёт файл из dist, иначе index.html (SPA fallback)."""
        file_path = (frontend_dist / full_path).resolve()
        if full_path and file_path.is_file() and frontend_dist.resolve() in file_path.parents:
            return FileResponse(file_path)
        if index_path.exists():
            return FileResponse(index_path)
        return JSONResponse(status_code=404, content={"message": "Not found"})


def create_app(
    settings: Optional[AdminSettings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    code_store: Optional[CodeStore] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """
    Собирает приложение админ-панели.

    Args:
        settings: Настройки (по умолчанию из окружения)
        session_factory: Фабрика сессий БД (по умолчанию движок из настроек)
        code_store: Хранилище кодов (по умолчанию по ADMIN_CODE_STORE_BACKEND)
        clock: Источник текущего времени для кодов подтверждения
    """
    settings = settings or admin_settings

    engine = None
    if session_factory is None:
        engine = build_engine(settings)
        session_factory = build_session_factory(engine)

    if code_store is None:
        code_store = build_code_store(settings, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Запуск админ-панели...")
        logger.info(f"Версия: {settings.APP_VERSION}")
        logger.info(f"Окружение: {settings.ENVIRONMENT}")

        # Без секрета подписи токенов не стартуем
        try:
            SessionTokenService.from_settings(settings)
        except ConfigurationError as e:
            logger.error(e.message)
            raise

        if engine is not None:
            await init_db(engine)
            logger.info("База данных инициализирована")

        logger.info(f"Админ-панель запущена на http://{settings.ADMIN_HOST}:{settings.ADMIN_PORT}")

        yield

        logger.info("Остановка админ-панели...")
        await code_store.close()
        if engine is not None:
            await close_db(engine)
        logger.info("Админ-панель остановлена")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="REST API админ-панели магазина",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.code_store = code_store
    app.state.clock = clock

    app.add_middleware(AdminRouteGuardMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health", tags=["System"])
    async def health_check():
        """Проверка работоспособности сервиса."""
        return {"status": "ok", "version": settings.APP_VERSION}

    @app.get("/api", tags=["System"])
    async def api_info():
        """Информация об API."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/api/docs" if settings.DEBUG else None,
        }

    from store_admin.routers import auth, categories

    app.include_router(auth.router, prefix="/api/admin", tags=["Authentication"])
    app.include_router(categories.router, prefix="/api/admin/categories", tags=["Categories"])

    register_frontend(app, settings)

    return app


setup_logging(admin_settings)
app = create_app()
