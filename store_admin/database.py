# -*- coding: utf-8 -*-
"""
Модуль работы с базой данных для админ-панели.

Движок и фабрика сессий создаются при сборке приложения и хранятся
в app.state, чтобы тесты могли подставить собственную БД.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from store_admin.config import AdminSettings
from store_admin.db import Base

logger = logging.getLogger("store_admin.database")


def build_engine(settings: AdminSettings) -> AsyncEngine:
    """
    Создаёт асинхронный движок по настройкам.

    Параметры пула передаются только для серверных БД (у SQLite пула нет).
    """
    url = settings.database_url
    kwargs = {"echo": settings.DEBUG}
    if make_url(url).get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=True,  # Проверка соединения перед использованием
        )
    return create_async_engine(url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Фабрика асинхронных сессий."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency для получения сессии БД в FastAPI.

    Yields:
        AsyncSession: Асинхронная сессия SQLAlchemy
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Ошибка в сессии БД: {e}")
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine) -> None:
    """
    Инициализация подключения к БД.

    Проверяет доступность базы данных и создаёт недостающие таблицы.
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Подключение к базе данных установлено")
    except Exception as e:
        logger.error(f"Не удалось подключиться к базе данных: {e}")
        raise


async def close_db(engine: AsyncEngine) -> None:
    """Закрытие подключения к БД. Вызывается при остановке приложения."""
    await engine.dispose()
    logger.info("Подключение к базе данных закрыто")
