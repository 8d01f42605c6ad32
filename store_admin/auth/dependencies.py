# -*- coding: utf-8 -*-
"""
FastAPI зависимости для авторизации в админ-панели.

Предоставляет зависимости для:
- Сборки сервисов двухэтапной аутентификации
- Проверки сессии администратора на защищённых эндпоинтах
"""

from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from store_admin.auth.codes import CodeStore
from store_admin.auth.credentials import AdminConfigRepository, CredentialVerifier
from store_admin.auth.guard import extract_token
from store_admin.auth.issuer import CodeIssuer
from store_admin.auth.service import TwoStageAuthService
from store_admin.auth.telegram import CodeSender, TelegramCodeSender
from store_admin.auth.tokens import SessionClaims, SessionTokenService
from store_admin.config import AdminSettings
from store_admin.database import get_db_session


def get_settings(request: Request) -> AdminSettings:
    return request.app.state.settings


def get_clock(request: Request) -> Callable[[], float]:
    return request.app.state.clock


def get_code_store(request: Request) -> CodeStore:
    return request.app.state.code_store


def get_token_service(settings: AdminSettings = Depends(get_settings)) -> SessionTokenService:
    """Сервис токенов; без секрета подписи выбрасывает ConfigurationError."""
    return SessionTokenService.from_settings(settings)


def get_config_repository(
    db: AsyncSession = Depends(get_db_session),
    settings: AdminSettings = Depends(get_settings),
) -> AdminConfigRepository:
    return AdminConfigRepository(db, settings)


async def get_code_sender(
    config: AdminConfigRepository = Depends(get_config_repository),
    settings: AdminSettings = Depends(get_settings),
) -> CodeSender:
    """Отправитель кодов в Telegram с настройками из БД или окружения."""
    bot_token, chat_id = await config.get_telegram_settings()
    return TelegramCodeSender(
        bot_token=bot_token,
        chat_id=chat_id,
        app_name=settings.APP_NAME,
        ttl_minutes=max(settings.ADMIN_CODE_TTL_SECONDS // 60, 1),
    )


def get_auth_service(
    settings: AdminSettings = Depends(get_settings),
    tokens: SessionTokenService = Depends(get_token_service),
    store: CodeStore = Depends(get_code_store),
    clock: Callable[[], float] = Depends(get_clock),
) -> TwoStageAuthService:
    """Сервис для проверки кода и сессии (без обращения к БД)."""
    return TwoStageAuthService(
        tokens=tokens,
        store=store,
        code_ttl_seconds=settings.ADMIN_CODE_TTL_SECONDS,
        clock=clock,
    )


def get_login_service(
    auth: TwoStageAuthService = Depends(get_auth_service),
    config: AdminConfigRepository = Depends(get_config_repository),
) -> TwoStageAuthService:
    auth.credentials = CredentialVerifier(config)
    return auth


def get_code_request_service(
    auth: TwoStageAuthService = Depends(get_auth_service),
    sender: CodeSender = Depends(get_code_sender),
    settings: AdminSettings = Depends(get_settings),
    clock: Callable[[], float] = Depends(get_clock),
) -> TwoStageAuthService:
    auth.issuer = CodeIssuer(
        store=auth.store,
        sender=sender,
        clock=clock,
        rollback_on_failure=settings.ADMIN_ROLLBACK_CODE_ON_DELIVERY_FAILURE,
    )
    return auth


def require_admin_session(
    request: Request,
    auth: TwoStageAuthService = Depends(get_auth_service),
) -> SessionClaims:
    """
    Пропускает только полностью аутентифицированного администратора.

    Raises:
        InvalidSessionToken: токена нет, он недействителен или промежуточный (401, cookie удаляется)
    """
    return auth.check_session(extract_token(request))
