# -*- coding: utf-8 -*-
"""
Защита маршрутов админ-панели.

Токен берётся из cookie admin_token, а если её нет, то из заголовка
Authorization: Bearer (его использует клиент для предварительной проверки).

Доступ к защищённым страницам даёт только токен этапа authenticated.
"""

import logging
from typing import Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from store_admin.auth.exceptions import ConfigurationError, InvalidToken
from store_admin.auth.tokens import AuthStage, SessionTokenService
from store_admin.config import AdminSettings
from store_admin.utils.security import parse_bearer_token

logger = logging.getLogger("store_admin.auth.guard")

SESSION_COOKIE_NAME = "admin_token"

ADMIN_PREFIX = "/admin"
LOGIN_PATH = "/admin/login"
VERIFY_PATH = "/admin/verify"
DASHBOARD_PATH = "/admin/dashboard"

# Страницы, с которых аутентифицированного администратора отправляем на дашборд
_ENTRY_PATHS = {"/admin", "/admin/", LOGIN_PATH}
# Страницы, доступные без полной аутентификации
_PUBLIC_PATHS = {LOGIN_PATH, VERIFY_PATH}


def extract_token(request: Request) -> Optional[str]:
    """Возвращает токен из cookie или заголовка Authorization."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        return token
    return parse_bearer_token(request.headers.get("Authorization"))


def set_session_cookie(response: Response, token: str, settings: AdminSettings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_token_ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_session_cookie(response: Response, settings: AdminSettings) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _is_admin_page(path: str) -> bool:
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/")


class AdminRouteGuardMiddleware(BaseHTTPMiddleware):
    """
    Проверяет доступ к страницам /admin.

    - недействительный токен: cookie удаляется, редирект на страницу входа
    - authenticated на /admin или /admin/login: редирект на дашборд
    - authenticated на других страницах: доступ разрешён
    - остальные: доступны только страницы входа и ввода кода
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not _is_admin_page(path):
            return await call_next(request)

        settings: AdminSettings = request.app.state.settings
        token = extract_token(request)

        if token:
            try:
                claims = SessionTokenService.from_settings(settings).verify(token)
            except ConfigurationError as e:
                logger.error(f"Проверка доступа невозможна: {e.message}")
                return JSONResponse(status_code=e.status_code, content={"message": e.message})
            except InvalidToken:
                logger.info(f"Недействительный токен при доступе к {path}, редирект на вход")
                response = RedirectResponse(url=LOGIN_PATH, status_code=307)
                clear_session_cookie(response, settings)
                return response

            if claims.stage is AuthStage.AUTHENTICATED:
                if path in _ENTRY_PATHS:
                    return RedirectResponse(url=DASHBOARD_PATH, status_code=307)
                return await call_next(request)

        if path in _PUBLIC_PATHS:
            return await call_next(request)

        return RedirectResponse(url=LOGIN_PATH, status_code=307)
