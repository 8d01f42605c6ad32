# -*- coding: utf-8 -*-
"""
API роутер двухэтапной аутентификации.

Эндпоинты:
- POST /auth - Первый этап: логин и пароль
- POST /request-code - Отправка кода в Telegram
- POST /verify-code - Второй этап: проверка кода, установка cookie
- GET /verify-token - Проверка сессии
- POST /logout - Выход (удаление cookie)
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from store_admin.auth.dependencies import (
    get_auth_service,
    get_code_request_service,
    get_login_service,
    get_settings,
)
from store_admin.auth.exceptions import InvalidRequest, InvalidToken
from store_admin.auth.guard import clear_session_cookie, extract_token, set_session_cookie
from store_admin.auth.service import TwoStageAuthService
from store_admin.config import AdminSettings
from store_admin.models.auth import (
    LoginRequest,
    LoginResponse,
    SessionUser,
    StatusResponse,
    VerifyCodeRequest,
    VerifyTokenResponse,
)
from store_admin.utils.security import parse_bearer_token

router = APIRouter()
logger = logging.getLogger("store_admin.routers.auth")

TOKEN_AND_CODE_REQUIRED_MESSAGE = "Токен и код обязательны"


def get_client_ip(request: Request) -> str:
    """Извлекает IP клиента (учитывает прокси)."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@router.post("/auth", response_model=LoginResponse)
async def login(
    request: Request,
    data: LoginRequest,
    auth: TwoStageAuthService = Depends(get_login_service),
):
    """
    Первый этап входа.

    Возвращает промежуточный токен, с которым запрашивается код.
    """
    logger.info(f"Попытка входа: {data.login}, IP: {get_client_ip(request)}")
    token = await auth.login(data.login, data.password)

    return LoginResponse(
        success=True,
        token=token,
        message="Первый этап аутентификации пройден",
    )


@router.post("/request-code", response_model=StatusResponse)
async def request_code(
    request: Request,
    auth: TwoStageAuthService = Depends(get_code_request_service),
):
    """
    Отправка кода подтверждения в Telegram.

    Промежуточный токен передаётся в заголовке Authorization: Bearer.
    Сам код в ответе не возвращается.
    """
    token = parse_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise InvalidToken("Токен авторизации не предоставлен")

    await auth.request_code(token)

    return StatusResponse(success=True, message="Код отправлен в Telegram")


@router.post("/verify-code", response_model=StatusResponse)
async def verify_code(
    data: VerifyCodeRequest,
    auth: TwoStageAuthService = Depends(get_auth_service),
    settings: AdminSettings = Depends(get_settings),
):
    """
    Второй этап входа.

    Неверный или истёкший код возвращает 200 с success=false,
    чтобы клиент просто показал форму ввода снова.
    """
    if not data.token or not data.code:
        raise InvalidRequest(TOKEN_AND_CODE_REQUIRED_MESSAGE)

    result = await auth.verify_code(data.token, data.code)
    if not result.success:
        return StatusResponse(success=False, message=result.message)

    response = JSONResponse(
        status_code=200,
        content={"success": True, "message": result.message},
    )
    set_session_cookie(response, result.session_token, settings)
    return response


@router.get("/verify-token", response_model=VerifyTokenResponse)
async def verify_token(
    request: Request,
    auth: TwoStageAuthService = Depends(get_auth_service),
):
    """Проверка сессионного токена из cookie или заголовка Authorization."""
    claims = auth.check_session(extract_token(request))

    return VerifyTokenResponse(
        success=True,
        message="Токен валидный",
        user=SessionUser(login=claims.login, timestamp=claims.timestamp),
    )


@router.post("/logout", response_model=StatusResponse)
async def logout(
    request: Request,
    response: Response,
    settings: AdminSettings = Depends(get_settings),
):
    """Выход: сессионная cookie удаляется, токен истечёт сам."""
    clear_session_cookie(response, settings)
    logger.info(f"Выход из админ-панели, IP: {get_client_ip(request)}")
    return StatusResponse(success=True, message="Выход выполнен успешно")
