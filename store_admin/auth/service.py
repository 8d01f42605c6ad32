# -*- coding: utf-8 -*-
"""
Двухэтапная аутентификация администратора.

Этапы:
1. login: логин/пароль → промежуточный токен (pending_verification)
2. request_code: промежуточный токен → код в Telegram
3. verify_code: промежуточный токен + код → сессионный токен (authenticated)
"""

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional

from store_admin.auth.codes import CodeStore
from store_admin.auth.credentials import CredentialVerifier
from store_admin.auth.exceptions import InvalidSessionToken, InvalidStage, InvalidToken
from store_admin.auth.issuer import CodeIssuer
from store_admin.auth.tokens import AuthStage, SessionClaims, SessionTokenService
from store_admin.utils.security import mask_sensitive_data

logger = logging.getLogger("store_admin.auth.service")

CODE_NOT_FOUND_MESSAGE = "Код не найден или истек"
CODE_EXPIRED_MESSAGE = "Код истек"
CODE_MISMATCH_MESSAGE = "Неверный код. Попробуйте еще раз."
VERIFIED_MESSAGE = "Аутентификация завершена успешно"


@dataclass(frozen=True)
class CodeVerificationResult:
    """
    Результат проверки кода.

    Неуспех здесь: исправимая ситуация (код неверный или истёк),
    а не ошибка сервера.
    """

    success: bool
    message: str
    session_token: Optional[str] = None


class TwoStageAuthService:
    def __init__(
        self,
        tokens: SessionTokenService,
        store: CodeStore,
        credentials: Optional[CredentialVerifier] = None,
        issuer: Optional[CodeIssuer] = None,
        code_ttl_seconds: float = 300,
        clock: Callable[[], float] = time.time,
    ):
        self.tokens = tokens
        self.store = store
        self.credentials = credentials
        self.issuer = issuer
        self.code_ttl_seconds = code_ttl_seconds
        self._clock = clock

    def _pending_claims(self, token: str) -> SessionClaims:
        claims = self.tokens.verify(token)
        if claims.stage is not AuthStage.PENDING_VERIFICATION:
            raise InvalidStage()
        return claims

    async def login(self, login: str, password: str) -> str:
        """Проверяет пароль и возвращает промежуточный токен."""
        verified_login = await self.credentials.verify(login, password)
        token = self.tokens.mint(verified_login, AuthStage.PENDING_VERIFICATION)
        logger.info(f"Первый этап входа пройден: {verified_login}")
        return token

    async def request_code(self, token: str) -> None:
        """Выдаёт и отправляет код по промежуточному токену."""
        claims = self._pending_claims(token)
        await self.issuer.issue(claims.login)

    async def verify_code(self, token: str, code: str) -> CodeVerificationResult:
        """
        Проверяет код и при совпадении выдаёт сессионный токен.

        Raises:
            InvalidToken: промежуточный токен недействителен или истёк
            InvalidStage: токен не промежуточный
        """
        claims = self._pending_claims(token)
        login = claims.login

        await self.store.cleanup()
        entry = await self.store.get(login)
        if entry is None:
            return CodeVerificationResult(success=False, message=CODE_NOT_FOUND_MESSAGE)

        if entry.is_expired(self._clock(), self.code_ttl_seconds):
            await self.store.delete(login)
            return CodeVerificationResult(success=False, message=CODE_EXPIRED_MESSAGE)

        submitted = (code or "").strip()
        if not secrets.compare_digest(entry.code.encode("utf-8"), submitted.encode("utf-8")):
            logger.warning(f"Неверный код подтверждения для {login}")
            return CodeVerificationResult(success=False, message=CODE_MISMATCH_MESSAGE)

        # Код одноразовый
        await self.store.delete(login)

        session_token = self.tokens.mint(login, AuthStage.AUTHENTICATED)
        logger.info(f"Вход подтверждён: {login}, токен {mask_sensitive_data(session_token)}")
        return CodeVerificationResult(
            success=True,
            message=VERIFIED_MESSAGE,
            session_token=session_token,
        )

    def check_session(self, token: Optional[str]) -> SessionClaims:
        """
        Проверяет сессионный токен.

        Raises:
            InvalidSessionToken: токена нет, он недействителен или не дошёл до этапа authenticated
        """
        if not token:
            raise InvalidSessionToken("Токен не найден")
        try:
            claims = self.tokens.verify(token)
        except InvalidToken as e:
            raise InvalidSessionToken(e.message) from e
        if claims.stage is not AuthStage.AUTHENTICATED:
            raise InvalidSessionToken("Токен не содержит полной аутентификации")
        return claims
