# -*- coding: utf-8 -*-
"""
JWT токены сессии админ-панели.

Токен несёт логин, этап аутентификации и время выдачи:
- pending_verification: выдаётся после проверки пароля, живёт 10 минут
- authenticated: выдаётся после подтверждения кода, живёт сутки

Сервер токены не хранит: валидность определяется подписью,
сроком действия и этапом.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from jose import JWTError, jwt

from store_admin.auth.exceptions import ConfigurationError, InvalidToken
from store_admin.config import AdminSettings


class AuthStage(str, Enum):
    """Этап аутентификации, записанный в токене."""

    PENDING_VERIFICATION = "pending_verification"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionClaims:
    """Проверенное содержимое токена."""

    login: str
    stage: AuthStage
    issued_at: datetime
    expires_at: datetime
    # Время выдачи в миллисекундах (отдаётся клиенту в /verify-token)
    timestamp: int


class SessionTokenService:
    """Выдача и проверка подписанных токенов сессии."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        pending_ttl: timedelta = timedelta(minutes=10),
        session_ttl: timedelta = timedelta(days=1),
    ):
        if not secret:
            raise ConfigurationError("Не задан секрет подписи токенов (ADMIN_JWT_SECRET)")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = {
            AuthStage.PENDING_VERIFICATION: pending_ttl,
            AuthStage.AUTHENTICATED: session_ttl,
        }

    @classmethod
    def from_settings(cls, settings: AdminSettings) -> "SessionTokenService":
        return cls(
            secret=settings.ADMIN_JWT_SECRET,
            algorithm=settings.ADMIN_JWT_ALGORITHM,
            pending_ttl=timedelta(seconds=settings.pending_token_ttl_seconds),
            session_ttl=timedelta(seconds=settings.session_token_ttl_seconds),
        )

    def ttl_for(self, stage: AuthStage) -> timedelta:
        return self._ttl[stage]

    def mint(self, login: str, stage: AuthStage, now: Optional[datetime] = None) -> str:
        """
        Создаёт токен для указанного этапа.

        Args:
            login: Логин администратора
            stage: Этап аутентификации
            now: Момент выдачи (по умолчанию текущее время UTC)

        Returns:
            Подписанный JWT
        """
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self._ttl[stage]

        to_encode: dict[str, Any] = {
            "login": login,
            "stage": stage.value,
            "timestamp": int(issued_at.timestamp() * 1000),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> SessionClaims:
        """
        Проверяет подпись и срок действия токена.

        Этап не проверяется: это задача вызывающего кода.

        Raises:
            InvalidToken: подпись неверна, токен истёк или повреждён
        """
        if not token:
            raise InvalidToken()

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            raise InvalidToken()

        login = payload.get("login")
        if not isinstance(login, str) or not login:
            raise InvalidToken()

        try:
            stage = AuthStage(payload.get("stage"))
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
            timestamp = int(payload.get("timestamp") or payload["iat"] * 1000)
        except (KeyError, TypeError, ValueError):
            raise InvalidToken()

        return SessionClaims(
            login=login,
            stage=stage,
            issued_at=issued_at,
            expires_at=expires_at,
            timestamp=timestamp,
        )
