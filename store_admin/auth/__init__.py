# -*- coding: utf-8 -*-
"""
Модуль аутентификации админ-панели.

Содержит:
- credentials: Проверка логина и пароля
- codes: Хранилище одноразовых кодов
- issuer, telegram: Выдача кодов и доставка через Telegram
- tokens: JWT токены сессии с этапом аутентификации
- service: Двухэтапный вход
- guard, dependencies: Защита маршрутов
"""

from store_admin.auth.codes import (
    InMemoryCodeStore,
    RedisCodeStore,
    VerificationCodeEntry,
    build_code_store,
)
from store_admin.auth.credentials import CredentialVerifier, hash_password, verify_password
from store_admin.auth.exceptions import (
    AdminAuthError,
    ConfigurationError,
    DeliveryError,
    InvalidCredentials,
    InvalidRequest,
    InvalidSessionToken,
    InvalidStage,
    InvalidToken,
)
from store_admin.auth.issuer import CodeIssuer, generate_code
from store_admin.auth.service import CodeVerificationResult, TwoStageAuthService
from store_admin.auth.tokens import AuthStage, SessionClaims, SessionTokenService

__all__ = [
    # Codes
    "InMemoryCodeStore",
    "RedisCodeStore",
    "VerificationCodeEntry",
    "build_code_store",
    "CodeIssuer",
    "generate_code",
    # Credentials
    "CredentialVerifier",
    "hash_password",
    "verify_password",
    # Errors
    "AdminAuthError",
    "ConfigurationError",
    "DeliveryError",
    "InvalidCredentials",
    "InvalidRequest",
    "InvalidSessionToken",
    "InvalidStage",
    "InvalidToken",
    # Tokens / service
    "AuthStage",
    "SessionClaims",
    "SessionTokenService",
    "CodeVerificationResult",
    "TwoStageAuthService",
]
