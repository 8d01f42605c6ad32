# -*- coding: utf-8 -*-
"""
Pydantic модели (схемы) для админ-панели.

Содержит:
- auth: Схемы двухэтапной аутентификации
- category: Схемы категорий товаров
"""

from store_admin.models.auth import (
    LoginRequest,
    LoginResponse,
    SessionUser,
    StatusResponse,
    VerifyCodeRequest,
    VerifyTokenResponse,
)
from store_admin.models.category import (
    CategoryCreate,
    CategoryParent,
    CategoryResponse,
    CategoryUpdate,
)

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    "SessionUser",
    "StatusResponse",
    "VerifyCodeRequest",
    "VerifyTokenResponse",
    # Category
    "CategoryCreate",
    "CategoryParent",
    "CategoryResponse",
    "CategoryUpdate",
]
