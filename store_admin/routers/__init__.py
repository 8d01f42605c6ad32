# -*- coding: utf-8 -*-
"""
API роутеры админ-панели.

Содержит:
- auth: Двухэтапная аутентификация
- categories: Категории товаров
"""

from store_admin.routers import auth, categories

__all__ = [
    "auth",
    "categories",
]
