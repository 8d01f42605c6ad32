# -*- coding: utf-8 -*-
"""
FastAPI бэкенд админ-панели магазина.

Модули:
- auth: Двухэтапный вход (пароль + код из Telegram), JWT сессии
- routers: API эндпоинты
- models: Pydantic схемы
- db: Модели SQLAlchemy
"""
