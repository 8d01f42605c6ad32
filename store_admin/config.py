# -*- coding: utf-8 -*-
"""
Конфигурация админ-панели магазина.

Настройки загружаются из переменных окружения и файла .env.
Использует Pydantic Settings для валидации.
"""

from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict


class AdminSettings(BaseSettings):
    """
    Настройки админ-панели.

    Значения учётных данных администратора и Telegram здесь служат
    запасным вариантом: основным источником является таблица settings в БД.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Основные настройки ===

    APP_NAME: str = "Store Admin"
    APP_VERSION: str = "1.0.0"

    # Режим отладки
    DEBUG: bool = False

    # Окружение: development / production (в production cookie ставится с флагом secure)
    ENVIRONMENT: str = "development"

    # === Сервер ===

    ADMIN_HOST: str = "0.0.0.0"
    ADMIN_PORT: int = 8082

    # CORS разрешённые домены (через запятую)
    ADMIN_CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Каталог собранного фронтенда (SPA раздаётся под /admin)
    ADMIN_FRONTEND_DIST: str = "frontend/dist"

    # === База данных ===

    # DATABASE_URL имеет приоритет, иначе URL собирается из POSTGRES_*
    DATABASE_URL: str = ""

    POSTGRES_HOST: str = "localhost"
    POSTGRES_DB: str = "store"
    POSTGRES_USER: str = "store_user"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_PORT: int = 5432

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # === JWT сессии ===

    # Секрет подписи токенов. Значения по умолчанию нет: без него приложение не стартует.
    ADMIN_JWT_SECRET: str = ""
    ADMIN_JWT_ALGORITHM: str = "HS256"

    # Промежуточный токен (после проверки пароля)
    ADMIN_PENDING_TOKEN_EXPIRE_MINUTES: int = 10

    # Сессионный токен (после подтверждения кода)
    ADMIN_SESSION_TOKEN_EXPIRE_HOURS: int = 24

    # === Одноразовые коды ===

    # Время жизни кода подтверждения (секунды)
    ADMIN_CODE_TTL_SECONDS: int = 300

    # Хранилище кодов: memory или redis
    ADMIN_CODE_STORE_BACKEND: str = "memory"

    REDIS_URL: str = "redis://localhost:6379/0"

    # Удалять ли сохранённый код, если отправка в Telegram не удалась
    ADMIN_ROLLBACK_CODE_ON_DELIVERY_FAILURE: bool = False

    # === Учётные данные администратора (запасной вариант для таблицы settings) ===

    ADMIN_LOGIN: str = ""
    ADMIN_PASSWORD_HASH: str = ""

    # === Telegram ===

    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_ID: str = ""

    # === Логирование ===

    ADMIN_LOG_LEVEL: str = "INFO"
    ADMIN_LOG_FILE: str = "logs/admin.log"
    ADMIN_LOG_MAX_SIZE_MB: int = 50
    ADMIN_LOG_BACKUP_COUNT: int = 3

    @property
    def cors_origins_list(self) -> list[str]:
        """Возвращает список разрешённых CORS origins."""
        return [origin.strip() for origin in self.ADMIN_CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def pending_token_ttl_seconds(self) -> int:
        return self.ADMIN_PENDING_TOKEN_EXPIRE_MINUTES * 60

    @property
    def session_token_ttl_seconds(self) -> int:
        return self.ADMIN_SESSION_TOKEN_EXPIRE_HOURS * 60 * 60

    @property
    def telegram_chat_id(self) -> Optional[str]:
        chat_id = (self.TELEGRAM_CHAT_ID or "").strip()
        return chat_id or None

    @property
    def database_url(self) -> str:
        """
        Возвращает итоговый URL подключения к БД.

        Приоритет:
        1) DATABASE_URL (если задан)
        2) Сборка из POSTGRES_*

        Логин и пароль кодируются через URL-encoding, чтобы спецсимволы
        (`@`, `&`, `:`) не ломали строку подключения.
        """
        if self.DATABASE_URL and self.DATABASE_URL.strip():
            return self.DATABASE_URL.strip()

        user = (self.POSTGRES_USER or "").strip().strip('"').strip("'")
        password_raw = (self.POSTGRES_PASSWORD or "").strip().strip('"').strip("'")

        user_enc = quote_plus(user)
        password_enc = quote_plus(password_raw)

        host = (self.POSTGRES_HOST or "localhost").strip()
        db = (self.POSTGRES_DB or "").strip()
        port = int(self.POSTGRES_PORT or 5432)

        return f"postgresql+asyncpg://{user_enc}:{password_enc}@{host}:{port}/{db}"


@lru_cache()
def get_admin_settings() -> AdminSettings:
    """
    Получает singleton экземпляр настроек.

    Кэшируется для производительности.
    """
    return AdminSettings()


# Глобальный экземпляр настроек (для точек входа)
admin_settings = get_admin_settings()
