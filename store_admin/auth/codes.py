# -*- coding: utf-8 -*-
"""
Хранилище одноразовых кодов подтверждения.

Один живой код на логин: новый код перезаписывает предыдущий.
Код старше TTL считается истёкшим, даже если ещё не удалён при очистке.

Реализации:
- InMemoryCodeStore: словарь в памяти процесса (коды теряются при рестарте)
- RedisCodeStore: Redis с нативным TTL, очистка не требуется
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from redis.asyncio import Redis

from store_admin.config import AdminSettings

logger = logging.getLogger("store_admin.auth.codes")

Clock = Callable[[], float]


@dataclass(frozen=True)
class VerificationCodeEntry:
    """Выданный код: логин, 6 цифр и время выдачи (unix-секунды)."""

    login: str
    code: str
    issued_at: float

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        return now - self.issued_at > ttl_seconds


class InMemoryCodeStore:
    """
    Коды в памяти процесса.

    Методы асинхронные для единого интерфейса с Redis, но внутри
    блокировки нет ни одного await, поэтому операции атомарны.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Clock = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._codes: dict[str, VerificationCodeEntry] = {}
        self._lock = threading.Lock()

    async def set(self, login: str, code: str, issued_at: float) -> None:
        with self._lock:
            self._codes[login] = VerificationCodeEntry(login=login, code=code, issued_at=issued_at)

    async def get(self, login: str) -> Optional[VerificationCodeEntry]:
        with self._lock:
            return self._codes.get(login)

    async def delete(self, login: str) -> None:
        with self._lock:
            self._codes.pop(login, None)

    async def discard(self, login: str, code: str) -> bool:
        """Удаляет запись, только если в ней всё ещё этот код."""
        with self._lock:
            entry = self._codes.get(login)
            if entry is None or entry.code != code:
                return False
            del self._codes[login]
            return True

    async def cleanup(self) -> int:
        """Удаляет истёкшие коды. Возвращает количество удалённых."""
        now = self._clock()
        with self._lock:
            expired = [
                login for login, entry in self._codes.items()
                if entry.is_expired(now, self.ttl_seconds)
            ]
            for login in expired:
                del self._codes[login]
        if expired:
            logger.debug(f"Удалено истёкших кодов: {len(expired)}")
        return len(expired)

    def snapshot(self) -> dict[str, VerificationCodeEntry]:
        """Копия содержимого (для диагностики и тестов)."""
        with self._lock:
            return dict(self._codes)

    async def close(self) -> None:
        return None


class RedisCodeStore:
    """Коды в Redis: ключ на логин, срок жизни задаётся самим Redis."""

    KEY_PREFIX = "admin:verify_code:"

    # GET + сравнение кода + DEL одной атомарной операцией
    DISCARD_SCRIPT = """
local raw = redis.call("GET", KEYS[1])
if not raw then
    return 0
end
local ok, data = pcall(cjson.decode, raw)
if ok and type(data) == "table" and tostring(data["code"]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""

    def __init__(self, redis: Redis, ttl_seconds: float = 300, clock: Clock = time.time):
        self.redis = redis
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _key(self, login: str) -> str:
        return f"{self.KEY_PREFIX}{login}"

    async def set(self, login: str, code: str, issued_at: float) -> None:
        value = json.dumps({"code": code, "issued_at": issued_at})
        # Оставшееся время жизни считаем от момента выдачи
        remaining = int(self.ttl_seconds - (self._clock() - issued_at))
        await self.redis.set(self._key(login), value, ex=max(remaining, 1))

    async def get(self, login: str) -> Optional[VerificationCodeEntry]:
        raw = await self.redis.get(self._key(login))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return VerificationCodeEntry(
                login=login,
                code=str(data["code"]),
                issued_at=float(data["issued_at"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Повреждённая запись кода для {login}: {e}")
            await self.redis.delete(self._key(login))
            return None

    async def delete(self, login: str) -> None:
        await self.redis.delete(self._key(login))

    async def discard(self, login: str, code: str) -> bool:
        removed = await self.redis.eval(self.DISCARD_SCRIPT, 1, self._key(login), code)
        return bool(removed)

    async def cleanup(self) -> int:
        # Истёкшие ключи удаляет Redis
        return 0

    async def close(self) -> None:
        await self.redis.aclose()


CodeStore = InMemoryCodeStore | RedisCodeStore


def build_code_store(settings: AdminSettings, clock: Clock = time.time) -> CodeStore:
    """Создаёт хранилище кодов по настройке ADMIN_CODE_STORE_BACKEND."""
    backend = settings.ADMIN_CODE_STORE_BACKEND.strip().lower()
    ttl = settings.ADMIN_CODE_TTL_SECONDS

    if backend == "redis":
        redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        logger.info("Хранилище кодов подтверждения: Redis")
        return RedisCodeStore(redis, ttl_seconds=ttl, clock=clock)

    if backend != "memory":
        logger.warning(f"Неизвестное хранилище кодов '{backend}', используется память процесса")
    return InMemoryCodeStore(ttl_seconds=ttl, clock=clock)
