# -*- coding: utf-8 -*-
"""
Выдача одноразовых кодов подтверждения.
"""

import logging
import secrets
import time
from typing import Callable

from store_admin.auth.codes import CodeStore
from store_admin.auth.exceptions import DeliveryError
from store_admin.auth.telegram import CodeSender

logger = logging.getLogger("store_admin.auth.issuer")

CODE_MIN = 100000
CODE_MAX = 999999


def generate_code() -> str:
    """Случайный 6-значный код из диапазона 100000–999999."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


class CodeIssuer:
    """Генерирует код, сохраняет его и отправляет администратору."""

    def __init__(
        self,
        store: CodeStore,
        sender: CodeSender,
        clock: Callable[[], float] = time.time,
        rollback_on_failure: bool = False,
    ):
        self.store = store
        self.sender = sender
        self._clock = clock
        self.rollback_on_failure = rollback_on_failure

    async def issue(self, login: str) -> None:
        """
        Выдаёт новый код для логина (предыдущий код перестаёт действовать).

        Код записывается до отправки. При rollback_on_failure запись
        удаляется, если отправка не удалась и в ней всё ещё этот код.

        Raises:
            DeliveryError: код не удалось доставить
        """
        code = generate_code()

        await self.store.cleanup()
        await self.store.set(login, code, self._clock())

        try:
            await self.sender.send_code(code)
        except DeliveryError:
            # Более новый код, выданный параллельно, не трогаем
            if self.rollback_on_failure and await self.store.discard(login, code):
                logger.warning(f"Код для {login} отозван: доставка не удалась")
            raise

        logger.info(f"Выдан код подтверждения для {login}")
