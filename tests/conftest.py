import os
import tempfile
import time
from pathlib import Path

# Настройки окружения до импорта приложения
os.environ.setdefault("ADMIN_JWT_SECRET", "test-secret-for-module-level-app")
os.environ.setdefault("ADMIN_LOG_FILE", str(Path(tempfile.gettempdir()) / "store_admin_tests" / "admin.log"))

import httpx
import pytest

from store_admin.auth.credentials import hash_password
from store_admin.auth.dependencies import get_code_sender
from store_admin.auth.exceptions import DeliveryError
from store_admin.config import AdminSettings
from store_admin.database import build_engine, build_session_factory, close_db, init_db
from store_admin.main import create_app

ADMIN_LOGIN = "admin"
ADMIN_PASSWORD = "correct-horse"
JWT_SECRET = "unit-test-secret-0123456789abcdef"


class FakeClock:
    """Управляемое время (unix-секунды)."""

    def __init__(self, start: float = None):
        self.now = start if start is not None else time.time()

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCodeSender:
    """Запоминает отправленные коды вместо Telegram."""

    def __init__(self):
        self.sent: list[str] = []
        self.fail = False

    async def send_code(self, code: str) -> None:
        if self.fail:
            raise DeliveryError()
        self.sent.append(code)

    @property
    def last_code(self) -> str:
        return self.sent[-1]


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    return hash_password(ADMIN_PASSWORD)


@pytest.fixture
def settings(tmp_path, admin_password_hash) -> AdminSettings:
    return AdminSettings(
        ENVIRONMENT="development",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'admin.db'}",
        ADMIN_JWT_SECRET=JWT_SECRET,
        ADMIN_LOGIN=ADMIN_LOGIN,
        ADMIN_PASSWORD_HASH=admin_password_hash,
        ADMIN_CODE_STORE_BACKEND="memory",
        ADMIN_FRONTEND_DIST=str(tmp_path / "no-frontend"),
        TELEGRAM_BOT_TOKEN="",
        TELEGRAM_CHAT_ID="",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sender() -> FakeCodeSender:
    return FakeCodeSender()


@pytest.fixture
async def session_factory(settings):
    engine = build_engine(settings)
    await init_db(engine)
    yield build_session_factory(engine)
    await close_db(engine)


@pytest.fixture
def app(settings, session_factory, clock, sender):
    app = create_app(settings=settings, session_factory=session_factory, clock=clock)
    app.dependency_overrides[get_code_sender] = lambda: sender

    @app.get("/admin/{page:path}", include_in_schema=False)
    async def admin_page(page: str):
        return {"page": page}

    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


async def login_pending(client: httpx.AsyncClient) -> str:
    """Первый этап входа; возвращает промежуточный токен."""
    response = await client.post(
        "/api/admin/auth",
        json={"login": ADMIN_LOGIN, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


async def login_full(client: httpx.AsyncClient, sender: FakeCodeSender) -> str:
    """Полный вход; возвращает сессионный токен из cookie."""
    token = await login_pending(client)
    response = await client.post(
        "/api/admin/request-code",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200, response.text
    response = await client.post(
        "/api/admin/verify-code",
        json={"token": token, "code": sender.last_code},
    )
    assert response.json()["success"] is True, response.text
    return response.cookies["admin_token"]
