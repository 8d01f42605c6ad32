from fastapi import Depends, FastAPI
import httpx
import pytest

from store_admin.auth.dependencies import require_admin_session
from store_admin.auth.guard import extract_token
from store_admin.auth.tokens import AuthStage, SessionClaims, SessionTokenService
from tests.conftest import ADMIN_LOGIN, JWT_SECRET, login_full, login_pending


@pytest.fixture
def tokens():
    return SessionTokenService(JWT_SECRET)


class TestAdminPages:
    async def test_anonymous_redirected_to_login(self, client):
        response = await client.get("/admin/dashboard")

        assert response.status_code == 307
        assert response.headers["location"] == "/admin/login"

    @pytest.mark.parametrize("path", ["/admin/login", "/admin/verify"])
    async def test_public_pages_open_to_anonymous(self, client, path):
        response = await client.get(path)

        assert response.status_code == 200

    async def test_pending_token_is_not_enough(self, client, tokens):
        client.cookies.set("admin_token", tokens.mint(ADMIN_LOGIN, AuthStage.PENDING_VERIFICATION))

        dashboard = await client.get("/admin/dashboard")
        verify_page = await client.get("/admin/verify")

        assert dashboard.status_code == 307
        assert dashboard.headers["location"] == "/admin/login"
        assert verify_page.status_code == 200

    async def test_authenticated_session_passes(self, client, sender):
        await login_full(client, sender)

        response = await client.get("/admin/orders")

        assert response.status_code == 200
        assert response.json() == {"page": "orders"}

    @pytest.mark.parametrize("path", ["/admin", "/admin/", "/admin/login"])
    async def test_authenticated_entry_pages_go_to_dashboard(self, client, sender, path):
        await login_full(client, sender)

        response = await client.get(path)

        assert response.status_code == 307
        assert response.headers["location"] == "/admin/dashboard"

    async def test_invalid_cookie_is_removed(self, client):
        client.cookies.set("admin_token", "not-a-jwt")

        response = await client.get("/admin/dashboard")

        assert response.status_code == 307
        assert response.headers["location"] == "/admin/login"
        assert "admin_token=" in response.headers["set-cookie"]
        assert "max-age=0" in response.headers["set-cookie"].lower()

    async def test_bearer_header_accepted(self, client, tokens):
        token = tokens.mint(ADMIN_LOGIN, AuthStage.AUTHENTICATED)

        response = await client.get(
            "/admin/products",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200

    async def test_api_paths_not_guarded(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_missing_secret_reported(self, client, settings, tokens):
        client.cookies.set("admin_token", tokens.mint(ADMIN_LOGIN, AuthStage.AUTHENTICATED))
        settings.ADMIN_JWT_SECRET = ""

        response = await client.get("/admin/dashboard")

        assert response.status_code == 500
        assert "message" in response.json()


class TestRequireAdminSession:
    @pytest.fixture
    def protected_app(self, app):
        @app.get("/api/admin/whoami")
        async def whoami(session: SessionClaims = Depends(require_admin_session)):
            return {"login": session.login}

        return app

    async def test_session_required(self, protected_app, client):
        response = await client.get("/api/admin/whoami")

        assert response.status_code == 401
        assert response.json()["message"]

    async def test_pending_token_rejected(self, protected_app, client):
        token = await login_pending(client)

        response = await client.get(
            "/api/admin/whoami",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401

    async def test_session_cookie_accepted(self, protected_app, client, sender):
        await login_full(client, sender)

        response = await client.get("/api/admin/whoami")

        assert response.status_code == 200
        assert response.json() == {"login": ADMIN_LOGIN}


class TestExtractToken:
    @staticmethod
    async def _extract(cookies=None, headers=None):
        app = FastAPI()

        @app.get("/token")
        async def token_view(token: str = Depends(extract_token)):
            return {"token": token}

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(
            transport=transport,
            base_url="http://testserver",
            cookies=cookies,
        ) as client:
            response = await client.get("/token", headers=headers)
        return response.json()["token"]

    async def test_cookie_wins_over_header(self):
        token = await self._extract(
            cookies={"admin_token": "from-cookie"},
            headers={"Authorization": "Bearer from-header"},
        )

        assert token == "from-cookie"

    async def test_header_fallback(self):
        token = await self._extract(headers={"Authorization": "Bearer from-header"})

        assert token == "from-header"

    async def test_no_token(self):
        assert await self._extract() is None
