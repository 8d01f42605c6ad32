from dataclasses import fields
from unittest.mock import patch

import pytest

from store_admin.auth.codes import InMemoryCodeStore
from store_admin.auth.exceptions import InvalidSessionToken, InvalidStage, InvalidToken
from store_admin.auth.service import CodeVerificationResult, TwoStageAuthService
from store_admin.auth.tokens import AuthStage, SessionTokenService
from tests.conftest import JWT_SECRET


@pytest.fixture
def tokens():
    return SessionTokenService(JWT_SECRET)


@pytest.fixture
def store(clock):
    return InMemoryCodeStore(ttl_seconds=300, clock=clock)


@pytest.fixture
def auth(tokens, store, clock):
    return TwoStageAuthService(tokens=tokens, store=store, code_ttl_seconds=300, clock=clock)


class TestVerifyCode:
    async def test_success_returns_session_token_only(self, auth, tokens, store, clock):
        pending = tokens.mint("admin", AuthStage.PENDING_VERIFICATION)
        await store.set("admin", "123456", clock())

        with patch.object(tokens, "verify", wraps=tokens.verify) as verify:
            result = await auth.verify_code(pending, "123456")

        # Проверяется только промежуточный токен, свежий сессионный не перепроверяется
        verify.assert_called_once_with(pending)
        assert result.success is True
        assert tokens.verify(result.session_token).stage is AuthStage.AUTHENTICATED
        assert [field.name for field in fields(CodeVerificationResult)] == [
            "success",
            "message",
            "session_token",
        ]

    async def test_mismatch_keeps_entry(self, auth, tokens, store, clock):
        pending = tokens.mint("admin", AuthStage.PENDING_VERIFICATION)
        await store.set("admin", "123456", clock())

        result = await auth.verify_code(pending, "654321")

        assert result.success is False
        assert result.session_token is None
        assert await store.get("admin") is not None

    async def test_wrong_stage(self, auth, tokens):
        session = tokens.mint("admin", AuthStage.AUTHENTICATED)

        with pytest.raises(InvalidStage):
            await auth.verify_code(session, "123456")

    async def test_bad_pending_token_is_not_a_session_error(self, auth):
        with pytest.raises(InvalidToken) as exc_info:
            await auth.verify_code("garbage", "123456")

        assert not isinstance(exc_info.value, InvalidSessionToken)


class TestCheckSession:
    def test_authenticated(self, auth, tokens):
        claims = auth.check_session(tokens.mint("admin", AuthStage.AUTHENTICATED))

        assert claims.login == "admin"

    @pytest.mark.parametrize("token", [None, "", "garbage"])
    def test_missing_or_broken_token(self, auth, token):
        with pytest.raises(InvalidSessionToken):
            auth.check_session(token)

    def test_pending_token(self, auth, tokens):
        with pytest.raises(InvalidSessionToken):
            auth.check_session(tokens.mint("admin", AuthStage.PENDING_VERIFICATION))
