import re
from unittest.mock import patch

import pytest

from store_admin.auth.codes import InMemoryCodeStore
from store_admin.auth.exceptions import DeliveryError
from store_admin.auth.issuer import CODE_MAX, CODE_MIN, CodeIssuer, generate_code


class TestGenerateCode:
    def test_always_six_digits(self):
        for _ in range(500):
            code = generate_code()
            assert re.fullmatch(r"[1-9][0-9]{5}", code)

    @pytest.mark.parametrize("offset, expected", [(0, "100000"), (CODE_MAX - CODE_MIN, "999999")])
    def test_range_bounds(self, offset, expected):
        with patch("store_admin.auth.issuer.secrets.randbelow", return_value=offset) as randbelow:
            assert generate_code() == expected
        randbelow.assert_called_once_with(900000)


class TestCodeIssuer:
    @pytest.fixture
    def store(self, clock):
        return InMemoryCodeStore(ttl_seconds=300, clock=clock)

    async def test_stores_and_sends_same_code(self, store, sender, clock):
        issuer = CodeIssuer(store, sender, clock=clock)

        await issuer.issue("admin")

        entry = await store.get("admin")
        assert entry.code == sender.last_code
        assert entry.issued_at == clock()

    async def test_new_code_replaces_previous(self, store, sender, clock):
        issuer = CodeIssuer(store, sender, clock=clock)

        with patch("store_admin.auth.issuer.generate_code", side_effect=["111111", "222222"]):
            await issuer.issue("admin")
            await issuer.issue("admin")

        assert (await store.get("admin")).code == "222222"

    async def test_issue_sweeps_expired_codes(self, store, sender, clock):
        issuer = CodeIssuer(store, sender, clock=clock)
        await store.set("stale", "123456", clock())
        clock.advance(301)

        await issuer.issue("admin")

        assert await store.get("stale") is None

    async def test_delivery_failure_keeps_code_by_default(self, store, sender, clock):
        sender.fail = True
        issuer = CodeIssuer(store, sender, clock=clock)

        with pytest.raises(DeliveryError):
            await issuer.issue("admin")

        assert await store.get("admin") is not None

    async def test_delivery_failure_with_rollback(self, store, sender, clock):
        sender.fail = True
        issuer = CodeIssuer(store, sender, clock=clock, rollback_on_failure=True)

        with pytest.raises(DeliveryError):
            await issuer.issue("admin")

        assert await store.get("admin") is None

    async def test_rollback_keeps_newer_code_issued_meanwhile(self, store, clock):
        class ReissuingSender:
            """Пока первая отправка «в пути», для того же логина выдаётся новый код."""

            async def send_code(self, code):
                await store.set("admin", "222222", clock())
                raise DeliveryError()

        issuer = CodeIssuer(store, ReissuingSender(), clock=clock, rollback_on_failure=True)

        with patch("store_admin.auth.issuer.generate_code", return_value="111111"):
            with pytest.raises(DeliveryError):
                await issuer.issue("admin")

        assert (await store.get("admin")).code == "222222"
