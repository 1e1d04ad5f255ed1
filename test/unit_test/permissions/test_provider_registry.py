from __future__ import annotations

import logging

import pytest

from chatops_engine.permissions.providers import ProviderRegistry
from chatops_engine.session import Session, User


class _Bot:
    def __init__(self, supported: set[str]) -> None:
        self.supported = supported
        self.asked: list[str] = []

    async def supports(self, name: str, session: Session) -> bool:
        self.asked.append(name)
        return name in self.supported


@pytest.fixture
def registry() -> ProviderRegistry:
    reg = ProviderRegistry()
    reg.seed_builtins()
    return reg


@pytest.mark.asyncio
async def test_unknown_name_is_denied() -> None:
    reg = ProviderRegistry()
    assert await reg.check("anything", Session()) is False


@pytest.mark.asyncio
async def test_exact_provider_grants() -> None:
    reg = ProviderRegistry()
    reg.provide("admin.ban", lambda name, session: True)
    assert await reg.check("admin.ban", Session()) is True
    assert await reg.check("admin.kick", Session()) is False


@pytest.mark.asyncio
async def test_wildcard_matches_prefix_only() -> None:
    reg = ProviderRegistry()
    reg.provide("admin.*", lambda name, session: True)
    assert await reg.check("admin.ban", Session()) is True
    assert await reg.check("administrator", Session()) is False


@pytest.mark.asyncio
async def test_all_matching_providers_must_pass() -> None:
    reg = ProviderRegistry()
    reg.provide("admin.*", lambda name, session: True)
    reg.provide("admin.ban", lambda name, session: False)
    assert await reg.check("admin.ban", Session()) is False
    assert await reg.check("admin.kick", Session()) is True


@pytest.mark.asyncio
async def test_exact_match_is_evaluated_before_wildcards_and_short_circuits() -> None:
    calls: list[str] = []

    def wildcard(name: str, session: Session) -> bool:
        calls.append("wildcard")
        return True

    def exact(name: str, session: Session) -> bool:
        calls.append("exact")
        return False

    reg = ProviderRegistry()
    reg.provide("admin.*", wildcard)
    reg.provide("admin.ban", exact)

    assert await reg.check("admin.ban", Session()) is False
    assert calls == ["exact"]


@pytest.mark.asyncio
async def test_provide_replaces_existing_pattern() -> None:
    reg = ProviderRegistry()
    reg.provide("x", lambda name, session: False)
    reg.provide("x", lambda name, session: True)
    assert await reg.check("x", Session()) is True


@pytest.mark.asyncio
async def test_disposer_removes_only_its_own_registration() -> None:
    reg = ProviderRegistry()
    dispose_first = reg.provide("x", lambda name, session: True)
    reg.provide("x", lambda name, session: True)
    dispose_first()
    assert reg.has("x")
    assert await reg.check("x", Session()) is True


@pytest.mark.asyncio
async def test_provider_exception_is_contained_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    def broken(name: str, session: Session) -> bool:
        raise RuntimeError("boom")

    reg = ProviderRegistry()
    reg.provide("x", broken)
    caplog.set_level(logging.WARNING)

    assert await reg.check("x", Session()) is False
    assert any("boom" in rec.getMessage() for rec in caplog.records)


@pytest.mark.asyncio
async def test_async_provider_is_awaited() -> None:
    async def granted(name: str, session: Session) -> bool:
        return True

    reg = ProviderRegistry()
    reg.provide("x", granted)
    assert await reg.check("x", Session()) is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("authority", "name", "expected"),
    [
        (3, "authority.3", True),
        (3, "authority.2", True),
        (3, "authority.4", False),
        (0, "authority.0", True),
        (5, "authority.abc", False),
        (0, "authority.", True),
    ],
)
async def test_authority_provider(registry: ProviderRegistry, authority: int, name: str, expected: bool) -> None:
    session = Session(user=User(id="u", authority=authority))
    assert await registry.check(name, session) is expected


@pytest.mark.asyncio
async def test_authority_provider_without_user_is_unrestricted(registry: ProviderRegistry) -> None:
    assert await registry.check("authority.5", Session()) is True


@pytest.mark.asyncio
async def test_bot_provider_asks_transport(registry: ProviderRegistry) -> None:
    bot = _Bot({"send"})
    session = Session(bot=bot)

    assert await registry.check("bot.send", session) is True
    assert await registry.check("bot.delete", session) is False
    assert bot.asked == ["send", "delete"]


@pytest.mark.asyncio
async def test_bot_provider_without_bot_denies(registry: ProviderRegistry) -> None:
    assert await registry.check("bot.send", Session()) is False
