from __future__ import annotations

import pytest

from chatops_engine.core.events import EventBus
from chatops_engine.permissions import TOPOLOGY_EVENT, Permissions
from chatops_engine.session import Session, User


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def permissions(events: EventBus) -> Permissions:
    return Permissions(events)


@pytest.fixture
def member() -> Session:
    return Session(user=User(id="member", authority=1))


class TestInheritAndDepend:
    @pytest.mark.asyncio
    async def test_dependency_granted_through_held_capability(self, permissions: Permissions, member: Session) -> None:
        permissions.inherit("authority.3", "cmd.bar")
        dispose = permissions.inherit("authority.3", "cmd.foo")
        permissions.depend("cmd.bar", "cmd.foo")

        assert await permissions.test({"authority.3"}, ["cmd.bar"], member) is True

        dispose()
        assert await permissions.test({"authority.3"}, ["cmd.bar"], member) is False

    @pytest.mark.asyncio
    async def test_required_name_itself_must_be_granted(self, permissions: Permissions, member: Session) -> None:
        permissions.inherit("authority.3", "cmd.foo")
        permissions.depend("cmd.bar", "cmd.foo")

        assert await permissions.test({"authority.3"}, ["cmd.bar"], member) is False
        assert await permissions.test({"authority.3", "cmd.bar"}, ["cmd.bar"], member) is True

    @pytest.mark.asyncio
    async def test_held_name_satisfies_itself(self, permissions: Permissions, member: Session) -> None:
        assert await permissions.test({"x"}, ["x"], member) is True
        assert await permissions.test(set(), ["x"], member) is False

    @pytest.mark.asyncio
    async def test_repeated_queries_agree(self, permissions: Permissions, member: Session) -> None:
        permissions.authority(1, "cmd.a")
        permissions.depend("cmd.a", "cmd.b")
        permissions.inherit("authority.0", "cmd.b")

        first = await permissions.test(set(), ["cmd.a"], member)
        second = await permissions.test(set(), ["cmd.a"], member)

        assert first is second is True

    @pytest.mark.asyncio
    async def test_empty_requirement_always_passes(self, permissions: Permissions, member: Session) -> None:
        assert await permissions.test(set(), [], member) is True

    @pytest.mark.asyncio
    async def test_provider_grants_through_inherit_edge(self, permissions: Permissions) -> None:
        permissions.authority(2, "cmd.echo")

        assert await permissions.test(set(), ["cmd.echo"], Session(user=User(id="a", authority=2))) is True
        assert await permissions.test(set(), ["cmd.echo"], Session(user=User(id="b", authority=1))) is False

    @pytest.mark.asyncio
    async def test_conditional_depend_edge(self, permissions: Permissions, member: Session) -> None:
        enabled = {"value": False}
        permissions.depend("cmd.bar", "cmd.secret", lambda session: enabled["value"])

        assert await permissions.test({"cmd.bar"}, ["cmd.bar"], member) is True
        enabled["value"] = True
        assert await permissions.test({"cmd.bar"}, ["cmd.bar"], member) is False

    @pytest.mark.asyncio
    async def test_duplicate_links_need_one_disposal_each(self, permissions: Permissions, member: Session) -> None:
        first = permissions.inherit("role.admin", "cmd.ban")
        second = permissions.inherit("role.admin", "cmd.ban")

        first()
        assert await permissions.test({"role.admin"}, ["cmd.ban"], member) is True
        second()
        assert await permissions.test({"role.admin"}, ["cmd.ban"], member) is False

    @pytest.mark.asyncio
    async def test_session_defaults_to_anonymous(self, permissions: Permissions) -> None:
        permissions.authority(5, "cmd.any")
        assert await permissions.test(set(), ["cmd.any"]) is True


class TestProviderMemoization:
    @pytest.mark.asyncio
    async def test_shared_grantor_checked_once(self, permissions: Permissions, member: Session) -> None:
        calls: list[str] = []

        def grant(name: str, session: Session) -> bool:
            calls.append(name)
            return True

        permissions.provide("role.mod", grant)
        permissions.inherit("role.mod", "cmd.a")
        permissions.inherit("role.mod", "cmd.b")
        permissions.depend("cmd.a", "cmd.b")

        assert await permissions.test(set(), ["cmd.a"], member) is True
        assert calls == ["role.mod"]

    @pytest.mark.asyncio
    async def test_failing_dependency_short_circuits(self, permissions: Permissions, member: Session) -> None:
        assert await permissions.test(set(), ["cmd.a", "cmd.b"], member) is False

    @pytest.mark.asyncio
    async def test_provider_error_counts_as_denial(self, permissions: Permissions, member: Session) -> None:
        def broken(name: str, session: Session) -> bool:
            raise RuntimeError("provider down")

        permissions.provide("cmd.a", broken)
        assert await permissions.test(set(), ["cmd.a"], member) is False


class TestAuthority:
    @pytest.mark.parametrize("value", ["3", None, True, 2.5j])
    def test_non_numeric_value_is_ignored(self, permissions: Permissions, value: object) -> None:
        assert permissions.authority(value, "cmd.x") is None
        assert permissions.list() == []

    def test_numeric_value_links_authority_capability(self, permissions: Permissions) -> None:
        dispose = permissions.authority(3, "cmd.x")
        assert dispose is not None
        assert permissions.inherits.conditions("cmd.x", "authority.3") == [True]


class TestTopology:
    def test_list_unions_both_graphs(self, permissions: Permissions) -> None:
        permissions.inherit("authority.1", "cmd.a")
        permissions.depend("cmd.b", "cmd.c")
        permissions.inherit("authority.2", "cmd.b")
        assert permissions.list() == ["cmd.a", "cmd.b"]

    def test_mutations_emit_topology_event(self, permissions: Permissions, events: EventBus) -> None:
        seen: list[str] = []
        events.on(TOPOLOGY_EVENT, lambda: seen.append("changed"))

        dispose_inherit = permissions.inherit("a", "b")
        dispose_depend = permissions.depend("c", "d")
        dispose_inherit()
        dispose_depend()
        dispose_depend()

        assert seen == ["changed"] * 4

    @pytest.mark.asyncio
    async def test_builtin_providers_are_seeded(self, permissions: Permissions) -> None:
        assert permissions.providers.has("authority.*")
        assert permissions.providers.has("bot.*")
        assert await permissions.check("authority.1", Session(user=User(id="a", authority=1))) is True
