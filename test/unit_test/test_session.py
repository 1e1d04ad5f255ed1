from __future__ import annotations

from chatops_engine import Channel, Session, User
from chatops_engine.i18n import BuiltinTextProvider
from chatops_engine.session import Bot


class _Bot:
    def supports(self, name: str, session: Session) -> bool:
        return True


def test_resolve_computed_values() -> None:
    session = Session(user=User(id="u", authority=4))

    assert session.resolve(3) == 3
    assert session.resolve(lambda s: s.user.authority) == 4


def test_preferred_locales_merge_in_order() -> None:
    session = Session(
        user=User(id="u", locales=["zh", "en"]),
        channel=Channel(id="c", locales=["ja", "zh"]),
        locales=["fr"],
    )

    assert session.preferred_locales() == ["fr", "zh", "en", "ja"]


def test_text_uses_locales_and_default() -> None:
    assert Session(user=User(id="u", locales=["zh"])).text("internal.low-authority") == "权限不足。"
    assert Session(default_locale="zh").text("internal.low-authority") == "权限不足。"
    catalog = BuiltinTextProvider(texts={"en": {"errors.unknown": "Unknown command: {0}"}})
    assert Session(i18n=catalog).text("errors.unknown", ["ping"]) == "Unknown command: ping"


def test_defaults() -> None:
    session = Session()

    assert session.user is None
    assert session.permissions == set()
    assert session.content == ""


def test_bot_protocol() -> None:
    assert isinstance(_Bot(), Bot)
