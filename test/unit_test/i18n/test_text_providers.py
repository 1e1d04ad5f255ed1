from __future__ import annotations

import pytest

from chatops_engine.i18n import BuiltinTextProvider, StackedTextProvider, TextProvider, render
from chatops_engine.i18n.render import candidate_locales, interpolate


class TestBuiltinTextProvider:
    def test_builtin_messages(self) -> None:
        provider = BuiltinTextProvider()

        assert provider.get("internal.low-authority") == "You do not have permission to use this command."
        assert provider.get("internal.error-encountered", locale="zh") == "发生未知错误。"
        assert provider.version() == "builtin-v1"

    def test_missing_path_raises_key_error(self) -> None:
        provider = BuiltinTextProvider()
        with pytest.raises(KeyError):
            provider.get("nope")
        with pytest.raises(KeyError):
            provider.get("internal.low-authority", locale="fr")

    def test_satisfies_protocol(self) -> None:
        assert isinstance(BuiltinTextProvider(), TextProvider)


class TestStackedTextProvider:
    def test_primary_overrides_fallback(self) -> None:
        primary = BuiltinTextProvider(texts={"en": {"internal.low-authority": "Nope."}}, version_id="app")
        stacked = StackedTextProvider(primary, BuiltinTextProvider())

        assert stacked.get("internal.low-authority") == "Nope."
        assert stacked.get("internal.error-encountered").startswith("An internal error")
        assert stacked.version() == "stacked:app+builtin-v1"

    def test_missing_everywhere_raises(self) -> None:
        stacked = StackedTextProvider(BuiltinTextProvider(texts={"en": {}}), BuiltinTextProvider())
        with pytest.raises(KeyError):
            stacked.get("nope")


class TestRender:
    @pytest.mark.parametrize(
        ("locales", "default", "expected"),
        [
            ([], "en", ["en"]),
            (["zh-TW"], "en", ["zh-TW", "zh", "en"]),
            (["en-US", "en"], "en", ["en-US", "en"]),
            (["", "fr"], "en", ["fr", "en"]),
        ],
    )
    def test_candidate_locales(self, locales, default, expected) -> None:
        assert candidate_locales(locales, default) == expected

    @pytest.mark.parametrize(
        ("template", "params", "expected"),
        [
            ("Hello {name}", {"name": "Ann"}, "Hello Ann"),
            ("Unknown command: {0}", ["ping"], "Unknown command: ping"),
            ("Unknown command: {0}", "ping", "Unknown command: ping"),
            ("Hello {name}", {}, "Hello {name}"),
            ("Plain", None, "Plain"),
        ],
    )
    def test_interpolate(self, template, params, expected) -> None:
        assert interpolate(template, params) == expected

    def test_render_prefers_session_locale(self) -> None:
        texts = {"en": {"errors.unknown": "Unknown command: {0}"}, "zh": {"errors.unknown": "未知指令：{0}"}}
        provider = BuiltinTextProvider(texts=texts)

        assert render(provider, "errors.unknown", ["ping"], ["zh-CN"]) == "未知指令：ping"
        assert render(provider, "errors.unknown", ["ping"], ["fr"]) == "Unknown command: ping"

    def test_builtin_catalog_holds_only_engine_messages(self) -> None:
        provider = BuiltinTextProvider()
        for locale in ("en", "zh"):
            with pytest.raises(KeyError):
                provider.get("internal.unknown-command", locale=locale)

    def test_render_unknown_path_returns_path(self) -> None:
        assert render(BuiltinTextProvider(), "missing.path") == "missing.path"
