from __future__ import annotations

import pytest

from chatops_engine import App, Session, User
from chatops_engine.core.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the process environment defaults used by the suite."""
    return Settings(CHATOPS_MAX_DEPTH=8, CHATOPS_DEFAULT_AUTHORITY=1, CHATOPS_DEFAULT_LOCALE="en")


@pytest.fixture
def app(settings: Settings):
    app = App(settings)
    yield app
    app.dispose()


@pytest.fixture
def user() -> User:
    return User(id="alice", authority=1)


@pytest.fixture
def session(app: App, user: User) -> Session:
    return app.session(user=user)
