import contextlib

import pytest

from rolling_restart import platform
from rolling_restart.settings import RestartConfig


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture
def config():
    return RestartConfig(poll_interval=0)


@pytest.fixture
def use_session(monkeypatch):
    """Make the CLI commands use the given session instead of the cf CLI."""
    def _use(session):
        @contextlib.contextmanager
        def _platform_session(*args, **kwargs):
            try:
                yield session
            finally:
                session.close()
        monkeypatch.setattr(platform, "platform_session", _platform_session)
        monkeypatch.setattr("time.sleep", lambda seconds: None)
        return session
    return _use


@pytest.fixture
def no_session(monkeypatch):
    """Fail the test if a CLI command opens a platform session."""
    def _platform_session(*args, **kwargs):
        raise AssertionError("platform session must not be opened")
    monkeypatch.setattr(platform, "platform_session", _platform_session)
