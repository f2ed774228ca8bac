from __future__ import annotations

import pytest

from skyportal.config.settings import EnvironmentConfig
from tests.helpers import ENV_KEYS, FakeSession


@pytest.fixture()
def clean_environ(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def env(clean_environ) -> EnvironmentConfig:
    return EnvironmentConfig(_env_file=None, LASTNAME="Doe", ROOMNUMBER="412")


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()
