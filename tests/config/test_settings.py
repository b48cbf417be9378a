from __future__ import annotations

import pytest

from routekeeper.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_console_settings,
    get_gateway_config,
)
from routekeeper.config.gateway import (
    GATEWAY_TIMEOUT_ENV,
    GATEWAY_TOKEN_ENV,
    GATEWAY_URL_ENV,
)


@pytest.fixture(autouse=True)
def clean_console_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ROUTEKEEPER_VERIFY_CONCURRENCY",
        "ROUTEKEEPER_DEFAULT_WEIGHT",
        "ROUTEKEEPER_DEFAULT_PRIORITY",
        "ROUTEKEEPER_AUTO_ASSOCIATE_ON_ADD",
        "ROUTEKEEPER_AUTO_CLEAN_ON_DELETE",
        "ROUTEKEEPER_PRUNE_EMPTY_CATALOGS",
        GATEWAY_URL_ENV,
        GATEWAY_TOKEN_ENV,
        GATEWAY_TIMEOUT_ENV,
    ):
        monkeypatch.delenv(name, raising=False)


def test_console_settings_defaults() -> None:
    settings = get_console_settings()

    assert settings.verify_concurrency == 3
    assert settings.default_weight == 5
    assert settings.default_priority == 100
    assert not settings.auto_associate_on_add
    assert not settings.auto_clean_on_delete
    assert not settings.prune_empty_catalogs


def test_console_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROUTEKEEPER_VERIFY_CONCURRENCY", "8")
    monkeypatch.setenv("ROUTEKEEPER_AUTO_ASSOCIATE_ON_ADD", "true")
    monkeypatch.setenv("ROUTEKEEPER_DEFAULT_PRIORITY", "0")

    settings = get_console_settings()

    assert settings.verify_concurrency == 8
    assert settings.auto_associate_on_add
    assert settings.default_priority == 0


def test_console_settings_reject_zero_concurrency(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROUTEKEEPER_VERIFY_CONCURRENCY", "0")

    with pytest.raises(ConfigurationError):
        get_console_settings()


def test_gateway_config_requires_url_and_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(GATEWAY_URL_ENV, "http://gateway.local")

    with pytest.raises(MissingConfigurationError, match=GATEWAY_TOKEN_ENV):
        get_gateway_config()


def test_gateway_config_builds_admin_and_verification_transports(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv(GATEWAY_URL_ENV, "http://gateway.local/")
    monkeypatch.setenv(GATEWAY_TOKEN_ENV, "secret")
    monkeypatch.setenv(GATEWAY_TIMEOUT_ENV, "12")

    config = get_gateway_config()
    admin = config.admin_resilience()
    verification = config.verification_resilience()

    assert config.base_url == "http://gateway.local"
    assert admin.base_url == "http://gateway.local"
    assert admin.default_headers == {"Authorization": "Bearer secret"}
    assert admin.timeout_seconds == 12
    assert admin.ratelimit is not None
    assert verification.retry.total == 0
    assert verification.ratelimit is None
    assert verification.timeout_seconds == 12
    assert verification.default_headers == {"Authorization": "Bearer secret"}
