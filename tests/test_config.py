from __future__ import annotations

from pathlib import Path

import pytest

from notifyhub.config import AppConfig, NotifyHubConfig, load_config


def test_load_example_config():
    config = load_config(str(Path(__file__).resolve().parents[1] / "app" / "config.example.yaml"))

    hub = config.notifyhub
    assert hub.mode == "mock"
    assert hub.email.smtp_host == "smtp.example.com"
    assert hub.sms.from_number == "+15005550006"
    assert hub.database.engine == "sqlite"
    assert hub.database.path == Path("data")
    assert hub.templates.default_language == "en"
    assert hub.defaults["serviceName"] == "NotifyHub"
    assert hub.dispatch.parallel_send is True
    assert hub.tracking.enabled is True
    assert hub.logging.directory == Path("logs")


def test_minimal_config_uses_defaults():
    hub = AppConfig.from_dict({"notifyhub": {}}).notifyhub

    assert hub.mode == "mock"
    assert hub.live is False
    assert hub.email is None
    assert hub.database is None
    assert hub.templates.include_builtin is True
    assert hub.tracking.enabled is False


def test_missing_section_is_rejected():
    with pytest.raises(ValueError):
        AppConfig.from_dict({"other": {}})


def test_live_mode_requires_email():
    with pytest.raises(ValueError, match="email"):
        NotifyHubConfig.from_dict({"mode": "live"})


def test_unknown_mode_and_dispatch_options_rejected():
    with pytest.raises(ValueError):
        NotifyHubConfig.from_dict({"mode": "carrier-pigeon"})
    with pytest.raises(ValueError, match="Unknown dispatch option"):
        NotifyHubConfig.from_dict({"dispatch": {"retry": True}})


def test_incomplete_sms_section_lists_missing_keys():
    with pytest.raises(ValueError, match="auth_token"):
        NotifyHubConfig.from_dict({"sms": {"account_sid": "AC1", "from_number": "+15005550006"}})


def test_invalid_log_level():
    with pytest.raises(ValueError):
        NotifyHubConfig.from_dict({"logging": {"level": "LOUD"}})
