from __future__ import annotations

import asyncio
import json
import logging

import pytest

from notifyhub import NotificationService
from notifyhub.config import DatabaseConfig, NotifyHubConfig, TrackingConfig
from notifyhub.logging_utils import setup_logging
from notifyhub.models import DispatchOptions, UserPreference
from notifyhub.preferences import InMemoryPreferenceStore, SqlPreferenceStore
from notifyhub.tracker import NotificationTracker


def _config(**overrides) -> NotifyHubConfig:
    return NotifyHubConfig(mode="mock", mock_delay=0, defaults={"serviceName": "NotifyHub"}, **overrides)


def test_end_to_end_with_mock_senders():
    preferences = InMemoryPreferenceStore(
        {"ada@example.com": {"sms_enabled": True, "phone": "+12025550123", "name": "Ada"}}
    )
    service = NotificationService(_config(), preferences=preferences)

    result = asyncio.run(service.send_notification_by_preference("ada@example.com", "otp", {"otpCode": "424242"}))

    assert result.success is True
    assert result.channels == ["email", "sms"]
    assert result.results["sms"].message_id.startswith("mock-sms-")
    payload = result.to_dict()
    assert "combined_delivery" not in payload
    json.dumps(payload)


def test_batch_through_service_applies_overrides():
    service = NotificationService(_config(), preferences=InMemoryPreferenceStore())

    batch = asyncio.run(
        service.send_batch(
            ["ada@example.com", "bob@example.com"],
            "welcome",
            options={"parallel_send": False, "combined_only": True},
        )
    )

    assert batch.processed_count == 2
    assert batch.status_counts.success == 2
    assert all(result.combined_delivery is True for result in batch.results)
    json.dumps(batch.to_dict())


def test_resolve_options_merges_configured_defaults():
    service = NotificationService(
        _config(dispatch=DispatchOptions(parallel_send=False, fail_fast=True)),
        preferences=InMemoryPreferenceStore(),
    )

    assert service.resolve_options() == DispatchOptions(parallel_send=False, fail_fast=True)
    merged = service.resolve_options({"force_send": True})
    assert merged.force_send is True
    assert merged.fail_fast is True
    with pytest.raises(ValueError):
        service.resolve_options({"bogus": True})


def test_service_uses_sql_store_when_database_configured(tmp_path):
    service = NotificationService(
        _config(database=DatabaseConfig(engine="sqlite", name="hub.db", path=tmp_path))
    )

    assert isinstance(service.preferences, SqlPreferenceStore)
    result = asyncio.run(service.send_notification_by_preference("ada@example.com", "welcome"))
    assert result.success is True
    assert service.preferences.get_preferences("ada@example.com").email == "ada@example.com"


def test_service_tracks_attempts(tmp_path):
    journal = tmp_path / "sent.json"
    service = NotificationService(
        _config(tracking=TrackingConfig(enabled=True, path=journal)),
        preferences=InMemoryPreferenceStore(),
    )

    asyncio.run(service.send_notification_by_preference("ada@example.com", "welcome"))

    entries = json.loads(journal.read_text(encoding="utf-8"))
    assert entries[0]["channel"] == "email"
    assert entries[0]["status"] == "sent"


def test_tracker_keeps_newest_entries_and_truncates(tmp_path):
    tracker = NotificationTracker(tmp_path / "sent.json", max_entries=2, message_limit=5)

    for index in range(3):
        tracker.track(user_id=f"user-{index}", channel="sms", recipient="+12025550123", status="sent", message="abcdefgh")

    entries = tracker.load()
    assert [entry["user_id"] for entry in entries] == ["user-1", "user-2"]
    assert entries[-1]["message"] == "abcde"
    assert entries[-1]["truncated"] is True


def test_tracker_resets_corrupt_journal(tmp_path):
    path = tmp_path / "sent.json"
    path.write_text("{not json", encoding="utf-8")

    assert NotificationTracker(path).load() == []


def test_setup_logging_is_idempotent(tmp_path):
    first = setup_logging(tmp_path, level="DEBUG")
    try:
        handler_count = len(first.handlers)
        second = setup_logging(tmp_path, level="INFO")

        assert first is second
        assert handler_count == 3
        assert len(second.handlers) == handler_count
        assert second.level == logging.INFO
        assert (tmp_path / "notifyhub.log").exists()
    finally:
        for handler in list(first.handlers):
            first.removeHandler(handler)
            handler.close()
        first.propagate = True


def test_parallel_batch_journal_keeps_every_attempt(tmp_path):
    journal = tmp_path / "sent.json"
    service = NotificationService(
        _config(tracking=TrackingConfig(enabled=True, path=journal)),
        preferences=InMemoryPreferenceStore(),
    )
    recipients = [f"user{index}@example.com" for index in range(6)]

    asyncio.run(service.send_batch(recipients, "welcome"))

    entries = json.loads(journal.read_text(encoding="utf-8"))
    assert sorted(entry["recipient"] for entry in entries) == sorted(recipients)


def test_service_substitutes_store_defaults_for_deleted_records():
    preferences = InMemoryPreferenceStore(defaults={"sms_enabled": True})
    service = NotificationService(_config(), preferences=preferences)

    substitute = service.planner.effective_preference(
        UserPreference("ada@example.com", is_deleted=True), "ada@example.com"
    )

    assert substitute.sms_enabled is True
    assert substitute.email == "ada@example.com"
