from __future__ import annotations

import asyncio
from typing import Any, Mapping

from notifyhub.batch import STATUS_FAILED, STATUS_SKIPPED, STATUS_SUCCESS, BatchOrchestrator, classify_outcome
from notifyhub.channels import MockEmailSender, MockSmsSender, SendReceipt
from notifyhub.dispatcher import DispatchExecutor
from notifyhub.models import DispatchOptions, DispatchResult
from notifyhub.preferences import InMemoryPreferenceStore
from notifyhub.templates import TemplateRenderer, TemplateResolver, TemplateStore


class CountingSender:
    def __init__(self, name: str) -> None:
        self.name = name
        self.addresses = []

    async def send(self, address: str, content: Any, metadata: Mapping[str, Any]) -> SendReceipt:
        self.addresses.append(address)
        return SendReceipt(message_id=f"{self.name}-{len(self.addresses)}")


def _orchestrator(preferences, senders=None):
    store = TemplateStore.with_builtin_catalog()
    resolver = TemplateResolver(store)
    senders = senders or {"email": MockEmailSender(delay=0), "sms": MockSmsSender(delay=0)}
    executor = DispatchExecutor(preferences, resolver, TemplateRenderer(), senders)
    return BatchOrchestrator(executor, resolver)


def test_parallel_batch_creates_defaults_for_new_users():
    preferences = InMemoryPreferenceStore(
        {
            "ada@example.com": {"email_enabled": True},
            "bob@example.com": {"email_enabled": False, "sms_enabled": False},
            "cy@example.com": {"sms_enabled": True, "phone": "+12025550123"},
        }
    )
    recipients = [
        "ada@example.com",
        "bob@example.com",
        "cy@example.com",
        "new.one@example.com",
        "new.two@example.com",
    ]

    batch = asyncio.run(_orchestrator(preferences).dispatch_batch(recipients, "welcome", {"userName": "Friend"}))

    assert batch.success is True
    assert batch.processed_count == 5
    assert batch.status_counts.to_dict() == {"success": 4, "skipped": 1, "failed": 0}
    assert [result.recipient_id for result in batch.results] == recipients
    assert batch.results[2].channels == ["email", "sms"]
    assert "new.one@example.com" in preferences.all_preferences()
    assert "new.two@example.com" in preferences.all_preferences()
    assert batch.processing_time_seconds >= 0


def test_sequential_fail_fast_stops_after_first_failure():
    preferences = InMemoryPreferenceStore(
        {
            "ada@example.com": {},
            "user-42": {"email_enabled": True},
            "cy@example.com": {},
            "dee@example.com": {},
        }
    )
    email = CountingSender("email")
    options = DispatchOptions(parallel_send=False, fail_fast=True)

    batch = asyncio.run(
        _orchestrator(preferences, {"email": email}).dispatch_batch(
            ["ada@example.com", "user-42", "cy@example.com", "dee@example.com"], "welcome", options=options
        )
    )

    assert len(batch.results) == 2
    assert batch.processed_count == 2
    assert batch.status_counts.failed == 1
    assert batch.status_counts.success == 1
    assert batch.results[1].results["email"].error == "Invalid email format"
    assert email.addresses == ["ada@example.com"]


def test_sequential_without_fail_fast_processes_everyone():
    preferences = InMemoryPreferenceStore({"user-42": {}})
    options = DispatchOptions(parallel_send=False)

    batch = asyncio.run(
        _orchestrator(preferences).dispatch_batch(
            ["ada@example.com", "user-42", "cy@example.com"], "welcome", options=options
        )
    )

    assert batch.processed_count == 3
    assert batch.status_counts.to_dict() == {"success": 2, "skipped": 0, "failed": 1}


def test_fail_fast_is_ignored_in_parallel_mode():
    preferences = InMemoryPreferenceStore({"user-42": {}})

    batch = asyncio.run(
        _orchestrator(preferences).dispatch_batch(
            ["user-42", "ada@example.com"], "welcome", options=DispatchOptions(fail_fast=True)
        )
    )

    assert batch.processed_count == 2


def test_preflight_failure_marks_every_recipient_failed():
    email = CountingSender("email")
    recipients = ["ada@example.com", "bob@example.com", "cy@example.com"]

    batch = asyncio.run(
        _orchestrator(InMemoryPreferenceStore(), {"email": email}).dispatch_batch(
            recipients, "invoiceOverdue", options=DispatchOptions(validate_templates_first=True)
        )
    )

    assert batch.success is False
    assert batch.processed_count == 3
    assert batch.status_counts.failed == 3
    assert all(result.error.startswith("Template not found") for result in batch.results)
    assert email.addresses == []


def test_preflight_checks_sms_when_all_channels_required():
    options = DispatchOptions(validate_templates_first=True, require_all_channels=True)

    batch = asyncio.run(
        _orchestrator(InMemoryPreferenceStore()).dispatch_batch(["ada@example.com"], "passwordReset", options=options)
    )

    assert batch.status_counts.failed == 1
    assert "sms" in batch.error


def test_preflight_passes_for_known_template():
    batch = asyncio.run(
        _orchestrator(InMemoryPreferenceStore()).dispatch_batch(
            ["ada@example.com"], "otp", {"otpCode": "123456"}, DispatchOptions(validate_templates_first=True)
        )
    )

    assert batch.success is True
    assert batch.error is None


def test_malformed_input_is_rejected():
    orchestrator = _orchestrator(InMemoryPreferenceStore())

    not_a_list = asyncio.run(orchestrator.dispatch_batch("ada@example.com", "welcome"))
    no_type = asyncio.run(orchestrator.dispatch_batch(["ada@example.com"], ""))

    assert not_a_list.success is False
    assert not_a_list.error == "Recipient IDs must be provided as a list"
    assert not_a_list.processed_count == 0
    assert no_type.error == "Notification type is required"


def test_empty_batch_is_not_successful():
    batch = asyncio.run(_orchestrator(InMemoryPreferenceStore()).dispatch_batch([], "welcome"))

    assert batch.success is False
    assert batch.processed_count == 0
    assert batch.error is None


def test_classify_outcome():
    assert classify_outcome(DispatchResult("a", "t", success=True)) == STATUS_SUCCESS
    assert classify_outcome(DispatchResult("a", "t", skipped_reason="no channels enabled")) == STATUS_SKIPPED
    assert classify_outcome(DispatchResult("a", "t", error="boom")) == STATUS_FAILED
    assert classify_outcome(DispatchResult("a", "t")) == STATUS_FAILED


def test_non_mapping_data_fails_the_batch_without_dispatch():
    email = CountingSender("email")

    batch = asyncio.run(
        _orchestrator(InMemoryPreferenceStore(), {"email": email}).dispatch_batch(
            ["ada@example.com", "bob@example.com"], "welcome", ["not", "a", "mapping"]
        )
    )

    assert batch.success is False
    assert batch.error == "Data must be a mapping"
    assert batch.processed_count == 0
    assert email.addresses == []
