from __future__ import annotations

import json

from notifyhub.config import DatabaseConfig
from notifyhub.data.db import initialize_database
from notifyhub.models import UserPreference
from notifyhub.preferences import InMemoryPreferenceStore, SqlPreferenceStore


def _sql_store(tmp_path) -> SqlPreferenceStore:
    session_factory = initialize_database(DatabaseConfig(engine="sqlite", name="prefs.db", path=tmp_path))
    return SqlPreferenceStore(session_factory)


def test_first_time_user_gets_persisted_defaults():
    store = InMemoryPreferenceStore()

    preference = store.get_preferences("new.user@example.com")

    assert preference.email_enabled is True
    assert preference.sms_enabled is False
    assert preference.preferred_language == "en"
    assert preference.email == "new.user@example.com"
    assert "new.user@example.com" in store.all_preferences()


def test_invalid_user_id_returns_none():
    store = InMemoryPreferenceStore()

    assert store.get_preferences("x") is None
    assert store.get_preferences("broken@") is None
    assert store.all_preferences() == {}


def test_deleted_user_is_replaced_with_defaults():
    store = InMemoryPreferenceStore(
        {"ada@example.com": {"email_enabled": False, "sms_enabled": True, "phone": "+12025550123", "is_deleted": True}}
    )

    preference = store.get_preferences("ada@example.com")

    assert preference.is_deleted is False
    assert preference.email_enabled is True
    assert preference.sms_enabled is False
    assert preference.phone is None


def test_update_preferences_validates_booleans():
    store = InMemoryPreferenceStore()

    assert store.update_preferences("ada@example.com", {"sms_enabled": "yes"}) is None
    assert store.update_preferences("ada@example.com", {"unknown": True}) is None
    assert store.update_preferences("ada@example.com", {}) is None

    updated = store.update_preferences("ada@example.com", {"sms_enabled": True, "preferred_language": "FR"})
    assert updated.sms_enabled is True
    assert updated.preferred_language == "fr"


def test_opt_in_and_toggle():
    store = InMemoryPreferenceStore()

    assert store.has_opted_in("ada@example.com", "email")
    assert not store.has_opted_in("ada@example.com", "sms")
    assert not store.has_opted_in("ada@example.com", "pigeon")

    assert store.set_channel_opt_in("ada@example.com", "sms", True)
    assert store.has_opted_in("ada@example.com", "sms")
    assert not store.set_channel_opt_in("ada@example.com", "fax", True)

    toggled = store.toggle_channel("ada@example.com", "email")
    assert toggled.email_enabled is False


def test_remove_is_a_soft_delete():
    store = InMemoryPreferenceStore({"ada@example.com": {"sms_enabled": True}})

    assert store.remove_preferences("ada@example.com")
    assert not store.remove_preferences("ada@example.com")
    assert "ada@example.com" not in store.all_preferences()


def test_initialize_users_stats():
    store = InMemoryPreferenceStore({"existing@example.com": {}})

    stats = store.initialize_users(
        ["existing@example.com", "fresh@example.com", "no"],
        {"sms_enabled": True},
    )

    assert stats == {"success": True, "total_users": 3, "new_users": 1, "skipped_users": 1, "invalid_users": 1}
    assert store.get_preferences("fresh@example.com").sms_enabled is True
    assert store.initialize_users("fresh@example.com")["success"] is False


def test_import_preferences_replace_mode():
    store = InMemoryPreferenceStore({"old@example.com": {}})

    imported = store.import_preferences({"new@example.com": {"sms_enabled": True}}, merge=False)

    assert imported == 1
    assert list(store.all_preferences()) == ["new@example.com"]


def test_sql_store_round_trip(tmp_path):
    store = _sql_store(tmp_path)

    created = store.get_preferences("ada@example.com")
    assert created.email_enabled is True

    store.update_preferences("ada@example.com", {"sms_enabled": True, "phone": "+12025550123", "name": "Ada"})
    reloaded = _sql_store(tmp_path).get_preferences("ada@example.com")

    assert reloaded.sms_enabled is True
    assert reloaded.phone == "+12025550123"
    assert reloaded.name == "Ada"


def test_sql_store_soft_delete_and_defaults(tmp_path):
    store = _sql_store(tmp_path)
    store.import_preferences({"ada@example.com": {"email_enabled": False, "sms_enabled": True}})

    assert store.remove_preferences("ada@example.com")
    assert store.all_preferences() == {}

    fresh = store.get_preferences("ada@example.com")
    assert fresh.email_enabled is True
    assert fresh.sms_enabled is False


def test_user_preference_from_dict_defaults():
    preference = UserPreference.from_dict("ada@example.com", {})

    assert preference.email_enabled is True
    assert preference.sms_enabled is False
    assert preference.language == "en"


def test_export_then_import_round_trip(tmp_path):
    source = InMemoryPreferenceStore(
        {
            "ada@example.com": {"sms_enabled": True, "phone": "+12025550123", "preferred_language": "es"},
            "gone@example.com": {"is_deleted": True},
        }
    )
    path = tmp_path / "exports" / "preferences.json"

    assert source.export_preferences(path) is True

    target = InMemoryPreferenceStore()
    assert target.import_preferences(json.loads(path.read_text(encoding="utf-8"))) == 1
    restored = target.get_preferences("ada@example.com")
    assert restored.sms_enabled is True
    assert restored.phone == "+12025550123"
    assert restored.preferred_language == "es"
    assert "gone@example.com" not in target.all_preferences()


def test_export_reports_write_failure(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")

    assert InMemoryPreferenceStore({"ada@example.com": {}}).export_preferences(blocker / "out.json") is False
