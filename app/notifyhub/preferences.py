from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from .data import crud
from .models import SUPPORTED_CHANNELS, UserPreference
from .schemas import PreferenceUpdate
from .validators import is_valid_email, is_valid_user_id

logger = logging.getLogger("notifyhub.preferences")


class PreferenceProvider(Protocol):
    def get_preferences(self, user_id: str) -> Optional[UserPreference]:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _PreferenceStoreBase:
    """
    Shared preference logic over a storage backend.

    Subclasses provide ``_load``, ``_save`` and ``_all`` primitives. First-time
    and deleted users receive fresh defaults that are persisted on read.
    """

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None) -> None:
        self._defaults = dict(defaults or {})

    def _load(self, user_id: str) -> Optional[UserPreference]:
        raise NotImplementedError

    def _save(self, preference: UserPreference) -> None:
        raise NotImplementedError

    def _all(self) -> Iterable[UserPreference]:
        raise NotImplementedError

    def create_default(self, user_id: str, overrides: Optional[Mapping[str, Any]] = None) -> UserPreference:
        values = {**self._defaults, **(overrides or {})}
        preference = UserPreference.from_dict(user_id, values)
        if preference.email is None and is_valid_email(user_id):
            preference.email = user_id
        return preference

    def get_preferences(self, user_id: str) -> Optional[UserPreference]:
        if not is_valid_user_id(user_id):
            logger.error("Invalid user ID: %s", user_id)
            return None

        existing = self._load(user_id)
        if existing is not None and not existing.is_deleted:
            return existing

        preference = self.create_default(user_id)
        self._save(preference)
        logger.info(
            "preferences.defaults_created",
            extra={"user_id": user_id, "previously_deleted": existing is not None},
        )
        return preference

    def has_opted_in(self, user_id: str, channel: str) -> bool:
        if not channel or channel.lower() not in SUPPORTED_CHANNELS:
            logger.error("Unknown notification channel: %s", channel)
            return False
        preference = self.get_preferences(user_id)
        return bool(preference and preference.channel_enabled(channel.lower()))

    def update_preferences(
        self,
        user_id: str,
        updates: Union[PreferenceUpdate, Mapping[str, Any]],
    ) -> Optional[UserPreference]:
        if not is_valid_user_id(user_id):
            logger.error("Invalid user ID: %s", user_id)
            return None
        try:
            change = updates if isinstance(updates, PreferenceUpdate) else PreferenceUpdate.model_validate(dict(updates))
        except ValidationError as exc:
            logger.error("Rejected preference update for %s: %s", user_id, exc)
            return None

        preference = self.get_preferences(user_id)
        if preference is None:
            return None
        for key, value in change.changes().items():
            setattr(preference, key, value)
        preference.updated_at = _utcnow()
        self._save(preference)
        return preference

    def set_channel_opt_in(self, user_id: str, channel: str, opt_in: bool) -> bool:
        key = self._channel_field(channel)
        if key is None:
            return False
        return self.update_preferences(user_id, {key: opt_in is True}) is not None

    def toggle_channel(self, user_id: str, channel: str) -> Optional[UserPreference]:
        key = self._channel_field(channel)
        if key is None:
            return None
        preference = self.get_preferences(user_id)
        if preference is None:
            return None
        current = getattr(preference, key)
        logger.info("Toggling %s for %s from %s to %s", key, user_id, current, not current)
        return self.update_preferences(user_id, {key: not current})

    def remove_preferences(self, user_id: str) -> bool:
        if not is_valid_user_id(user_id):
            return False
        existing = self._load(user_id)
        if existing is None or existing.is_deleted:
            return False
        existing.is_deleted = True
        existing.updated_at = _utcnow()
        self._save(existing)
        return True

    def initialize_users(
        self,
        user_ids: Iterable[str],
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        if isinstance(user_ids, (str, bytes)) or not isinstance(user_ids, (list, tuple, set)):
            logger.error("User IDs must be provided as a list")
            return {"success": False, "total_users": 0, "new_users": 0, "skipped_users": 0, "invalid_users": 0}

        stats = {"success": True, "total_users": len(user_ids), "new_users": 0, "skipped_users": 0, "invalid_users": 0}
        for user_id in user_ids:
            if not is_valid_user_id(user_id):
                stats["invalid_users"] += 1
                continue
            existing = self._load(user_id)
            if existing is not None and not existing.is_deleted:
                stats["skipped_users"] += 1
                continue
            self._save(self.create_default(user_id, overrides))
            stats["new_users"] += 1
        return stats

    def all_preferences(self) -> Dict[str, UserPreference]:
        return {preference.user_id: preference for preference in self._all() if not preference.is_deleted}

    def export_preferences(self, path: Path) -> bool:
        """Write every live record to ``path`` as JSON keyed by user id."""
        payload = {user_id: preference.to_dict() for user_id, preference in self.all_preferences().items()}
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to export preferences to %s: %s", path, exc)
            return False
        logger.info("preferences.exported", extra={"path": str(path), "count": len(payload)})
        return True

    def import_preferences(self, data: Mapping[str, Mapping[str, Any]], *, merge: bool = True) -> int:
        if not isinstance(data, Mapping):
            raise TypeError("Import data must be a mapping of user id to preferences")
        if not merge:
            for preference in list(self._all()):
                if preference.user_id not in data and not preference.is_deleted:
                    preference.is_deleted = True
                    self._save(preference)
        imported = 0
        for user_id, values in data.items():
            if not is_valid_user_id(user_id):
                continue
            self._save(UserPreference.from_dict(user_id, values))
            imported += 1
        return imported

    @staticmethod
    def _channel_field(channel: str) -> Optional[str]:
        normalized = (channel or "").lower()
        if normalized not in SUPPORTED_CHANNELS:
            logger.error("Unknown notification channel: %s", channel)
            return None
        return f"{normalized}_enabled"


class InMemoryPreferenceStore(_PreferenceStoreBase):
    def __init__(
        self,
        records: Optional[Mapping[str, Union[UserPreference, Mapping[str, Any]]]] = None,
        *,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(defaults)
        self._records: Dict[str, UserPreference] = {}
        for user_id, record in (records or {}).items():
            if isinstance(record, UserPreference):
                self._records[user_id] = record
            else:
                self._records[user_id] = UserPreference.from_dict(user_id, record)

    def _load(self, user_id: str) -> Optional[UserPreference]:
        return self._records.get(user_id)

    def _save(self, preference: UserPreference) -> None:
        self._records[preference.user_id] = preference

    def _all(self) -> Iterable[UserPreference]:
        return list(self._records.values())


class SqlPreferenceStore(_PreferenceStoreBase):
    """Preference store persisted in the ``user_preferences`` table."""

    def __init__(self, session_factory: sessionmaker, *, defaults: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(defaults)
        self._session_factory = session_factory

    def _load(self, user_id: str) -> Optional[UserPreference]:
        with self._session_factory() as session:
            row = crud.get_preference_row(session, user_id)
        return self._from_row(row) if row is not None else None

    def _save(self, preference: UserPreference) -> None:
        session: Session = self._session_factory()
        try:
            crud.upsert_preference_row(session, self._to_row(preference))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _all(self) -> Iterable[UserPreference]:
        with self._session_factory() as session:
            rows = crud.list_preference_rows(session, include_deleted=True)
        return [self._from_row(row) for row in rows]

    @staticmethod
    def _to_row(preference: UserPreference) -> Dict[str, Any]:
        return {
            "user_id": preference.user_id,
            "email": preference.email,
            "phone": preference.phone,
            "name": preference.name,
            "email_enabled": preference.email_enabled,
            "sms_enabled": preference.sms_enabled,
            "preferred_language": preference.language,
            "is_deleted": preference.is_deleted,
            "created_at": preference.created_at,
            "updated_at": preference.updated_at,
        }

    @staticmethod
    def _from_row(row: Mapping[str, Any]) -> UserPreference:
        return UserPreference.from_dict(row["user_id"], row)
