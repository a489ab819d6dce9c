from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

CHANNEL_EMAIL = "email"
CHANNEL_SMS = "sms"
SUPPORTED_CHANNELS = (CHANNEL_EMAIL, CHANNEL_SMS)
DEFAULT_LANGUAGE = "en"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class UserPreference:
    """Per-user channel opt-in state as held by a preference store."""

    user_id: str
    email_enabled: bool = True
    sms_enabled: bool = False
    preferred_language: str = DEFAULT_LANGUAGE
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None
    is_deleted: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def language(self) -> str:
        return (self.preferred_language or DEFAULT_LANGUAGE).strip().lower() or DEFAULT_LANGUAGE

    def channel_enabled(self, channel: str) -> bool:
        if channel == CHANNEL_EMAIL:
            return self.email_enabled
        if channel == CHANNEL_SMS:
            return self.sms_enabled
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email_enabled": self.email_enabled,
            "sms_enabled": self.sms_enabled,
            "preferred_language": self.preferred_language,
            "email": self.email,
            "phone": self.phone,
            "name": self.name,
            "is_deleted": self.is_deleted,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, user_id: str, data: Mapping[str, Any]) -> "UserPreference":
        def to_datetime(value: Any) -> datetime:
            if isinstance(value, datetime):
                return value
            if value:
                return datetime.fromisoformat(str(value))
            return _utcnow()

        return cls(
            user_id=user_id,
            email_enabled=bool(data.get("email_enabled", True)),
            sms_enabled=bool(data.get("sms_enabled", False)),
            preferred_language=str(data.get("preferred_language") or DEFAULT_LANGUAGE).lower(),
            email=data.get("email"),
            phone=data.get("phone"),
            name=data.get("name"),
            is_deleted=bool(data.get("is_deleted", False)),
            created_at=to_datetime(data.get("created_at")),
            updated_at=to_datetime(data.get("updated_at")),
        )


@dataclass(frozen=True, slots=True)
class DispatchOptions:
    """Flags controlling a single dispatch or a batch run."""

    force_send: bool = False
    combined_only: bool = False
    require_all_channels: bool = False
    parallel_send: bool = True
    fail_fast: bool = False
    validate_templates_first: bool = False

    @property
    def wants_combined_check(self) -> bool:
        return self.combined_only or self.require_all_channels

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "DispatchOptions":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown dispatch option(s): {', '.join(unknown)}")
        return cls(**{key: bool(value) for key, value in data.items()})


@dataclass(slots=True)
class ChannelResult:
    success: bool
    requested_language: str
    actual_language: str
    language_fallback_used: bool = False
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message_id": self.message_id,
            "error": self.error,
            "language_fallback_used": self.language_fallback_used,
            "requested_language": self.requested_language,
            "actual_language": self.actual_language,
        }


@dataclass(slots=True)
class DispatchResult:
    """Outcome of routing one notification to one recipient."""

    recipient_id: Optional[str]
    notification_type: Optional[str]
    success: bool = False
    channels: List[str] = field(default_factory=list)
    results: Dict[str, ChannelResult] = field(default_factory=dict)
    combined_delivery: Optional[bool] = None
    partial_delivery: Optional[bool] = None
    preferences_overridden: bool = False
    error: Optional[str] = None
    skipped_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "recipient_id": self.recipient_id,
            "notification_type": self.notification_type,
            "success": self.success,
            "channels": list(self.channels),
            "results": {channel: result.to_dict() for channel, result in self.results.items()},
            "preferences_overridden": self.preferences_overridden,
        }
        if self.combined_delivery is not None:
            payload["combined_delivery"] = self.combined_delivery
            payload["partial_delivery"] = self.partial_delivery
        if self.error:
            payload["error"] = self.error
        if self.skipped_reason:
            payload["skipped_reason"] = self.skipped_reason
        return payload


@dataclass(slots=True)
class StatusCounts:
    success: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"success": self.success, "skipped": self.skipped, "failed": self.failed}


@dataclass(slots=True)
class BatchResult:
    notification_type: Optional[str]
    success: bool = False
    processed_count: int = 0
    status_counts: StatusCounts = field(default_factory=StatusCounts)
    processing_time_seconds: float = 0.0
    results: List[DispatchResult] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "notification_type": self.notification_type,
            "success": self.success,
            "processed_count": self.processed_count,
            "status_counts": self.status_counts.to_dict(),
            "processing_time_seconds": self.processing_time_seconds,
            "results": [result.to_dict() for result in self.results],
        }
        if self.error:
            payload["error"] = self.error
        return payload
