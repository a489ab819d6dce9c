from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import DEFAULT_LANGUAGE, DispatchOptions


def _to_optional_path(value: Any) -> Optional[Path]:
    if value in (None, "", "null"):
        return None
    return Path(str(value))


@dataclass
class DatabaseConfig:
    engine: str
    name: str
    path: Path

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DatabaseConfig":
        if "name" not in data or "path" not in data:
            raise ValueError("Database configuration requires 'name' and 'path'")
        return cls(
            engine=data.get("type", "sqlite"),
            name=data["name"],
            path=Path(data["path"]),
        )


@dataclass
class EmailConfig:
    smtp_host: str
    from_address: str
    smtp_port: int = 587
    username: str = ""
    password: str = ""
    use_tls: bool = True
    timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmailConfig":
        host = data.get("smtp_host")
        if not host:
            raise ValueError("Email configuration missing 'smtp_host'")
        from_address = data.get("from_address")
        if not from_address:
            raise ValueError("Email configuration missing 'from_address'")
        return cls(
            smtp_host=str(host),
            from_address=str(from_address),
            smtp_port=int(data.get("smtp_port", 587)),
            username=str(data.get("username") or ""),
            password=str(data.get("password") or ""),
            use_tls=bool(data.get("use_tls", True)),
            timeout=float(data.get("timeout", 10.0)),
        )


@dataclass
class SmsConfig:
    account_sid: str
    auth_token: str
    from_number: str
    base_url: str = "https://api.twilio.com"
    timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SmsConfig":
        missing = [key for key in ("account_sid", "auth_token", "from_number") if not data.get(key)]
        if missing:
            raise ValueError(f"SMS configuration missing {', '.join(repr(key) for key in missing)}")
        return cls(
            account_sid=str(data["account_sid"]),
            auth_token=str(data["auth_token"]),
            from_number=str(data["from_number"]),
            base_url=str(data.get("base_url") or "https://api.twilio.com"),
            timeout=float(data.get("timeout", 10.0)),
        )


@dataclass
class TemplatesConfig:
    path: Optional[Path] = None
    include_builtin: bool = True
    default_language: str = DEFAULT_LANGUAGE
    strict_language: bool = False
    remove_unresolved: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplatesConfig":
        return cls(
            path=_to_optional_path(data.get("path")),
            include_builtin=bool(data.get("include_builtin", True)),
            default_language=str(data.get("default_language") or DEFAULT_LANGUAGE).lower(),
            strict_language=bool(data.get("strict_language", False)),
            remove_unresolved=bool(data.get("remove_unresolved", False)),
        )


@dataclass
class TrackingConfig:
    enabled: bool = False
    path: Path = Path("data/sent_notifications.json")
    max_entries: int = 100
    message_limit: int = 100

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackingConfig":
        max_entries = int(data.get("max_entries", 100))
        if max_entries <= 0:
            raise ValueError("Tracking 'max_entries' must be positive")
        return cls(
            enabled=bool(data.get("enabled", False)),
            path=Path(str(data.get("path") or "data/sent_notifications.json")),
            max_entries=max_entries,
            message_limit=int(data.get("message_limit", 100)),
        )


@dataclass
class LoggingConfig:
    level: str = "INFO"
    directory: Path = Path("logs")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        level = str(data.get("level", "INFO")).upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unsupported log level '{level}'")
        return cls(level=level, directory=Path(str(data.get("dir") or "logs")))


@dataclass
class NotifyHubConfig:
    mode: str = "mock"
    mock_delay: float = 0.6
    email: Optional[EmailConfig] = None
    sms: Optional[SmsConfig] = None
    database: Optional[DatabaseConfig] = None
    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    defaults: Dict[str, Any] = field(default_factory=dict)
    dispatch: DispatchOptions = field(default_factory=DispatchOptions)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def live(self) -> bool:
        return self.mode == "live"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotifyHubConfig":
        mode = str(data.get("mode", "mock")).strip().lower()
        if mode not in {"mock", "live"}:
            raise ValueError(f"Unsupported mode '{mode}', expected 'mock' or 'live'")

        email_raw = data.get("email")
        sms_raw = data.get("sms")
        database_raw = data.get("database")
        config = cls(
            mode=mode,
            mock_delay=float(data.get("mock_delay", 0.6)),
            email=EmailConfig.from_dict(email_raw) if isinstance(email_raw, dict) else None,
            sms=SmsConfig.from_dict(sms_raw) if isinstance(sms_raw, dict) else None,
            database=DatabaseConfig.from_dict(database_raw) if isinstance(database_raw, dict) else None,
            templates=TemplatesConfig.from_dict(data.get("templates") or {}),
            defaults=dict(data.get("defaults") or {}),
            dispatch=DispatchOptions.from_dict(data.get("dispatch")),
            tracking=TrackingConfig.from_dict(data.get("tracking") or {}),
            logging=LoggingConfig.from_dict(data.get("logging") or {}),
        )
        if config.live and config.email is None:
            raise ValueError("Live mode requires an 'email' section")
        return config


@dataclass
class AppConfig:
    notifyhub: NotifyHubConfig

    @classmethod
    def from_dict(cls, data: Dict[str, Dict]) -> "AppConfig":
        if not isinstance(data, dict) or "notifyhub" not in data:
            raise ValueError("Configuration missing top-level 'notifyhub' section")
        return cls(notifyhub=NotifyHubConfig.from_dict(data["notifyhub"] or {}))


def app_config(file_path: str) -> AppConfig:
    with open(file_path, "r", encoding="utf-8") as file:
        config_dict = yaml.safe_load(file)
    return AppConfig.from_dict(config_dict)


load_config = app_config
