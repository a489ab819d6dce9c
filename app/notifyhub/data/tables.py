from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Index, MetaData, String, Table


metadata = MetaData()


user_preferences = Table(
    "user_preferences",
    metadata,
    Column("user_id", String(255), primary_key=True),
    Column("email", String(255)),
    Column("phone", String(32)),
    Column("name", String(255)),
    Column("email_enabled", Boolean, nullable=False, default=True),
    Column("sms_enabled", Boolean, nullable=False, default=False),
    Column("preferred_language", String(16), nullable=False, default="en"),
    Column("is_deleted", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

Index("ix_user_preferences_is_deleted", user_preferences.c.is_deleted)
