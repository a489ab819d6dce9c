from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.orm import Session

from .tables import user_preferences


def get_preference_row(session: Session, user_id: str) -> Optional[Dict[str, Any]]:
    result = session.execute(
        select(user_preferences).where(user_preferences.c.user_id == user_id)
    ).mappings().first()
    return dict(result) if result is not None else None


def list_preference_rows(session: Session, *, include_deleted: bool = False) -> List[Dict[str, Any]]:
    query = select(user_preferences).order_by(user_preferences.c.user_id)
    if not include_deleted:
        query = query.where(user_preferences.c.is_deleted.is_(False))
    return [dict(row) for row in session.execute(query).mappings()]


def upsert_preference_row(session: Session, payload: Dict[str, Any]) -> None:
    if "user_id" not in payload:
        raise ValueError("payload missing required field 'user_id'")

    user_id = payload["user_id"]
    values = {key: value for key, value in payload.items() if key != "user_id"}
    if get_preference_row(session, user_id) is not None:
        session.execute(
            update(user_preferences)
            .where(user_preferences.c.user_id == user_id)
            .values(**values)
        )
    else:
        session.execute(insert(user_preferences).values(**payload))
