# Overview: Service-layer operations for browser sessions; encapsulates the session table.

"""
Server-side session storage.

WHY: The session id travels in the session_id cookie; everything else
(userId, isLoggedIn, isAdmin, remembered email) stays on the server.

- Ids are 32 random bytes (secrets.token_hex), never derived from user data
- Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS) and idle timeout
  (SESSION_IDLE_TIMEOUT_MINUTES) from app config
- Rows are written only once a session holds data, so anonymous page views
  do not fill the table
- destroy() on logout drops the row; the next request starts a fresh id
"""

from __future__ import annotations

import secrets
from datetime import timedelta

import sqlalchemy as sa
from flask import current_app
from sqlalchemy.orm import Session as DbSession

from ..http.session import Session
from ..models import SessionRecord
from ..time_utils import utcnow


def generate_session_id() -> str:
    return secrets.token_hex(32)  # 32 bytes = 64 hex characters


def _idle_timeout() -> timedelta:
    return timedelta(minutes=current_app.config["SESSION_IDLE_TIMEOUT_MINUTES"])


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config["SESSION_ABSOLUTE_TIMEOUT_HOURS"])


def _is_expired(record: SessionRecord, now) -> bool:
    return record.expires_at < now or now - record.last_used_at > _idle_timeout()


def load(db: DbSession, session_id: str | None) -> Session:
    """
    Resume the stored session for `session_id`, or start a new (unsaved) one
    when the id is missing, unknown or expired.
    """
    if session_id:
        record = db.get(SessionRecord, session_id)
        if record is not None:
            if not _is_expired(record, utcnow()):
                return Session(record.id, record.data)
            db.delete(record)
            db.commit()
    return Session(generate_session_id(), is_new=True)


def save(db: DbSession, session: Session) -> bool:
    """
    Persist the session. Returns True when a row now backs session.id
    (so the cookie should be (re)issued), False otherwise.
    """
    now = utcnow()

    if session.destroyed:
        record = db.get(SessionRecord, session.id)
        if record is not None:
            db.delete(record)
            db.commit()
        session.id = generate_session_id()
        session.is_new = True
        session.destroyed = False
        session.modified = False
        return False

    if session.is_new and not session.modified:
        return False

    record = db.get(SessionRecord, session.id)
    if record is None:
        record = SessionRecord(
            id=session.id,
            data=dict(session.data),
            created_at=now,
            last_used_at=now,
            expires_at=now + _absolute_timeout(),
        )
        db.add(record)
    else:
        # Reassign so the JSON column is flagged dirty
        record.data = dict(session.data)
        record.last_used_at = now
    db.commit()

    session.is_new = False
    session.modified = False
    return True


def purge_expired(db: DbSession) -> int:
    """Delete sessions past their absolute or idle timeout. Returns rows removed."""
    now = utcnow()
    result = db.execute(
        sa.delete(SessionRecord)
        .where(sa.or_(
            SessionRecord.expires_at < now,
            SessionRecord.last_used_at < now - _idle_timeout(),
        ))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount
