from __future__ import annotations

from ..extensions import db


class SessionRecord(db.Model):
    """
    Server-side storage for one browser session (see services/session_service.py).

    The id is the opaque token carried by the session_id cookie.
    """
    __tablename__ = "session"

    id = db.Column(db.String(64), primary_key=True)
    data = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, nullable=False)
    last_used_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
