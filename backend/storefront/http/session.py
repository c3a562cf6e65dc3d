# Overview: Per-browser key/value session state carried by the session_id cookie.

from __future__ import annotations

from typing import Any

# Keys written on login and read by the access guards and controllers
USER_ID = "userId"
IS_LOGGED_IN = "isLoggedIn"
IS_ADMIN = "isAdmin"
EMAIL = "email"


class Session:
    """
    In-request view of one stored session.

    Created implicitly the first time a handler asks for it; persisted by the
    router after the handler runs (see services/session_service.save).
    """

    def __init__(self, id: str, data: dict | None = None, *, is_new: bool = False):
        self.id = id
        self.data: dict[str, Any] = dict(data or {})
        self.is_new = is_new
        self.modified = False
        self.destroyed = False

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value
        self.modified = True

    def destroy(self) -> None:
        """Forget every key; the stored row is dropped when the request finishes."""
        self.data.clear()
        self.destroyed = True
        self.modified = True

    def is_logged_in(self) -> bool:
        return bool(self.data.get(IS_LOGGED_IN)) and self.data.get(USER_ID) is not None

    @property
    def customer_id(self) -> int | None:
        return self.data.get(USER_ID)

    @property
    def is_admin(self) -> bool:
        return bool(self.data.get(IS_ADMIN))

    def __repr__(self) -> str:
        return f"<Session {self.id[:8]}... keys={sorted(self.data)}>"
