# Overview: Incoming request normalization: body, path params, query params, cookies, session.

from __future__ import annotations

from typing import Any

from flask import Request as FlaskRequest, current_app
from sqlalchemy.orm import Session as DbSession
from werkzeug.datastructures import MultiDict

from ..services import session_service
from ..validation import MAX_INT
from .cookie import Cookie
from .session import Session


class Request:
    def __init__(self, flask_request: FlaskRequest, db: DbSession, params: dict[str, Any] | None = None):
        self._request = flask_request
        self._db = db
        self.params: dict[str, Any] = dict(params or {})
        self._session: Session | None = None
        self._body: dict | None = None

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def path(self) -> str:
        return self._request.path

    @property
    def body(self) -> dict:
        """JSON object body, or form fields for HTML posts; {} when neither."""
        if self._body is None:
            data = self._request.get_json(silent=True)
            if isinstance(data, dict):
                self._body = data
            elif self._request.form:
                self._body = self._request.form.to_dict()
            else:
                self._body = {}
        return self._body

    def get_param(self, name: str) -> str | None:
        value = self.params.get(name)
        return None if value is None else str(value)

    def get_int_param(self, name: str) -> int | None:
        value = self.get_param(name)
        if value is None:
            return None
        try:
            parsed = int(value)
        except ValueError:
            return None
        # Out-of-range ids can never match a row
        return parsed if abs(parsed) <= MAX_INT else None

    def get_id(self) -> int | None:
        """The `:id` path segment as an int, or None when absent/not numeric."""
        return self.get_int_param("id")

    def get_search_params(self) -> MultiDict:
        return self._request.args

    def find_cookie(self, name: str) -> Cookie | None:
        value = self._request.cookies.get(name)
        if value is None:
            return None
        return Cookie(name, value)

    @property
    def session_loaded(self) -> bool:
        return self._session is not None

    def get_session(self) -> Session:
        if self._session is None:
            cookie = self.find_cookie(current_app.config["SESSION_ID_COOKIE_NAME"])
            self._session = session_service.load(self._db, cookie.value if cookie else None)
        return self._session

    def wants_html(self) -> bool:
        best = self._request.accept_mimetypes.best_match(["application/json", "text/html"])
        return best == "text/html"
