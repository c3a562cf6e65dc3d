# Overview: Maps (HTTP method, path pattern) to controller handlers on the Flask URL map.

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable

from flask import Flask, current_app, jsonify, request
from sqlalchemy.orm import Session as DbSession
from werkzeug.exceptions import HTTPException

from ..services import session_service
from .cookie import Cookie
from .request import Request
from .response import Response, StatusCode

Handler = Callable[[Request, Response], None]

_NAMED_SEGMENT = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def to_rule(pattern: str) -> str:
    """/cart/items/:productId -> /cart/items/<productId>"""
    return _NAMED_SEGMENT.sub(r"<\1>", pattern)


@dataclass(frozen=True)
class Route:
    method: str
    pattern: str
    rule: str
    endpoint: str
    handler: Handler


class Router:
    """
    Registers controller handlers as Flask views.

    Named segments are plain strings, so a non-numeric id still reaches the
    handler (which answers 400 "Invalid ID"). Literal routes should be
    registered before parameterized ones sharing a prefix; Werkzeug ranks
    static segments first regardless.
    """

    def __init__(self, app: Flask, db: DbSession):
        self.app = app
        self.db = db
        self.routes: list[Route] = []
        self._handlers: dict[str, Handler] = {}

    def get(self, pattern: str, handler: Handler) -> None:
        self.add("GET", pattern, handler)

    def post(self, pattern: str, handler: Handler) -> None:
        self.add("POST", pattern, handler)

    def put(self, pattern: str, handler: Handler) -> None:
        self.add("PUT", pattern, handler)

    def delete(self, pattern: str, handler: Handler) -> None:
        self.add("DELETE", pattern, handler)

    def add(self, method: str, pattern: str, handler: Handler) -> None:
        method = method.upper()
        rule = to_rule(pattern)
        endpoint = f"{method} {pattern}"
        if endpoint in self._handlers:
            raise ValueError(f"Route already registered: {endpoint}")
        self.app.add_url_rule(rule, endpoint=endpoint, view_func=self._view(handler), methods=[method])
        self._handlers[endpoint] = handler
        self.routes.append(Route(method, pattern, rule, endpoint, handler))

    def match(self, method: str, path: str) -> tuple[Handler, dict[str, Any]]:
        """
        Resolve a request line the same way dispatch does.

        Raises werkzeug NotFound / MethodNotAllowed when nothing matches.
        """
        adapter = self.app.url_map.bind("localhost")
        endpoint, params = adapter.match(path, method=method.upper())
        return self._handlers[endpoint], params

    def _view(self, handler: Handler):
        def view(**params):
            req = Request(request, self.db, params)
            res = Response(wants_html=req.wants_html())
            handler(req, res)

            if not res.sent:
                current_app.logger.error("Handler for %s %s sent no response", req.method, req.path)
                res.send(StatusCode.InternalServerError, "Internal server error", template="ErrorView")

            if req.session_loaded:
                self._persist_session(req, res)
            return res.to_flask()

        view.__name__ = getattr(handler, "__name__", "view")
        return view

    def _persist_session(self, req: Request, res: Response) -> None:
        session = req.get_session()
        cookie_name = current_app.config["SESSION_ID_COOKIE_NAME"]
        destroyed = session.destroyed
        try:
            stored = session_service.save(self.db, session)
        except Exception:
            self.db.rollback()
            current_app.logger.exception("Failed to persist session")
            raise
        if stored:
            res.set_cookie(Cookie(cookie_name, session.id))
        elif destroyed:
            res.delete_cookie(cookie_name)


def register_error_handlers(app: Flask) -> None:
    """Unmatched paths and methods answer in the same JSON shape as handlers."""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        resp = jsonify({"message": e.name})
        resp.status_code = e.code or 500
        return resp
