# Overview: Outgoing response shaping: status, message, view name, payload, redirect, cookies.

from __future__ import annotations

from enum import IntEnum
from typing import Any

from flask import jsonify, redirect as flask_redirect

from .cookie import Cookie


class StatusCode(IntEnum):
    OK = 200
    Created = 201
    NoContent = 204
    Redirect = 303
    BadRequest = 400
    Unauthorized = 401
    Forbidden = 403
    NotFound = 404
    InternalServerError = 500


class Response:
    """
    Collects exactly one send() per request, plus any cookies, and turns it
    into a Flask response.

    JSON clients always get the body
        {"message": ..., "template": ..., "payload": ..., "redirect": ...}
    (keys left out when unset). Browser clients that asked for HTML are sent
    a 303 to `redirect` when one is given.
    """

    def __init__(self, *, wants_html: bool = False):
        self.wants_html = wants_html
        self.status_code: StatusCode | None = None
        self.message: str | None = None
        self.template: str | None = None
        self.payload: Any = None
        self.redirect: str | None = None
        self.cookies: list[Cookie] = []
        self.deleted_cookies: list[str] = []

    @property
    def sent(self) -> bool:
        return self.status_code is not None

    def send(
        self,
        status_code: StatusCode,
        message: str,
        *,
        template: str | None = None,
        payload: Any = None,
        redirect: str | None = None,
    ) -> None:
        if self.sent:
            raise RuntimeError("Response already sent")
        self.status_code = StatusCode(status_code)
        self.message = message
        self.template = template
        self.payload = payload
        self.redirect = redirect

    def set_cookie(self, cookie: Cookie) -> None:
        self.cookies = [c for c in self.cookies if c.name != cookie.name]
        self.cookies.append(cookie)

    def delete_cookie(self, name: str) -> None:
        self.cookies = [c for c in self.cookies if c.name != name]
        self.deleted_cookies.append(name)

    def body(self) -> dict:
        body: dict[str, Any] = {"message": self.message}
        if self.template is not None:
            body["template"] = self.template
        if self.payload is not None:
            body["payload"] = self.payload
        if self.redirect is not None:
            body["redirect"] = self.redirect
        return body

    def to_flask(self):
        if not self.sent:
            raise RuntimeError("Response was never sent")

        if self.wants_html and self.redirect:
            resp = flask_redirect(self.redirect, code=StatusCode.Redirect)
        else:
            resp = jsonify(self.body())
            resp.status_code = int(self.status_code)

        for name in self.deleted_cookies:
            resp.delete_cookie(name, path="/")
        for cookie in self.cookies:
            resp.set_cookie(
                cookie.name,
                cookie.value,
                max_age=cookie.max_age,
                path=cookie.path,
                httponly=cookie.http_only,
                samesite="Lax",
            )
        return resp
