# Overview: Shared controller plumbing: DB handle, common error responses, session lookups.

from __future__ import annotations

from urllib.parse import urlencode

from flask import current_app
from sqlalchemy.orm import Session as DbSession

from ..http import Request, Response, Router, StatusCode
from ..models import Customer


def with_query(path: str, **params) -> str:
    """/login + error="Bad input" -> /login?error=Bad+input"""
    return f"{path}?{urlencode(params)}" if params else path


class Controller:
    """
    Base for every controller. Holds the pooled DB handle handed to each model
    call and the responses every handler shares.
    """

    def __init__(self, db: DbSession):
        self.db = db

    def register_routes(self, router: Router) -> None:
        raise NotImplementedError

    def current_customer(self, req: Request) -> Customer | None:
        customer_id = req.get_session().customer_id
        if customer_id is None:
            return None
        return Customer.read(self.db, customer_id)

    def can_access(self, req: Request, owner_id: int) -> bool:
        """Owners see their own rows; admins see everyone's."""
        customer = self.current_customer(req)
        return customer is not None and (customer.id == owner_id or customer.is_admin)

    def invalid_id(self, res: Response) -> None:
        res.send(
            StatusCode.BadRequest,
            "Invalid ID",
            template="ErrorView",
            payload={"error": "Invalid ID"},
        )

    def not_found(self, res: Response, entity: str) -> None:
        res.send(StatusCode.NotFound, f"{entity} not found", template="ErrorView")

    def bad_request(self, res: Response, message: str, *, redirect: str | None = None) -> None:
        res.send(
            StatusCode.BadRequest,
            message,
            template="ErrorView",
            payload={"error": message},
            redirect=redirect,
        )

    def fail(self, res: Response, action: str) -> None:
        """Log the in-flight exception and answer 500 without leaking it."""
        self.db.rollback()
        current_app.logger.exception("Failed while %s", action)
        message = f"Error while {action}"
        res.send(
            StatusCode.InternalServerError,
            message,
            template="ErrorView",
            payload={"error": message},
        )
