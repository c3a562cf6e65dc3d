# Overview: Landing page and health endpoints.

from __future__ import annotations

import time

import sqlalchemy as sa

from ..http import Request, Response, Router, StatusCode
from ..models import Category, Product
from .base import Controller


class HomeController(Controller):
    def register_routes(self, router: Router) -> None:
        router.get("/", self.get_home_view)
        router.get("/health", self.get_health)

    def get_home_view(self, req: Request, res: Response) -> None:
        session = req.get_session()
        try:
            categories = Category.read_all(self.db)
            products = Product.read_all(self.db)
            res.send(
                StatusCode.OK,
                "HomeView",
                template="HomeView",
                payload={
                    "categories": [c.props for c in categories],
                    "products": [p.props for p in products],
                    "isLoggedIn": session.is_logged_in(),
                    "error": req.get_search_params().get("error"),
                },
            )
        except Exception:
            self.fail(res, "loading home view")

    def get_health(self, req: Request, res: Response) -> None:
        """Database connectivity check for load balancers and deploy scripts."""
        start_time = time.time()
        try:
            self.db.execute(sa.text("SELECT 1"))
        except Exception:
            self.fail(res, "checking database health")
            return
        res.send(
            StatusCode.OK,
            "healthy",
            payload={"database": {"status": "healthy", "latencyMs": round((time.time() - start_time) * 1000, 2)}},
        )
