# backend/storefront/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    # Overrides must land before db.init_app, which builds the engine
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register controllers on the router
    from .http import Router, register_error_handlers
    from .controllers.home import HomeController
    from .controllers.auth import AuthController
    from .controllers.customers import CustomerController
    from .controllers.addresses import AddressController
    from .controllers.categories import CategoryController
    from .controllers.products import ProductController
    from .controllers.cart import CartController
    from .controllers.orders import OrderController

    router = Router(app, db.session)
    for controller_cls in (
        HomeController,
        AuthController,
        CustomerController,
        AddressController,
        CategoryController,
        ProductController,
        CartController,
        OrderController,
    ):
        controller_cls(db.session).register_routes(router)
    app.extensions["storefront.router"] = router

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
