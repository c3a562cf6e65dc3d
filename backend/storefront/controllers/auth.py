# Overview: Registration, login and logout; owns the session lifecycle.

from __future__ import annotations

from flask import current_app

from ..errors import DuplicateEmailError, InvalidCredentialsError
from ..http import Cookie, Request, Response, Router, StatusCode
from ..http.session import EMAIL, IS_ADMIN, IS_LOGGED_IN, USER_ID
from ..models import Category, Customer
from ..services import customer_service
from ..validation import ValidationError
from .base import Controller, with_query


class AuthController(Controller):
    def register_routes(self, router: Router) -> None:
        router.get("/register", self.get_registration_form)
        router.post("/register", self.register)
        router.get("/login", self.get_login_form)
        router.post("/login", self.login)
        router.get("/logout", self.logout)

    def get_registration_form(self, req: Request, res: Response) -> None:
        params = req.get_search_params()
        error_message = params.get("error", "")
        try:
            categories = [c.props for c in Category.read_all(self.db)]
        except Exception:
            self.fail(res, "loading registration form")
            return
        res.send(
            StatusCode.OK,
            error_message or params.get("success", "") or "Registration form",
            template="Register",
            payload={
                "message": error_message or params.get("success", ""),
                "error": error_message or None,
                "categories": categories,
            },
        )

    def register(self, req: Request, res: Response) -> None:
        try:
            customer = customer_service.register_customer(self.db, req.body)
        except (ValidationError, DuplicateEmailError) as e:
            self.bad_request(res, str(e), redirect=with_query("/register", error=str(e)))
            return
        except Exception:
            self.fail(res, "registering customer")
            return

        res.send(
            StatusCode.Created,
            "Customer created successfully!",
            redirect=with_query("/login", success="Account created"),
            payload={"customer": customer.props},
        )

    def get_login_form(self, req: Request, res: Response) -> None:
        remembered = req.find_cookie(EMAIL)
        error_message = req.get_search_params().get("error", "")
        if error_message:
            res.send(
                StatusCode.BadRequest,
                "Login form",
                template="LoginForm",
                payload={"title": "Login", "message": f"{error_message}.", "email": remembered.value if remembered else ""},
            )
            return
        res.send(
            StatusCode.OK,
            "Login form",
            template="LoginForm",
            payload={"title": "Login", "email": remembered.value if remembered else ""},
        )

    def login(self, req: Request, res: Response) -> None:
        email = req.body.get("email")
        password = req.body.get("password")
        remember = req.body.get("remember")

        if not email:
            self.bad_request(res, "Email is required.", redirect=with_query("/login", error="Email is required"))
            return
        if not password:
            self.bad_request(res, "Password is required.", redirect=with_query("/login", error="Password is required"))
            return

        try:
            customer = Customer.login(self.db, email, password)
        except InvalidCredentialsError as e:
            current_app.logger.info("Failed login attempt for %s", email)
            res.send(
                StatusCode.Unauthorized,
                str(e),
                template="LoginForm",
                redirect=with_query("/login", error="Invalid credentials"),
            )
            return
        except Exception:
            self.fail(res, "logging in")
            return

        session = req.get_session()
        session.set(IS_LOGGED_IN, True)
        session.set(USER_ID, customer.id)
        session.set(IS_ADMIN, bool(customer.is_admin))
        if remember in ("on", True, "true"):
            session.set(EMAIL, customer.email)
            res.set_cookie(Cookie(EMAIL, customer.email, max_age=current_app.config["REMEMBER_COOKIE_MAX_AGE"]))

        res.send(
            StatusCode.OK,
            "Logged in successfully!",
            redirect="/products",
            payload={"customer": customer.props, "isLoggedIn": True},
        )

    def logout(self, req: Request, res: Response) -> None:
        req.get_session().destroy()
        res.send(StatusCode.OK, "Logged out successfully", redirect="/")
