# Overview: Access guards for controller handlers (login and admin checks).

from functools import wraps

from .http.response import StatusCode
from .http.session import IS_ADMIN
from .models import Customer


def require_login(f):
    """
    Require a logged-in session.

    Returns 401 (redirect /login) when the session holds no customer, or when
    the customer behind it no longer exists (the stale session is destroyed).
    """
    @wraps(f)
    def decorated_function(self, req, res, *args, **kwargs):
        session = req.get_session()
        if not session.is_logged_in():
            return res.send(StatusCode.Unauthorized, "Unauthorized", redirect="/login")

        if Customer.read(self.db, session.customer_id) is None:
            session.destroy()
            return res.send(StatusCode.Unauthorized, "Unauthorized", redirect="/login")

        return f(self, req, res, *args, **kwargs)

    return decorated_function


def require_admin(f):
    """
    Require a logged-in admin. The flag is re-read from the customer row so
    revoking is_admin takes effect on the next request.
    """
    @wraps(f)
    def decorated_function(self, req, res, *args, **kwargs):
        session = req.get_session()
        if not session.is_logged_in():
            return res.send(StatusCode.Unauthorized, "Unauthorized", redirect="/login")

        customer = Customer.read(self.db, session.customer_id)
        if customer is None:
            session.destroy()
            return res.send(StatusCode.Unauthorized, "Unauthorized", redirect="/login")

        if not customer.is_admin:
            if session.is_admin:
                session.set(IS_ADMIN, False)
            return res.send(StatusCode.Forbidden, "Forbidden", template="ErrorView")

        return f(self, req, res, *args, **kwargs)

    return decorated_function
