# Overview: Customer account CRUD.

from __future__ import annotations

from ..decorators import require_admin, require_login
from ..errors import DuplicateEmailError
from ..http import Request, Response, Router, StatusCode
from ..models import Customer
from ..services import customer_service
from ..validation import ValidationError
from .base import Controller


class CustomerController(Controller):
    def register_routes(self, router: Router) -> None:
        router.post("/customers", self.add_customer)
        router.get("/customers", self.get_all_customers)
        router.get("/customers/:id", self.get_customer)
        router.get("/customers/:id/edit", self.get_edit_customer_form)
        router.put("/customers/:id", self.update_customer)
        router.delete("/customers/:id", self.delete_customer)

    def _is_admin(self, req: Request) -> bool:
        customer = self.current_customer(req)
        return bool(customer and customer.is_admin)

    def _load_for(self, req: Request, res: Response) -> Customer | None:
        """Resolve :id to a customer the caller may see, sending the error response otherwise."""
        customer_id = req.get_id()
        if customer_id is None:
            self.invalid_id(res)
            return None
        customer = Customer.read(self.db, customer_id)
        if customer is None:
            self.not_found(res, "Customer")
            return None
        if not self.can_access(req, customer.id):
            res.send(StatusCode.Forbidden, "Forbidden", template="ErrorView")
            return None
        return customer

    def add_customer(self, req: Request, res: Response) -> None:
        try:
            customer = customer_service.register_customer(
                self.db, req.body, allow_admin=self._is_admin(req)
            )
        except (ValidationError, DuplicateEmailError) as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "creating customer")
            return

        res.send(
            StatusCode.Created,
            "Customer created successfully!",
            redirect="/login",
            payload={"customer": customer.props},
        )

    @require_admin
    def get_all_customers(self, req: Request, res: Response) -> None:
        try:
            customers = Customer.read_all(self.db)
        except Exception:
            self.fail(res, "retrieving customers")
            return
        res.send(
            StatusCode.OK,
            "Customers list",
            template="CustomerListView",
            payload={"customers": [c.props for c in customers]},
        )

    @require_login
    def get_customer(self, req: Request, res: Response) -> None:
        try:
            customer = self._load_for(req, res)
        except Exception:
            self.fail(res, "retrieving customer")
            return
        if customer is None:
            return
        res.send(
            StatusCode.OK,
            "Customer retrieved successfully!",
            template="CustomerView",
            payload={"customer": customer.props},
        )

    @require_login
    def get_edit_customer_form(self, req: Request, res: Response) -> None:
        try:
            customer = self._load_for(req, res)
        except Exception:
            self.fail(res, "loading customer edit form")
            return
        if customer is None:
            return
        res.send(
            StatusCode.OK,
            "Edit customer form",
            template="CustomerEditView",
            payload={"customer": customer.props},
        )

    @require_login
    def update_customer(self, req: Request, res: Response) -> None:
        try:
            customer = self._load_for(req, res)
            if customer is None:
                return
            customer_service.update_customer(customer, req.body, allow_admin=self._is_admin(req))
        except (ValidationError, DuplicateEmailError) as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "updating customer")
            return

        res.send(
            StatusCode.OK,
            "Customer updated successfully!",
            template="CustomerView",
            payload={"customer": customer.props},
        )

    @require_login
    def delete_customer(self, req: Request, res: Response) -> None:
        try:
            customer = self._load_for(req, res)
            if customer is None:
                return
            snapshot = customer.props
            deleted = customer.delete()
        except Exception:
            self.fail(res, "deleting customer")
            return

        if not deleted:
            self.not_found(res, "Customer")
            return

        session = req.get_session()
        if session.customer_id == snapshot["id"]:
            session.destroy()

        res.send(
            StatusCode.OK,
            "Customer deleted successfully!",
            redirect="/",
            payload={"customer": snapshot},
        )
