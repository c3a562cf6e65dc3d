# Overview: Orders. Customers see and manage their own; admins see everyone's.

from __future__ import annotations

from ..decorators import require_login
from ..http import Request, Response, Router, StatusCode
from ..models import STATUS_COMPLETE, Address, Cart, Customer, Order
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_order,
    validate_payload,
)
from .base import Controller

ORDER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"total_price", "address_id", "customer_id", "status"}),
    required_on_create=frozenset({"total_price", "address_id"}),
    ignored_fields=frozenset({"order_date", "completed_at"}),
)


class OrderController(Controller):
    def register_routes(self, router: Router) -> None:
        router.get("/orders/new", self.get_new_order_form)
        router.post("/orders", self.create_order)
        router.get("/orders", self.get_order_list)
        router.get("/orders/:id", self.get_order)
        router.get("/orders/:id/edit", self.get_edit_order_form)
        router.put("/orders/:id", self.update_order)
        router.put("/orders/:id/complete", self.mark_order_complete)
        router.delete("/orders/:id", self.delete_order)

    def _load_for(self, req: Request, res: Response) -> Order | None:
        order_id = req.get_id()
        if order_id is None:
            self.invalid_id(res)
            return None
        order = Order.read(self.db, order_id)
        if order is None or not self.can_access(req, order.customer_id):
            self.not_found(res, "Order")
            return None
        return order

    def _check_references(self, req: Request, patch: dict, *, owner_id: int) -> None:
        """
        Resolve who owns the order and make sure the address belongs to them.
        Only admins may place or move orders for other customers.
        """
        current = self.current_customer(req)
        if "customer_id" in patch and patch["customer_id"] != owner_id:
            if not current.is_admin:
                raise ValidationError("Field not allowed: customer_id")
            if Customer.read(self.db, patch["customer_id"]) is None:
                raise ValidationError("customer_id does not reference an existing customer")
            owner_id = patch["customer_id"]
        patch["customer_id"] = owner_id

        address_id = patch.get("address_id")
        if address_id is not None:
            address = Address.read(self.db, address_id)
            if address is None or address.customer_id != owner_id:
                raise ValidationError("address_id does not reference one of the customer's addresses")

    @require_login
    def get_new_order_form(self, req: Request, res: Response) -> None:
        try:
            customer = self.current_customer(req)
            addresses = Address.read_all(self.db, customer_id=customer.id)
        except Exception:
            self.fail(res, "loading new order form")
            return
        res.send(
            StatusCode.OK,
            "New Order form",
            template="NewOrderFormView",
            payload={"title": "New Order", "addresses": [a.props for a in addresses]},
        )

    @require_login
    def create_order(self, req: Request, res: Response) -> None:
        try:
            patch = validate_payload(model=Order, payload=req.body, policy=ORDER_POLICY, partial=False)
            enforce_rules_order(patch)
            patch.pop("status", None)  # new orders always start incomplete
            self._check_references(req, patch, owner_id=req.get_session().customer_id)
            order = Order.create(self.db, patch)
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "creating order")
            return

        res.send(
            StatusCode.Created,
            "Order created successfully!",
            redirect=f"/orders/{order.id}",
            payload={"order": order.props},
        )

    @require_login
    def get_order_list(self, req: Request, res: Response) -> None:
        try:
            customer = self.current_customer(req)
            orders = Order.read_all(self.db, customer_id=None if customer.is_admin else customer.id)
        except Exception:
            self.fail(res, "retrieving order list")
            return
        res.send(
            StatusCode.OK,
            "Order list retrieved successfully!",
            template="OrderListView",
            payload={"orders": [o.props for o in orders]},
        )

    @require_login
    def get_order(self, req: Request, res: Response) -> None:
        try:
            order = self._load_for(req, res)
            if order is None:
                return
            # Orders placed through checkout keep their cart lines.
            cart = Cart.read_by_order_id(self.db, order.id)
            items = [item.props for item in cart.items] if cart is not None else []
        except Exception:
            self.fail(res, "retrieving order")
            return
        res.send(
            StatusCode.OK,
            "Order retrieved successfully!",
            template="OrderView",
            payload={"order": order.props, "items": items},
        )

    @require_login
    def get_edit_order_form(self, req: Request, res: Response) -> None:
        try:
            order = self._load_for(req, res)
            if order is None:
                return
            addresses = Address.read_all(self.db, customer_id=order.customer_id)
        except Exception:
            self.fail(res, "getting order")
            return
        res.send(
            StatusCode.OK,
            "Edit Order form",
            template="EditOrderFormView",
            payload={"order": order.props, "addresses": [a.props for a in addresses]},
        )

    @require_login
    def update_order(self, req: Request, res: Response) -> None:
        try:
            order = self._load_for(req, res)
            if order is None:
                return
            patch = validate_payload(model=Order, payload=req.body, policy=ORDER_POLICY, partial=True)
            enforce_rules_order(patch)
            if "customer_id" in patch or "address_id" in patch:
                patch.setdefault("address_id", order.address_id)
                self._check_references(req, patch, owner_id=order.customer_id)
            # Completing goes through mark_complete so completed_at is stamped once.
            completing = patch.get("status") == STATUS_COMPLETE
            if completing:
                patch.pop("status")
            if patch:
                order.update(patch)
            if completing:
                order.mark_complete()
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "updating order")
            return

        res.send(
            StatusCode.OK,
            "Order updated successfully!",
            redirect=f"/orders/{order.id}",
            payload={"order": order.props},
        )

    @require_login
    def mark_order_complete(self, req: Request, res: Response) -> None:
        try:
            order = self._load_for(req, res)
            if order is None:
                return
            order.mark_complete()
        except Exception:
            self.fail(res, "completing order")
            return

        res.send(
            StatusCode.OK,
            "Order marked as complete!",
            redirect=f"/orders/{order.id}",
            payload={"order": order.props},
        )

    @require_login
    def delete_order(self, req: Request, res: Response) -> None:
        try:
            order = self._load_for(req, res)
            if order is None:
                return
            deleted = order.delete()
        except Exception:
            self.fail(res, "deleting order")
            return

        if not deleted:
            self.not_found(res, "Order")
            return
        res.send(StatusCode.NoContent, "Order deleted successfully!", redirect="/orders")
