# Overview: The logged-in customer's active cart and checkout.

from __future__ import annotations

from ..decorators import require_login
from ..errors import NotFoundError
from ..http import Request, Response, Router, StatusCode
from ..models import Cart
from ..services import cart_service
from ..validation import ValidationError, require_positive_quantity
from .base import Controller


def _cart_payload(cart: Cart) -> dict:
    props = cart.props
    return {"cart": props, "items": props["items"], "total": props["total"]}


class CartController(Controller):
    def register_routes(self, router: Router) -> None:
        router.get("/cart", self.get_cart)
        router.delete("/cart", self.clear_cart)
        router.post("/cart/items", self.add_item_to_cart)
        router.post("/cart/checkout", self.checkout)
        router.put("/cart/items/:productId", self.update_cart_item)
        router.delete("/cart/items/:productId", self.remove_item_from_cart)

    @require_login
    def get_cart(self, req: Request, res: Response) -> None:
        customer_id = req.get_session().customer_id
        try:
            cart = Cart.get_or_create(self.db, customer_id)
            payload = _cart_payload(cart)
        except Exception:
            self.fail(res, "retrieving cart")
            return
        res.send(
            StatusCode.OK,
            "Cart retrieved successfully",
            template="CartView",
            payload=payload,
        )

    @require_login
    def add_item_to_cart(self, req: Request, res: Response) -> None:
        customer_id = req.get_session().customer_id
        body = req.body
        try:
            product_id = body.get("productId", body.get("product_id"))
            if product_id is None:
                raise ValidationError("Missing required fields: productId")
            product_id = require_positive_quantity(product_id, field="productId")
            quantity = require_positive_quantity(body.get("quantity", 1))
            cart = cart_service.add_to_cart(self.db, customer_id, product_id, quantity)
            payload = _cart_payload(cart)
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except NotFoundError as e:
            self.not_found(res, e.entity)
            return
        except Exception:
            self.fail(res, "adding item to cart")
            return

        res.send(
            StatusCode.Created,
            "Item added to cart successfully",
            template="CartView",
            payload=payload,
        )

    @require_login
    def update_cart_item(self, req: Request, res: Response) -> None:
        customer_id = req.get_session().customer_id
        product_id = req.get_int_param("productId")
        if product_id is None:
            self.invalid_id(res)
            return
        try:
            quantity = require_positive_quantity(req.body.get("quantity"))
            cart = Cart.read_by_customer_id(self.db, customer_id)
            if cart is None:
                self.not_found(res, "Cart")
                return
            if not cart.update_item(product_id, quantity):
                self.not_found(res, "Cart item")
                return
            payload = _cart_payload(cart)
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "updating cart item")
            return

        res.send(
            StatusCode.OK,
            "Cart item updated successfully",
            template="CartView",
            payload=payload,
        )

    @require_login
    def remove_item_from_cart(self, req: Request, res: Response) -> None:
        customer_id = req.get_session().customer_id
        product_id = req.get_int_param("productId")
        if product_id is None:
            self.invalid_id(res)
            return
        try:
            cart = Cart.read_by_customer_id(self.db, customer_id)
            if cart is None:
                self.not_found(res, "Cart")
                return
            removed = cart.remove_item(product_id)
        except Exception:
            self.fail(res, "removing cart item")
            return

        if not removed:
            self.not_found(res, "Cart item")
            return
        res.send(StatusCode.NoContent, "Cart item removed successfully")

    @require_login
    def clear_cart(self, req: Request, res: Response) -> None:
        customer_id = req.get_session().customer_id
        try:
            cart = Cart.read_by_customer_id(self.db, customer_id)
            if cart is not None:
                cart.clear()
        except Exception:
            self.fail(res, "clearing cart")
            return
        res.send(StatusCode.OK, "Cart cleared successfully", payload={"items": [], "total": 0.0})

    @require_login
    def checkout(self, req: Request, res: Response) -> None:
        customer_id = req.get_session().customer_id
        body = req.body
        try:
            address_id = body.get("addressId", body.get("address_id"))
            if address_id is None:
                raise ValidationError("Missing required fields: addressId")
            address_id = require_positive_quantity(address_id, field="addressId")
            order = cart_service.checkout(self.db, customer_id, address_id)
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except NotFoundError as e:
            self.not_found(res, e.entity)
            return
        except Exception:
            self.fail(res, "checking out cart")
            return

        res.send(
            StatusCode.Created,
            "Order created successfully!",
            redirect=f"/orders/{order.id}",
            payload={"order": order.props},
        )
