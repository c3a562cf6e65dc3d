# Overview: Shipping address CRUD for the logged-in customer (admins may manage anyone's).

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..decorators import require_login
from ..http import Request, Response, Router, StatusCode
from ..models import Address, Customer
from ..validation import MAX_INT, ModelValidationPolicy, ValidationError, validate_payload
from .base import Controller

ADDRESS_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "street_number", "civic_number", "street_name", "city",
        "province", "country", "postal_code", "customer_id",
    }),
    required_on_create=frozenset({
        "street_number", "street_name", "city", "province", "country", "postal_code",
    }),
)


class AddressController(Controller):
    def register_routes(self, router: Router) -> None:
        router.post("/addresses", self.create_address)
        router.get("/addresses", self.get_address_list)
        router.get("/addresses/:id", self.get_address)
        router.put("/addresses/:id", self.update_address)
        router.delete("/addresses/:id", self.delete_address)

    def _owner_for(self, req: Request, patch: dict) -> int:
        """Non-admins always act on their own account, whatever customer_id says."""
        current = self.current_customer(req)
        requested = patch.get("customer_id")
        if requested is not None and current.is_admin:
            if Customer.read(self.db, requested) is None:
                raise ValidationError("customer_id does not reference an existing customer")
            return requested
        return current.id

    def _load_for(self, req: Request, res: Response) -> Address | None:
        address_id = req.get_id()
        if address_id is None:
            self.invalid_id(res)
            return None
        address = Address.read(self.db, address_id)
        if address is None or not self.can_access(req, address.customer_id):
            self.not_found(res, "Address")
            return None
        return address

    @require_login
    def create_address(self, req: Request, res: Response) -> None:
        try:
            patch = validate_payload(model=Address, payload=req.body, policy=ADDRESS_POLICY, partial=False)
            patch["customer_id"] = self._owner_for(req, patch)
            address = Address.create(self.db, patch)
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "creating address")
            return

        res.send(
            StatusCode.Created,
            "Address created successfully!",
            redirect=f"/addresses/{address.id}",
            payload={"address": address.props},
        )

    @require_login
    def get_address_list(self, req: Request, res: Response) -> None:
        try:
            current = self.current_customer(req)
            # Admins may list another customer's addresses with ?customerId=
            customer_id = current.id
            requested = req.get_search_params().get("customerId", type=int)
            if current.is_admin and requested is not None and abs(requested) <= MAX_INT:
                customer_id = requested
            addresses = Address.read_all(self.db, customer_id=customer_id)
        except Exception:
            self.fail(res, "retrieving address list")
            return
        res.send(
            StatusCode.OK,
            "Address list retrieved successfully!",
            template="AddressListView",
            payload={"addresses": [a.props for a in addresses]},
        )

    @require_login
    def get_address(self, req: Request, res: Response) -> None:
        try:
            address = self._load_for(req, res)
        except Exception:
            self.fail(res, "retrieving address")
            return
        if address is None:
            return
        res.send(
            StatusCode.OK,
            "Address retrieved successfully!",
            template="AddressView",
            payload={"address": address.props},
        )

    @require_login
    def update_address(self, req: Request, res: Response) -> None:
        try:
            address = self._load_for(req, res)
            if address is None:
                return
            patch = validate_payload(model=Address, payload=req.body, policy=ADDRESS_POLICY, partial=True)
            if "customer_id" in patch:
                patch["customer_id"] = self._owner_for(req, patch)
            if patch:
                address.update(patch)
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "updating address")
            return

        res.send(
            StatusCode.OK,
            "Address updated successfully!",
            redirect=f"/addresses/{address.id}",
            payload={"address": address.props},
        )

    @require_login
    def delete_address(self, req: Request, res: Response) -> None:
        try:
            address = self._load_for(req, res)
            if address is None:
                return
            deleted = address.delete()
        except IntegrityError:
            # Orders keep a reference to the address they shipped to
            self.bad_request(res, "Address is used by an order")
            return
        except Exception:
            self.fail(res, "deleting address")
            return

        if not deleted:
            self.not_found(res, "Address")
            return
        res.send(StatusCode.NoContent, "Address deleted successfully!", redirect="/addresses")
