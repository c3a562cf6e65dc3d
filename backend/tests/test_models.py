"""
Model-level CRUD tests.

Covers the shared create/read/update/delete contract plus the per-entity
rules: unique emails and category names, bcrypt passwords, order status
transitions and the cart aggregate.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import object_session

from storefront.errors import DuplicateCategoryError, DuplicateEmailError, InvalidCredentialsError
from storefront.models import (
    STATUS_COMPLETE,
    STATUS_INCOMPLETE,
    Address,
    Cart,
    CartItem,
    Category,
    Customer,
    Order,
    Product,
    cart_total,
)
from storefront.services import cart_service
from storefront.validation import ValidationError

from conftest import DEFAULT_PASSWORD


def _order(db_session, customer, address, total="10.00"):
    return Order.create(db_session, {
        "totalPrice": Decimal(total),
        "customerId": customer.id,
        "addressId": address.id,
    })


# =============================================================================
# CUSTOMER
# =============================================================================


class TestCustomer:
    def test_create_hashes_password_and_lowercases_email(self, db_session):
        c = Customer.create(db_session, {
            "email": "  Mixed.Case@Example.COM ",
            "password": "s3cret!",
            "firstName": "Mixed",
            "lastName": "Case",
        })
        assert c.id is not None
        assert c.email == "mixed.case@example.com"
        assert c.password != "s3cret!"
        assert c.password.startswith("$2")
        assert c.is_admin is False

    def test_props_are_camel_case_without_password(self, customer):
        props = customer.props
        assert props["firstName"] == "Ada"
        assert props["email"] == "ada@example.com"
        assert "password" not in props
        assert list(props)[0] == "id"

    def test_duplicate_email_rejected(self, db_session, customer):
        with pytest.raises(DuplicateEmailError) as exc:
            Customer.create(db_session, {
                "email": "ADA@example.com",
                "password": "x",
                "firstName": "A",
                "lastName": "B",
            })
        assert str(exc.value) == "User with this email already exists."

    def test_unknown_field_rejected(self, db_session):
        with pytest.raises(ValueError):
            Customer.create(db_session, {"email": "x@example.com", "favouriteColour": "blue"})

    def test_read_and_read_by_email(self, db_session, customer):
        assert Customer.read(db_session, customer.id).email == "ada@example.com"
        assert Customer.read_by_email(db_session, "ADA@EXAMPLE.COM").id == customer.id
        assert Customer.read(db_session, 999999) is None

    def test_login(self, db_session, customer):
        assert Customer.login(db_session, "ada@example.com", DEFAULT_PASSWORD).id == customer.id
        with pytest.raises(InvalidCredentialsError):
            Customer.login(db_session, "ada@example.com", "wrong")
        with pytest.raises(InvalidCredentialsError):
            Customer.login(db_session, "nobody@example.com", DEFAULT_PASSWORD)

    def test_update_only_changes_supplied_fields(self, db_session, customer):
        customer.update({"firstName": "Augusta", "password": "n3w-pass"})
        assert customer.first_name == "Augusta"
        assert customer.last_name == "Lovelace"
        assert Customer.login(db_session, "ada@example.com", "n3w-pass").id == customer.id

    def test_update_to_taken_email(self, customer, other_customer):
        with pytest.raises(DuplicateEmailError):
            other_customer.update({"email": "ada@example.com"})

    def test_delete(self, db_session, customer):
        customer_id = customer.id
        assert customer.delete() is True
        assert Customer.read(db_session, customer_id) is None
        # Row is already gone
        assert customer.delete() is False

    def test_delete_cascades_to_addresses(self, db_session, customer, address):
        address_id = address.id
        customer.delete()
        assert Address.read(db_session, address_id) is None

    def test_read_all_ordered_by_id(self, db_session, customer, other_customer):
        assert [c.id for c in Customer.read_all(db_session)] == sorted([customer.id, other_customer.id])


# =============================================================================
# ADDRESS / CATEGORY / PRODUCT
# =============================================================================


class TestAddress:
    def test_read_all_filters_by_customer(self, db_session, address, other_customer):
        Address.create(db_session, {
            "streetNumber": 1,
            "streetName": "Elm",
            "city": "Laval",
            "province": "QC",
            "country": "Canada",
            "postalCode": "H7N 1A1",
            "customerId": other_customer.id,
        })
        mine = Address.read_all(db_session, customer_id=address.customer_id)
        assert [a.id for a in mine] == [address.id]
        assert len(Address.read_all(db_session)) == 2

    def test_props(self, address):
        props = address.props
        assert props["streetName"] == "Baker Street"
        assert props["postalCode"] == "H2X 1Y4"
        assert props["civicNumber"] is None


class TestCategory:
    def test_duplicate_name(self, db_session, category):
        with pytest.raises(DuplicateCategoryError):
            Category.create(db_session, {"name": "Books"})

    def test_rename_to_existing(self, db_session, category):
        music = Category.create(db_session, {"name": "Music"})
        with pytest.raises(DuplicateCategoryError):
            music.update({"name": "Books"})

    def test_delete_leaves_products_uncategorized(self, db_session, category, product):
        product_id = product.id
        assert category.delete() is True
        db_session.expire_all()
        assert Product.read(db_session, product_id).category_id is None


class TestProduct:
    def test_price_round_trips_as_decimal_and_float(self, product):
        assert product.price == Decimal("12.50")
        assert product.props["price"] == 12.5
        assert product.props["categoryId"] is not None
        assert product.props["date"].endswith("Z")

    def test_read_all_by_category(self, db_session, product, second_product):
        other = Category.create(db_session, {"name": "Games"})
        chess = Product.create(db_session, {"title": "Chess", "price": Decimal("30.00"), "categoryId": other.id})
        assert [p.id for p in Product.read_all(db_session, category_id=other.id)] == [chess.id]
        assert len(Product.read_all(db_session)) == 3

    def test_update(self, product):
        product.update({"price": Decimal("9.99"), "inventory": 4})
        assert product.price == Decimal("9.99")
        assert product.inventory == 4
        assert product.title == "Dune"


# =============================================================================
# ORDER
# =============================================================================


class TestOrder:
    def test_defaults(self, db_session, customer, address):
        order = _order(db_session, customer, address)
        assert order.status == STATUS_INCOMPLETE
        assert order.completed_at is None
        assert order.order_date is not None
        assert order.props["totalPrice"] == 10.0

    def test_mark_complete_is_idempotent(self, db_session, customer, address):
        order = _order(db_session, customer, address)
        order.mark_complete()
        assert order.status == STATUS_COMPLETE
        first = order.completed_at
        assert first is not None

        order.mark_complete()
        assert order.completed_at == first

    def test_completed_order_cannot_be_reopened(self, db_session, customer, address):
        order = _order(db_session, customer, address)
        order.mark_complete()
        with pytest.raises(ValidationError):
            order.update({"status": STATUS_INCOMPLETE})

    def test_unknown_status_rejected(self, db_session, customer, address):
        order = _order(db_session, customer, address)
        with pytest.raises(ValidationError):
            order.update({"status": "shipped"})

    def test_read_all_filters_by_customer(self, db_session, customer, address, other_customer):
        mine = _order(db_session, customer, address)
        assert [o.id for o in Order.read_all(db_session, customer_id=customer.id)] == [mine.id]
        assert Order.read_all(db_session, customer_id=other_customer.id) == []

    def test_address_in_use_cannot_be_deleted(self, db_session, customer, address):
        _order(db_session, customer, address)
        with pytest.raises(IntegrityError):
            address.delete()


# =============================================================================
# CART
# =============================================================================


class TestCartTotal:
    def test_sum_of_quantity_times_unit_price(self):
        items = [
            SimpleNamespace(quantity=2, unit_price=Decimal("12.50")),
            SimpleNamespace(quantity=3, unit_price=Decimal("0.10")),
        ]
        assert cart_total(items) == Decimal("25.30")

    def test_empty(self):
        assert cart_total([]) == Decimal("0.00")


class TestCart:
    def test_get_or_create_reuses_active_cart(self, db_session, customer):
        first = Cart.get_or_create(db_session, customer.id)
        second = Cart.get_or_create(db_session, customer.id)
        assert first.id == second.id
        assert first.order_id is None

    def test_add_item_captures_price(self, db_session, customer, product):
        cart = Cart.get_or_create(db_session, customer.id)
        item = cart.add_item(product.id, 2, product.price)
        assert item.quantity == 2
        assert item.unit_price == Decimal("12.50")
        assert cart.total == Decimal("25.00")

    def test_add_existing_item_increments_quantity(self, db_session, customer, product):
        cart = Cart.get_or_create(db_session, customer.id)
        cart.add_item(product.id, 2, product.price)
        item = cart.add_item(product.id, 3, product.price)
        assert item.quantity == 5
        assert len(cart.items) == 1

    def test_update_remove_clear(self, db_session, customer, product, second_product):
        cart = Cart.get_or_create(db_session, customer.id)
        cart.add_item(product.id, 1, product.price)
        cart.add_item(second_product.id, 1, second_product.price)

        assert cart.update_item(product.id, 4) is True
        assert cart.find_item(product.id).quantity == 4
        assert cart.update_item(999999, 1) is False

        assert cart.remove_item(second_product.id) is True
        assert cart.remove_item(second_product.id) is False
        assert [i.product_id for i in cart.items] == [product.id]

        assert cart.clear() is True
        assert cart.items == []
        assert cart.clear() is False

    def test_props_include_product_fields_and_total(self, db_session, customer, product):
        cart = Cart.get_or_create(db_session, customer.id)
        cart.add_item(product.id, 2, product.price)
        props = cart.props
        assert props["total"] == 25.0
        line = props["items"][0]
        assert line["productId"] == product.id
        assert line["title"] == "Dune"
        assert line["unitPrice"] == 12.5
        assert line["productPrice"] == 12.5

    def test_checked_out_cart_is_no_longer_active(self, db_session, customer, address, product):
        cart = Cart.get_or_create(db_session, customer.id)
        cart.add_item(product.id, 1, product.price)
        order = _order(db_session, customer, address, total="12.50")
        cart.update({"orderId": order.id})

        assert Cart.read_by_customer_id(db_session, customer.id) is None
        assert Cart.read_by_order_id(db_session, order.id).id == cart.id
        fresh = Cart.get_or_create(db_session, customer.id)
        assert fresh.id != cart.id

    def test_deleting_product_removes_its_cart_lines(self, db_session, customer, product, second_product):
        cart = Cart.get_or_create(db_session, customer.id)
        cart.add_item(product.id, 1, product.price)
        cart.add_item(second_product.id, 1, second_product.price)
        product.delete()
        db_session.expire_all()
        assert [i.product_id for i in cart.items] == [second_product.id]


# =============================================================================
# CART UNDER CONCURRENT REQUESTS
# =============================================================================
# Each test commits a competing write at the point where a second request
# would interleave, then checks the losing call recovers.


class TestCartConcurrency:
    def test_get_or_create_returns_cart_created_concurrently(self, db_session, customer, monkeypatch):
        existing = Cart.get_or_create(db_session, customer.id)
        existing_id = existing.id

        original_read = Cart.read_by_customer_id
        reads = []

        def read_before_other_insert(session, customer_id):
            reads.append(customer_id)
            if len(reads) == 1:
                # Looked before the other request's cart was visible
                return None
            return original_read(session, customer_id)

        monkeypatch.setattr(Cart, "read_by_customer_id", read_before_other_insert)

        cart = Cart.get_or_create(db_session, customer.id)
        assert cart.id == existing_id
        assert len(reads) == 2
        active = db_session.scalars(
            sa.select(Cart).where(Cart.customer_id == customer.id, Cart.order_id.is_(None))
        ).all()
        assert len(active) == 1

    def test_add_item_folds_into_line_inserted_concurrently(self, db_session, customer, product, monkeypatch):
        cart = Cart.get_or_create(db_session, customer.id)
        cart_id, product_id, price = cart.id, product.id, product.price
        session = object_session(cart)
        real_execute = session.execute
        calls = []

        def execute_then_other_insert(stmt, *args, **kwargs):
            result = real_execute(stmt, *args, **kwargs)
            if calls:
                return result
            calls.append(stmt)
            rowcount = result.rowcount
            # Another request inserts the same (cart, product) line and commits
            real_execute(sa.insert(CartItem).values(
                shopping_cart_id=cart_id, product_id=product_id, quantity=4, unit_price=price,
            ))
            session.commit()
            return SimpleNamespace(rowcount=rowcount)

        monkeypatch.setattr(session, "execute", execute_then_other_insert)

        item = cart.add_item(product_id, 2, price)
        assert item.quantity == 6
        assert len(cart.items) == 1
        count = db_session.scalar(
            sa.select(sa.func.count()).select_from(CartItem).where(CartItem.shopping_cart_id == cart_id)
        )
        assert count == 1

    def test_checkout_refuses_cart_linked_concurrently(self, db_session, customer, address, product, monkeypatch):
        cart = Cart.get_or_create(db_session, customer.id)
        cart.add_item(product.id, 1, product.price)
        cart_id = cart.id
        rival = Order.create(db_session, {
            "totalPrice": Decimal("12.50"),
            "customerId": customer.id,
            "addressId": address.id,
        })
        rival_id = rival.id

        original_read = Cart.read_by_customer_id

        def read_then_other_checkout(session, customer_id):
            found = original_read(session, customer_id)
            # Another checkout links the same cart after this one has read it
            session.execute(sa.update(Cart).where(Cart.id == cart_id).values(order_id=rival_id))
            session.commit()
            return found

        monkeypatch.setattr(Cart, "read_by_customer_id", read_then_other_checkout)

        with pytest.raises(ValidationError) as exc:
            cart_service.checkout(db_session, customer.id, address.id)
        assert str(exc.value) == "Cart was already checked out"
        assert [o.id for o in Order.read_all(db_session)] == [rival_id]
        assert Cart.read_by_order_id(db_session, rival_id).id == cart_id
