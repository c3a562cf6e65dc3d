"""Address endpoints for customers and admins."""

from decimal import Decimal

from storefront.models import Address, Order

from conftest import login


ADDRESS = {
    "streetNumber": "12",
    "civicNumber": "4",
    "streetName": "Sherbrooke",
    "city": "Montreal",
    "province": "QC",
    "country": "Canada",
    "postalCode": "H3A 0G4",
}


def test_create_for_self(customer_client, customer):
    resp = customer_client.post("/addresses", json=ADDRESS)
    assert resp.status_code == 201
    created = resp.get_json()["payload"]["address"]
    assert created["customerId"] == customer.id
    assert created["streetNumber"] == 12
    assert created["civicNumber"] == 4


def test_customer_id_in_body_ignored_for_non_admin(customer_client, customer, other_customer):
    resp = customer_client.post("/addresses", json={**ADDRESS, "customerId": other_customer.id})
    assert resp.status_code == 201
    assert resp.get_json()["payload"]["address"]["customerId"] == customer.id


def test_admin_creates_for_customer(admin_client, customer):
    resp = admin_client.post("/addresses", json={**ADDRESS, "customerId": customer.id})
    assert resp.status_code == 201
    assert resp.get_json()["payload"]["address"]["customerId"] == customer.id


def test_missing_fields(customer_client, db_session):
    resp = customer_client.post("/addresses", json={"city": "Montreal"})
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("Missing required fields: ")


def test_street_number_must_be_integer(customer_client, db_session):
    resp = customer_client.post("/addresses", json={**ADDRESS, "streetNumber": "12.5"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "street_number must be an integer (no decimals)"


def test_street_number_out_of_range(customer_client, db_session):
    resp = customer_client.post("/addresses", json={**ADDRESS, "streetNumber": "99999999999"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "street_number is out of range"


def test_list_own_addresses(customer_client, address, other_customer, db_session):
    Address.create(db_session, {**ADDRESS, "streetNumber": 1, "civicNumber": None, "customerId": other_customer.id})
    resp = customer_client.get("/addresses")
    assert resp.status_code == 200
    assert [a["id"] for a in resp.get_json()["payload"]["addresses"]] == [address.id]


def test_admin_lists_by_customer(admin_client, address, customer):
    resp = admin_client.get(f"/addresses?customerId={customer.id}")
    assert [a["id"] for a in resp.get_json()["payload"]["addresses"]] == [address.id]


def test_get_and_update(customer_client, address):
    assert customer_client.get(f"/addresses/{address.id}").status_code == 200
    resp = customer_client.put(f"/addresses/{address.id}", json={"city": "Laval"})
    assert resp.status_code == 200
    updated = resp.get_json()["payload"]["address"]
    assert updated["city"] == "Laval"
    assert updated["streetName"] == "Baker Street"


def test_other_customers_address_is_hidden(client, address, other_customer):
    login(client, other_customer.email)
    assert client.get(f"/addresses/{address.id}").status_code == 404
    assert client.delete(f"/addresses/{address.id}").status_code == 404


def test_delete(customer_client, address, db_session):
    address_id = address.id
    assert customer_client.delete(f"/addresses/{address_id}").status_code == 204
    assert Address.read(db_session, address_id) is None


def test_delete_address_used_by_order(customer_client, customer, address, db_session):
    Order.create(db_session, {
        "totalPrice": Decimal("5.00"),
        "customerId": customer.id,
        "addressId": address.id,
    })
    resp = customer_client.delete(f"/addresses/{address.id}")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Address is used by an order"


def test_requires_login(client, db_session):
    assert client.get("/addresses").status_code == 401
