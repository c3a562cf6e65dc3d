"""
Pytest fixtures for storefront backend tests.

Provides test database setup, customer/admin fixtures, and a logged-in test client.
"""

from decimal import Decimal

import pytest
from storefront import create_app
from storefront.extensions import db
from storefront.models import Address, Category, Customer, Product


DEFAULT_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.expunge_all()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def customer(db_session):
    """Regular (non-admin) customer."""
    return Customer.create(db_session, {
        "email": "ada@example.com",
        "password": DEFAULT_PASSWORD,
        "firstName": "Ada",
        "lastName": "Lovelace",
    })


@pytest.fixture(scope='function')
def other_customer(db_session):
    return Customer.create(db_session, {
        "email": "grace@example.com",
        "password": DEFAULT_PASSWORD,
        "firstName": "Grace",
        "lastName": "Hopper",
    })


@pytest.fixture(scope='function')
def admin(db_session):
    return Customer.create(db_session, {
        "email": "admin@example.com",
        "password": DEFAULT_PASSWORD,
        "firstName": "Shop",
        "lastName": "Admin",
        "isAdmin": True,
    })


@pytest.fixture(scope='function')
def category(db_session):
    return Category.create(db_session, {"name": "Books"})


@pytest.fixture(scope='function')
def product(db_session, category):
    return Product.create(db_session, {
        "title": "Dune",
        "description": "Desert planet",
        "url": "https://example.com/dune.jpg",
        "price": Decimal("12.50"),
        "inventory": 10,
        "categoryId": category.id,
    })


@pytest.fixture(scope='function')
def second_product(db_session, category):
    return Product.create(db_session, {
        "title": "Emma",
        "price": Decimal("7.25"),
        "inventory": 3,
        "categoryId": category.id,
    })


@pytest.fixture(scope='function')
def address(db_session, customer):
    return Address.create(db_session, {
        "streetNumber": 221,
        "streetName": "Baker Street",
        "city": "Montreal",
        "province": "QC",
        "country": "Canada",
        "postalCode": "H2X 1Y4",
        "customerId": customer.id,
    })


def login(client, email: str, password: str = DEFAULT_PASSWORD):
    """Helper to log a test client in; the session cookie stays on the client."""
    return client.post('/login', json={'email': email, 'password': password})


@pytest.fixture(scope='function')
def customer_client(client, customer):
    """Test client logged in as `customer`."""
    resp = login(client, customer.email)
    assert resp.status_code == 200
    return client


@pytest.fixture(scope='function')
def admin_client(client, admin):
    """Test client logged in as `admin`."""
    resp = login(client, admin.email)
    assert resp.status_code == 200
    return client
