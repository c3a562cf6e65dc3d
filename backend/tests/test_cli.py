"""Flask CLI commands."""

from datetime import timedelta

from storefront.models import Category, Customer, SessionRecord
from storefront.time_utils import utcnow


def test_customers_create_and_list(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "customers", "create",
        "--email", "Boss@Example.com",
        "--password", "Password123!",
        "--first-name", "Big",
        "--last-name", "Boss",
        "--admin",
    ])
    assert result.exit_code == 0, result.output
    assert "PASS Created admin: boss@example.com" in result.output
    assert Customer.read_by_email(db_session, "boss@example.com").is_admin is True

    result = runner.invoke(args=["customers", "list"])
    assert result.exit_code == 0
    assert "boss@example.com" in result.output


def test_customers_create_duplicate(app, customer):
    result = app.test_cli_runner().invoke(args=[
        "customers", "create",
        "--email", "ada@example.com",
        "--password", "x",
        "--first-name", "A",
        "--last-name", "B",
    ])
    assert result.exit_code != 0
    assert "User with this email already exists." in result.output


def test_catalog_commands(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["catalog", "add-category", "Garden"])
    assert result.exit_code == 0
    assert Category.read_all(db_session)[0].name == "Garden"

    result = runner.invoke(args=["catalog", "add-category", "Garden"])
    assert result.exit_code != 0

    result = runner.invoke(args=["catalog", "list"])
    assert "Garden" in result.output
    assert "0 products" in result.output


def test_purge_sessions(app, db_session):
    now = utcnow()
    db_session.add(SessionRecord(
        id="a" * 64, data={}, created_at=now, last_used_at=now, expires_at=now - timedelta(hours=1),
    ))
    db_session.commit()

    result = app.test_cli_runner().invoke(args=["system", "purge-sessions"])
    assert result.exit_code == 0
    assert "Deleted 1 expired sessions." in result.output


def test_system_init_is_idempotent(app, db_session):
    result = app.test_cli_runner().invoke(args=["system", "init"])
    assert result.exit_code == 0
    assert "shopping_cart_item" in result.output
