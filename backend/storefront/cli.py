# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system purge-sessions
#   Delete sessions past their idle or absolute timeout.
#
# Customer inspection/bootstrap:
# - python -m flask customers list
#   List all customers with their admin flag.
# - python -m flask customers create --email admin@shop.local --password "Password123!" --first-name Ada --last-name Admin --admin
#   Create a customer (prompts if options are omitted).
#
# Catalog bootstrap:
# - python -m flask catalog add-category "Books"
# - python -m flask catalog list
#   List categories with their product counts.

import click
from flask.cli import with_appcontext

from .errors import DomainError
from .extensions import db
from .models import Category, Customer, Product
from .services import session_service
from .services.customer_service import register_customer
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create every table that does not exist yet. Safe to re-run."""
    click.echo("START Initializing storefront schema...")
    db.create_all()
    click.echo("PASS Tables: " + ", ".join(t.name for t in db.metadata.sorted_tables))


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@system_group.command('purge-sessions')
@with_appcontext
def purge_sessions():
    """Delete expired sessions."""
    deleted = session_service.purge_expired(db.session)
    click.echo(f"Deleted {deleted} expired sessions.")


@click.group('customers')
def customers_group():
    """Customer account commands."""


@customers_group.command('list')
@with_appcontext
def list_customers():
    """List all customers."""
    customers = Customer.read_all(db.session)

    if not customers:
        click.echo("No customers found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<35} {'Name':<30} {'Admin'}")
    click.echo("="*80)

    for c in customers:
        name = f"{c.first_name} {c.last_name}"
        click.echo(f"{c.id:<5} {c.email:<35} {name:<30} {'Yes' if c.is_admin else 'No'}")

    click.echo("="*80 + "\n")


@customers_group.command('create')
@click.option('--email', prompt=True, help='Login email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--first-name', prompt=True, help='First name')
@click.option('--last-name', prompt=True, help='Last name')
@click.option('--admin', 'is_admin', is_flag=True, help='Grant admin rights')
@with_appcontext
def create_customer_cli(email, password, first_name, last_name, is_admin):
    """Create a customer account."""
    try:
        customer = register_customer(
            db.session,
            {
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
                "isAdmin": is_admin,
            },
            allow_admin=True,
        )
    except (ValidationError, DomainError) as e:
        raise click.ClickException(str(e))

    role = "admin" if customer.is_admin else "customer"
    click.echo(f"PASS Created {role}: {customer.email} (ID: {customer.id})")


@click.group('catalog')
def catalog_group():
    """Category commands."""


@catalog_group.command('add-category')
@click.argument('name')
@with_appcontext
def add_category(name):
    """Create a category."""
    name = name.strip()
    if not name:
        raise click.ClickException("Category name cannot be empty.")
    try:
        category = Category.create(db.session, {"name": name})
    except DomainError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created category: {category.name} (ID: {category.id})")


@catalog_group.command('list')
@with_appcontext
def list_categories():
    """List categories with product counts."""
    categories = Category.read_all(db.session)

    if not categories:
        click.echo("No categories found.")
        return

    for category in categories:
        count = len(Product.read_all(db.session, category_id=category.id))
        click.echo(f"{category.id:<5} {category.name:<40} {count} products")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(customers_group)
    app.cli.add_command(catalog_group)
