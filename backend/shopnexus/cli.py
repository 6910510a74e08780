# Overview: Flask CLI command groups for bootstrap, platform tenant administration and ledger checks.

# backend/shopnexus/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Tenant administration (platform operator):
# - python -m flask tenants list
# - python -m flask tenants suspend acme-corp
#   Block every user of the tenant (login and existing tokens).
# - python -m flask tenants activate acme-corp
# - python -m flask tenants set-tier acme-corp PRO_YEARLY
#
# Ledger checks:
# - python -m flask stock verify --tenant acme-corp
#   Replay the stock ledger and list products whose stock disagrees.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Tenant, User, Product
from .models.tenancy import SUBSCRIPTION_TIERS
from .services.stock_service import find_ledger_mismatches
from .services.tenant_service import TenantScope


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


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


@click.group('tenants')
def tenants_group():
    """Tenant (company) administration commands."""


def _get_tenant_or_fail(slug: str) -> Tenant:
    tenant = db.session.query(Tenant).filter_by(slug=slug).first()
    if tenant is None:
        raise click.ClickException(f"Tenant not found: {slug}")
    return tenant


@tenants_group.command('list')
@with_appcontext
def list_tenants():
    """List all tenants."""
    tenants = db.session.query(Tenant).order_by(Tenant.id.asc()).all()

    if not tenants:
        click.echo("No tenants found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Slug':<25} {'Name':<25} {'Status':<10} {'Tier':<14} {'Users'}")
    click.echo("="*90)

    for tenant in tenants:
        user_count = db.session.query(User).filter_by(tenant_id=tenant.id).count()
        click.echo(
            f"{tenant.id:<5} {tenant.slug:<25} {tenant.name:<25} {tenant.status:<10} "
            f"{tenant.subscription_tier:<14} {user_count}"
        )

    click.echo("="*90 + "\n")


def _set_status(slug: str, status: str) -> None:
    tenant = _get_tenant_or_fail(slug)
    previous = tenant.status
    tenant.status = status
    db.session.commit()
    current_app.logger.info("Tenant %s (%s) status %s -> %s", tenant.id, tenant.slug, previous, status)
    click.echo(f"PASS Tenant {tenant.slug}: {previous} -> {status}")


@tenants_group.command('suspend')
@click.argument('slug')
@with_appcontext
def suspend_tenant(slug):
    """Suspend a tenant; its users are refused from the next request on."""
    _set_status(slug, "SUSPENDED")


@tenants_group.command('activate')
@click.argument('slug')
@with_appcontext
def activate_tenant(slug):
    """Re-activate a suspended or pending tenant."""
    _set_status(slug, "ACTIVE")


@tenants_group.command('set-tier')
@click.argument('slug')
@click.argument('tier', type=click.Choice(SUBSCRIPTION_TIERS))
@with_appcontext
def set_tier(slug, tier):
    """Change a tenant's subscription tier."""
    tenant = _get_tenant_or_fail(slug)
    previous = tenant.subscription_tier
    tenant.subscription_tier = tier
    db.session.commit()
    current_app.logger.info("Tenant %s (%s) tier %s -> %s", tenant.id, tenant.slug, previous, tier)
    click.echo(f"PASS Tenant {tenant.slug}: tier {previous} -> {tier}")


@click.group('stock')
def stock_group():
    """Stock ledger inspection commands."""


@stock_group.command('verify')
@click.option('--tenant', 'slug', required=True, help='Tenant slug')
@with_appcontext
def verify_stock(slug):
    """Replay opening_stock + ledger for every product and report mismatches."""
    tenant = _get_tenant_or_fail(slug)
    scope = TenantScope(tenant.id)
    product_count = scope.query(Product).count()

    mismatches = find_ledger_mismatches(scope)
    if not mismatches:
        click.echo(f"PASS Ledger consistent for {product_count} products of {tenant.slug}.")
        return

    for row in mismatches:
        click.echo(
            f"FAIL product {row['product_id']} ({row['sku']}): "
            f"stock={row['stock']} replayed={row['replayed_stock']}"
        )
    raise click.ClickException(f"{len(mismatches)} product(s) disagree with the ledger")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(tenants_group)
    app.cli.add_command(stock_group)
