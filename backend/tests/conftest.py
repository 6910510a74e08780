"""
Pytest fixtures for ShopNexus backend tests.

Provides test database setup, two isolated tenants with users, and the test client.
"""

import pytest

from shopnexus import create_app
from shopnexus.config import TestConfig
from shopnexus.extensions import db
from shopnexus.models import Tenant, TenantSettings, User, Product, Customer
from shopnexus.services.auth_service import hash_password
from shopnexus.services.session_service import issue_token
from shopnexus.services.tenant_service import TenantScope


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

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

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_tenant(session, name: str, slug: str, status: str = "ACTIVE") -> Tenant:
    tenant = Tenant(name=name, slug=slug, status=status)
    session.add(tenant)
    session.flush()
    session.add(TenantSettings(tenant_id=tenant.id))
    session.commit()
    return tenant


def make_user(session, tenant: Tenant, name: str, email: str, role: str = "ADMIN") -> User:
    user = User(
        tenant_id=tenant.id,
        name=name,
        email=email,
        password_hash=hash_password(PASSWORD),
        role=role,
        permissions=[],
    )
    session.add(user)
    session.commit()
    return user


def make_product(session, tenant: Tenant, sku: str, stock: int = 10, price_cents: int = 1000, name: str | None = None) -> Product:
    product = Product(
        tenant_id=tenant.id,
        sku=sku,
        name=name or f"Product {sku}",
        price_cents=price_cents,
        stock=stock,
        opening_stock=stock,
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def tenant_a(db_session):
    """Tenant A (first company)."""
    return make_tenant(db_session, "Acme Corp", "acme-corp")


@pytest.fixture(scope='function')
def tenant_b(db_session):
    """Tenant B (second company)."""
    return make_tenant(db_session, "Beta Inc", "beta-inc")


@pytest.fixture(scope='function')
def admin_a(db_session, tenant_a):
    return make_user(db_session, tenant_a, "Alice Admin", "alice@acme.test", role="ADMIN")


@pytest.fixture(scope='function')
def cashier_a(db_session, tenant_a):
    return make_user(db_session, tenant_a, "Carl Cashier", "carl@acme.test", role="CASHIER")


@pytest.fixture(scope='function')
def admin_b(db_session, tenant_b):
    return make_user(db_session, tenant_b, "Bob Admin", "bob@beta.test", role="ADMIN")


@pytest.fixture(scope='function')
def headers_a(admin_a):
    return auth_headers(issue_token(admin_a))


@pytest.fixture(scope='function')
def cashier_headers(cashier_a):
    return auth_headers(issue_token(cashier_a))


@pytest.fixture(scope='function')
def headers_b(admin_b):
    return auth_headers(issue_token(admin_b))


@pytest.fixture(scope='function')
def scope_a(tenant_a):
    return TenantScope(tenant_a.id)


@pytest.fixture(scope='function')
def product_a(db_session, tenant_a):
    """Product in tenant A with stock 10."""
    return make_product(db_session, tenant_a, "SKU-A-001", stock=10, name="Widget")


@pytest.fixture(scope='function')
def product_b(db_session, tenant_b):
    """Product in tenant B with stock 20."""
    return make_product(db_session, tenant_b, "SKU-B-001", stock=20, name="Gadget")


@pytest.fixture(scope='function')
def customer_a(db_session, tenant_a):
    customer = Customer(tenant_id=tenant_a.id, name="Carol Customer", total_spent_cents=0)
    db_session.add(customer)
    db_session.commit()
    return customer


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
