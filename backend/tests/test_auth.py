# Overview: Pytest coverage for signup, login, session tokens and PIN checks.

"""
Authentication Tests

Verifies:
- Signup creates tenant + admin user + default settings in one go
- Email is unique across ALL tenants
- Login does not reveal whether the email exists
- Suspended tenants are blocked at login and on every authenticated request
- Tokens: missing / tampered / expired / deleted-user all return 401
"""

import bcrypt
import pytest

from shopnexus.models import Tenant, TenantSettings, User
from shopnexus.services import auth_service, session_service
from shopnexus.services.auth_service import slugify, hash_password, verify_password
from shopnexus.services.session_service import issue_token

from conftest import PASSWORD, auth_headers, get_auth_token


SIGNUP = {
    "company_name": "Nexus Mart",
    "admin_name": "Nina Owner",
    "email": "nina@nexus.test",
    "password": "s3cret-pass",
}


class TestSignup:

    def test_signup_creates_tenant_admin_and_settings(self, client, db_session):
        resp = client.post("/api/auth/signup", json=SIGNUP)
        assert resp.status_code == 201

        body = resp.get_json()
        assert body["token"]
        assert body["tenant"]["slug"] == "nexus-mart"
        assert body["tenant"]["subscription_tier"] == "FREE"
        assert body["tenant"]["subscription_status"] == "ACTIVE"
        assert body["user"]["role"] == "ADMIN"
        assert set(body["user"]["permissions"]) == {
            "VIEW_DASHBOARD", "MANAGE_PRODUCTS", "MANAGE_ORDERS", "MANAGE_USERS", "MANAGE_SETTINGS",
        }
        assert "password_hash" not in body["user"]

        tenant = db_session.query(Tenant).filter_by(slug="nexus-mart").one()
        settings = db_session.query(TenantSettings).filter_by(tenant_id=tenant.id).one()
        assert settings.currency == "USD"
        assert settings.barcode_next_sequence == 1000

    def test_signup_token_works_for_me(self, client, db_session):
        token = client.post("/api/auth/signup", json=SIGNUP).get_json()["token"]

        resp = client.get("/api/auth/me", headers=auth_headers(token))
        assert resp.status_code == 200
        assert resp.get_json()["user"]["email"] == "nina@nexus.test"
        assert resp.get_json()["tenant"]["name"] == "Nexus Mart"

    def test_password_is_stored_as_bcrypt_hash(self, client, db_session):
        client.post("/api/auth/signup", json=SIGNUP)
        user = db_session.query(User).filter_by(email="nina@nexus.test").one()

        assert user.password_hash != SIGNUP["password"]
        assert bcrypt.checkpw(SIGNUP["password"].encode(), user.password_hash.encode())

    @pytest.mark.parametrize("missing", ["company_name", "admin_name", "email", "password"])
    def test_signup_missing_field(self, client, db_session, missing):
        payload = {k: v for k, v in SIGNUP.items() if k != missing}
        resp = client.post("/api/auth/signup", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Please add all fields"

    def test_email_is_unique_across_tenants(self, client, db_session, admin_b):
        payload = dict(SIGNUP, email=admin_b.email)
        resp = client.post("/api/auth/signup", json=payload)

        assert resp.status_code == 400
        assert resp.get_json()["message"] == "User already exists"
        assert db_session.query(Tenant).filter_by(slug="nexus-mart").first() is None

    def test_email_race_on_insert_is_a_conflict(self, client, db_session, admin_b, monkeypatch):
        # Another signup registered the email between the check and the insert
        monkeypatch.setattr(auth_service, "email_taken", lambda email: False)

        resp = client.post("/api/auth/signup", json=dict(SIGNUP, email=admin_b.email))
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "User already exists"
        assert db_session.query(Tenant).filter_by(slug="nexus-mart").first() is None

    def test_slug_collision_is_rejected(self, client, db_session, tenant_a):
        payload = dict(SIGNUP, company_name="Acme Corp", email="other@acme.test")
        resp = client.post("/api/auth/signup", json=payload)
        assert resp.status_code == 400
        assert db_session.query(Tenant).filter_by(slug="acme-corp").count() == 1


class TestSlugify:

    @pytest.mark.parametrize("name,slug", [
        ("Acme Corp", "acme-corp"),
        ("Joe's Shop & Co.", "joes-shop--co"),
        ("  Trim Me ", "--trim-me-"),
        ("Café Nord", "caf-nord"),
    ])
    def test_slugify(self, name, slug):
        assert slugify(name) == slug


class TestLogin:

    def test_login_success(self, client, db_session, admin_a, tenant_a):
        assert tenant_a.last_activity_at is None

        resp = client.post("/api/auth/login", json={"email": admin_a.email, "password": PASSWORD})
        assert resp.status_code == 200

        body = resp.get_json()
        assert body["token"]
        assert body["user"]["id"] == admin_a.id
        assert "password_hash" not in body["user"]
        assert body["tenant"]["id"] == tenant_a.id

        db_session.refresh(tenant_a)
        assert tenant_a.last_activity_at is not None

    def test_wrong_password_and_unknown_email_look_the_same(self, client, db_session, admin_a):
        wrong = client.post("/api/auth/login", json={"email": admin_a.email, "password": "nope"})
        unknown = client.post("/api/auth/login", json={"email": "ghost@nowhere.test", "password": PASSWORD})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json()["message"] == unknown.get_json()["message"] == "Invalid credentials"

    def test_suspended_tenant_cannot_login(self, client, db_session, admin_a, tenant_a):
        tenant_a.status = "SUSPENDED"
        db_session.commit()

        resp = client.post("/api/auth/login", json={"email": admin_a.email, "password": PASSWORD})
        assert resp.status_code == 403
        assert "token" not in resp.get_json()

    def test_non_string_password_is_invalid_credentials(self, client, db_session, admin_a):
        resp = client.post("/api/auth/login", json={"email": admin_a.email, "password": 12345678})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid credentials"

    def test_get_auth_token_helper(self, client, db_session, admin_a):
        assert get_auth_token(client, admin_a.email)


class TestSessionTokens:

    def test_missing_token(self, client, db_session):
        resp = client.get("/api/products")
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Not authorized, no token"

    def test_tampered_token(self, client, db_session, admin_a):
        token = issue_token(admin_a)
        resp = client.get("/api/products", headers=auth_headers(token[:-2] + "xx"))
        assert resp.status_code == 401

    def test_expired_token(self, client, db_session, admin_a, monkeypatch):
        token = issue_token(admin_a)
        monkeypatch.setattr(session_service, "_max_age_seconds", lambda: -1)

        resp = client.get("/api/products", headers=auth_headers(token))
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Not authorized, token expired"

    def test_deleted_user_token_revoked(self, client, db_session, admin_a):
        headers = auth_headers(issue_token(admin_a))
        db_session.delete(admin_a)
        db_session.commit()

        resp = client.get("/api/products", headers=headers)
        assert resp.status_code == 401

    def test_suspended_tenant_token_blocked(self, client, db_session, headers_a, tenant_a):
        assert client.get("/api/products", headers=headers_a).status_code == 200

        tenant_a.status = "SUSPENDED"
        db_session.commit()

        resp = client.get("/api/products", headers=headers_a)
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Tenant access suspended or invalid"


class TestPin:

    def test_verify_pin(self, client, db_session, headers_a, admin_a):
        assert client.post("/api/auth/verify-pin", json={"pin": "1234"}, headers=headers_a).get_json() == {"valid": False}

        resp = client.put(f"/api/users/{admin_a.id}/pin", json={"pin": "1234"}, headers=headers_a)
        assert resp.status_code == 200

        db_session.refresh(admin_a)
        assert admin_a.pin_hash and admin_a.pin_hash != "1234"

        ok = client.post("/api/auth/verify-pin", json={"pin": "1234"}, headers=headers_a)
        bad = client.post("/api/auth/verify-pin", json={"pin": "9999"}, headers=headers_a)
        assert ok.get_json() == {"valid": True}
        assert bad.get_json() == {"valid": False}


class TestPasswordHelpers:

    def test_hash_and_verify(self, app):
        hashed = hash_password("hunter22")
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)
        assert not verify_password("hunter22", "not-a-bcrypt-hash")
        assert not verify_password(22, hashed)


class TestErrorBodies:

    def test_error_details_outside_production(self, client, db_session):
        resp = client.post("/api/auth/login", json={})
        body = resp.get_json()
        assert body["error"] == "AuthError"
        assert "stack" in body

    def test_production_hides_details(self, app, client, db_session, monkeypatch):
        monkeypatch.setitem(app.config, "APP_ENV", "production")
        body = client.post("/api/auth/login", json={}).get_json()
        assert body == {"message": "Invalid credentials"}

    def test_unknown_route_is_json(self, client, db_session):
        resp = client.get("/api/does-not-exist")
        assert resp.status_code == 404
        assert "message" in resp.get_json()
