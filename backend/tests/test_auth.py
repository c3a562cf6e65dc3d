"""Registration, login and logout endpoints."""

from storefront.models import Customer

from conftest import DEFAULT_PASSWORD, login


REGISTRATION = {
    "email": "new@example.com",
    "password": "Sup3r-secret",
    "confirmPassword": "Sup3r-secret",
    "firstName": "New",
    "lastName": "Customer",
}


class TestRegister:
    def test_registration_form(self, client, db_session):
        resp = client.get("/register")
        assert resp.status_code == 200
        assert resp.get_json()["template"] == "Register"

    def test_register_creates_customer(self, client, db_session):
        resp = client.post("/register", json=REGISTRATION)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "Customer created successfully!"
        assert body["payload"]["customer"]["email"] == "new@example.com"
        assert "password" not in body["payload"]["customer"]
        assert body["redirect"].startswith("/login?")

    def test_register_cannot_self_promote(self, client, db_session):
        resp = client.post("/register", json={**REGISTRATION, "isAdmin": True})
        assert resp.status_code == 201
        assert Customer.read_by_email(db_session, "new@example.com").is_admin is False

    def test_duplicate_email(self, client, customer):
        resp = client.post("/register", json={**REGISTRATION, "email": customer.email})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["message"] == "User with this email already exists."
        assert body["redirect"].startswith("/register?error=")

    def test_missing_fields(self, client, db_session):
        resp = client.post("/register", json={"email": "x@example.com"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Missing required fields: first_name, last_name, password"


class TestLogin:
    def test_login_form(self, client, db_session):
        resp = client.get("/login")
        assert resp.status_code == 200
        assert resp.get_json()["payload"]["email"] == ""

    def test_login_form_with_error(self, client, db_session):
        resp = client.get("/login?error=Invalid+credentials")
        assert resp.status_code == 400
        assert resp.get_json()["payload"]["message"] == "Invalid credentials."

    def test_login_success(self, client, customer):
        resp = login(client, "ada@example.com")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Logged in successfully!"
        assert body["redirect"] == "/products"
        assert body["payload"]["customer"]["id"] == customer.id
        assert body["payload"]["isLoggedIn"] is True

    def test_wrong_password(self, client, customer):
        resp = login(client, "ada@example.com", "not-the-password")
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid credentials."

    def test_unknown_email(self, client, db_session):
        resp = login(client, "ghost@example.com")
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid credentials."

    def test_missing_email_or_password(self, client, db_session):
        resp = client.post("/login", json={"password": DEFAULT_PASSWORD})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Email is required."
        resp = client.post("/login", json={"email": "ada@example.com"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Password is required."

    def test_remember_me_sets_email_cookie(self, client, customer):
        resp = client.post("/login", json={
            "email": "ada@example.com",
            "password": DEFAULT_PASSWORD,
            "remember": "on",
        })
        assert resp.status_code == 200
        assert any(h.startswith("email=ada@example.com") for h in resp.headers.getlist("Set-Cookie"))

        # The login form pre-fills the remembered email
        assert client.get("/login").get_json()["payload"]["email"] == "ada@example.com"


class TestLogout:
    def test_logout_when_logged_in(self, customer_client):
        resp = customer_client.get("/logout")
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Logged out successfully"
        assert customer_client.get("/orders").status_code == 401

    def test_logout_without_session(self, client, db_session):
        assert client.get("/logout").status_code == 200
