"""API tests for /v1/auth."""

from uuid import uuid4


def new_email():
    return f"user-{uuid4().hex[:12]}@example.com"


class TestAuth:

    def test_register_login_and_me(self, client):
        email = new_email()
        registered = client.post(
            "/v1/auth/register",
            json={"email": email, "password": "correct-horse-battery", "full_name": "Studio Owner"},
        )
        assert registered.status_code == 201

        login = client.post("/v1/auth/login", json={"email": email, "password": "correct-horse-battery"})
        assert login.status_code == 200
        token = login.json()["data"]["access_token"]

        me = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"}).json()["data"]
        assert me["email"] == email
        assert me["full_name"] == "Studio Owner"
        assert me["id"] == registered.json()["data"]["user_id"]

    def test_duplicate_email_rejected(self, client):
        email = new_email()
        payload = {"email": email, "password": "correct-horse-battery"}
        assert client.post("/v1/auth/register", json=payload).status_code == 201
        assert client.post("/v1/auth/register", json=payload).status_code == 400

    def test_wrong_password_rejected(self, client, register_user):
        email = new_email()
        register_user(email=email)
        response = client.post("/v1/auth/login", json={"email": email, "password": "wrong-password"})
        assert response.status_code == 401

    def test_invalid_token_rejected(self, client):
        response = client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
