"""Tests for the /v1/auth endpoints."""

from types import SimpleNamespace

from tests.conftest import make_session


class TestSignIn:
    """Tests for POST /v1/auth/sign-in."""

    def test_sign_in_returns_tokens(self, client, backend_client):
        """Test a successful sign-in."""
        backend_client.auth.sign_in_with_password.return_value = SimpleNamespace(
            session=make_session(), user=make_session().user
        )

        response = client.post(
            "/v1/auth/sign-in", json={"email": "ada@example.com", "password": "secret1"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "access_token": "access-token",
            "refresh_token": "refresh-token",
            "user_id": "user-1",
            "email": "ada@example.com",
        }

    def test_sign_in_bad_credentials(self, client, backend_client):
        """Test that backend refusals become 401."""
        backend_client.auth.sign_in_with_password.side_effect = RuntimeError(
            "Invalid login credentials"
        )

        response = client.post(
            "/v1/auth/sign-in", json={"email": "ada@example.com", "password": "wrong-1"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid login credentials"

    def test_sign_in_short_password(self, client, backend_client):
        """Test local credential validation."""
        response = client.post(
            "/v1/auth/sign-in", json={"email": "ada@example.com", "password": "123"}
        )
        assert response.status_code == 400
        backend_client.auth.sign_in_with_password.assert_not_called()


class TestSignUp:
    """Tests for POST /v1/auth/sign-up."""

    def test_sign_up_without_session(self, client, backend_client):
        """Test sign-up when e-mail confirmation is pending."""
        user = SimpleNamespace(id="user-2", email="bob@example.com")
        backend_client.auth.sign_up.return_value = SimpleNamespace(user=user, session=None)

        response = client.post(
            "/v1/auth/sign-up", json={"email": "bob@example.com", "password": "secret1"}
        )

        assert response.status_code == 201
        assert response.json() == {"user_id": "user-2", "email": "bob@example.com", "session": None}

    def test_sign_up_error(self, client, backend_client):
        """Test that sign-up failures are 400."""
        backend_client.auth.sign_up.side_effect = RuntimeError("User already registered")

        response = client.post(
            "/v1/auth/sign-up", json={"email": "bob@example.com", "password": "secret1"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "User already registered"


class TestSession:
    """Tests for /v1/auth/session and /v1/auth/sign-out."""

    def test_anonymous_session(self, client):
        """Test the anonymous state."""
        assert client.get("/v1/auth/session").json() == {
            "state": "anonymous",
            "user_id": None,
            "email": None,
        }

    def test_authenticated_session(self, client, signed_in):
        """Test the authenticated state."""
        data = client.get("/v1/auth/session").json()
        assert data["state"] == "authenticated"
        assert data["user_id"] == "user-1"

    def test_bearer_token_restores_session(self, client, backend_client):
        """Test that the Authorization header reaches the backend."""
        client.get(
            "/v1/auth/session",
            headers={"Authorization": "Bearer acc", "X-Refresh-Token": "ref"},
        )
        backend_client.auth.set_session.assert_called_once_with("acc", "ref")

    def test_subscription_released_after_request(self, client, backend_client):
        """Test that the session subscription ends with the request."""
        client.get("/v1/auth/session")
        subscription = backend_client.auth.on_auth_state_change.return_value
        subscription.unsubscribe.assert_called_once()

    def test_sign_out(self, client, backend_client, signed_in):
        """Test sign-out pass-through."""
        response = client.post("/v1/auth/sign-out")
        assert response.status_code == 200
        backend_client.auth.sign_out.assert_called_once()

    def test_sign_out_requires_session(self, client):
        """Test that anonymous sign-out is 401."""
        assert client.post("/v1/auth/sign-out").status_code == 401
