"""
Tests for the /api/auth endpoints.

Exercises the full signup -> verify -> session flow over HTTP, including
cookie attributes and error bodies.
"""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from qrmenu.services.auth import Identity, SessionIssuer


def signup(client: TestClient, email: str = "a@x.com", name: str = "Ana", country: str = "IN"):
    return client.post("/api/auth/signup", json={"email": email, "name": name, "country": country})


def verify(client: TestClient, email: str, otp: str):
    return client.post("/api/auth/verify-otp", json={"email": email, "otp": otp})


class TestSignupEndpoint:
    """Tests for POST /api/auth/signup."""

    def test_signup_sends_code(self, client: TestClient, notifier) -> None:
        response = signup(client)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "OTP sent to email"}
        assert notifier.last_code("a@x.com") is not None
        assert notifier.last_code("a@x.com") not in response.text

    def test_duplicate_signup_conflicts(self, client: TestClient) -> None:
        signup(client)

        response = signup(client, name="Someone")

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "CONFLICT"

    def test_signup_validates_input(self, client: TestClient) -> None:
        assert signup(client, email="not-an-email").status_code == 422
        assert signup(client, name="A").status_code == 422
        assert signup(client, country="I").status_code == 422


class TestLoginEndpoint:
    """Tests for POST /api/auth/login."""

    def test_login_unknown_email_not_found(self, client: TestClient) -> None:
        response = client.post("/api/auth/login", json={"email": "nobody@x.com"})

        assert response.status_code == 404
        assert response.json()["detail"] == {
            "kind": "NOT_FOUND",
            "message": "User not found. Please sign up first.",
        }

    def test_login_invalidates_previous_code(self, client: TestClient, notifier) -> None:
        signup(client)
        old = notifier.last_code("a@x.com")

        response = client.post("/api/auth/login", json={"email": "a@x.com"})
        new = notifier.last_code("a@x.com")

        assert response.status_code == 200
        if old != new:
            assert verify(client, "a@x.com", old).status_code == 401
        assert verify(client, "a@x.com", new).status_code == 200

    def test_delivery_failure_is_internal(self, client: TestClient, notifier) -> None:
        signup(client)
        notifier.fail = True

        response = client.post("/api/auth/login", json={"email": "a@x.com"})

        assert response.status_code == 500
        assert response.json()["detail"]["kind"] == "INTERNAL"


class TestVerifyOtpEndpoint:
    """Tests for POST /api/auth/verify-otp."""

    def test_signup_verify_scenario(self, client: TestClient, notifier) -> None:
        assert signup(client).status_code == 200
        code = notifier.last_code("a@x.com")
        wrong = "000000" if code != "000000" else "111111"

        rejected = verify(client, "a@x.com", wrong)
        assert rejected.status_code == 401
        assert rejected.json()["detail"]["kind"] == "UNAUTHORIZED"
        assert "set-cookie" not in rejected.headers

        accepted = verify(client, "a@x.com", code)
        assert accepted.status_code == 200
        body = accepted.json()
        assert body["success"] is True
        assert body["user"]["name"] == "Ana"
        assert body["user"]["email"] == "a@x.com"
        assert "auth_token" in accepted.cookies

        replayed = verify(client, "a@x.com", code)
        assert replayed.status_code == 401

    def test_session_cookie_attributes(self, client: TestClient, notifier) -> None:
        signup(client)

        response = verify(client, "a@x.com", notifier.last_code("a@x.com"))

        header = response.headers["set-cookie"].lower()
        assert header.startswith("auth_token=")
        assert "httponly" in header
        assert "samesite=strict" in header
        assert "path=/" in header
        assert "max-age=604800" in header

    def test_padded_code_is_rejected_and_stays_pending(self, client: TestClient, notifier) -> None:
        signup(client)
        code = notifier.last_code("a@x.com")

        padded = verify(client, "a@x.com", f"  {code} \n")

        assert padded.status_code == 401
        assert padded.json()["detail"]["kind"] == "UNAUTHORIZED"
        assert verify(client, "a@x.com", code).status_code == 200

    def test_verify_unknown_email_unauthorized(self, client: TestClient) -> None:
        response = verify(client, "nobody@x.com", "123456")

        assert response.status_code == 401
        assert response.json()["detail"]["message"] == "Invalid or expired OTP"


class TestMeEndpoint:
    """Tests for GET /api/auth/me."""

    def test_me_requires_session(self, client: TestClient) -> None:
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"]["kind"] == "UNAUTHORIZED"

    def test_me_returns_session_identity(self, client: TestClient, sign_in) -> None:
        user = sign_in(client, "a@x.com", name="Ana")

        response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json() == {"id": user["id"], "email": "a@x.com"}

    def test_expired_session_is_rejected(self, client: TestClient, sign_in, test_settings) -> None:
        user = sign_in(client, "a@x.com")
        past = datetime.now(timezone.utc) - timedelta(days=8)
        expired = SessionIssuer(test_settings, clock=lambda: past).issue_session(
            Identity(id=user["id"], email="a@x.com")
        )

        client.cookies.clear()
        client.cookies.set("auth_token", expired)
        response = client.get("/api/auth/me")

        assert response.status_code == 401


class TestErrorContract:
    """Tests for the documented error body of service failures."""

    def test_documented_error_matches_returned_body(self, client: TestClient) -> None:
        openapi = client.get("/openapi.json").json()
        documented = openapi["paths"]["/api/auth/login"]["post"]["responses"]["404"]
        ref = documented["content"]["application/json"]["schema"]["$ref"]
        schemas = openapi["components"]["schemas"]

        envelope = schemas[ref.rsplit("/", 1)[-1]]
        detail_ref = envelope["properties"]["detail"]["$ref"]
        detail = schemas[detail_ref.rsplit("/", 1)[-1]]

        body = client.post("/api/auth/login", json={"email": "nobody@x.com"}).json()

        assert set(envelope["properties"]) == set(body)
        assert set(detail["properties"]) == set(body["detail"]) == {"kind", "message"}
