"""API tests for /auth: first-run setup, login, refresh, logout, and the bearer gate."""

import unittest
from datetime import UTC, datetime, timedelta

from famli.core.config import settings
from famli.core.security import issue_tokens, verify_access_token
from tests.support import ADMIN, API, ApiTestCase


def _tamper(token: str) -> str:
    header, payload, signature = token.split(".")
    return f"{header}.{payload}.{signature[::-1]}"


class TestFirstRun(ApiTestCase):
    def test_first_run_true_until_a_user_exists(self) -> None:
        resp = self.client.get(f"{API}/auth/first-run")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"isFirstRun": True})

        self.setup_admin()

        resp = self.client.get(f"{API}/auth/first-run")
        self.assertEqual(resp.json(), {"isFirstRun": False})


class TestSetup(ApiTestCase):
    def test_setup_creates_admin_and_signs_in(self) -> None:
        resp = self.client.post(f"{API}/auth/setup", json=ADMIN)
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["user"]["username"], "alice")
        self.assertEqual(body["user"]["email"], "a@x.com")
        self.assertEqual(body["user"]["role"], "admin")
        self.assertNotIn("password_hash", body["user"])
        claims = verify_access_token(body["accessToken"])
        self.assertEqual(claims.id, body["user"]["id"])
        self.assertEqual(claims.role, "admin")
        self.assertTrue(body["refreshToken"])

    def test_second_setup_rejected_regardless_of_payload(self) -> None:
        self.setup_admin()
        for payload in (
            ADMIN,
            {"username": "mallory", "email": "m@x.com", "password": "longenough1"},
            {},
            {"username": "x"},
            {"username": 5},
            {"email": {"a": 1}},
            [1, 2],
            "admin",
        ):
            resp = self.client.post(f"{API}/auth/setup", json=payload)
            self.assertEqual(resp.status_code, 400, payload)
            self.assertEqual(resp.json(), {"error": "Setup already completed"})

    def test_setup_without_body_after_completion(self) -> None:
        self.setup_admin()
        resp = self.client.post(f"{API}/auth/setup")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Setup already completed")

    def test_short_password_rejected(self) -> None:
        resp = self.client.post(
            f"{API}/auth/setup",
            json={"username": "alice", "email": "a@x.com", "password": "short"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Password must be at least 8 characters"})
        self.assertEqual(self.client.get(f"{API}/auth/first-run").json(), {"isFirstRun": True})

    def test_missing_fields_rejected(self) -> None:
        resp = self.client.post(f"{API}/auth/setup", json={"username": "alice"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "All fields are required"})

    def test_wrongly_typed_fields_count_as_missing(self) -> None:
        for payload in ({"username": 5, "email": "a@x.com", "password": "longenough1"}, [ADMIN]):
            resp = self.client.post(f"{API}/auth/setup", json=payload)
            self.assertEqual(resp.status_code, 400, payload)
            self.assertEqual(resp.json(), {"error": "All fields are required"})
        self.assertEqual(self.client.get(f"{API}/auth/first-run").json(), {"isFirstRun": True})

    def test_malformed_json_after_completion(self) -> None:
        self.setup_admin()
        resp = self.client.post(
            f"{API}/auth/setup", content="not json", headers={"Content-Type": "application/json"}
        )
        self.assertEqual(resp.json(), {"error": "Setup already completed"})


class TestLogin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.setup_admin()

    def test_login_returns_verifiable_access_token(self) -> None:
        body = self.login(ADMIN["username"], ADMIN["password"])
        claims = verify_access_token(body["accessToken"])
        self.assertEqual(
            (claims.id, claims.username, claims.role),
            (body["user"]["id"], "alice", "admin"),
        )
        self.assertEqual(body["user"]["preferences"], {})

    def test_login_for_created_user(self) -> None:
        admin_token = self.login(ADMIN["username"], ADMIN["password"])["accessToken"]
        created = self.create_user(admin_token, "bob", "editor")
        body = self.login("bob")
        claims = verify_access_token(body["accessToken"])
        self.assertEqual((claims.id, claims.username, claims.role), (created["id"], "bob", "editor"))

    def test_wrong_password(self) -> None:
        resp = self.client.post(
            f"{API}/auth/login", json={"username": "alice", "password": "wrong-password"}
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid credentials"})

    def test_unknown_user(self) -> None:
        resp = self.client.post(
            f"{API}/auth/login", json={"username": "nobody", "password": "longenough1"}
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid credentials"})

    def test_missing_credentials(self) -> None:
        resp = self.client.post(f"{API}/auth/login", json={"username": "alice"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Username and password are required"})

    def test_non_string_credentials(self) -> None:
        resp = self.client.post(f"{API}/auth/login", json={"username": "alice", "password": 12345678})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Username and password are required"})


class TestRefreshAndLogout(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.tokens = self.setup_admin()

    def _refresh(self, refresh_token: str):
        return self.client.post(f"{API}/auth/refresh", json={"refreshToken": refresh_token})

    def test_refresh_returns_new_working_pair(self) -> None:
        resp = self._refresh(self.tokens["refreshToken"])
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(set(body), {"accessToken", "refreshToken"})
        self.assertNotEqual(body["refreshToken"], self.tokens["refreshToken"])
        me = self.client.get(f"{API}/users/me", headers=self.bearer(body["accessToken"]))
        self.assertEqual(me.status_code, 200)

    def test_old_refresh_token_rejected_after_rotation(self) -> None:
        self.assertEqual(self._refresh(self.tokens["refreshToken"]).status_code, 200)
        resp = self._refresh(self.tokens["refreshToken"])
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"error": "Invalid refresh token"})

    def test_tampered_refresh_token(self) -> None:
        resp = self._refresh(_tamper(self.tokens["refreshToken"]))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"error": "Invalid refresh token"})

    def test_access_token_cannot_refresh(self) -> None:
        resp = self._refresh(self.tokens["accessToken"])
        self.assertEqual(resp.status_code, 403)

    def test_missing_refresh_token(self) -> None:
        resp = self.client.post(f"{API}/auth/refresh", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Refresh token required"})

    def test_non_string_refresh_token_is_invalid(self) -> None:
        for token in (123, ["a"], {"token": "a"}, True):
            resp = self.client.post(f"{API}/auth/refresh", json={"refreshToken": token})
            self.assertEqual(resp.status_code, 403, token)
            self.assertEqual(resp.json(), {"error": "Invalid refresh token"})

    def test_empty_or_unparseable_refresh_body(self) -> None:
        for kwargs in (
            {"json": {"refreshToken": ""}},
            {"json": [self.tokens["refreshToken"]]},
            {"content": "not json", "headers": {"Content-Type": "application/json"}},
        ):
            resp = self.client.post(f"{API}/auth/refresh", **kwargs)
            self.assertEqual(resp.status_code, 400, kwargs)
            self.assertEqual(resp.json(), {"error": "Refresh token required"})

    def test_logout_revokes_session(self) -> None:
        resp = self.client.post(
            f"{API}/auth/logout", json={"refreshToken": self.tokens["refreshToken"]}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Logged out successfully"})
        self.assertEqual(self._refresh(self.tokens["refreshToken"]).status_code, 403)

    def test_logout_is_idempotent(self) -> None:
        for payload in ({"refreshToken": self.tokens["refreshToken"]}, {"refreshToken": "bogus"}, {}):
            resp = self.client.post(f"{API}/auth/logout", json=payload)
            self.assertEqual(resp.status_code, 200, payload)
        self.assertEqual(self.client.post(f"{API}/auth/logout").status_code, 200)

    def test_logout_never_errors_on_odd_bodies(self) -> None:
        for kwargs in (
            {"json": {"refreshToken": 123}},
            {"json": []},
            {"json": "token"},
            {"content": "not json", "headers": {"Content-Type": "application/json"}},
        ):
            resp = self.client.post(f"{API}/auth/logout", **kwargs)
            self.assertEqual(resp.status_code, 200, kwargs)
            self.assertEqual(resp.json(), {"message": "Logged out successfully"})
        self.assertEqual(self._refresh(self.tokens["refreshToken"]).status_code, 200)

    def test_logout_does_not_invalidate_access_token(self) -> None:
        self.client.post(f"{API}/auth/logout", json={"refreshToken": self.tokens["refreshToken"]})
        me = self.client.get(f"{API}/users/me", headers=self.bearer(self.tokens["accessToken"]))
        self.assertEqual(me.status_code, 200)


class TestAuthorizationGate(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.tokens = self.setup_admin()

    def test_missing_header(self) -> None:
        resp = self.client.get(f"{API}/households")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Access token required"})

    def test_malformed_header(self) -> None:
        for value in ("Token abc", "Bearer", "abc"):
            resp = self.client.get(f"{API}/households", headers={"Authorization": value})
            self.assertEqual(resp.status_code, 401, value)
            self.assertEqual(resp.json(), {"error": "Access token required"})

    def test_invalid_token(self) -> None:
        resp = self.client.get(
            f"{API}/households", headers=self.bearer(_tamper(self.tokens["accessToken"]))
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid or expired token"})

    def test_expired_token(self) -> None:
        past = datetime.now(UTC) - timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES + 1)
        expired = issue_tokens(1, "alice", "admin", now=past).access_token
        resp = self.client.get(f"{API}/households", headers=self.bearer(expired))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid or expired token"})

    def test_refresh_token_is_not_a_bearer_credential(self) -> None:
        resp = self.client.get(f"{API}/households", headers=self.bearer(self.tokens["refreshToken"]))
        self.assertEqual(resp.status_code, 401)

    def test_insufficient_role(self) -> None:
        viewer = self.token_for_role(self.tokens["accessToken"], "viewer")
        resp = self.client.post(
            f"{API}/households", json={"name": "Smiths"}, headers=self.bearer(viewer)
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"error": "Insufficient permissions"})

    def test_gate_trusts_token_without_database_lookup(self) -> None:
        # A well-signed token for an id the store has never seen still passes the gate.
        ghost = issue_tokens(999, "ghost", "viewer").access_token
        resp = self.client.get(f"{API}/households", headers=self.bearer(ghost))
        self.assertEqual(resp.status_code, 200)


class TestFirstRunScenario(ApiTestCase):
    """Setup, locked setup, failed login and a forged refresh, in sequence."""

    def test_scenario(self) -> None:
        resp = self.client.post(f"{API}/auth/setup", json=ADMIN)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["user"]["role"], "admin")
        refresh_token = resp.json()["refreshToken"]

        resp = self.client.post(f"{API}/auth/setup", json={"username": "eve"})
        self.assertEqual((resp.status_code, resp.json()), (400, {"error": "Setup already completed"}))

        resp = self.client.post(
            f"{API}/auth/login", json={"username": "alice", "password": "not-the-password"}
        )
        self.assertEqual((resp.status_code, resp.json()), (401, {"error": "Invalid credentials"}))

        resp = self.client.post(f"{API}/auth/refresh", json={"refreshToken": _tamper(refresh_token)})
        self.assertEqual((resp.status_code, resp.json()), (403, {"error": "Invalid refresh token"}))


if __name__ == "__main__":
    unittest.main()
