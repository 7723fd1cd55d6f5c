"""Unit tests for famli.core.security: password hashing and access/refresh token handling."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt

from famli.core.config import settings
from famli.core.security import (
    InvalidTokenError,
    decode_refresh_token,
    hash_password,
    issue_tokens,
    verify_access_token,
    verify_password,
)


def _tamper(token: str) -> str:
    header, payload, signature = token.split(".")
    return f"{header}.{payload}.{signature[::-1]}"


class TestPasswordHashing(unittest.TestCase):
    def setUp(self) -> None:
        rounds = patch("famli.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)

    def test_hash_verifies_and_is_salted(self) -> None:
        first = hash_password("longenough1")
        second = hash_password("longenough1")
        self.assertNotEqual(first, second)
        self.assertTrue(verify_password("longenough1", first))
        self.assertTrue(verify_password("longenough1", second))

    def test_wrong_password_rejected(self) -> None:
        hashed = hash_password("longenough1")
        self.assertFalse(verify_password("longenough2", hashed))

    def test_malformed_hash_returns_false(self) -> None:
        self.assertFalse(verify_password("longenough1", "not-a-bcrypt-hash"))


class TestIssueTokens(unittest.TestCase):
    def test_access_token_round_trips_identity(self) -> None:
        pair = issue_tokens(7, "alice", "admin")
        claims = verify_access_token(pair.access_token)
        self.assertEqual((claims.id, claims.username, claims.role), (7, "alice", "admin"))

    def test_refresh_token_carries_only_user_id(self) -> None:
        pair = issue_tokens(7, "alice", "admin")
        self.assertEqual(decode_refresh_token(pair.refresh_token), 7)
        payload = jwt.decode(
            pair.refresh_token,
            settings.JWT_REFRESH_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
        )
        self.assertNotIn("username", payload)
        self.assertNotIn("role", payload)

    def test_expiry_windows(self) -> None:
        now = datetime.now(UTC).replace(microsecond=0)
        pair = issue_tokens(1, "alice", "admin", now=now)
        access = jwt.decode(
            pair.access_token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
        )
        refresh = jwt.decode(
            pair.refresh_token,
            settings.JWT_REFRESH_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
        )
        self.assertEqual(access["exp"] - access["iat"], settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)
        self.assertEqual(
            refresh["exp"] - refresh["iat"], settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600
        )

    def test_pairs_issued_at_same_instant_differ(self) -> None:
        now = datetime.now(UTC)
        first = issue_tokens(1, "alice", "admin", now=now)
        second = issue_tokens(1, "alice", "admin", now=now)
        self.assertNotEqual(first.access_token, second.access_token)
        self.assertNotEqual(first.refresh_token, second.refresh_token)


class TestVerifyAccessToken(unittest.TestCase):
    def test_expired_token_rejected(self) -> None:
        past = datetime.now(UTC) - timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES + 5)
        pair = issue_tokens(1, "alice", "admin", now=past)
        with self.assertRaises(InvalidTokenError):
            verify_access_token(pair.access_token)

    def test_tampered_signature_rejected(self) -> None:
        pair = issue_tokens(1, "alice", "admin")
        with self.assertRaises(InvalidTokenError):
            verify_access_token(_tamper(pair.access_token))

    def test_refresh_token_is_not_an_access_token(self) -> None:
        pair = issue_tokens(1, "alice", "admin")
        with self.assertRaises(InvalidTokenError):
            verify_access_token(pair.refresh_token)

    def test_access_token_is_not_a_refresh_token(self) -> None:
        pair = issue_tokens(1, "alice", "admin")
        with self.assertRaises(InvalidTokenError):
            decode_refresh_token(pair.access_token)

    def test_missing_claims_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "1", "type": "access", "exp": now + timedelta(minutes=5)},
            settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
        )
        with self.assertRaises(InvalidTokenError):
            verify_access_token(token)

    def test_non_numeric_subject_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": "alice",
                "username": "alice",
                "role": "admin",
                "type": "access",
                "exp": now + timedelta(minutes=5),
            },
            settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
        )
        with self.assertRaises(InvalidTokenError):
            verify_access_token(token)

    def test_garbage_rejected(self) -> None:
        with self.assertRaises(InvalidTokenError):
            verify_access_token("not.a.jwt")


if __name__ == "__main__":
    unittest.main()
