"""Shared base class for API tests: the real app on an in-memory SQLite database."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from famli.core.database import get_db
from famli.main import app
from famli.models import Base

API = "/api"

ADMIN = {"username": "alice", "email": "a@x.com", "password": "longenough1"}


class ApiTestCase(unittest.TestCase):
    """Fresh database per test; bcrypt rounds lowered so hashing stays fast."""

    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.addCleanup(app.dependency_overrides.clear)
        self.addCleanup(self.engine.dispose)

        rounds = patch("famli.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)

        self.client = TestClient(app)

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def setup_admin(self) -> dict:
        resp = self.client.post(f"{API}/auth/setup", json=ADMIN)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def create_user(self, admin_token: str, username: str, role: str, password: str = "password123") -> dict:
        resp = self.client.post(
            f"{API}/users",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
                "role": role,
            },
            headers=self.bearer(admin_token),
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def login(self, username: str, password: str = "password123") -> dict:
        resp = self.client.post(
            f"{API}/auth/login", json={"username": username, "password": password}
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def token_for_role(self, admin_token: str, role: str) -> str:
        """Create a user with role and return a fresh access token for it."""
        username = f"{role}-user"
        self.create_user(admin_token, username, role)
        return self.login(username)["accessToken"]
