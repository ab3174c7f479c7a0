"""
Shared fixtures: an in-memory Redis, a GoTrue emulator behind an httpx
MockTransport, and the ASGI app wired to both.
"""
import json
import re
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

import fakeredis
import httpx
import pytest

from storefront import config
from storefront.clients.auth_provider import AuthProviderClient, get_auth_provider
from storefront.clients.storefront_client import StorefrontClient
from storefront.kv_store import KVStore, get_kv
from storefront.main import app

SERVICE_KEY = "service-role-key"
USER_PATH = re.compile(r"^/auth/v1/admin/users/(?P<user_id>[^/]+)$")


class FakeGoTrue:
    """Just enough of the GoTrue REST API for the storefront."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.tokens: Dict[str, str] = {}
        self.passwords: Dict[str, str] = {}
        self.fail_with: Optional[int] = None

    def add_user(self, email: str, name: str = "Ada", confirmed: bool = True, password: str = "secret123") -> Tuple[str, str]:
        user_id = str(uuid.uuid4())
        self.users[user_id] = {
            "id": user_id,
            "email": email,
            "email_confirmed_at": datetime.now(timezone.utc).isoformat() if confirmed else None,
            "user_metadata": {"name": name},
        }
        self.passwords[user_id] = password
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return user_id, token

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail_with:
            return httpx.Response(self.fail_with, json={"msg": "provider failure"})

        bearer = request.headers.get("Authorization", "").removeprefix("Bearer ")
        path = request.url.path

        if path == "/auth/v1/user" and request.method == "GET":
            user_id = self.tokens.get(bearer)
            if user_id is None:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json=self.users[user_id])

        if bearer != SERVICE_KEY or request.headers.get("apikey") != SERVICE_KEY:
            return httpx.Response(401, json={"msg": "service role required"})

        if path == "/auth/v1/admin/users" and request.method == "GET":
            return httpx.Response(200, json={"users": list(self.users.values())})

        if path == "/auth/v1/admin/users" and request.method == "POST":
            payload = json.loads(request.content)
            if len(payload.get("password", "")) < 6:
                return httpx.Response(422, json={"msg": "Password should be at least 6 characters"})
            user_id, _ = self.add_user(
                payload["email"],
                payload["user_metadata"]["name"],
                confirmed=payload.get("email_confirm", False),
                password=payload["password"],
            )
            return httpx.Response(200, json=self.users[user_id])

        match = USER_PATH.match(path)
        if match and request.method == "PUT":
            user = self.users.get(match["user_id"])
            if user is None:
                return httpx.Response(404, json={"msg": "User not found"})
            payload = json.loads(request.content)
            if payload.get("email_confirm"):
                user["email_confirmed_at"] = datetime.now(timezone.utc).isoformat()
            if "password" in payload:
                self.passwords[user["id"]] = payload["password"]
            if "user_metadata" in payload:
                user["user_metadata"] = payload["user_metadata"]
            return httpx.Response(200, json=user)

        return httpx.Response(404, json={"msg": "not found"})


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    monkeypatch.setattr(config, "AUTH_JWT_SECRET", None)
    monkeypatch.setattr(config, "EXPOSE_RESET_CODE", True)
    monkeypatch.setattr(config, "ENFORCE_STATUS_TRANSITIONS", False)
    monkeypatch.setattr(config, "STRICT_PRICING", False)
    monkeypatch.setattr(config, "RESET_CODE_TTL_SECONDS", 600)


@pytest.fixture
def kv():
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    return KVStore(client, namespace="test:")


@pytest.fixture
def gotrue():
    return FakeGoTrue()


@pytest.fixture
def provider(gotrue):
    return AuthProviderClient(
        base_url="http://auth.test",
        service_role_key=SERVICE_KEY,
        transport=httpx.MockTransport(gotrue.handler),
    )


@pytest.fixture
def asgi_app(kv, provider):
    app.dependency_overrides[get_kv] = lambda: kv
    app.dependency_overrides[get_auth_provider] = lambda: provider
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def api(asgi_app):
    transport = httpx.ASGITransport(app=asgi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def customer(gotrue):
    """(user_id, token) of a confirmed customer."""
    return gotrue.add_user("ada@sacyskitchen.ng", "Ada")


@pytest.fixture
async def admin(gotrue, kv):
    """(user_id, token) of a confirmed administrator."""
    user_id, token = gotrue.add_user("chef@sacyskitchen.ng", "Chef")
    await kv.set_json(f"admin:{user_id}", True)
    return user_id, token


@pytest.fixture
def storefront_client(asgi_app):
    """Factory for API clients talking to the in-process app."""

    def make(token: Optional[str] = None) -> StorefrontClient:
        return StorefrontClient(
            base_url="http://test",
            token=token,
            transport=httpx.ASGITransport(app=asgi_app),
        )

    return make

