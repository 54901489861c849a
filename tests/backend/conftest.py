import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from app.core import db as db_module
from app.main import app
from app.services import mailer


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest.fixture
def outbox(monkeypatch):
    """
    Capture outgoing mail instead of talking to an SMTP server.
    Each entry is a (to, subject, body) tuple.
    """
    sent: list[tuple[str, str, str]] = []

    def _fake_send(to: str, subject: str, body: str) -> bool:
        sent.append((to, subject, body))
        return True

    monkeypatch.setattr(mailer, "send_email", _fake_send)
    return sent


@pytest_asyncio.fixture
async def client(outbox):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def register(client):
    """
    Factory fixture registering a user through the API.
    Returns (response body, Authorization headers, password).
    """

    async def _register(
        name: str = "Jess",
        email: str | None = None,
        password: str = "Red12345!",
        age: int | None = None,
    ) -> tuple[dict, dict[str, str], str]:
        payload = {
            "name": name,
            "email": email or f"user_{uuid.uuid4().hex[:6]}@example.com",
            "password": password,
        }
        if age is not None:
            payload["age"] = age
        resp = await client.post("/users", json=payload)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body, {"Authorization": f"Bearer {body['token']}"}, password

    return _register
