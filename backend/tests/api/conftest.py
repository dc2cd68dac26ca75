"""API test fixtures - httpx client over the real app, wired to the test database.

Invariants:
    - app.state.registry points at the per-test registry (ASGITransport skips the lifespan)
    - db_manager patched so the readiness probe checks the test database
    - Both restored after each test
"""

import pytest
from httpx import ASGITransport, AsyncClient

import app.infrastructure.database as db_module
from app.main import app


@pytest.fixture
async def client(registry, session_manager):
    original_manager = db_module.db_manager
    original_registry = getattr(app.state, "registry", None)
    db_module.db_manager = session_manager
    app.state.registry = registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    db_module.db_manager = original_manager
    app.state.registry = original_registry
