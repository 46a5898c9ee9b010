"""Shared fixtures: one client per backend, plus the in-process gateway."""

from pathlib import Path

import httpx
import pytest

from intake_desk.client import IntakeDeskClient, create_client
from intake_desk.core import MemoryStorage, Settings
from intake_desk.main import create_app

BACKENDS = ["memory", "file", "sql", "remote"]


def make_settings(tmp_path: Path, backend: str = "memory", **overrides) -> Settings:
    """Settings isolated from the environment and the working directory."""
    values = {
        "INTAKE_API_URL": "",
        "storage_backend": backend,
        "storage_dir": tmp_path / "data",
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'intake.db'}",
    }
    values.update(overrides)
    return Settings(**values)


async def make_remote_client(local: IntakeDeskClient) -> IntakeDeskClient:
    """HTTP-backed client talking to a gateway that serves ``local``."""
    app = create_app(local.settings, client=local)
    settings = local.settings.model_copy(update={"api_base_url": "http://testserver"})
    return await create_client(settings, transport=httpx.ASGITransport(app=app))


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def settings_factory(tmp_path: Path):
    """Build isolated settings for a given backend."""

    def factory(backend: str = "memory", **overrides) -> Settings:
        return make_settings(tmp_path, backend, **overrides)

    return factory


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Memory-backed settings."""
    return make_settings(tmp_path)


@pytest.fixture
async def local_client(settings: Settings):
    """Client over an in-memory document."""
    client = await create_client(settings, storage=MemoryStorage())
    yield client
    await client.aclose()


@pytest.fixture(params=BACKENDS)
async def client(request, tmp_path: Path):
    """The same client surface over every backend."""
    backend = request.param
    if backend == "remote":
        local = await create_client(make_settings(tmp_path), storage=MemoryStorage())
        remote = await make_remote_client(local)
        yield remote
        await remote.aclose()
        await local.aclose()
        return

    client = await create_client(make_settings(tmp_path, backend))
    yield client
    await client.aclose()


@pytest.fixture
async def gateway(local_client: IntakeDeskClient):
    """Raw HTTP access to the gateway serving ``local_client``."""
    app = create_app(local_client.settings, client=local_client)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as http:
        yield http
