import json
import os
from pathlib import Path

# The app module builds its engine at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pinpoint.database import models  # noqa: F401
from pinpoint.database.session import Base
from pinpoint.services.geo_index import GeoIndex
from pinpoint.services.geocoding import LocationResolver, RequestThrottle
from pinpoint.services.storage import KeyValueStore

FIXTURES = Path(__file__).parent / "fixtures"

NOMINATIM_URL = "https://nominatim.test/reverse"


def load_topology():
    with open(FIXTURES / "world.json") as f:
        return json.load(f)


def unavailable(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"error": "unavailable"})


@pytest.fixture
def topology():
    return load_topology()


@pytest.fixture
def countries_index(topology):
    return GeoIndex.from_topology(topology, "countries")


@pytest.fixture
def land_index(topology):
    return GeoIndex.from_topology(topology, "land")


@pytest.fixture
def offline_resolver(countries_index):
    """Resolver whose remote geocoder always fails, so answers come from the fixture shapes."""
    return LocationResolver(
        countries_index,
        RequestThrottle(0),
        api_url=NOMINATIM_URL,
        transport=httpx.MockTransport(unavailable),
    )


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def store(session_factory):
    return KeyValueStore(session_factory)
