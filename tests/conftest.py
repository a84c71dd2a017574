"""Test fixtures — async test client, test database, factories."""
import os
from typing import AsyncGenerator

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite:///./test.db")
os.environ.setdefault("API_KEY", "test-api-key")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.database import Base
from app.api.deps import get_db
from app.main import app
from app.schemas.property_schema import PropertyRead


TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_session_factory = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables and yield a test database session."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_factory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Yield an HTTP test client with the test DB injected and the API key set."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-API-Key": settings.api_key},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def make_property_payload(**overrides) -> dict:
    """Create a valid property creation payload (camelCase, as sent over the wire)."""
    defaults = {
        "title": "Bright two-bedroom apartment",
        "description": "Renovated apartment close to the metro with a south-facing balcony.",
        "address": "12 Harbour Street",
        "propertyType": "apartment",
        "listingType": "sale",
        "price": 3_000_000_000,
        "area": 80,
        "bedrooms": 2,
        "bathrooms": 1,
        "parkingSpaces": 1,
        "hasElevator": True,
        "hasBalcony": True,
        "hasStorage": False,
        "city": "Harbor City",
        "district": "Old Town",
        "latitude": 41.1496,
        "longitude": -8.6109,
        "amenities": ["gym", "pool"],
        "yearBuilt": 2018,
        "floorNumber": 3,
        "totalFloors": 8,
        "images": [
            "https://cdn.example.com/p/1.jpg",
            "https://cdn.example.com/p/2.jpg",
        ],
    }
    defaults.update(overrides)
    return defaults


def make_record(**overrides) -> PropertyRead:
    """In-memory property record for the search engine."""
    defaults = {
        "title": "Listing",
        "property_type": "apartment",
        "listing_type": "sale",
        "price": 1_000_000_000,
        "area": 70,
        "bedrooms": 2,
        "bathrooms": 1,
        "parking_spaces": 0,
        "city": "Harbor City",
        "district": "Old Town",
    }
    defaults.update(overrides)
    return PropertyRead(**defaults)
