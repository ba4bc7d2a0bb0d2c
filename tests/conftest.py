"""
Test configuration and fixtures for the real estate listings API.
Provides database fixtures, test data factories, and common test utilities.
"""

import pytest
import uuid
import io
import os
from typing import AsyncGenerator, List, Optional
from decimal import Decimal
from PIL import Image
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from estate_api.main import app
from estate_api.database import Base, get_db
from estate_api.models.user import User, UserRole
from estate_api.models.property import Property, PropertyType, ListingType, PropertyStatus
from estate_api.models.image import PropertyImage
from estate_api.repositories.user import UserRepository
from estate_api.repositories.property import PropertyRepository
from estate_api.repositories.image import ImageRepository
from estate_api.repositories.favorite import FavoriteRepository
from estate_api.services.auth import AuthService
from estate_api.services.user import UserService
from estate_api.services.property import PropertyService
from estate_api.services.image import ImageService
from estate_api.services.favorite import FavoriteService
from estate_api.utils.auth import create_access_token


# Test database configuration
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def test_engine():
    """Fresh database per test; in-memory SQLite unless TEST_DATABASE_URL is set."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False}
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    """Create a user repository instance."""
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    """Create a property repository instance."""
    return PropertyRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    """Create an image repository instance."""
    return ImageRepository(db_session)


@pytest.fixture
def favorite_repository(db_session: AsyncSession) -> FavoriteRepository:
    return FavoriteRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    """Create an auth service instance."""
    return AuthService(db_session)


@pytest.fixture
def user_service(db_session: AsyncSession) -> UserService:
    return UserService(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession) -> PropertyService:
    """Create a property service instance."""
    return PropertyService(db_session)


@pytest.fixture
def image_service(db_session: AsyncSession) -> ImageService:
    """Create an image service instance."""
    return ImageService(db_session)


@pytest.fixture
def favorite_service(db_session: AsyncSession) -> FavoriteService:
    return FavoriteService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: str = "testpassword123",
        full_name: str = "Test User",
        role: UserRole = UserRole.AGENT,
        is_active: bool = True
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "full_name": full_name,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: str = None,
        password: str = "testpassword123",
        full_name: str = "Test User",
        role: UserRole = UserRole.AGENT,
        is_active: bool = True
    ) -> User:
        """Create a test user in the database."""
        user_data = UserFactory.create_user_data(
            email=email,
            password=password,
            full_name=full_name,
            role=role,
            is_active=is_active
        )
        return await user_repo.create_user(user_data)


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        agent_id: int,
        title: str = "Test Property",
        description: str = "A beautiful test property",
        property_type: PropertyType = PropertyType.HOUSE,
        listing_type: ListingType = ListingType.SALE,
        price: Decimal = Decimal("250000.00"),
        city: str = "Austin",
        bedrooms: int = 2,
        bathrooms: int = 1,
        area_sqft: int = 1000,
        status: PropertyStatus = PropertyStatus.AVAILABLE,
        featured: bool = False
    ) -> dict:
        """Create property data dictionary."""
        return {
            "title": title,
            "description": description,
            "property_type": property_type,
            "listing_type": listing_type,
            "price": price,
            "address": "1 Test Street",
            "city": city,
            "state": "TX",
            "zip_code": "73301",
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "area_sqft": area_sqft,
            "status": status,
            "featured": featured,
            "agent_id": agent_id
        }

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        agent_id: int,
        image_ids: Optional[List[int]] = None,
        **overrides
    ) -> Property:
        """Create a test property in the database."""
        property_data = PropertyFactory.create_property_data(agent_id=agent_id, **overrides)
        return await property_repo.create_property(property_data, image_ids=image_ids)


def create_test_image(width: int = 64, height: int = 48, format: str = "PNG", color: str = "red") -> bytes:
    """Create a test image in memory."""
    img = Image.new("RGB", (width, height), color=color)
    img_bytes = io.BytesIO()
    img.save(img_bytes, format=format)
    return img_bytes.getvalue()


class ImageFactory:
    """Factory for creating stored test images."""

    @staticmethod
    def create_image_payload(
        format: str = "PNG",
        mime_type: str = "image/png",
        filename: str = "test_image.png",
        width: int = 64,
        height: int = 48
    ) -> dict:
        """Create the column values of one stored image."""
        data = create_test_image(width=width, height=height, format=format)
        return {
            "image_data": data,
            "mime_type": mime_type,
            "file_size": len(data),
            "filename": filename,
            "width": width,
            "height": height
        }

    @staticmethod
    async def create_images(image_repo: ImageRepository, count: int = 1) -> List[int]:
        """Store unattached images and return their ids."""
        payloads = [
            ImageFactory.create_image_payload(filename=f"test_image_{i}.png")
            for i in range(count)
        ]
        images = await image_repo.store_unattached(payloads)
        return [image.id for image in images]


def auth_headers(user: User) -> dict:
    """Bearer authorization header for a user."""
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


# Common test fixtures
@pytest.fixture
async def test_agent(user_repository: UserRepository) -> User:
    """Create a test agent user."""
    return await UserFactory.create_user(
        user_repository,
        email="agent@example.com",
        full_name="Test Agent",
        role=UserRole.AGENT
    )


@pytest.fixture
async def other_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="other.agent@example.com",
        full_name="Other Agent",
        role=UserRole.AGENT
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    """Create a test admin user."""
    return await UserFactory.create_user(
        user_repository,
        email="admin@example.com",
        full_name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    """Create a regular (buyer/renter) user."""
    return await UserFactory.create_user(
        user_repository,
        email="user@example.com",
        full_name="Test User",
        role=UserRole.USER
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    """Create a test inactive user."""
    return await UserFactory.create_user(
        user_repository,
        email="inactive@example.com",
        full_name="Inactive User",
        role=UserRole.AGENT,
        is_active=False
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_agent: User) -> Property:
    """Create a test property."""
    return await PropertyFactory.create_property(
        property_repository,
        agent_id=test_agent.id,
        title="Test Property",
        price=Decimal("1500.00"),
        bedrooms=3,
        listing_type=ListingType.RENT
    )


@pytest.fixture
async def test_images(image_repository: ImageRepository) -> List[int]:
    """Three stored, unattached images."""
    return await ImageFactory.create_images(image_repository, count=3)


# Utility functions for tests
def assert_user_equal(user1: User, user2: User, check_password: bool = False):
    """Assert that two users are equal."""
    assert user1.id == user2.id
    assert user1.email == user2.email
    assert user1.full_name == user2.full_name
    assert user1.role == user2.role
    assert user1.is_active == user2.is_active

    if check_password:
        assert user1.hashed_password == user2.hashed_password


def assert_property_dict_matches(property_dict: dict, property_obj: Property):
    """Assert that a serialized property describes the given model."""
    assert property_dict["id"] == property_obj.id
    assert property_dict["title"] == property_obj.title
    assert property_dict["price"] == float(property_obj.price)
    assert property_dict["bedrooms"] == property_obj.bedrooms
    assert property_dict["agent_id"] == property_obj.agent_id
    assert property_dict["status"] == property_obj.status.value


async def load_image_rows(db_session: AsyncSession, image_ids: List[int]) -> List[PropertyImage]:
    """Reload images from the database, bypassing the identity map."""
    result = await db_session.execute(
        select(PropertyImage)
        .where(PropertyImage.id.in_(image_ids))
        .order_by(PropertyImage.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def count_rows(db_session: AsyncSession, model, **filters) -> int:
    """Count rows of a model matching equality filters."""
    query = select(func.count(model.id))
    for field, value in filters.items():
        query = query.where(getattr(model, field) == value)
    result = await db_session.execute(query)
    return result.scalar()
