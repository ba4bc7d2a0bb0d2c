"""
Tests for repository classes.
Covers CRUD operations, the search query composer, image association and favorites.
"""

import asyncio
import pytest
from decimal import Decimal
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from estate_api.database import Base

from estate_api.models.user import User, UserRole
from estate_api.models.property import Property, PropertyType, ListingType, PropertyStatus
from estate_api.models.favorite import Favorite
from estate_api.repositories.user import UserRepository
from estate_api.repositories.property import PropertyRepository, PropertySearchFilters
from estate_api.repositories.image import ImageRepository
from estate_api.repositories.favorite import FavoriteRepository
from tests.conftest import (
    UserFactory, PropertyFactory, ImageFactory, assert_user_equal, count_rows, load_image_rows
)


class TestBaseRepository:
    """Test base repository functionality through UserRepository."""

    @pytest.mark.asyncio
    async def test_create(self, user_repository: UserRepository):
        """Test creating a record."""
        user_data = UserFactory.create_user_data(email="test@example.com")
        user = await user_repository.create_user(user_data)

        assert user.id is not None
        assert user.email == "test@example.com"
        assert user.created_at is not None
        assert user.updated_at is not None

    @pytest.mark.asyncio
    async def test_get_by_id(self, user_repository: UserRepository):
        """Test getting a record by ID."""
        created_user = await UserFactory.create_user(user_repository)

        retrieved_user = await user_repository.get_by_id(created_user.id)

        assert retrieved_user is not None
        assert_user_equal(retrieved_user, created_user)

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, user_repository: UserRepository):
        assert await user_repository.get_by_id(999999) is None

    @pytest.mark.asyncio
    async def test_update(self, user_repository: UserRepository):
        """Test updating a record."""
        created_user = await UserFactory.create_user(user_repository)

        updated_user = await user_repository.update(created_user.id, {"full_name": "Updated Name"})

        assert updated_user is not None
        assert updated_user.full_name == "Updated Name"
        assert updated_user.id == created_user.id

    @pytest.mark.asyncio
    async def test_update_not_found(self, user_repository: UserRepository):
        assert await user_repository.update(999999, {"full_name": "Nobody"}) is None

    @pytest.mark.asyncio
    async def test_count_and_exists(self, user_repository: UserRepository):
        """Test counting records with and without filters."""
        initial_count = await count_rows(user_repository.db, User)

        agent = await UserFactory.create_user(user_repository, role=UserRole.AGENT)
        await UserFactory.create_user(user_repository, role=UserRole.USER)

        assert await count_rows(user_repository.db, User) == initial_count + 2
        assert await count_rows(user_repository.db, User, role=UserRole.USER) == 1
        assert await user_repository.exists(agent.id) is True
        assert await user_repository.exists(999999) is False


class TestUserRepository:
    """Test user-specific repository operations."""

    @pytest.mark.asyncio
    async def test_create_user_hashes_password_and_defaults_role(self, user_repository: UserRepository):
        user = await user_repository.create_user({
            "email": "New.User@Example.com",
            "password": "password123"
        })

        assert user.email == "new.user@example.com"
        assert user.role == UserRole.USER
        assert user.hashed_password != "password123"
        assert user.verify_password("password123")

    @pytest.mark.asyncio
    async def test_create_user_duplicate_email(self, user_repository: UserRepository, test_agent: User):
        with pytest.raises(ValueError, match="already exists"):
            await user_repository.create_user({
                "email": "agent@example.com",
                "password": "password123"
            })

    @pytest.mark.asyncio
    async def test_authenticate_user(self, user_repository: UserRepository, test_agent: User):
        assert await user_repository.authenticate_user("agent@example.com", "testpassword123") is not None
        assert await user_repository.authenticate_user("agent@example.com", "wrong") is None
        assert await user_repository.authenticate_user("missing@example.com", "testpassword123") is None

    @pytest.mark.asyncio
    async def test_authenticate_inactive_user(self, user_repository: UserRepository, test_inactive_user: User):
        assert await user_repository.authenticate_user("inactive@example.com", "testpassword123") is None

    @pytest.mark.asyncio
    async def test_check_email_availability(self, user_repository: UserRepository, test_agent: User):
        assert await user_repository.check_email_availability("agent@example.com") is False
        assert await user_repository.check_email_availability("AGENT@example.com") is False
        assert await user_repository.check_email_availability("agent@example.com", exclude_user_id=test_agent.id) is True
        assert await user_repository.check_email_availability("free@example.com") is True

    @pytest.mark.asyncio
    async def test_list_with_property_counts(
        self,
        user_repository: UserRepository,
        property_repository: PropertyRepository,
        test_agent: User,
        test_user: User
    ):
        """Every user is listed, including those without listings."""
        agent_id = test_agent.id
        user_id = test_user.id
        await PropertyFactory.create_property(property_repository, agent_id=agent_id)
        await PropertyFactory.create_property(property_repository, agent_id=agent_id)

        users = await user_repository.list_with_property_counts()
        counts = {entry["id"]: entry["property_count"] for entry in users}

        assert counts[agent_id] == 2
        assert counts[user_id] == 0
        assert all("hashed_password" not in entry for entry in users)

    @pytest.mark.asyncio
    async def test_delete_user_removes_listings_and_favorites(
        self,
        db_session,
        user_repository: UserRepository,
        property_repository: PropertyRepository,
        image_repository: ImageRepository,
        favorite_repository: FavoriteRepository,
        test_agent: User,
        test_user: User
    ):
        agent_id = test_agent.id
        user_id = test_user.id
        image_ids = await ImageFactory.create_images(image_repository, count=2)
        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=agent_id, image_ids=image_ids
        )
        property_id = property_obj.id
        await favorite_repository.add_if_absent(user_id, property_id)
        await favorite_repository.add_if_absent(agent_id, property_id)

        assert await user_repository.delete_user(agent_id) is True

        assert await user_repository.exists(agent_id) is False
        assert await property_repository.exists(property_id) is False
        assert await favorite_repository.is_favorited(user_id, property_id) is False

        images = await load_image_rows(db_session, image_ids)
        assert len(images) == 2
        assert all(image.property_id is None for image in images)

    @pytest.mark.asyncio
    async def test_delete_user_not_found(self, user_repository: UserRepository):
        assert await user_repository.delete_user(999999) is False


class TestPropertySearch:
    """The search composer applies every supplied filter and nothing else."""

    @pytest.fixture
    async def listings(self, property_repository: PropertyRepository, test_agent: User, other_agent: User):
        agent_id = test_agent.id
        other_id = other_agent.id
        rows = [
            dict(agent_id=agent_id, title="Austin House", city="Austin", price=Decimal("300000"),
                 property_type=PropertyType.HOUSE, listing_type=ListingType.SALE,
                 bedrooms=3, bathrooms=2, featured=True),
            dict(agent_id=agent_id, title="Austin Flat", city="austin", price=Decimal("1500"),
                 property_type=PropertyType.APARTMENT, listing_type=ListingType.RENT,
                 bedrooms=1, bathrooms=1, status=PropertyStatus.RENTED),
            dict(agent_id=other_id, title="Dallas Villa", city="Dallas", price=Decimal("2500000"),
                 property_type=PropertyType.VILLA, listing_type=ListingType.SALE,
                 bedrooms=5, bathrooms=4, featured=True),
            dict(agent_id=other_id, title="San Antonio Condo", city="San Antonio", price=Decimal("500000"),
                 property_type=PropertyType.CONDO, listing_type=ListingType.SALE,
                 bedrooms=2, bathrooms=2, status=PropertyStatus.PENDING),
        ]
        created = []
        for fields in rows:
            created.append(await PropertyFactory.create_property(property_repository, **fields))
        return {p.title: p.id for p in created}

    async def _titles(self, property_repository: PropertyRepository, **filters):
        results = await property_repository.search_properties(PropertySearchFilters(**filters))
        return {row["title"] for row in results}

    @pytest.mark.asyncio
    async def test_no_filters_returns_everything(self, property_repository, listings):
        assert await self._titles(property_repository) == set(listings)

    @pytest.mark.asyncio
    async def test_city_is_case_insensitive_substring(self, property_repository, listings):
        assert await self._titles(property_repository, city="AUST") == {"Austin House", "Austin Flat"}
        assert await self._titles(property_repository, city="anton") == {"San Antonio Condo"}

    @pytest.mark.asyncio
    async def test_city_wildcards_match_literally(self, property_repository, listings):
        assert await self._titles(property_repository, city="%") == set()
        assert await self._titles(property_repository, city="_ustin") == set()
        assert await self._titles(property_repository, city="San_Antonio") == set()

    @pytest.mark.asyncio
    async def test_price_bounds_are_inclusive(self, property_repository, listings):
        titles = await self._titles(
            property_repository, min_price=Decimal("300000"), max_price=Decimal("500000")
        )
        assert titles == {"Austin House", "San Antonio Condo"}

    @pytest.mark.asyncio
    async def test_min_price_only(self, property_repository, listings):
        assert await self._titles(property_repository, min_price=Decimal("2000000")) == {"Dallas Villa"}

    @pytest.mark.asyncio
    async def test_rooms_are_minimums(self, property_repository, listings):
        assert await self._titles(property_repository, bedrooms=3) == {"Austin House", "Dallas Villa"}
        assert await self._titles(property_repository, bathrooms=4) == {"Dallas Villa"}

    @pytest.mark.asyncio
    async def test_equality_filters(self, property_repository, listings, other_agent):
        assert await self._titles(property_repository, property_type=PropertyType.CONDO) == {"San Antonio Condo"}
        assert await self._titles(property_repository, listing_type=ListingType.RENT) == {"Austin Flat"}
        assert await self._titles(property_repository, status=PropertyStatus.PENDING) == {"San Antonio Condo"}
        assert await self._titles(property_repository, featured=True) == {"Austin House", "Dallas Villa"}
        assert await self._titles(property_repository, featured=False) == {"Austin Flat", "San Antonio Condo"}
        assert await self._titles(property_repository, agent_id=other_agent.id) == {
            "Dallas Villa", "San Antonio Condo"
        }

    @pytest.mark.asyncio
    async def test_combined_filters_satisfy_every_bound(self, property_repository, listings):
        results = await property_repository.search_properties(PropertySearchFilters(
            listing_type=ListingType.SALE,
            min_price=Decimal("250000"),
            bedrooms=2,
            status=PropertyStatus.AVAILABLE
        ))

        assert [row["title"] for row in results] == ["Dallas Villa", "Austin House"]
        for row in results:
            assert row["listing_type"] == "sale"
            assert row["price"] >= 250000
            assert row["bedrooms"] >= 2
            assert row["status"] == "available"

    @pytest.mark.asyncio
    async def test_results_are_newest_first_with_images(
        self, property_repository, image_repository, test_agent
    ):
        agent_id = test_agent.id
        image_ids = await ImageFactory.create_images(image_repository, count=2)
        first = await PropertyFactory.create_property(property_repository, agent_id=agent_id, title="First")
        second = await PropertyFactory.create_property(
            property_repository, agent_id=agent_id, title="Second", image_ids=image_ids
        )

        results = await property_repository.search_properties(PropertySearchFilters())

        assert [row["id"] for row in results] == [second.id, first.id]
        assert results[0]["images"] == image_ids
        assert results[1]["images"] == []

    def test_filters_repr_lists_active_filters(self):
        filters = PropertySearchFilters(city="Austin", bedrooms=2)
        assert "city" in repr(filters)
        assert "max_price" not in repr(filters)


class TestPropertyRepository:
    """Test property writes and their image associations."""

    @pytest.mark.asyncio
    async def test_create_links_images_in_order(
        self, db_session, property_repository, image_repository, test_agent
    ):
        image_ids = await ImageFactory.create_images(image_repository, count=3)
        ordered = [image_ids[2], image_ids[0]]

        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, image_ids=ordered
        )
        property_dict = await property_repository.get_property_with_images(property_obj.id)

        assert property_dict["images"] == ordered

        rows = {image.id: image for image in await load_image_rows(db_session, image_ids)}
        assert rows[image_ids[2]].is_primary is True
        assert rows[image_ids[2]].display_order == 0
        assert rows[image_ids[0]].is_primary is False
        assert rows[image_ids[0]].display_order == 1
        assert rows[image_ids[1]].property_id is None

    @pytest.mark.asyncio
    async def test_primary_skips_unknown_leading_id(
        self, db_session, property_repository, image_repository, test_agent
    ):
        """When the first id matches no image, the first stored one becomes primary."""
        i1, i2 = await ImageFactory.create_images(image_repository, count=2)

        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, image_ids=[999999, i2, i1]
        )
        property_dict = await property_repository.get_property_with_images(property_obj.id)

        assert property_dict["images"] == [i2, i1]

        rows = {image.id: image for image in await load_image_rows(db_session, [i1, i2])}
        assert rows[i2].is_primary is True
        assert rows[i2].display_order == 0
        assert rows[i1].is_primary is False
        assert rows[i1].display_order == 1

    @pytest.mark.asyncio
    async def test_update_with_only_unknown_ids_unlinks_all(
        self, db_session, property_repository, image_repository, test_agent
    ):
        image_ids = await ImageFactory.create_images(image_repository, count=1)
        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, image_ids=image_ids
        )
        property_id = property_obj.id

        await property_repository.update_property(property_id, {}, image_ids=[999999])

        property_dict = await property_repository.get_property_with_images(property_id)
        assert property_dict["images"] == []
        rows = await load_image_rows(db_session, image_ids)
        assert rows[0].property_id is None

    @pytest.mark.asyncio
    async def test_create_invalid_price(self, property_repository, test_agent):
        data = PropertyFactory.create_property_data(agent_id=test_agent.id, price=Decimal("0"))
        with pytest.raises(ValueError):
            await property_repository.create_property(data)

    @pytest.mark.asyncio
    async def test_update_relinks_images(self, db_session, property_repository, image_repository, test_agent):
        """Linking [i1, i2] and then updating with [i2, i3] leaves exactly {i2, i3} linked."""
        i1, i2, i3 = await ImageFactory.create_images(image_repository, count=3)
        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, image_ids=[i1, i2]
        )
        property_id = property_obj.id

        await property_repository.update_property(property_id, {"title": "Renamed"}, image_ids=[i2, i3])

        property_dict = await property_repository.get_property_with_images(property_id)
        assert property_dict["title"] == "Renamed"
        assert property_dict["images"] == [i2, i3]

        rows = {image.id: image for image in await load_image_rows(db_session, [i1, i2, i3])}
        assert rows[i1].property_id is None
        assert rows[i2].property_id == property_id
        assert rows[i2].is_primary is True
        assert rows[i3].property_id == property_id

    @pytest.mark.asyncio
    async def test_update_without_images_keeps_links(self, property_repository, image_repository, test_agent):
        image_ids = await ImageFactory.create_images(image_repository, count=2)
        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, image_ids=image_ids
        )

        await property_repository.update_property(property_obj.id, {"bedrooms": 4})

        property_dict = await property_repository.get_property_with_images(property_obj.id)
        assert property_dict["bedrooms"] == 4
        assert property_dict["images"] == image_ids

    @pytest.mark.asyncio
    async def test_update_not_found(self, property_repository):
        assert await property_repository.update_property(999999, {"title": "Nope"}) is None

    @pytest.mark.asyncio
    async def test_delete_property(
        self, db_session, property_repository, image_repository, favorite_repository, test_agent, test_user
    ):
        user_id = test_user.id
        image_ids = await ImageFactory.create_images(image_repository, count=1)
        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, image_ids=image_ids
        )
        property_id = property_obj.id
        await favorite_repository.add_if_absent(user_id, property_id)

        assert await property_repository.delete_property(property_id) is True

        assert await property_repository.exists(property_id) is False
        assert await favorite_repository.is_favorited(user_id, property_id) is False
        images = await load_image_rows(db_session, image_ids)
        assert images[0].property_id is None

    @pytest.mark.asyncio
    async def test_delete_missing_property_leaves_table_unchanged(self, property_repository, test_property):
        before = await count_rows(property_repository.db, Property)

        assert await property_repository.delete_property(999999) is False

        assert await count_rows(property_repository.db, Property) == before


class TestImageRepository:

    @pytest.mark.asyncio
    async def test_store_unattached(self, image_repository: ImageRepository):
        images = await image_repository.store_unattached([ImageFactory.create_image_payload()])

        assert images[0].id is not None
        assert images[0].property_id is None
        assert images[0].is_primary is False

    @pytest.mark.asyncio
    async def test_get_payload(self, image_repository: ImageRepository):
        payload = ImageFactory.create_image_payload()
        images = await image_repository.store_unattached([payload])

        data, mime_type = await image_repository.get_payload(images[0].id)

        assert data == payload["image_data"]
        assert mime_type == "image/png"
        assert await image_repository.get_payload(999999) is None

    @pytest.mark.asyncio
    async def test_link_ignores_unknown_ids(self, image_repository, property_repository, test_agent):
        image_ids = await ImageFactory.create_images(image_repository, count=1)
        property_obj = await PropertyFactory.create_property(property_repository, agent_id=test_agent.id)

        await image_repository.link_to_property(property_obj.id, [image_ids[0], 999999])

        image_map = await image_repository.get_image_ids([property_obj.id])
        assert image_map[property_obj.id] == image_ids

    @pytest.mark.asyncio
    async def test_replace_links(self, image_repository, property_repository, test_agent):
        i1, i2 = await ImageFactory.create_images(image_repository, count=2)
        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, image_ids=[i1]
        )

        await image_repository.replace_links(property_obj.id, [i2])

        image_map = await image_repository.get_image_ids([property_obj.id])
        assert image_map[property_obj.id] == [i2]

    @pytest.mark.asyncio
    async def test_unlink_property(self, image_repository, property_repository, test_agent):
        image_ids = await ImageFactory.create_images(image_repository, count=2)
        property_obj = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, image_ids=image_ids
        )

        await image_repository.unlink_property(property_obj.id)

        image_map = await image_repository.get_image_ids([property_obj.id])
        assert image_map == {property_obj.id: []}


class TestFavoriteRepository:

    @pytest.mark.asyncio
    async def test_add_if_absent_is_idempotent(
        self, db_session, favorite_repository: FavoriteRepository, test_user, test_property
    ):
        """The second insert of the same pair is a no-op and leaves one row."""
        user_id = test_user.id
        property_id = test_property.id

        first = await favorite_repository.add_if_absent(user_id, property_id)
        second = await favorite_repository.add_if_absent(user_id, property_id)

        assert first is not None
        assert second is None

        result = await db_session.execute(
            select(func.count(Favorite.id)).where(
                Favorite.user_id == user_id, Favorite.property_id == property_id
            )
        )
        assert result.scalar() == 1

    @pytest.mark.asyncio
    async def test_remove(self, favorite_repository: FavoriteRepository, test_user, test_property):
        user_id = test_user.id
        property_id = test_property.id
        await favorite_repository.add_if_absent(user_id, property_id)

        assert await favorite_repository.remove(user_id, property_id) is True
        assert await favorite_repository.remove(user_id, property_id) is False
        assert await favorite_repository.is_favorited(user_id, property_id) is False

    @pytest.mark.asyncio
    async def test_list_for_user_joins_property_summary(
        self, favorite_repository: FavoriteRepository, test_user, test_property
    ):
        user_id = test_user.id
        await favorite_repository.add_if_absent(user_id, test_property.id)

        favorites = await favorite_repository.list_for_user(user_id)

        assert len(favorites) == 1
        favorite = favorites[0]
        assert favorite["property_id"] == test_property.id
        assert favorite["title"] == "Test Property"
        assert favorite["price"] == 1500.0
        assert favorite["property_type"] == "house"
        assert favorite["status"] == "available"
        assert await favorite_repository.list_for_user(999999) == []

    @pytest.mark.asyncio
    async def test_concurrent_adds_store_one_row(self, tmp_path):
        """Two sessions adding the same favorite at once leave a single row."""
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'favorites.db'}",
            connect_args={"timeout": 30}
        )
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

        try:
            async with session_factory() as session:
                user = await UserFactory.create_user(UserRepository(session), role=UserRole.USER)
                agent = await UserFactory.create_user(UserRepository(session), role=UserRole.AGENT)
                property_obj = await PropertyFactory.create_property(PropertyRepository(session), agent_id=agent.id)
                user_id, property_id = user.id, property_obj.id

            async def add():
                async with session_factory() as session:
                    return await FavoriteRepository(session).add_if_absent(user_id, property_id)

            results = await asyncio.gather(add(), add())

            assert results.count(None) == 1
            assert [r for r in results if r is not None][0] > 0

            async with session_factory() as session:
                assert await count_rows(session, Favorite, user_id=user_id, property_id=property_id) == 1
        finally:
            await engine.dispose()
