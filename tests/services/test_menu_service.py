"""
Unit tests for MenuService: ownership gating and menu assembly.
"""

import pytest
from sqlalchemy import func, select

from qrmenu.models import Dish, User
from qrmenu.services.auth import Identity
from qrmenu.services.menu import MenuService
from qrmenu.services.results import ErrorKind

DISH = {
    "name": "Paneer Tikka",
    "description": "Charred cottage cheese",
    "price": 249.0,
    "image": "https://images.example.com/paneer.jpg",
}


@pytest.fixture
async def owners(session):
    """Two registered users."""
    ana = User(email="a@x.com", name="Ana", country="IN")
    bo = User(email="b@x.com", name="Bo", country="SE")
    session.add_all([ana, bo])
    await session.commit()
    return (
        Identity(id=ana.id, email=ana.email, name=ana.name),
        Identity(id=bo.id, email=bo.email, name=bo.name),
    )


@pytest.fixture
def service(session) -> MenuService:
    return MenuService(session)


class TestRestaurants:
    """Tests for restaurant creation and listing."""

    @pytest.mark.asyncio
    async def test_create_restaurant_sets_owner(self, service, owners):
        ana, _ = owners

        restaurant = await service.create_restaurant(ana, "Spice Route", "Mumbai")

        assert restaurant.owner_id == ana.id
        assert restaurant.created_at is not None

    @pytest.mark.asyncio
    async def test_list_owned_restaurants_only_returns_callers(self, service, owners):
        ana, bo = owners
        await service.create_restaurant(ana, "Spice Route", "Mumbai")
        await service.create_restaurant(bo, "Nordic Bites", "Malmo")

        mine = await service.list_owned_restaurants(ana)

        assert [r.name for r in mine] == ["Spice Route"]

    @pytest.mark.asyncio
    async def test_public_listing_includes_everyone(self, service, owners):
        ana, bo = owners
        await service.create_restaurant(ana, "Spice Route", "Mumbai")
        await service.create_restaurant(bo, "Nordic Bites", "Malmo")

        names = [r.name for r in await service.list_public_restaurants()]

        assert names == ["Nordic Bites", "Spice Route"]

    @pytest.mark.asyncio
    async def test_get_missing_restaurant_not_found(self, service):
        result = await service.get_restaurant("does-not-exist")

        assert result.error_kind == ErrorKind.NOT_FOUND


class TestOwnershipGate:
    """Tests for restaurant-scoped mutations."""

    @pytest.mark.asyncio
    async def test_owner_creates_category(self, service, owners):
        ana, _ = owners
        restaurant = await service.create_restaurant(ana, "Spice Route", "Mumbai")

        result = await service.create_category(ana, "Starters", restaurant.id)

        assert result.success
        assert result.value.restaurant_id == restaurant.id

    @pytest.mark.asyncio
    async def test_non_owner_cannot_create_category(self, service, owners):
        ana, bo = owners
        restaurant = await service.create_restaurant(ana, "Spice Route", "Mumbai")

        result = await service.create_category(bo, "Starters", restaurant.id)

        assert result.error_kind == ErrorKind.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_missing_restaurant_fails_like_foreign_one(self, service, owners):
        ana, bo = owners
        restaurant = await service.create_restaurant(ana, "Spice Route", "Mumbai")

        foreign = await service.create_category(bo, "Starters", restaurant.id)
        missing = await service.create_category(bo, "Starters", "does-not-exist")

        assert missing.to_dict() == foreign.to_dict()

    @pytest.mark.asyncio
    async def test_non_owner_cannot_create_dish(self, service, owners, session):
        ana, bo = owners
        restaurant = await service.create_restaurant(ana, "Spice Route", "Mumbai")

        result = await service.create_dish(bo, restaurant.id, **DISH)

        assert result.error_kind == ErrorKind.UNAUTHORIZED
        assert await session.scalar(select(func.count(Dish.id))) == 0

    @pytest.mark.asyncio
    async def test_dish_rejects_category_of_other_restaurant(self, service, owners, session):
        ana, _ = owners
        mine = await service.create_restaurant(ana, "Spice Route", "Mumbai")
        other = await service.create_restaurant(ana, "Second Kitchen", "Pune")
        foreign_category = (await service.create_category(ana, "Mains", other.id)).value

        result = await service.create_dish(ana, mine.id, category_ids=[foreign_category.id], **DISH)

        assert result.error_kind == ErrorKind.UNAUTHORIZED
        assert await session.scalar(select(func.count(Dish.id))) == 0


class TestMenu:
    """Tests for dish placement and menu reads."""

    @pytest.mark.asyncio
    async def test_dish_appears_under_each_category(self, service, owners):
        ana, _ = owners
        restaurant = await service.create_restaurant(ana, "Spice Route", "Mumbai")
        starters = (await service.create_category(ana, "Starters", restaurant.id)).value
        specials = (await service.create_category(ana, "Specials", restaurant.id)).value

        result = await service.create_dish(
            ana,
            restaurant.id,
            spice_level=2,
            category_ids=[starters.id, specials.id, starters.id],
            **DISH,
        )
        assert result.success
        assert result.value.is_veg is True
        assert result.value.spice_level == 2

        menu = await service.get_menu(restaurant.id)

        assert {c.name for c in menu} == {"Starters", "Specials"}
        for category in menu:
            assert [link.dish.name for link in category.dish_links] == ["Paneer Tikka"]

    @pytest.mark.asyncio
    async def test_get_restaurant_loads_full_menu(self, service, owners):
        ana, _ = owners
        restaurant = await service.create_restaurant(ana, "Spice Route", "Mumbai")
        starters = (await service.create_category(ana, "Starters", restaurant.id)).value
        await service.create_dish(ana, restaurant.id, category_ids=[starters.id], **DISH)

        result = await service.get_restaurant(restaurant.id)

        assert result.success
        loaded = result.value
        assert [c.name for c in loaded.categories] == ["Starters"]
        assert loaded.categories[0].dish_links[0].dish.price == 249.0

    @pytest.mark.asyncio
    async def test_menu_of_unknown_restaurant_is_empty(self, service):
        assert list(await service.get_menu("does-not-exist")) == []
