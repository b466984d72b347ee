"""
Menu Service

Restaurant, category and dish operations. Every mutation below a
restaurant goes through the authorization gate's ownership check; a
restaurant that does not exist is reported exactly like one owned by
someone else.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from qrmenu.models import Category, Dish, DishCategory, Restaurant
from qrmenu.services.auth.base import UNAUTHORIZED_MESSAGE, Identity
from qrmenu.services.auth.gate import AuthorizationGate
from qrmenu.services.results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)


class MenuService:
    """Owner-side menu management and public menu lookups."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # RESTAURANTS
    # =========================================================================

    async def create_restaurant(self, identity: Identity, name: str, location: str) -> Restaurant:
        restaurant = Restaurant(name=name, location=location, owner_id=identity.id)
        self.session.add(restaurant)
        await self.session.commit()
        await self.session.refresh(restaurant)

        logger.info(f"Restaurant {restaurant.id} created by {identity.email}")
        return restaurant

    async def list_owned_restaurants(self, identity: Identity) -> Sequence[Restaurant]:
        """Restaurants owned by the caller, newest first."""
        result = await self.session.execute(
            select(Restaurant)
            .where(Restaurant.owner_id == identity.id)
            .order_by(Restaurant.created_at.desc())
        )
        return result.scalars().all()

    async def list_public_restaurants(self) -> Sequence[Restaurant]:
        result = await self.session.execute(select(Restaurant).order_by(Restaurant.name))
        return result.scalars().all()

    async def get_restaurant(self, restaurant_id: str) -> ServiceResult:
        """Load a restaurant with its categories and their dishes."""
        result = await self.session.execute(
            select(Restaurant)
            .where(Restaurant.id == restaurant_id)
            .options(
                selectinload(Restaurant.categories)
                .selectinload(Category.dish_links)
                .selectinload(DishCategory.dish)
            )
        )
        restaurant = result.scalar_one_or_none()
        if restaurant is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, f"Restaurant {restaurant_id} not found")
        return ServiceResult.ok(restaurant)

    # =========================================================================
    # OWNERSHIP
    # =========================================================================

    async def _authorize(self, identity: Identity, restaurant_id: str) -> ServiceResult:
        owner_id = await self.session.scalar(
            select(Restaurant.owner_id).where(Restaurant.id == restaurant_id)
        )
        allowed = AuthorizationGate.ensure_owner(owner_id, identity)
        if not allowed.success:
            logger.warning(f"{identity.email} denied access to restaurant {restaurant_id}")
        return allowed

    # =========================================================================
    # CATEGORIES & DISHES
    # =========================================================================

    async def create_category(self, identity: Identity, name: str, restaurant_id: str) -> ServiceResult:
        allowed = await self._authorize(identity, restaurant_id)
        if not allowed.success:
            return allowed

        category = Category(name=name, restaurant_id=restaurant_id)
        self.session.add(category)
        await self.session.commit()
        await self.session.refresh(category)
        return ServiceResult.ok(category)

    async def create_dish(
        self,
        identity: Identity,
        restaurant_id: str,
        name: str,
        description: str,
        price: float,
        image: str,
        is_veg: bool = True,
        spice_level: Optional[int] = None,
        category_ids: Sequence[str] = (),
    ) -> ServiceResult:
        """
        Add a dish to a restaurant and place it in the given categories.

        Categories must belong to the same restaurant; otherwise the call
        fails with the generic authorization error.
        """
        allowed = await self._authorize(identity, restaurant_id)
        if not allowed.success:
            return allowed

        wanted = list(dict.fromkeys(category_ids))
        if wanted:
            result = await self.session.execute(
                select(Category.id).where(
                    Category.id.in_(wanted),
                    Category.restaurant_id == restaurant_id,
                )
            )
            if len(set(result.scalars().all())) != len(wanted):
                return ServiceResult.fail(ErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)

        dish = Dish(
            name=name,
            description=description,
            price=price,
            image=image,
            is_veg=is_veg,
            spice_level=spice_level,
            restaurant_id=restaurant_id,
        )
        self.session.add(dish)
        await self.session.flush()

        self.session.add_all(
            DishCategory(dish_id=dish.id, category_id=category_id) for category_id in wanted
        )
        await self.session.commit()
        await self.session.refresh(dish)
        return ServiceResult.ok(dish)

    async def get_menu(self, restaurant_id: str) -> Sequence[Category]:
        """Categories of a restaurant with the dishes placed in each."""
        result = await self.session.execute(
            select(Category)
            .where(Category.restaurant_id == restaurant_id)
            .options(selectinload(Category.dish_links).selectinload(DishCategory.dish))
            .order_by(Category.created_at)
        )
        return result.scalars().all()
