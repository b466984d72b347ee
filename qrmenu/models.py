"""
SQLAlchemy Database Models

Tables:
- users: owner identity plus the single live OTP challenge
- restaurants: owned by exactly one user
- categories / dishes: restaurant menu content
- dish_categories: many-to-many link between dishes and categories
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from qrmenu.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    Restaurant owner account.

    ``otp_code`` and ``otp_expires_at`` are written and cleared together:
    either both hold the current challenge or both are NULL.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False)

    # =========================================================================
    # OTP CHALLENGE
    # =========================================================================
    otp_code = Column(String(6), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    restaurants = relationship("Restaurant", back_populates="owner")

    def __repr__(self):
        return f"<User {self.email}>"


class Restaurant(Base):
    """A restaurant. ``owner_id`` is fixed at creation."""
    __tablename__ = "restaurants"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    location = Column(String(255), nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User", back_populates="restaurants")
    categories = relationship("Category", back_populates="restaurant", order_by="Category.created_at")
    dishes = relationship("Dish", back_populates="restaurant")

    def __repr__(self):
        return f"<Restaurant {self.name} ({self.id})>"


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    restaurant = relationship("Restaurant", back_populates="categories")
    dish_links = relationship("DishCategory", back_populates="category")

    def __repr__(self):
        return f"<Category {self.name}>"


class Dish(Base):
    __tablename__ = "dishes"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    image = Column(String(500), nullable=False)
    is_veg = Column(Boolean, nullable=False, default=True)
    spice_level = Column(Integer, nullable=True)  # 0-3
    restaurant_id = Column(String(36), ForeignKey("restaurants.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    restaurant = relationship("Restaurant", back_populates="dishes")
    category_links = relationship("DishCategory", back_populates="dish")

    def __repr__(self):
        return f"<Dish {self.name} - {self.price:.2f}>"


class DishCategory(Base):
    """Places a dish in a category."""
    __tablename__ = "dish_categories"

    dish_id = Column(String(36), ForeignKey("dishes.id"), primary_key=True)
    category_id = Column(String(36), ForeignKey("categories.id"), primary_key=True)

    dish = relationship("Dish", back_populates="category_links")
    category = relationship("Category", back_populates="dish_links")
