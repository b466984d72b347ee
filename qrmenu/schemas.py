"""
Pydantic Schemas for Request/Response Validation

Covers:
- OTP signup/login/verification
- Session identity
- Restaurants, categories and dishes
"""

from pydantic import BaseModel, Field, HttpUrl, EmailStr
from typing import Optional, List
from datetime import datetime


# =============================================================================
# AUTH REQUEST SCHEMAS
# =============================================================================

class SignupRequest(BaseModel):
    """Request schema for creating an owner account."""
    email: EmailStr = Field(..., examples=["ana@example.com"])
    name: str = Field(..., min_length=2, max_length=100, examples=["Ana"])
    country: str = Field(..., min_length=2, max_length=100, examples=["IN"])


class LoginRequest(BaseModel):
    """Request schema for requesting a login code."""
    email: EmailStr = Field(..., examples=["ana@example.com"])


class VerifyOtpRequest(BaseModel):
    """Request schema for exchanging a code for a session."""
    email: EmailStr = Field(..., examples=["ana@example.com"])
    otp: str = Field(..., min_length=1, max_length=16, examples=["482913"])


# =============================================================================
# AUTH RESPONSE SCHEMAS
# =============================================================================

class AuthMessageResponse(BaseModel):
    """Response after an OTP has been issued."""
    success: bool
    message: str


class UserResponse(BaseModel):
    """Public view of a verified user."""
    id: str
    name: str
    email: str


class VerifyOtpResponse(BaseModel):
    """Response after a successful OTP verification."""
    success: bool
    user: UserResponse


class SessionIdentityResponse(BaseModel):
    """Identity carried by the session token."""
    id: str
    email: str


# =============================================================================
# MENU REQUEST SCHEMAS
# =============================================================================

class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100, examples=["Spice Route"])
    location: str = Field(..., min_length=2, max_length=255, examples=["Bandra, Mumbai"])


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Starters"])
    restaurant_id: str


class DishCreate(BaseModel):
    """Request schema for adding a dish to a restaurant."""
    name: str = Field(..., min_length=1, max_length=100, examples=["Paneer Tikka"])
    description: str = Field(default="", max_length=2000)
    price: float = Field(..., ge=0, examples=[249.0])
    image: HttpUrl = Field(..., examples=["https://images.example.com/paneer.jpg"])
    is_veg: bool = True
    spice_level: Optional[int] = Field(None, ge=0, le=3)
    restaurant_id: str
    category_ids: List[str] = Field(default_factory=list)


# =============================================================================
# MENU RESPONSE SCHEMAS
# =============================================================================

class RestaurantResponse(BaseModel):
    id: str
    name: str
    location: str
    owner_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RestaurantPublicResponse(BaseModel):
    """Restaurant listing entry for customers."""
    id: str
    name: str
    location: str

    class Config:
        from_attributes = True


class CategoryResponse(BaseModel):
    id: str
    name: str
    restaurant_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DishResponse(BaseModel):
    id: str
    name: str
    description: str
    price: float
    image: str
    is_veg: bool
    spice_level: Optional[int] = None
    restaurant_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MenuCategoryResponse(BaseModel):
    """A category together with the dishes placed in it."""
    id: str
    name: str
    restaurant_id: str
    dishes: List[DishResponse]


class RestaurantDetailResponse(BaseModel):
    """Restaurant with its full menu."""
    id: str
    name: str
    location: str
    owner_id: str
    categories: List[MenuCategoryResponse]


# =============================================================================
# GENERIC SCHEMAS
# =============================================================================

class ErrorDetail(BaseModel):
    """Machine-readable service failure."""
    kind: str = Field(..., examples=["NOT_FOUND"])
    message: str


class ServiceErrorResponse(BaseModel):
    """Body of a failed service call."""
    detail: ErrorDetail


class ErrorResponse(BaseModel):
    """Body returned by the catch-all handler for unexpected errors."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    notification_service: str
    timestamp: datetime
