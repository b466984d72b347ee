"""
FastAPI Application Entry Point

QR Menu - restaurant owners sign in with an emailed one-time password,
manage their menus, and share a public menu page.

Endpoints:
    - POST /api/auth/signup: Create an account and email a code
    - POST /api/auth/login: Email a fresh code to an existing account
    - POST /api/auth/verify-otp: Exchange a code for a session cookie
    - GET /api/auth/me: Current session identity
    - POST/GET /api/restaurants: Create / list own restaurants
    - GET /api/restaurants/public: Public restaurant listing
    - GET /api/restaurants/{id}: Restaurant with its menu
    - POST /api/menu/categories: Create a category (owner only)
    - POST /api/menu/dishes: Create a dish (owner only)
    - GET /api/menu/{restaurant_id}: Public menu
    - GET /health: System health check

Run:
    uvicorn qrmenu.main:app --host 0.0.0.0 --port 8001
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select, func

from qrmenu.core.config import Settings, get_settings, setup_logging
from qrmenu.database import Database
from qrmenu.dependencies import (
    RequestContext,
    get_app_settings,
    get_notifier,
    get_request_context,
    get_session_issuer,
    raise_for_result,
    require_auth,
)
from qrmenu.models import Category, Restaurant
from qrmenu.schemas import (
    AuthMessageResponse,
    CategoryCreate,
    CategoryResponse,
    DishCreate,
    DishResponse,
    ErrorResponse,
    HealthResponse,
    LoginRequest,
    MenuCategoryResponse,
    RestaurantCreate,
    RestaurantDetailResponse,
    RestaurantPublicResponse,
    RestaurantResponse,
    ServiceErrorResponse,
    SessionIdentityResponse,
    SignupRequest,
    UserResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from qrmenu.services.auth import OtpIssuer, OtpVerifier, SessionIssuer
from qrmenu.services.menu import MenuService
from qrmenu.services.notifications import BaseNotificationService, get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    # Refuse to run with an unsigned session secret
    settings.require_secrets()
    app.state.session_issuer = SessionIssuer(settings)

    await database.init()
    logger.info("✅ Database initialized")
    logger.info(f"✅ Notification Service: {app.state.notifier.provider_name}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ Missing recommended config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await database.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def menu_category_response(category: Category) -> MenuCategoryResponse:
    """Flatten a category and its dish links."""
    return MenuCategoryResponse(
        id=category.id,
        name=category.name,
        restaurant_id=category.restaurant_id,
        dishes=[DishResponse.model_validate(link.dish) for link in category.dish_links],
    )


def restaurant_detail_response(restaurant: Restaurant) -> RestaurantDetailResponse:
    return RestaurantDetailResponse(
        id=restaurant.id,
        name=restaurant.name,
        location=restaurant.location,
        owner_id=restaurant.owner_id,
        categories=[menu_category_response(c) for c in restaurant.categories],
    )


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@router.get("/", tags=["Root"])
async def root(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    ctx: RequestContext = Depends(get_request_context),
    notifier: BaseNotificationService = Depends(get_notifier),
) -> HealthResponse:
    """Verify all system components are operational."""

    db_status = "healthy"
    try:
        await ctx.db.execute(select(func.count(Restaurant.id)))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    notification_status = "healthy" if await notifier.health_check() else "unhealthy"

    overall = "operational" if all(
        s == "healthy" for s in [db_status, notification_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        notification_service=notification_status,
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# AUTH ENDPOINTS
# =============================================================================

@router.post(
    "/api/auth/signup",
    response_model=AuthMessageResponse,
    responses={409: {"model": ServiceErrorResponse}, 500: {"model": ServiceErrorResponse}},
    tags=["Auth"],
)
async def signup(
    body: SignupRequest,
    ctx: RequestContext = Depends(get_request_context),
    notifier: BaseNotificationService = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
) -> AuthMessageResponse:
    """Create an owner account and email its first login code."""
    issuer = OtpIssuer(ctx.db, notifier, settings)
    result = await issuer.signup(body.email, body.name, body.country)
    if not result.success:
        raise_for_result(result)
    return AuthMessageResponse(success=True, message=result.message)


@router.post(
    "/api/auth/login",
    response_model=AuthMessageResponse,
    responses={404: {"model": ServiceErrorResponse}, 500: {"model": ServiceErrorResponse}},
    tags=["Auth"],
)
async def login(
    body: LoginRequest,
    ctx: RequestContext = Depends(get_request_context),
    notifier: BaseNotificationService = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
) -> AuthMessageResponse:
    """Email a fresh login code, replacing any pending one."""
    issuer = OtpIssuer(ctx.db, notifier, settings)
    result = await issuer.login(body.email)
    if not result.success:
        raise_for_result(result)
    return AuthMessageResponse(success=True, message=result.message)


@router.post(
    "/api/auth/verify-otp",
    response_model=VerifyOtpResponse,
    responses={401: {"model": ServiceErrorResponse}},
    tags=["Auth"],
)
async def verify_otp(
    body: VerifyOtpRequest,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    sessions: SessionIssuer = Depends(get_session_issuer),
) -> VerifyOtpResponse:
    """Consume a login code and start a session."""
    result = await OtpVerifier(ctx.db).verify(body.email, body.otp)
    if not result.success:
        raise_for_result(result)

    identity = result.value
    sessions.attach(response, sessions.issue_session(identity))

    return VerifyOtpResponse(
        success=True,
        user=UserResponse(id=identity.id, name=identity.name, email=identity.email),
    )


@router.get(
    "/api/auth/me",
    response_model=SessionIdentityResponse,
    responses={401: {"model": ServiceErrorResponse}},
    tags=["Auth"],
)
async def me(ctx: RequestContext = Depends(require_auth)) -> SessionIdentityResponse:
    """Return the identity of the signed-in caller."""
    return SessionIdentityResponse(id=ctx.identity.id, email=ctx.identity.email)


# =============================================================================
# RESTAURANT ENDPOINTS
# =============================================================================

@router.post(
    "/api/restaurants",
    response_model=RestaurantResponse,
    status_code=201,
    tags=["Restaurants"],
)
async def create_restaurant(
    body: RestaurantCreate,
    ctx: RequestContext = Depends(require_auth),
) -> RestaurantResponse:
    restaurant = await MenuService(ctx.db).create_restaurant(ctx.identity, body.name, body.location)
    return RestaurantResponse.model_validate(restaurant)


@router.get(
    "/api/restaurants",
    response_model=list[RestaurantResponse],
    tags=["Restaurants"],
)
async def list_my_restaurants(
    ctx: RequestContext = Depends(require_auth),
) -> list[RestaurantResponse]:
    """Restaurants owned by the caller, newest first."""
    restaurants = await MenuService(ctx.db).list_owned_restaurants(ctx.identity)
    return [RestaurantResponse.model_validate(r) for r in restaurants]


@router.get(
    "/api/restaurants/public",
    response_model=list[RestaurantPublicResponse],
    tags=["Restaurants"],
)
async def list_public_restaurants(
    ctx: RequestContext = Depends(get_request_context),
) -> list[RestaurantPublicResponse]:
    restaurants = await MenuService(ctx.db).list_public_restaurants()
    return [RestaurantPublicResponse.model_validate(r) for r in restaurants]


@router.get(
    "/api/restaurants/{restaurant_id}",
    response_model=RestaurantDetailResponse,
    responses={404: {"model": ServiceErrorResponse}},
    tags=["Restaurants"],
)
async def get_restaurant(
    restaurant_id: str,
    ctx: RequestContext = Depends(get_request_context),
) -> RestaurantDetailResponse:
    """Restaurant with its categories and dishes."""
    result = await MenuService(ctx.db).get_restaurant(restaurant_id)
    if not result.success:
        raise_for_result(result)
    return restaurant_detail_response(result.value)


# =============================================================================
# MENU ENDPOINTS
# =============================================================================

@router.post(
    "/api/menu/categories",
    response_model=CategoryResponse,
    status_code=201,
    responses={401: {"model": ServiceErrorResponse}},
    tags=["Menu"],
)
async def create_category(
    body: CategoryCreate,
    ctx: RequestContext = Depends(require_auth),
) -> CategoryResponse:
    result = await MenuService(ctx.db).create_category(ctx.identity, body.name, body.restaurant_id)
    if not result.success:
        raise_for_result(result)
    return CategoryResponse.model_validate(result.value)


@router.post(
    "/api/menu/dishes",
    response_model=DishResponse,
    status_code=201,
    responses={401: {"model": ServiceErrorResponse}},
    tags=["Menu"],
)
async def create_dish(
    body: DishCreate,
    ctx: RequestContext = Depends(require_auth),
) -> DishResponse:
    result = await MenuService(ctx.db).create_dish(
        ctx.identity,
        restaurant_id=body.restaurant_id,
        name=body.name,
        description=body.description,
        price=body.price,
        image=str(body.image),
        is_veg=body.is_veg,
        spice_level=body.spice_level,
        category_ids=body.category_ids,
    )
    if not result.success:
        raise_for_result(result)
    return DishResponse.model_validate(result.value)


@router.get(
    "/api/menu/{restaurant_id}",
    response_model=list[MenuCategoryResponse],
    tags=["Menu"],
)
async def get_menu(
    restaurant_id: str,
    ctx: RequestContext = Depends(get_request_context),
) -> list[MenuCategoryResponse]:
    """Public menu: categories with their dishes."""
    categories = await MenuService(ctx.db).get_menu(restaurant_id)
    return [menu_category_response(c) for c in categories]


# =============================================================================
# ERROR HANDLERS
# =============================================================================

async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    settings: Settings = request.app.state.settings

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            detail=str(exc) if settings.debug else "An unexpected error occurred",
        ).model_dump(),
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    notifier: Optional[BaseNotificationService] = None,
) -> FastAPI:
    """
    Build the application with explicitly owned collaborators.

    Args:
        settings: Application settings (defaults to environment settings)
        database: Persistence handle (defaults to one built from settings)
        notifier: Mail delivery service (defaults to the configured one)
    """
    settings = settings or get_settings()
    setup_logging(settings=settings)

    app = FastAPI(
        title=settings.app_name,
        description="Restaurant menu management with emailed one-time-password login.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.database = database or Database(settings.database_url, echo=settings.database_echo)
    app.state.notifier = notifier or get_notification_service(settings)

    # Session cookies need credentialed CORS with explicit origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.add_exception_handler(Exception, global_exception_handler)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("qrmenu.main:app", host=_settings.api_host, port=_settings.api_port)
