"""Public restaurant and menu endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ordering.core.errors import NotFoundError
from ordering.db.session import get_db
from ordering.schemas.menu import (
    CustomizationResponse,
    FriesOptionResponse,
    MenuCategoryResponse,
    MenuItemResponse,
    RestaurantResponse,
    SauceResponse,
)
from ordering.services import menu_service, settings_service
from ordering.services.pricing import EXTRA_UNIT_PRICE

router: APIRouter = APIRouter()


@router.get("/restaurant", response_model=RestaurantResponse)
def get_restaurant(db: Session = Depends(get_db)) -> RestaurantResponse:
    restaurant = settings_service.get_restaurant(db)
    if restaurant is None:
        raise NotFoundError("Restaurant not configured")
    return RestaurantResponse.model_validate(restaurant)


@router.get("/menu", response_model=list[MenuCategoryResponse])
def get_menu(db: Session = Depends(get_db)) -> list[MenuCategoryResponse]:
    """Orderable items grouped by category."""
    grouped = menu_service.list_public_menu(db)
    return [
        MenuCategoryResponse(category=category, items=[MenuItemResponse.model_validate(item) for item in items])
        for category, items in grouped.items()
    ]


@router.get("/menu/customization", response_model=CustomizationResponse)
def get_customization_options(db: Session = Depends(get_db)) -> CustomizationResponse:
    sauces, fries = menu_service.list_customization_options(db)
    return CustomizationResponse(
        sauces=[SauceResponse.model_validate(sauce) for sauce in sauces],
        fries_options=[FriesOptionResponse.model_validate(option) for option in fries],
        extra_price=EXTRA_UNIT_PRICE,
    )
