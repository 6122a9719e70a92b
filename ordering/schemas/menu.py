"""Menu and restaurant API schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class MenuItemCreate(BaseModel):
    """Payload for creating a menu item."""

    slug: str = Field(min_length=1, max_length=120)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str = Field(default="Other", max_length=64)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    includes_sides: bool = False
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    slug: str | None = Field(default=None, min_length=1, max_length=120)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=64)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    includes_sides: bool | None = None
    is_available: bool | None = None


class MenuItemResponse(BaseModel):
    """Serialized menu item."""

    id: int
    slug: str
    name: str
    description: str | None
    category: str
    price: Decimal
    includes_sides: bool
    is_available: bool
    is_deleted: bool

    model_config = ConfigDict(from_attributes=True)


class AvailabilityUpdate(BaseModel):
    is_available: bool


class BulkAvailabilityUpdate(BaseModel):
    item_ids: list[int] = Field(min_length=1)
    is_available: bool


class BulkAvailabilityResponse(BaseModel):
    updated: int


class MenuCategoryResponse(BaseModel):
    category: str
    items: list[MenuItemResponse]


class SauceResponse(BaseModel):
    id: int
    slug: str
    name: str
    price: Decimal
    is_default: bool

    model_config = ConfigDict(from_attributes=True)


class FriesOptionResponse(BaseModel):
    id: int
    slug: str
    name: str
    price_addon: Decimal
    is_default: bool

    model_config = ConfigDict(from_attributes=True)


class CustomizationResponse(BaseModel):
    sauces: list[SauceResponse]
    fries_options: list[FriesOptionResponse]
    extra_price: Decimal


class RestaurantResponse(BaseModel):
    """Public restaurant information."""

    name: str
    description: str | None
    phone: str | None
    email: str | None
    address: str | None
    city: str | None
    is_active: bool
    delivery_fee: Decimal
    minimum_order: Decimal
    delivery_time: str
    opening_hours: dict | None

    model_config = ConfigDict(from_attributes=True)
