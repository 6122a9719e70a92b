"""Admin menu management endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ordering.core.security import get_current_admin
from ordering.db.session import get_db
from ordering.schemas.menu import (
    AvailabilityUpdate,
    BulkAvailabilityResponse,
    BulkAvailabilityUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
)
from ordering.services import menu_service

router: APIRouter = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("/items", response_model=list[MenuItemResponse])
def list_items(
    include_deleted: bool = False,
    category: str | None = None,
    db: Session = Depends(get_db),
) -> list[MenuItemResponse]:
    items = menu_service.list_menu_items(db, include_deleted=include_deleted, category=category)
    return [MenuItemResponse.model_validate(item) for item in items]


@router.post("/items", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(payload: MenuItemCreate, db: Session = Depends(get_db)) -> MenuItemResponse:
    item = menu_service.create_menu_item(db, **payload.model_dump())
    return MenuItemResponse.model_validate(item)


@router.patch("/items/bulk-availability", response_model=BulkAvailabilityResponse)
def bulk_availability(payload: BulkAvailabilityUpdate, db: Session = Depends(get_db)) -> BulkAvailabilityResponse:
    updated = menu_service.bulk_set_availability(db, payload.item_ids, payload.is_available)
    return BulkAvailabilityResponse(updated=updated)


@router.get("/items/{item_id}", response_model=MenuItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)) -> MenuItemResponse:
    return MenuItemResponse.model_validate(menu_service.get_menu_item(db, item_id))


@router.put("/items/{item_id}", response_model=MenuItemResponse)
def update_item(item_id: int, payload: MenuItemUpdate, db: Session = Depends(get_db)) -> MenuItemResponse:
    item = menu_service.update_menu_item(db, item_id, payload.model_dump(exclude_unset=True))
    return MenuItemResponse.model_validate(item)


@router.delete("/items/{item_id}", response_model=MenuItemResponse)
def delete_item(item_id: int, db: Session = Depends(get_db)) -> MenuItemResponse:
    """Soft delete; past order lines keep pointing at the row."""
    return MenuItemResponse.model_validate(menu_service.soft_delete_menu_item(db, item_id))


@router.patch("/items/{item_id}/availability", response_model=MenuItemResponse)
def set_availability(item_id: int, payload: AvailabilityUpdate, db: Session = Depends(get_db)) -> MenuItemResponse:
    return MenuItemResponse.model_validate(menu_service.set_availability(db, item_id, payload.is_available))


@router.patch("/items/{item_id}/restore", response_model=MenuItemResponse)
def restore_item(item_id: int, db: Session = Depends(get_db)) -> MenuItemResponse:
    return MenuItemResponse.model_validate(menu_service.restore_menu_item(db, item_id))
