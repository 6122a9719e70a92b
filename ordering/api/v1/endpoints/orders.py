"""Public order endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from ordering.api.deps import get_order_service
from ordering.db.session import get_db
from ordering.schemas.order import (
    OrderCreate,
    OrderResponse,
    OrderTrackingItem,
    OrderTrackingResponse,
    PaidOrderCreate,
)
from ordering.services import menu_service
from ordering.services.invoice_builder import describe_customizations
from ordering.services.order_service import OrderService

router: APIRouter = APIRouter()


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """Place an order. Invoice and confirmation emails go out after the response."""
    order = orders.place_order(db, payload.to_request(), schedule=background_tasks.add_task)
    db.refresh(order)
    return OrderResponse.from_order(order)


@router.post("/paid", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_paid_order(
    payload: PaidOrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = orders.place_paid_order(
        db,
        payload.to_request(),
        payload.to_payment(),
        schedule=background_tasks.add_task,
    )
    db.refresh(order)
    return OrderResponse.from_order(order)


@router.get("/{order_number}/status", response_model=OrderTrackingResponse)
def track_order(
    order_number: str,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderTrackingResponse:
    order = orders.get_by_number(db, order_number)
    sauces = menu_service.sauce_names(db)
    fries = menu_service.fries_names(db)
    return OrderTrackingResponse(
        order_number=order.order_number,
        status=order.status,
        order_type=order.order_type,
        total=order.total,
        created_at=order.created_at,
        status_updated_at=order.status_updated_at,
        estimated_time=order.estimated_time,
        items=[
            OrderTrackingItem(
                name=item.name,
                quantity=item.quantity,
                total_price=item.total_price,
                display_customizations=describe_customizations(
                    selected_sauce=item.selected_sauce,
                    fries_upgrade=item.fries_upgrade,
                    extras=item.extras,
                    remove_items=item.remove_items,
                    special_notes=item.special_notes,
                    sauce_names=sauces,
                    fries_names=fries,
                    includes_sides=item.includes_sides,
                ),
            )
            for item in order.items
        ],
    )
