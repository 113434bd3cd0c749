from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from order_tracker.config import settings
from order_tracker.exceptions import OrderFinalizedError, OrderNotFoundError, OrderProcessingError
from order_tracker.models import Address, FoodCategory, MenuItem, Order
from order_tracker.order_state import OrderStatus, StatusKind, display_name, is_final
from order_tracker.service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

_service: OrderService | None = None


def get_order_service() -> OrderService:
    global _service
    if _service is None:
        _service = OrderService()
    return _service


class MenuItemBody(BaseModel):
    id: str
    name: str
    description: str = ""
    price: Decimal = Field(..., ge=0)
    category: FoodCategory


class OrderLineBody(BaseModel):
    item: MenuItemBody
    quantity: int = Field(..., gt=0)


class AddressBody(BaseModel):
    street: str
    city: str
    state: str
    postal_code: str
    country: str


class CreateOrderBody(BaseModel):
    customer_id: str
    restaurant_id: str
    items: list[OrderLineBody]
    delivery_address: AddressBody
    special_instructions: str = ""


class StatusUpdateBody(BaseModel):
    status: StatusKind
    reason: str | None = Field(default=None, description="Only used when status is CANCELLED")


class CancelBody(BaseModel):
    reason: str | None = None


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "customer_id": order.customer_id,
        "restaurant_id": order.restaurant_id,
        "items": [
            {"id": item.id, "name": item.name, "quantity": quantity, "unit_price": f"{item.price:.2f}"}
            for item, quantity in order.items.items()
        ],
        "delivery_address": {
            "street": order.delivery_address.street,
            "city": order.delivery_address.city,
            "state": order.delivery_address.state,
            "postal_code": order.delivery_address.postal_code,
            "country": order.delivery_address.country,
        },
        "status": order.status.kind.value,
        "status_display": display_name(order.status),
        "reason": order.status.reason,
        "total": f"{order.calculate_total():.2f}",
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "special_instructions": order.special_instructions,
    }


def _not_found(e: OrderNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"status": "not_found", "detail": str(e)})


@router.post("")
def create_order(body: CreateOrderBody, service: OrderService = Depends(get_order_service)) -> JSONResponse:
    # Lines with the same item id add up; they must describe the same item.
    by_id: dict[str, MenuItem] = {}
    items: dict[MenuItem, int] = {}
    for line in body.items:
        item = MenuItem(
            id=line.item.id,
            name=line.item.name,
            description=line.item.description,
            price=line.item.price,
            category=line.item.category,
        )
        if by_id.setdefault(item.id, item) != item:
            return JSONResponse(
                status_code=422,
                content={"status": "invalid", "detail": f"Conflicting definitions for menu item {item.id}"},
            )
        items[item] = items.get(item, 0) + line.quantity
    address = Address(**body.delivery_address.model_dump())
    try:
        order = service.create_order(
            customer_id=body.customer_id,
            restaurant_id=body.restaurant_id,
            items=items,
            delivery_address=address,
            special_instructions=body.special_instructions,
        )
    except OrderProcessingError as e:
        return JSONResponse(status_code=422, content={"status": "invalid", "detail": str(e)})
    return JSONResponse(status_code=201, content=order_to_dict(order))


@router.get("")
def list_orders(
    customer_id: str | None = Query(default=None),
    restaurant_id: str | None = Query(default=None),
    in_progress: bool = Query(default=False),
    service: OrderService = Depends(get_order_service),
) -> JSONResponse:
    """List orders in creation order. Filters combine."""
    if customer_id is not None:
        orders = service.get_customer_orders(customer_id)
    elif restaurant_id is not None:
        orders = service.get_restaurant_orders(restaurant_id)
    elif in_progress:
        orders = service.get_in_progress_orders()
    else:
        orders = service.list_orders()
    if restaurant_id is not None:
        orders = [o for o in orders if o.restaurant_id == restaurant_id]
    if in_progress:
        orders = [o for o in orders if not is_final(o.status)]
    return JSONResponse(status_code=200, content=[order_to_dict(o) for o in orders])


@router.get("/{order_id}")
def get_order(order_id: str, service: OrderService = Depends(get_order_service)) -> JSONResponse:
    try:
        order = service.get_order_by_id(order_id)
    except OrderNotFoundError as e:
        return _not_found(e)
    return JSONResponse(status_code=200, content=order_to_dict(order))


@router.post("/{order_id}/status")
def update_status(
    order_id: str,
    body: StatusUpdateBody,
    service: OrderService = Depends(get_order_service),
) -> JSONResponse:
    """
    Apply a status transition. A rejected transition is an expected outcome, reported as 200
    with status "rejected" and the order's current status rather than as an error.
    """
    if body.status is StatusKind.CANCELLED:
        new_status = OrderStatus.cancelled(body.reason or settings.default_cancel_reason)
    else:
        new_status = OrderStatus(body.status)
    try:
        updated = service.update_order_status(order_id, new_status)
        current = service.get_order_by_id(order_id).status
    except OrderNotFoundError as e:
        return _not_found(e)
    if not updated:
        return JSONResponse(
            status_code=200,
            content={"status": "rejected", "order_id": order_id, "current_status": current.kind.value},
        )
    return JSONResponse(
        status_code=200,
        content={"status": "updated", "order_id": order_id, "current_status": current.kind.value},
    )


@router.post("/{order_id}/cancel")
def cancel_order(
    order_id: str,
    body: CancelBody | None = None,
    service: OrderService = Depends(get_order_service),
) -> JSONResponse:
    reason = body.reason if body is not None else None
    try:
        order = service.cancel_order(order_id, reason)
    except OrderNotFoundError as e:
        return _not_found(e)
    except OrderFinalizedError as e:
        return JSONResponse(status_code=409, content={"status": "finalized", "detail": str(e)})
    return JSONResponse(status_code=200, content=order_to_dict(order))


@router.get("/{order_id}/eta")
def estimated_delivery(order_id: str, service: OrderService = Depends(get_order_service)) -> JSONResponse:
    try:
        message = service.get_estimated_delivery_time(order_id)
    except OrderNotFoundError as e:
        return _not_found(e)
    return JSONResponse(status_code=200, content={"order_id": order_id, "estimate": message})


@router.get("/{order_id}/history")
def order_history(order_id: str, service: OrderService = Depends(get_order_service)) -> JSONResponse:
    try:
        history = service.get_order_history(order_id)
    except OrderNotFoundError as e:
        return _not_found(e)
    return JSONResponse(status_code=200, content=history)
