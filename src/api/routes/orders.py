"""
Order endpoints
===============

POST /api/v1/orders                     -- create a TRANSPORT or TOUR order (form data)
GET  /api/v1/orders/{order_id}          -- order with transport / package and payment
PUT  /api/v1/orders/{order_id}/status   -- move the order through its lifecycle
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_routing_provider
from src.api.middleware import limiter
from src.api.schemas import (
    DestinationResponse,
    OrderEnvelope,
    OrderResponse,
    OrderStatusUpdate,
    PackageOrderResponse,
    PaymentResponse,
    TourOrderForm,
    TransportationResponse,
    TransportOrderForm,
    parse_form,
)
from src.config import settings
from src.domain.enums import OrderStatus, OrderType
from src.domain.errors import InvalidOrderField
from src.domain.reconstruction import normalize_time, parse_destination_fields
from src.domain.routing import RoutingProvider
from src.services.orders import OrderRecord, OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def _order_response(record: OrderRecord) -> OrderResponse:
    data = OrderResponse.model_validate(record.order)
    if record.transportation is not None:
        data.transportation = TransportationResponse.model_validate(record.transportation)
        data.transportation.destinations = [
            DestinationResponse.model_validate(d) for d in record.destinations
        ]
    if record.package_order is not None:
        data.package_order = PackageOrderResponse.model_validate(record.package_order)
    if record.payment is not None:
        data.payment = PaymentResponse.model_validate(record.payment)
    return data


def _order_type(fields: dict[str, str]) -> OrderType:
    raw = (fields.get("orderType") or "").strip().upper()
    if not raw:
        raise InvalidOrderField("orderType")
    if raw not in OrderType.__members__:
        raise InvalidOrderField("orderType", "must be TRANSPORT or TOUR")
    return OrderType[raw]


@router.post(
    "",
    status_code=201,
    response_model=OrderEnvelope,
    summary="Create an order",
    responses={
        400: {"description": "Malformed form, validation gate rejection or no vehicles"},
        404: {"description": "Vehicle type or tour package not found"},
    },
)
@limiter.limit(settings.rate_limit)
async def create_order(
    request: Request,
    db: AsyncSession = Depends(get_db),
    routing: Optional[RoutingProvider] = Depends(get_routing_provider),
):
    form = await request.form()
    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    service = OrderService(db, routing)

    if _order_type(fields) == OrderType.TRANSPORT:
        body = parse_form(TransportOrderForm, fields)
        record = await service.create_transport_order(
            raw_destinations=parse_destination_fields(fields),
            vehicle_type_id=body.vehicle_type_id,
            vehicle_count=body.vehicle_count,
            client_distance_meters=body.total_distance,
            client_price=body.total_price,
            round_trip=body.round_trip,
            timezone_name=body.timezone,
            full_name=body.full_name,
            phone_number=body.phone_number,
            email=body.email,
            total_passengers=body.total_passengers,
            note=body.note,
        )
    else:
        body = parse_form(TourOrderForm, fields)
        record = await service.create_tour_order(
            package_id=body.package_id,
            departure_date=body.departure_date,
            departure_time=normalize_time(body.departure_time, "departureTime"),
            timezone_name=body.timezone,
            full_name=body.full_name,
            phone_number=body.phone_number,
            email=body.email,
            total_passengers=body.total_passengers,
            note=body.note,
        )

    return OrderEnvelope(message="Order created successfully", data=_order_response(record))


@router.get(
    "/{order_id}",
    response_model=OrderEnvelope,
    summary="Get an order",
)
@limiter.limit(settings.rate_limit)
async def get_order(
    request: Request,
    order_id: int,
    db: AsyncSession = Depends(get_db),
):
    record = await OrderService(db).get_order(order_id)
    return OrderEnvelope(message="Order retrieved successfully", data=_order_response(record))


@router.put(
    "/{order_id}/status",
    response_model=OrderEnvelope,
    summary="Update order status",
    responses={409: {"description": "Transition not allowed from the current status"}},
)
@limiter.limit(settings.rate_limit)
async def update_order_status(
    request: Request,
    order_id: int,
    body: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    raw = body.order_status.strip().upper()
    if raw not in OrderStatus.__members__:
        raise InvalidOrderField("orderStatus", f"is not a valid status: {body.order_status!r}")

    record = await OrderService(db).update_status(order_id, OrderStatus[raw])
    return OrderEnvelope(message="Order status updated", data=_order_response(record))
