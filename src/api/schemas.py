"""Pydantic request / response schemas for the REST API.

Wire names are camelCase (the booking front-end's convention); Python
attributes stay snake_case.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.domain.enums import OrderStatus, OrderType, PaymentStatus
from src.domain.errors import InvalidOrderField


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


# ── Order form (multipart / urlencoded) ───────────────────────────────


class OrderForm(CamelModel):
    order_type: OrderType
    timezone: str = "Asia/Jakarta"
    full_name: str
    phone_number: str
    email: Optional[str] = None
    total_passengers: int = Field(1, ge=1)
    note: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_fields(cls, data: Any) -> Any:
        # Browsers submit empty inputs as "": treat them as absent.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if not (isinstance(v, str) and not v.strip())}
        return data

    @field_validator("order_type", mode="before")
    @classmethod
    def _upper_order_type(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class TransportOrderForm(OrderForm):
    vehicle_type_id: int
    vehicle_count: int = Field(1, ge=1)
    round_trip: bool = False
    total_distance: float = Field(..., ge=0)  # meters
    total_price: float = Field(..., ge=0)


class TourOrderForm(OrderForm):
    package_id: int
    departure_date: date
    departure_time: Optional[str] = None

    @field_validator("departure_date", mode="before")
    @classmethod
    def _date_part(cls, value: Any) -> Any:
        return value.strip()[:10] if isinstance(value, str) else value


def parse_form(schema: type[OrderForm], data: dict[str, Any]) -> OrderForm:
    """Validate form fields, reporting the first bad field by its wire name."""
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "form"
        reason = "is required" if error["type"] == "missing" else error["msg"]
        raise InvalidOrderField(field, reason) from None


class OrderStatusUpdate(CamelModel):
    order_status: str


# ── Price preview ─────────────────────────────────────────────────────


class TripLocation(CamelModel):
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    address: str = ""
    time: Optional[str] = None


class TripRequest(CamelModel):
    trip_date: date = Field(..., alias="date")
    location: list[TripLocation] = []
    start_time: Optional[str] = None

    @field_validator("trip_date", mode="before")
    @classmethod
    def _date_part(cls, value: Any) -> Any:
        return value.strip()[:10] if isinstance(value, str) else value


class PriceCalculationRequest(CamelModel):
    vehicle_type_id: int
    vehicle_count: int = Field(1, ge=1)
    trips: list[TripRequest] = Field(..., min_length=1)


class TripDistanceResponse(CamelModel):
    trip_date: date = Field(..., alias="date")
    distance_meters: float


class InterTripDetailResponse(CamelModel):
    from_address: str
    to_address: str
    distance_km: float
    charge: int


class PriceBreakdownResponse(CamelModel):
    trip_distances: list[TripDistanceResponse] = []
    inter_trip_details: list[InterTripDetailResponse] = []


class PriceCalculationResponse(CamelModel):
    vehicle_type: str
    vehicle_class: str
    vehicle_count: int
    total_distance_km: float
    base_price: int
    inter_trip_charges: int
    total_price: int
    breakdown: PriceBreakdownResponse


# ── Orders ────────────────────────────────────────────────────────────


class DestinationResponse(CamelModel):
    id: int
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    arrival_time: Optional[str] = None
    departure_date: date
    is_pickup_location: bool
    sequence: int


class TransportationResponse(CamelModel):
    id: int
    vehicle_type_id: int
    departure_date: datetime
    pickup_location: str
    destination: str
    passenger_count: int
    vehicle_count: int
    round_trip: bool
    total_distance: float
    base_price: int
    inter_trip_charges: int
    total_price: int
    destinations: list[DestinationResponse] = []


class PackageOrderResponse(CamelModel):
    id: int
    package_id: int
    departure_date: datetime


class PaymentResponse(CamelModel):
    id: int
    total_price: int
    payment_status: PaymentStatus
    created_at: Optional[datetime] = None


class OrderResponse(CamelModel):
    id: int
    order_type: OrderType
    order_status: OrderStatus
    full_name: str
    phone_number: str
    email: Optional[str] = None
    total_passengers: int
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    transportation: Optional[TransportationResponse] = None
    package_order: Optional[PackageOrderResponse] = None
    payment: Optional[PaymentResponse] = None


class OrderEnvelope(BaseModel):
    message: str
    data: OrderResponse


class PriceEnvelope(BaseModel):
    message: str
    data: PriceCalculationResponse


# ── Admin ─────────────────────────────────────────────────────────────


class VehicleTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    seat_capacity: int = Field(12, ge=1)


class VehicleTypeResponse(CamelModel):
    id: int
    name: str
    seat_capacity: int


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    message: str
    data: None = None
