"""Domain enumerations and state-transition rules."""

import enum


class OrderType(str, enum.Enum):
    TRANSPORT = "TRANSPORT"
    TOUR = "TOUR"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"


# State machine: maps current status -> set of valid next statuses
ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELED},
    OrderStatus.CONFIRMED: {OrderStatus.COMPLETED, OrderStatus.CANCELED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELED: set(),
}


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class VehicleClass(str, enum.Enum):
    """Tariff profile a vehicle type is billed under."""

    ANGKOT = "ANGKOT"
    HIACE_COMMUTER = "HIACE_COMMUTER"
    HIACE_PREMIO = "HIACE_PREMIO"
    ELF = "ELF"
    DEFAULT = "DEFAULT"


class RouteSource(str, enum.Enum):
    PROVIDER = "provider"
    HAVERSINE = "haversine"
    CACHE = "cache"
