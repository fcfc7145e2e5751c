"""
Domain exceptions.

Everything a request can fail with derives from ``BookingError``; the API
layer maps each subclass to an HTTP status.  ``RoutingProviderError`` is
not a ``BookingError``: the route aggregator always recovers from it.
"""

from __future__ import annotations


class BookingError(Exception):
    """Base class for order / pricing failures surfaced to the caller."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ── 400 ───────────────────────────────────────────────────────────────


class InvalidOrderField(BookingError):
    """A submitted field is missing or malformed."""

    def __init__(self, field: str, reason: str = "is required"):
        self.field = field
        super().__init__(f"Field {field} {reason}")


class NoValidDestinations(BookingError):
    def __init__(self) -> None:
        super().__init__("No valid destinations provided")


class NotEnoughVehicles(BookingError):
    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough vehicles available: requested {requested}, "
            f"available {available}"
        )


class UnbillableTrip(BookingError):
    """A trip-day has fewer than two destinations with coordinates."""

    def __init__(self, departure_date):
        self.departure_date = departure_date
        super().__init__(
            f"Trip on {departure_date.isoformat()} needs at least two "
            "destinations with coordinates"
        )


class PriceValidationFailed(BookingError):
    def __init__(self, expected: int, received: float):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Price validation failed: expected {expected}, received {received:g}"
        )


class DistanceValidationFailed(BookingError):
    def __init__(self, expected: float, received: float):
        self.expected = expected
        self.received = received
        super().__init__(
            "Distance validation failed: expected "
            f"{expected:.0f} m, received {received:.0f} m"
        )


class PickupOutsideServiceArea(BookingError):
    pass


# ── 404 ───────────────────────────────────────────────────────────────


class VehicleTypeNotFound(BookingError):
    def __init__(self, vehicle_type_id: int):
        super().__init__(f"Vehicle type {vehicle_type_id} not found")


class TourPackageNotFound(BookingError):
    def __init__(self, package_id: int):
        super().__init__(f"Tour package {package_id} not found")


class OrderNotFound(BookingError):
    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found")


# ── 409 ───────────────────────────────────────────────────────────────


class InvalidStateTransition(BookingError):
    """Raised when an order status change violates the state machine."""


class DuplicateVehicleType(BookingError):
    def __init__(self, name: str):
        super().__init__(f"Vehicle type {name!r} already exists")


# ── recovered internally ──────────────────────────────────────────────


class RoutingProviderError(Exception):
    """The routing provider could not produce a route."""

    def __init__(self, message: str, status: str = "ERROR"):
        self.message = message
        self.status = status
        super().__init__(message)
