# File: src/lotsim/domain/models.py
"""
Domain Models for the Parking Lot Simulator

This module contains:
1. Value Objects: Money, Vehicle (immutable once created)
2. Entities: ParkingSlot (numbered position that may hold a vehicle)
3. Enums: VehicleType with its base fee lookup table
4. Domain Events: Facts raised by the parking lot aggregate
5. Domain Exceptions: Errors local to a single operation

Vehicles never change after construction; fees are always derived from the
entry time at the moment they are asked for.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union
from datetime import datetime
from decimal import Decimal
from enum import Enum
import string
import uuid


# ============================================================================
# DOMAIN EXCEPTIONS
# ============================================================================

class ParkingDomainError(ValueError):
    """Base class for errors raised by the domain layer"""
    pass


class InvalidCapacityError(ParkingDomainError):
    """Raised when a lot is created with a negative number of slots"""
    pass


class InvalidSlotError(ParkingDomainError):
    """Raised when a slot number falls outside 1..capacity"""

    def __init__(self, slot_number: int, capacity: int):
        super().__init__(f"Invalid slot number {slot_number}")
        self.slot_number = slot_number
        self.capacity = capacity


class InvalidRegistrationError(ParkingDomainError):
    """Raised when a vehicle is created with a blank registration number"""
    pass


class MalformedRegistrationError(ParkingDomainError):
    """Raised when a registration number has no parity digit after its first hyphen"""

    def __init__(self, registration_number: str):
        super().__init__(
            f"Registration number {registration_number!r} has no digit after the first hyphen"
        )
        self.registration_number = registration_number


class UnknownVehicleTypeError(ParkingDomainError):
    """Raised for vehicle types outside the supported enumeration"""
    pass


# ============================================================================
# DOMAIN PRIMITIVES / VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)  # Value objects are immutable
class Money:
    """
    Value Object: Monetary amount with currency
    Amounts are kept as Decimal so hourly multiplication stays exact
    """
    amount: Decimal
    currency: str = "IDR"

    def __post_init__(self):
        """Validate money amount"""
        object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        if self.amount < Decimal('0'):
            raise ValueError("Money amount cannot be negative")

        if len(self.currency) != 3:
            raise ValueError(f"Currency must be 3-letter code: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money amounts (same currency only)"""
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} to {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, multiplier: Union[int, Decimal]) -> 'Money':
        """Multiply money by a whole number of hours or a decimal factor"""
        if multiplier < 0:
            raise ValueError("Multiplier cannot be negative")
        return Money(self.amount * Decimal(multiplier), self.currency)

    def format(self) -> str:
        """Format money for display, e.g. 'IDR 10,000'"""
        if self.amount == self.amount.to_integral_value():
            return f"{self.currency} {self.amount:,.0f}"
        return f"{self.currency} {self.amount:,.2f}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "amount": str(self.amount),
            "currency": self.currency
        }

    def __str__(self) -> str:
        return self.format()


# ============================================================================
# ENUMS FOR DOMAIN TYPES
# ============================================================================

class VehicleType(Enum):
    """
    Enumeration of vehicle types admitted to the lot
    Each type carries a flat base fee fixed at park time
    """
    CAR = "car"
    MOTORCYCLE = "motorcycle"

    @property
    def base_fee(self) -> int:
        """Flat per-type charge recorded on the vehicle when it parks"""
        return _BASE_FEES[self]

    @classmethod
    def from_string(cls, text: str) -> 'VehicleType':
        """
        Parse a vehicle type typed by an operator
        Accepts enum values, display names and the 'Mobil'/'Motor' aliases
        Raises: UnknownVehicleTypeError if nothing matches
        """
        key = (text or "").strip().lower()
        vehicle_type = _TYPE_ALIASES.get(key)
        if vehicle_type is None:
            raise UnknownVehicleTypeError(f"Unknown vehicle type: {text}")
        return vehicle_type

    def __str__(self) -> str:
        """Human-readable string representation"""
        names = {
            VehicleType.CAR: "Car",
            VehicleType.MOTORCYCLE: "Motorcycle",
        }
        return names[self]


_BASE_FEES: Dict[VehicleType, int] = {
    VehicleType.CAR: 10000,
    VehicleType.MOTORCYCLE: 5000,
}

_TYPE_ALIASES: Dict[str, VehicleType] = {
    "car": VehicleType.CAR,
    "mobil": VehicleType.CAR,
    "motorcycle": VehicleType.MOTORCYCLE,
    "motor": VehicleType.MOTORCYCLE,
}


# ============================================================================
# VEHICLE
# ============================================================================

@dataclass(frozen=True)
class Vehicle:
    """
    Value Object: A vehicle as it was admitted to the lot

    entry_time and vehicle_type never change after construction and the base
    fee is fixed from the type table at creation.
    """
    registration_number: str
    color: str
    vehicle_type: VehicleType
    entry_time: datetime
    base_fee: int = field(init=False)

    def __post_init__(self):
        """Validate vehicle attributes and fix the base fee"""
        if not isinstance(self.vehicle_type, VehicleType):
            raise UnknownVehicleTypeError(f"Unknown vehicle type: {self.vehicle_type}")

        if not self.registration_number or not self.registration_number.strip():
            raise InvalidRegistrationError("Registration number cannot be empty")

        object.__setattr__(self, 'base_fee', self.vehicle_type.base_fee)

    def plate_parity_digit(self) -> int:
        """
        Digit used for odd/even plate queries: the first character after the
        first hyphen of the registration number

        Raises: MalformedRegistrationError if that character is missing or not 0-9
        """
        _, hyphen, remainder = self.registration_number.partition('-')
        if not hyphen or not remainder or remainder[0] not in string.digits:
            raise MalformedRegistrationError(self.registration_number)
        return int(remainder[0])

    def has_odd_plate(self) -> bool:
        """Raises: MalformedRegistrationError as plate_parity_digit does"""
        return self.plate_parity_digit() % 2 != 0

    def matches_color(self, color: str) -> bool:
        """Case-insensitive exact colour comparison"""
        return self.color.casefold() == (color or "").casefold()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "registration_number": self.registration_number,
            "color": self.color,
            "vehicle_type": self.vehicle_type.value,
            "entry_time": self.entry_time.isoformat(),
            "base_fee": self.base_fee
        }

    def __str__(self) -> str:
        return f"{self.vehicle_type} {self.registration_number} ({self.color})"


@dataclass(frozen=True)
class ParkingRates:
    """
    Value Object: Hourly tariff per vehicle type
    Fixed for the lifetime of the billing service that holds it
    """
    car_hourly_rate: Decimal = Decimal('10000')
    motorcycle_hourly_rate: Decimal = Decimal('5000')
    currency: str = "IDR"

    def __post_init__(self):
        """Validate rates"""
        for name in ('car_hourly_rate', 'motorcycle_hourly_rate'):
            value = Decimal(str(getattr(self, name)))
            if value <= Decimal('0'):
                raise ValueError(f"{name} must be positive, got {value}")
            object.__setattr__(self, name, value)

    def hourly_rate(self, vehicle_type: VehicleType) -> Money:
        """
        Hourly rate for the given vehicle type
        Raises: UnknownVehicleTypeError for anything outside the enumeration
        """
        rates = {
            VehicleType.CAR: self.car_hourly_rate,
            VehicleType.MOTORCYCLE: self.motorcycle_hourly_rate,
        }
        try:
            return Money(rates[vehicle_type], self.currency)
        except (KeyError, TypeError):
            raise UnknownVehicleTypeError(f"Unknown vehicle type: {vehicle_type}") from None


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class ParkingSlot:
    """
    Entity: One numbered position in the lot
    Holds either nothing or exactly one vehicle
    """

    def __init__(self, number: int):
        if number <= 0:
            raise ValueError("Slot number must be positive")
        self.number = number
        self.vehicle: Optional[Vehicle] = None

    @property
    def is_occupied(self) -> bool:
        return self.vehicle is not None

    def occupy(self, vehicle: Vehicle) -> None:
        """
        Occupy the slot with a vehicle
        Raises: ValueError if slot is already occupied
        """
        if self.is_occupied:
            raise ValueError(f"Slot {self.number} is already occupied")
        self.vehicle = vehicle

    def vacate(self) -> Optional[Vehicle]:
        """
        Vacate the slot
        Returns: the vehicle that was parked here, None if the slot was empty
        """
        vehicle = self.vehicle
        self.vehicle = None
        return vehicle

    def __repr__(self) -> str:
        return f"ParkingSlot(number={self.number}, vehicle={self.vehicle!r})"


# ============================================================================
# DOMAIN EVENTS
# ============================================================================

class DomainEvent(ABC):
    """
    Base class for all domain events
    Events represent something that happened in the lot
    """

    def __init__(self, timestamp: Optional[datetime] = None):
        self.event_id = str(uuid.uuid4())
        self.timestamp = timestamp or datetime.now()

    @property
    @abstractmethod
    def event_type(self) -> str:
        """Dotted event name used in logs"""
        pass

    @abstractmethod
    def data(self) -> Dict[str, Any]:
        """Event payload"""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization"""
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data()
        }

    def __str__(self) -> str:
        return f"{self.event_type} {self.data()}"


class LotCreatedEvent(DomainEvent):
    """Event raised when the lot is (re)created"""

    def __init__(self, capacity: int, discarded_vehicles: int, timestamp: Optional[datetime] = None):
        super().__init__(timestamp)
        self.capacity = capacity
        self.discarded_vehicles = discarded_vehicles

    @property
    def event_type(self) -> str:
        return "lot.created"

    def data(self) -> Dict[str, Any]:
        return {
            "capacity": self.capacity,
            "discarded_vehicles": self.discarded_vehicles
        }


class VehicleParkedEvent(DomainEvent):
    """Event raised when a vehicle is parked"""

    def __init__(self, slot_number: int, vehicle: Vehicle):
        super().__init__(vehicle.entry_time)
        self.slot_number = slot_number
        self.registration_number = vehicle.registration_number
        self.vehicle_type = vehicle.vehicle_type

    @property
    def event_type(self) -> str:
        return "vehicle.parked"

    def data(self) -> Dict[str, Any]:
        return {
            "slot_number": self.slot_number,
            "registration_number": self.registration_number,
            "vehicle_type": self.vehicle_type.value
        }


class VehicleLeftEvent(DomainEvent):
    """Event raised when a slot is released"""

    def __init__(self, slot_number: int, vehicle: Optional[Vehicle], timestamp: Optional[datetime] = None):
        super().__init__(timestamp)
        self.slot_number = slot_number
        self.registration_number = vehicle.registration_number if vehicle else None

    @property
    def event_type(self) -> str:
        return "vehicle.left"

    def data(self) -> Dict[str, Any]:
        return {
            "slot_number": self.slot_number,
            "registration_number": self.registration_number
        }
