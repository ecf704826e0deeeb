# File: src/lotsim/domain/aggregates.py
"""
Aggregate Root for the Parking Lot Simulator
Following Domain-Driven Design (DDD) Aggregate Pattern

The ParkingLot aggregate is the lot registry: it exclusively owns the fixed
sequence of slots and every vehicle parked in them.

Key Concepts:
- All modifications go through aggregate root methods
- Slots are numbered 1..capacity and never renumbered while a vehicle is parked
- Domain events are raised for every state change and drained by the caller
"""

from datetime import datetime
from typing import List, Optional, Tuple
import logging

from .models import (
    ParkingSlot, Vehicle, DomainEvent,
    LotCreatedEvent, VehicleParkedEvent, VehicleLeftEvent,
    InvalidCapacityError, InvalidSlotError
)
from .strategies import ParkingStrategy, FirstAvailableSlotStrategy


# ============================================================================
# BASE AGGREGATE ROOT
# ============================================================================

class AggregateRoot:
    """
    Base class for aggregate roots
    Provides domain event collection and versioning
    """

    def __init__(self):
        self._version: int = 1
        self._changes: List[DomainEvent] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def version(self) -> int:
        """Get current aggregate version"""
        return self._version

    def _increment_version(self) -> None:
        self._version += 1

    def _add_domain_event(self, event: DomainEvent) -> None:
        """Add a domain event to the list of changes"""
        self._changes.append(event)
        self._logger.debug(f"Added domain event: {event.__class__.__name__}")

    def clear_events(self) -> List[DomainEvent]:
        """Clear and return all domain events"""
        events = self._changes.copy()
        self._changes.clear()
        return events

    @property
    def has_changes(self) -> bool:
        """Check if aggregate has pending domain events"""
        return len(self._changes) > 0

    def _validate_invariants(self) -> None:
        """Validate aggregate invariants - to be overridden by subclasses"""
        pass


# ============================================================================
# PARKING LOT AGGREGATE
# ============================================================================

class ParkingLot(AggregateRoot):
    """
    Aggregate Root: fixed-capacity sequence of numbered slots

    A lot starts with zero slots (always full) until create_lot sizes it.
    """

    def __init__(self, capacity: int = 0, strategy: Optional[ParkingStrategy] = None):
        super().__init__()
        self.strategy = strategy or FirstAvailableSlotStrategy()
        self._slots: List[ParkingSlot] = self._build_slots(capacity)
        self._validate_invariants()

    @staticmethod
    def _build_slots(capacity: int) -> List[ParkingSlot]:
        if capacity < 0:
            raise InvalidCapacityError(f"Capacity cannot be negative, got {capacity}")
        return [ParkingSlot(number) for number in range(1, capacity + 1)]

    def _validate_invariants(self) -> None:
        """Validate aggregate invariants"""
        # Invariant 1: slot numbers are exactly 1..capacity in order
        for index, slot in enumerate(self._slots, start=1):
            if slot.number != index:
                raise ValueError(f"Slot at position {index} is numbered {slot.number}")

        # Invariant 2: occupancy never exceeds capacity
        if self.occupied_count > self.capacity:
            raise ValueError(
                f"Occupied count {self.occupied_count} exceeds capacity {self.capacity}"
            )

    # ========================================================================
    # PUBLIC BUSINESS METHODS
    # ========================================================================

    def create_lot(self, capacity: int, now: Optional[datetime] = None) -> None:
        """
        Reset the lot to 'capacity' empty slots, discarding parked vehicles
        'now' stamps the LotCreatedEvent; callers pass their clock reading
        Raises: InvalidCapacityError if capacity is negative
        """
        slots = self._build_slots(capacity)
        discarded = self.occupied_count

        self._slots = slots
        self._increment_version()
        self._add_domain_event(LotCreatedEvent(capacity, discarded, timestamp=now))
        self._validate_invariants()

        if discarded:
            self._logger.info(f"Recreated lot with {capacity} slots, discarded {discarded} vehicles")
        else:
            self._logger.info(f"Created lot with {capacity} slots")

    def park(self, vehicle: Vehicle) -> Optional[int]:
        """
        Park a vehicle in the slot chosen by the allocation strategy
        Returns: slot number, or None when the lot is full (vehicle not admitted)
        """
        slot = self.strategy.allocate_slot(self._slots, vehicle)
        if slot is None:
            self._logger.warning(f"Lot full, {vehicle.registration_number} not admitted")
            return None

        slot.occupy(vehicle)
        self._increment_version()
        self._add_domain_event(VehicleParkedEvent(slot.number, vehicle))
        self._validate_invariants()

        self._logger.info(f"Vehicle {vehicle.registration_number} parked in slot {slot.number}")
        return slot.number

    def release(self, slot_number: int, now: Optional[datetime] = None) -> Optional[Vehicle]:
        """
        Free a slot, discarding its vehicle
        'now' stamps the VehicleLeftEvent
        Returns: the vehicle that left, None if the slot was already empty
        Raises: InvalidSlotError if slot_number is outside 1..capacity
        """
        slot = self.get_slot(slot_number)
        if slot is None:
            self._logger.warning(f"Release of slot {slot_number} rejected, capacity is {self.capacity}")
            raise InvalidSlotError(slot_number, self.capacity)

        vehicle = slot.vacate()
        self._increment_version()
        self._add_domain_event(VehicleLeftEvent(slot_number, vehicle, timestamp=now))

        if vehicle:
            self._logger.info(f"Vehicle {vehicle.registration_number} left slot {slot_number}")
        else:
            self._logger.info(f"Slot {slot_number} released while already empty")
        return vehicle

    # ========================================================================
    # QUERY METHODS (Read-only)
    # ========================================================================

    def list_parked(self) -> List[Tuple[int, Vehicle]]:
        """Snapshot of (slot_number, vehicle) for occupied slots, ascending by slot"""
        return [(slot.number, slot.vehicle) for slot in self._slots if slot.vehicle is not None]

    def get_slot(self, slot_number: int) -> Optional[ParkingSlot]:
        """Get slot by its number, None if out of range"""
        if 1 <= slot_number <= len(self._slots):
            return self._slots[slot_number - 1]
        return None

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def occupied_count(self) -> int:
        return sum(1 for slot in self._slots if slot.is_occupied)

    @property
    def available_count(self) -> int:
        return self.capacity - self.occupied_count

    @property
    def is_full(self) -> bool:
        return self.available_count == 0

    def __str__(self) -> str:
        return f"ParkingLot: {self.occupied_count}/{self.capacity} occupied"
