# File: src/lotsim/domain/strategies.py
"""
Strategy Pattern Implementation for the Parking Lot Simulator

This module encapsulates the two algorithms the lot depends on:
1. Parking Allocation Strategies - which empty slot a new vehicle receives
2. Pricing Strategies - how a stay is turned into an amount to pay

Both are selected when the aggregate/service is built, so tests can swap
them without touching the lot itself.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import datetime, timedelta
import logging

from .models import ParkingSlot, ParkingRates, Vehicle, Money


# ============================================================================
# STRATEGY INTERFACES
# ============================================================================

class ParkingStrategy(ABC):
    """
    Abstract base class for parking strategies
    Defines the interface for slot allocation algorithms
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def allocate_slot(
        self,
        slots: Sequence[ParkingSlot],
        vehicle: Vehicle
    ) -> Optional[ParkingSlot]:
        """
        Pick a slot for the given vehicle
        Returns: ParkingSlot if one is free, None otherwise
        """
        pass

    def get_strategy_name(self) -> str:
        return self.__class__.__name__

    def __str__(self) -> str:
        return self.get_strategy_name()


class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines how a stay is charged
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def billable_hours(self, entry_time: datetime, now: datetime) -> int:
        """Number of hours charged for a stay from entry_time until now"""
        pass

    @abstractmethod
    def hourly_rate(self, vehicle: Vehicle) -> Money:
        """Hourly rate applied to the vehicle"""
        pass

    def calculate_parking_fee(self, vehicle: Vehicle, now: datetime) -> Money:
        """Fee owed by the vehicle if it left at 'now'"""
        return self.hourly_rate(vehicle) * self.billable_hours(vehicle.entry_time, now)


# ============================================================================
# PARKING ALLOCATION STRATEGIES
# ============================================================================

class FirstAvailableSlotStrategy(ParkingStrategy):
    """
    Strategy: first-fit allocation
    Slots are scanned in ascending number order and the lowest empty one wins
    """

    def allocate_slot(
        self,
        slots: Sequence[ParkingSlot],
        vehicle: Vehicle
    ) -> Optional[ParkingSlot]:
        for slot in slots:
            if not slot.is_occupied:
                self.logger.debug(f"Slot {slot.number} is the first free slot for {vehicle.registration_number}")
                return slot
        return None


# ============================================================================
# PRICING STRATEGIES
# ============================================================================

class HourlyPricingStrategy(PricingStrategy):
    """
    Hourly pricing
    - Every started hour is charged in full
    - A stay shorter than one hour is still charged one hour
    - Rate is looked up from the ParkingRates table by vehicle type
    """

    BILLING_UNIT = timedelta(hours=1)

    def __init__(self, rates: Optional[ParkingRates] = None):
        super().__init__()
        self.rates = rates or ParkingRates()

    def billable_hours(self, entry_time: datetime, now: datetime) -> int:
        hours, remainder = divmod(now - entry_time, self.BILLING_UNIT)
        if remainder:
            hours += 1
        return max(1, hours)

    def hourly_rate(self, vehicle: Vehicle) -> Money:
        return self.rates.hourly_rate(vehicle.vehicle_type)
