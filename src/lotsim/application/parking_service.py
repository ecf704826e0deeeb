# File: src/lotsim/application/parking_service.py
"""
Parking Query & Billing Application Service

This service derives read-only views and fees from the lot registry.
It owns no mutable state of its own apart from the fixed rate table; every
query walks the current snapshot returned by ParkingLot.list_parked(), and
every fee reads the injected clock at call time.

Responsibilities:
1. Filtered queries (by type, colour, plate parity, registration)
2. Fee calculation and receipts
3. Status snapshots for the presentation layer
"""

from datetime import datetime
from typing import List, Optional
import logging

from ..domain.models import (
    Vehicle, VehicleType, Money, ParkingRates,
    MalformedRegistrationError
)
from ..domain.aggregates import ParkingLot
from ..domain.strategies import PricingStrategy, HourlyPricingStrategy
from ..infrastructure.clock import Clock, SystemClock
from ..infrastructure.config import AppConfig
from .dtos import ParkedVehicleDTO, LotStatusDTO, ReceiptDTO


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ParkingServiceError(Exception):
    """Base exception for application layer errors"""
    pass


# ============================================================================
# MAIN PARKING SERVICE
# ============================================================================

class ParkingService:
    """
    Query & billing service over a single parking lot

    The lot is read on every call; nothing is cached between calls, so two
    fee queries for the same vehicle at different instants may differ.
    """

    def __init__(
        self,
        lot: ParkingLot,
        rates: Optional[ParkingRates] = None,
        clock: Optional[Clock] = None,
        pricing_strategy: Optional[PricingStrategy] = None
    ):
        """
        Args:
            lot: the lot registry to read from
            rates: hourly rate table, defaults to ParkingRates()
            clock: time source, defaults to the wall clock
            pricing_strategy: overrides the hourly strategy built from 'rates'
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.lot = lot
        self.rates = rates or ParkingRates()
        self.clock = clock or SystemClock()
        self.pricing_strategy = pricing_strategy or HourlyPricingStrategy(self.rates)

    # ========================================================================
    # VEHICLE CREATION
    # ========================================================================

    def create_vehicle(self, registration_number: str, color: str, vehicle_type: VehicleType) -> Vehicle:
        """Build a vehicle stamped with the current clock time"""
        return Vehicle(
            registration_number=registration_number,
            color=color,
            vehicle_type=vehicle_type,
            entry_time=self.clock.now()
        )

    # ========================================================================
    # QUERIES
    # ========================================================================

    def count_by_type(self, vehicle_type: VehicleType) -> int:
        return sum(1 for _, vehicle in self.lot.list_parked() if vehicle.vehicle_type == vehicle_type)

    def registrations_by_plate_parity(self, odd: bool) -> List[str]:
        """
        Registration numbers whose parity digit is odd (odd=True) or even

        Registrations without a digit after the first hyphen are skipped and
        logged; they belong to neither result.
        """
        matches = []
        for slot_number, vehicle in self.lot.list_parked():
            try:
                is_odd = vehicle.has_odd_plate()
            except MalformedRegistrationError as e:
                self.logger.warning(f"Skipping slot {slot_number} in parity query: {e}")
                continue
            if is_odd == odd:
                matches.append(vehicle.registration_number)
        return matches

    def registrations_by_color(self, color: str) -> List[str]:
        return [
            vehicle.registration_number
            for _, vehicle in self.lot.list_parked()
            if vehicle.matches_color(color)
        ]

    def slots_by_color(self, color: str) -> List[int]:
        return [
            slot_number
            for slot_number, vehicle in self.lot.list_parked()
            if vehicle.matches_color(color)
        ]

    def slot_by_registration(self, registration_number: str) -> Optional[int]:
        """Lowest slot holding an exact (case-sensitive) registration match, None if absent"""
        for slot_number, vehicle in self.lot.list_parked():
            if vehicle.registration_number == registration_number:
                return slot_number
        return None

    def find_vehicle(self, registration_number: str) -> Optional[Vehicle]:
        """Parked vehicle with an exact registration match, lowest slot first"""
        for _, vehicle in self.lot.list_parked():
            if vehicle.registration_number == registration_number:
                return vehicle
        return None

    def get_status(self) -> LotStatusDTO:
        """Occupancy snapshot with one row per parked vehicle"""
        vehicles = [
            ParkedVehicleDTO(
                slot_number=slot_number,
                vehicle_type=str(vehicle.vehicle_type),
                registration_number=vehicle.registration_number,
                color=vehicle.color,
                base_fee=vehicle.base_fee
            )
            for slot_number, vehicle in self.lot.list_parked()
        ]
        return LotStatusDTO(
            capacity=self.lot.capacity,
            occupied_slots=len(vehicles),
            available_slots=self.lot.capacity - len(vehicles),
            vehicles=vehicles
        )

    # ========================================================================
    # BILLING
    # ========================================================================

    def hourly_rate(self, vehicle: Vehicle) -> Money:
        """
        Hourly rate for the vehicle's type
        Raises: UnknownVehicleTypeError for types outside the rate table
        """
        return self.pricing_strategy.hourly_rate(vehicle)

    def billable_hours(self, vehicle: Vehicle, now: Optional[datetime] = None) -> int:
        return self.pricing_strategy.billable_hours(vehicle.entry_time, now or self.clock.now())

    def fee(self, vehicle: Vehicle) -> Money:
        """Amount owed if the vehicle left now: started hours times the hourly rate"""
        return self.pricing_strategy.calculate_parking_fee(vehicle, self.clock.now())

    def receipt(self, vehicle: Vehicle) -> ReceiptDTO:
        """Receipt with every derived field computed against a single clock reading"""
        now = self.clock.now()
        rate = self.hourly_rate(vehicle)
        hours = self.billable_hours(vehicle, now)
        total = self.pricing_strategy.calculate_parking_fee(vehicle, now)

        self.logger.debug(f"Receipt for {vehicle.registration_number}: {hours}h at {rate} = {total}")
        return ReceiptDTO(
            registration_number=vehicle.registration_number,
            vehicle_type=str(vehicle.vehicle_type),
            entry_time=vehicle.entry_time,
            issued_at=now,
            duration_hours=hours,
            hourly_rate=rate.amount,
            total_fee=total.amount,
            currency=rate.currency
        )

    def receipt_for(self, registration_number: str) -> Optional[ReceiptDTO]:
        """Receipt for a parked vehicle looked up by registration, None if not parked"""
        vehicle = self.find_vehicle(registration_number)
        if vehicle is None:
            return None
        return self.receipt(vehicle)


# ============================================================================
# SERVICE FACTORY
# ============================================================================

class ParkingServiceFactory:
    """Factory for creating parking service instances"""

    @staticmethod
    def create_default_service(clock: Optional[Clock] = None) -> ParkingService:
        """Service over an empty, unsized lot with default rates"""
        return ParkingService(ParkingLot(), clock=clock)

    @staticmethod
    def create_service_with_config(config: AppConfig, clock: Optional[Clock] = None) -> ParkingService:
        """Service using the rates and currency from configuration"""
        return ParkingService(ParkingLot(), rates=config.parking_rates(), clock=clock)
