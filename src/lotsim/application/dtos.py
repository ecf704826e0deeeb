# File: src/lotsim/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Parking Lot Simulator

Output DTOs carry read-only views of the lot from the application service
to the presentation layer. They are snapshots: nothing in them refers back
to live domain objects.
"""

from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..domain.models import Money


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO: immutable snapshot, buildable from domain objects"""

    model_config = ConfigDict(
        frozen=True,
        from_attributes=True,
        populate_by_name=True,
    )


# ============================================================================
# PARKING DTOs
# ============================================================================

class ParkedVehicleDTO(BaseDTO):
    """One occupied slot as shown by the status listing"""
    slot_number: int = Field(ge=1, description="Slot number (1-based)")
    vehicle_type: str = Field(description="Display name of the vehicle type")
    registration_number: str = Field(description="Registration number")
    color: str = Field(description="Vehicle colour")
    base_fee: int = Field(ge=0, description="Flat fee fixed at park time")


class LotStatusDTO(BaseDTO):
    """Lot occupancy snapshot"""
    capacity: int = Field(ge=0)
    occupied_slots: int = Field(ge=0)
    available_slots: int = Field(ge=0)
    vehicles: List[ParkedVehicleDTO] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.vehicles


# ============================================================================
# BILLING DTOs
# ============================================================================

class ReceiptDTO(BaseDTO):
    """Parking receipt computed at issue time"""
    registration_number: str
    vehicle_type: str
    entry_time: datetime
    issued_at: datetime
    duration_hours: int = Field(ge=1, description="Billable hours, partial hours rounded up")
    hourly_rate: Decimal = Field(gt=0)
    total_fee: Decimal = Field(ge=0)
    currency: str = Field(default="IDR", min_length=3, max_length=3)

    def render(self) -> str:
        """Receipt as printed on the console"""
        return "\n".join([
            f"Vehicle: {self.registration_number}",
            f"Type: {self.vehicle_type}",
            f"Entry Time: {self.entry_time:%Y-%m-%d %H:%M:%S}",
            f"Duration: {self.duration_hours} hours",
            f"Hourly Rate: {Money(self.hourly_rate, self.currency).format()}",
            f"Total Fee: {Money(self.total_fee, self.currency).format()}",
        ])
