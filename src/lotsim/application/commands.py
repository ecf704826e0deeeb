# File: src/lotsim/application/commands.py
"""
Command Pattern Implementation for the Parking Lot Simulator

Each line typed at the prompt becomes a command object. A command knows its
own arguments, validates them, and executes against the ParkingService (and
through it the lot registry). The CommandProcessor runs commands one at a
time and turns every error into a reported result so the session survives.

Command Types:
1. Lot Commands - create the lot, park, leave
2. Query Commands - status, counts, colour/parity/registration lookups
3. Billing Commands - receipts
4. Session Commands - command list, exit
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type
import logging
import uuid

from ..domain.models import (
    VehicleType, ParkingDomainError, InvalidSlotError, UnknownVehicleTypeError
)
from .parking_service import ParkingService, ParkingServiceError


NOT_FOUND_MESSAGE = "Not found"


class CommandValidationError(ParkingServiceError):
    """Raised when command arguments are missing or malformed"""
    pass


# ============================================================================
# COMMAND RESULT
# ============================================================================

@dataclass
class CommandResult:
    """Outcome of one command: printable message plus structured data"""
    success: bool
    command_type: str
    message: str = ""
    data: Optional[Any] = None
    terminate: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "success": self.success,
            "command_type": self.command_type,
            "message": self.message,
            "data": self.data,
            "terminate": self.terminate
        }


# ============================================================================
# COMMAND BASE CLASS
# ============================================================================

class Command(ABC):
    """
    Abstract base class for all commands

    Subclasses declare the command word in 'name' and their positional
    argument names in 'arguments'; extra trailing tokens are ignored.
    """

    name: str = ""
    arguments: Tuple[str, ...] = ()

    def __init__(self, args: Optional[Sequence[str]] = None, command_id: Optional[str] = None):
        self.args: List[str] = list(args or [])
        self.command_id = command_id or str(uuid.uuid4())
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, service: ParkingService) -> CommandResult:
        """
        Execute the command using the provided service
        Assumes validate() succeeded
        """
        pass

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate command parameters before execution

        Returns: (is_valid, error_messages)
        """
        errors = []
        missing = self.arguments[len(self.args):]
        if missing:
            errors.append(f"{self.name} requires {' '.join(f'<{arg}>' for arg in missing)}")
            return False, errors

        try:
            self._parse_arguments()
        except CommandValidationError as e:
            errors.append(str(e))

        return len(errors) == 0, errors

    def _parse_arguments(self) -> None:
        """Convert raw tokens into typed values - overridden by subclasses"""
        pass

    @staticmethod
    def _parse_int(value: str, label: str) -> int:
        try:
            return int(value)
        except ValueError:
            raise CommandValidationError(f"{label} must be an integer, got {value!r}") from None

    @classmethod
    def usage(cls) -> str:
        return " ".join([cls.name] + [f"<{arg}>" for arg in cls.arguments])

    def get_description(self) -> str:
        return " ".join([self.name] + self.args)

    def _result(self, message: str, success: bool = True, data: Any = None, terminate: bool = False) -> CommandResult:
        return CommandResult(
            success=success,
            command_type=self.name,
            message=message,
            data=data,
            terminate=terminate
        )

    @staticmethod
    def _join(values: Sequence[Any]) -> str:
        return ", ".join(str(v) for v in values) if values else NOT_FOUND_MESSAGE


# ============================================================================
# LOT COMMANDS
# ============================================================================

class CreateParkingLotCommand(Command):
    """Command: size the lot, discarding anything parked"""

    name = "create_parking_lot"
    arguments = ("number",)

    def _parse_arguments(self) -> None:
        self.capacity = self._parse_int(self.args[0], "Number of slots")

    def execute(self, service: ParkingService) -> CommandResult:
        service.lot.create_lot(self.capacity, now=service.clock.now())
        return self._result(f"Created a parking lot with {self.capacity} slots", data=self.capacity)


class ParkVehicleCommand(Command):
    """
    Command: park a vehicle in the first free slot

    An unrecognised type falls back to Car, matching the behaviour operators
    are used to; the fallback is logged.
    """

    name = "park"
    arguments = ("registration_number", "colour", "type")

    def _parse_arguments(self) -> None:
        self.registration_number, self.color, type_text = self.args[:3]
        try:
            self.vehicle_type = VehicleType.from_string(type_text)
        except UnknownVehicleTypeError:
            self.logger.warning(f"Unknown vehicle type {type_text!r}, parking {self.registration_number} as Car")
            self.vehicle_type = VehicleType.CAR

    def execute(self, service: ParkingService) -> CommandResult:
        vehicle = service.create_vehicle(self.registration_number, self.color, self.vehicle_type)
        slot_number = service.lot.park(vehicle)
        if slot_number is None:
            return self._result("Sorry, parking lot is full", success=False)
        return self._result(f"Allocated slot number: {slot_number}", data=slot_number)


class LeaveCommand(Command):
    """Command: free a slot"""

    name = "leave"
    arguments = ("slot_number",)

    def _parse_arguments(self) -> None:
        self.slot_number = self._parse_int(self.args[0], "Slot number")

    def execute(self, service: ParkingService) -> CommandResult:
        try:
            vehicle = service.lot.release(self.slot_number, now=service.clock.now())
        except InvalidSlotError as e:
            return self._result(str(e), success=False)
        return self._result(
            f"Slot number {self.slot_number} is free",
            data=vehicle.registration_number if vehicle else None
        )


# ============================================================================
# QUERY COMMANDS
# ============================================================================

class StatusCommand(Command):
    """Command: list occupied slots"""

    name = "status"

    HEADER = "Slot No.\tType\tRegistration No\tColour\tFee"

    def execute(self, service: ParkingService) -> CommandResult:
        status = service.get_status()
        if status.is_empty:
            return self._result("Parking lot is empty", data=status)

        rows = [self.HEADER]
        for row in status.vehicles:
            rows.append(
                f"{row.slot_number}\t{row.vehicle_type}\t{row.registration_number}\t{row.color}\t{row.base_fee}"
            )
        return self._result("\n".join(rows), data=status)


class TypeOfVehiclesCommand(Command):
    """Command: count parked vehicles of one type"""

    name = "type_of_vehicles"
    arguments = ("type",)

    def _parse_arguments(self) -> None:
        try:
            self.vehicle_type = VehicleType.from_string(self.args[0])
        except UnknownVehicleTypeError as e:
            raise CommandValidationError(str(e)) from None

    def execute(self, service: ParkingService) -> CommandResult:
        count = service.count_by_type(self.vehicle_type)
        return self._result(str(count), data=count)


class PlateParityRegistrationsCommand(Command):
    """Command: registrations with odd or even plate digit"""

    odd: bool = True

    def execute(self, service: ParkingService) -> CommandResult:
        registrations = service.registrations_by_plate_parity(self.odd)
        return self._result(self._join(registrations), data=registrations)


class OddPlateRegistrationsCommand(PlateParityRegistrationsCommand):
    name = "registration_numbers_for_vehicles_with_odd_plate"
    odd = True


class EvenPlateRegistrationsCommand(PlateParityRegistrationsCommand):
    name = "registration_numbers_for_vehicles_with_even_plate"
    odd = False


class RegistrationsByColourCommand(Command):
    """Command: registrations of vehicles with a given colour"""

    name = "registration_numbers_for_vehicles_with_colour"
    arguments = ("colour",)

    def execute(self, service: ParkingService) -> CommandResult:
        registrations = service.registrations_by_color(self.args[0])
        return self._result(self._join(registrations), data=registrations)


class SlotsByColourCommand(Command):
    """Command: slot numbers of vehicles with a given colour"""

    name = "slot_numbers_for_vehicles_with_colour"
    arguments = ("colour",)

    def execute(self, service: ParkingService) -> CommandResult:
        slots = service.slots_by_color(self.args[0])
        return self._result(self._join(slots), data=slots)


class SlotByRegistrationCommand(Command):
    """Command: slot holding a registration number"""

    name = "slot_number_for_registration_number"
    arguments = ("registration_number",)

    def execute(self, service: ParkingService) -> CommandResult:
        slot_number = service.slot_by_registration(self.args[0])
        if slot_number is None:
            return self._result(NOT_FOUND_MESSAGE, success=False)
        return self._result(str(slot_number), data=slot_number)


# ============================================================================
# BILLING COMMANDS
# ============================================================================

class ParkingReceiptCommand(Command):
    """Command: print the receipt for a parked vehicle"""

    name = "parking_receipt"
    arguments = ("registration_number",)

    def execute(self, service: ParkingService) -> CommandResult:
        registration_number = self.args[0]
        receipt = service.receipt_for(registration_number)
        if receipt is None:
            return self._result(
                f"Vehicle with registration number {registration_number} not found",
                success=False
            )
        return self._result(receipt.render(), data=receipt)


# ============================================================================
# SESSION COMMANDS
# ============================================================================

class CommandListCommand(Command):
    """Command: show the available commands"""

    name = "command_list"

    def execute(self, service: ParkingService) -> CommandResult:
        lines = ["Commands:"]
        for index, command_class in enumerate(CommandFactory.command_classes(), start=1):
            lines.append(f"{index}. {command_class.usage()}")
        return self._result("\n".join(lines))


class ExitCommand(Command):
    """Command: end the session"""

    name = "exit"

    def execute(self, service: ParkingService) -> CommandResult:
        return self._result("", terminate=True)


# ============================================================================
# COMMAND FACTORY
# ============================================================================

class CommandFactory:
    """Factory for creating commands from an input line"""

    _COMMANDS: Tuple[Type[Command], ...] = (
        CreateParkingLotCommand,
        ParkVehicleCommand,
        LeaveCommand,
        StatusCommand,
        TypeOfVehiclesCommand,
        OddPlateRegistrationsCommand,
        EvenPlateRegistrationsCommand,
        RegistrationsByColourCommand,
        SlotsByColourCommand,
        SlotByRegistrationCommand,
        ParkingReceiptCommand,
        CommandListCommand,
        ExitCommand,
    )

    @classmethod
    def command_classes(cls) -> Tuple[Type[Command], ...]:
        return cls._COMMANDS

    @classmethod
    def create_command(cls, line: str) -> Optional[Command]:
        """
        Create a command instance from a raw input line

        Returns: Command instance or None if the command word is not recognised
        """
        tokens = line.split()
        if not tokens:
            return None

        command_class = {c.name: c for c in cls._COMMANDS}.get(tokens[0])
        if command_class is None:
            return None
        return command_class(tokens[1:])


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class CommandProcessor:
    """
    Runs commands one at a time against a ParkingService

    - Validates before executing
    - Converts every error into a reported CommandResult
    - Drains and logs the lot's domain events after each command
    """

    INVALID_COMMAND_MESSAGE = "Invalid command"

    def __init__(self, service: ParkingService):
        self.service = service
        self.logger = logging.getLogger(self.__class__.__name__)

    def process_line(self, line: str) -> CommandResult:
        """Parse and run one input line"""
        command = CommandFactory.create_command(line)
        if command is None:
            self.logger.info(f"Unrecognised input: {line.strip()!r}")
            return CommandResult(success=False, command_type="", message=self.INVALID_COMMAND_MESSAGE)
        return self.process(command)

    def process(self, command: Command) -> CommandResult:
        """
        Process a command

        Returns: Execution result; never raises
        """
        self.logger.debug(f"Processing command: {command.get_description()}")

        is_valid, errors = command.validate()
        if not is_valid:
            self.logger.info(f"Rejected {command.name}: {'; '.join(errors)}")
            return CommandResult(
                success=False,
                command_type=command.name,
                message=f"Error: {'; '.join(errors)}"
            )

        try:
            result = command.execute(self.service)
        except (ParkingDomainError, ParkingServiceError) as e:
            self.logger.warning(f"{command.name} failed: {e}")
            result = CommandResult(success=False, command_type=command.name, message=f"Error: {e}")
        except Exception as e:
            self.logger.error(f"Error processing command {command.name}: {e}", exc_info=True)
            result = CommandResult(success=False, command_type=command.name, message=f"Error: {e}")
        finally:
            self._publish_events()

        return result

    def _publish_events(self) -> None:
        for event in self.service.lot.clear_events():
            self.logger.info(f"Domain event: {event}")
