#!/usr/bin/env python3
"""
Command Layer Unit Tests

Covers parsing, validation, the printed messages of every command and the
processor's error handling.
"""

import sys
import unittest
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import patch

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from lotsim.application.commands import (
    CommandFactory, CommandProcessor, CreateParkingLotCommand, ParkVehicleCommand,
    LeaveCommand, StatusCommand, ExitCommand, NOT_FOUND_MESSAGE
)
from lotsim.application.parking_service import ParkingService, ParkingServiceFactory
from lotsim.domain.models import VehicleType
from lotsim.infrastructure.clock import FixedClock


START = datetime(2024, 1, 1, 8, 0, 0)


class TestCommandFactory(unittest.TestCase):
    """Unit tests for CommandFactory"""

    def test_create_known_commands(self):
        command = CommandFactory.create_command("park B-1234-XY Red Car")
        self.assertIsInstance(command, ParkVehicleCommand)
        self.assertEqual(command.args, ["B-1234-XY", "Red", "Car"])

        self.assertIsInstance(CommandFactory.create_command("  leave   3 "), LeaveCommand)
        self.assertIsInstance(CommandFactory.create_command("status"), StatusCommand)

    def test_unknown_or_empty(self):
        for line in ["", "   ", "fly B-1 Red Car", "STATUS"]:
            self.assertIsNone(CommandFactory.create_command(line), msg=repr(line))

    def test_command_names_are_unique(self):
        names = [c.name for c in CommandFactory.command_classes()]
        self.assertEqual(len(names), len(set(names)))
        self.assertEqual(len(names), 13)


class TestCommandValidation(unittest.TestCase):
    """Unit tests for argument validation"""

    def test_missing_arguments(self):
        is_valid, errors = ParkVehicleCommand(["B-1234-XY"]).validate()
        self.assertFalse(is_valid)
        self.assertEqual(errors, ["park requires <colour> <type>"])

    def test_non_integer_argument(self):
        is_valid, errors = CreateParkingLotCommand(["six"]).validate()
        self.assertFalse(is_valid)
        self.assertIn("must be an integer", errors[0])

    def test_extra_arguments_are_ignored(self):
        is_valid, errors = LeaveCommand(["1", "extra"]).validate()
        self.assertTrue(is_valid)
        self.assertEqual(errors, [])

    def test_usage(self):
        self.assertEqual(ParkVehicleCommand.usage(), "park <registration_number> <colour> <type>")
        self.assertEqual(StatusCommand.usage(), "status")


class CommandTestCase(unittest.TestCase):
    """Processor over a fresh service with a fixed clock"""

    def setUp(self):
        self.clock = FixedClock(START)
        self.service = ParkingServiceFactory.create_default_service(clock=self.clock)
        self.processor = CommandProcessor(self.service)

    def run_line(self, line):
        return self.processor.process_line(line)

    def message(self, line):
        return self.run_line(line).message


class TestLotCommands(CommandTestCase):
    """create_parking_lot, park and leave"""

    def test_create_parking_lot(self):
        self.assertEqual(self.message("create_parking_lot 6"), "Created a parking lot with 6 slots")
        self.assertEqual(self.service.lot.capacity, 6)

    def test_create_parking_lot_negative(self):
        self.run_line("create_parking_lot 2")
        result = self.run_line("create_parking_lot -1")
        self.assertFalse(result.success)
        self.assertTrue(result.message.startswith("Error: "))
        self.assertEqual(self.service.lot.capacity, 2)

    def test_park_and_full(self):
        self.run_line("create_parking_lot 2")
        self.assertEqual(self.message("park B-1234-XY Red Car"), "Allocated slot number: 1")
        self.assertEqual(self.message("park B-5678-XY Blue Motorcycle"), "Allocated slot number: 2")

        result = self.run_line("park B-0001-XY Black Car")
        self.assertFalse(result.success)
        self.assertEqual(result.message, "Sorry, parking lot is full")

    def test_park_before_create(self):
        self.assertEqual(self.message("park B-1234-XY Red Car"), "Sorry, parking lot is full")

    def test_park_unknown_type_falls_back_to_car(self):
        self.run_line("create_parking_lot 1")
        with self.assertLogs("ParkVehicleCommand", level="WARNING"):
            self.assertEqual(self.message("park B-1234-XY Red Bus"), "Allocated slot number: 1")
        self.assertEqual(self.service.count_by_type(VehicleType.CAR), 1)

    def test_park_accepts_aliases(self):
        self.run_line("create_parking_lot 2")
        self.run_line("park B-1234-XY Red Mobil")
        self.run_line("park B-5678-XY Blue Motor")
        self.assertEqual(self.service.count_by_type(VehicleType.CAR), 1)
        self.assertEqual(self.service.count_by_type(VehicleType.MOTORCYCLE), 1)

    def test_park_missing_arguments(self):
        self.run_line("create_parking_lot 1")
        self.assertEqual(
            self.message("park B-1234-XY"),
            "Error: park requires <colour> <type>"
        )
        self.assertEqual(self.service.lot.occupied_count, 0)

    def test_leave(self):
        self.run_line("create_parking_lot 2")
        self.run_line("park B-1234-XY Red Car")

        result = self.run_line("leave 1")
        self.assertEqual(result.message, "Slot number 1 is free")
        self.assertEqual(result.data, "B-1234-XY")
        self.assertEqual(self.message("leave 2"), "Slot number 2 is free")

    def test_leave_invalid_slot(self):
        self.run_line("create_parking_lot 2")
        result = self.run_line("leave 7")
        self.assertFalse(result.success)
        self.assertEqual(result.message, "Invalid slot number 7")

    def test_leave_non_integer(self):
        self.run_line("create_parking_lot 2")
        self.assertTrue(self.message("leave one").startswith("Error: Slot number must be an integer"))


class TestQueryCommands(CommandTestCase):
    """status and the lookup commands"""

    def setUp(self):
        super().setUp()
        self.run_line("create_parking_lot 3")
        self.run_line("park B-1234-XY Red Car")
        self.run_line("park B-5678-XY Blue Motorcycle")

    def test_status(self):
        self.assertEqual(
            self.message("status"),
            "Slot No.\tType\tRegistration No\tColour\tFee\n"
            "1\tCar\tB-1234-XY\tRed\t10000\n"
            "2\tMotorcycle\tB-5678-XY\tBlue\t5000"
        )

    def test_status_after_leave_keeps_slot_numbers(self):
        self.run_line("leave 1")
        self.assertEqual(
            self.message("status").splitlines()[1:],
            ["2\tMotorcycle\tB-5678-XY\tBlue\t5000"]
        )

    def test_status_empty(self):
        self.run_line("create_parking_lot 3")
        self.assertEqual(self.message("status"), "Parking lot is empty")

    def test_type_of_vehicles(self):
        self.assertEqual(self.message("type_of_vehicles Car"), "1")
        self.assertEqual(self.message("type_of_vehicles motor"), "1")
        self.assertTrue(self.message("type_of_vehicles Bus").startswith("Error: Unknown vehicle type"))

    def test_plate_parity(self):
        self.assertEqual(
            self.message("registration_numbers_for_vehicles_with_odd_plate"),
            "B-1234-XY, B-5678-XY"
        )
        self.assertEqual(
            self.message("registration_numbers_for_vehicles_with_even_plate"),
            NOT_FOUND_MESSAGE
        )

    def test_colour_queries(self):
        self.assertEqual(self.message("registration_numbers_for_vehicles_with_colour red"), "B-1234-XY")
        self.assertEqual(self.message("slot_numbers_for_vehicles_with_colour Blue"), "2")
        self.assertEqual(self.message("slot_numbers_for_vehicles_with_colour Green"), NOT_FOUND_MESSAGE)

    def test_slot_by_registration(self):
        self.assertEqual(self.message("slot_number_for_registration_number B-5678-XY"), "2")

        result = self.run_line("slot_number_for_registration_number NOPE")
        self.assertFalse(result.success)
        self.assertEqual(result.message, NOT_FOUND_MESSAGE)


class TestBillingCommands(CommandTestCase):
    """parking_receipt"""

    def test_receipt(self):
        self.run_line("create_parking_lot 1")
        self.run_line("park B-1234-XY Red Car")
        self.clock.advance(timedelta(minutes=61))

        self.assertEqual(
            self.message("parking_receipt B-1234-XY"),
            "Vehicle: B-1234-XY\n"
            "Type: Car\n"
            "Entry Time: 2024-01-01 08:00:00\n"
            "Duration: 2 hours\n"
            "Hourly Rate: IDR 10,000\n"
            "Total Fee: IDR 20,000"
        )

    def test_receipt_unknown_vehicle(self):
        self.run_line("create_parking_lot 1")
        result = self.run_line("parking_receipt B-9999-XY")
        self.assertFalse(result.success)
        self.assertEqual(result.message, "Vehicle with registration number B-9999-XY not found")


class TestSessionCommands(CommandTestCase):
    """command_list, exit and unrecognised input"""

    def test_command_list(self):
        lines = self.message("command_list").splitlines()
        self.assertEqual(lines[0], "Commands:")
        self.assertEqual(lines[1], "1. create_parking_lot <number>")
        self.assertEqual(lines[-1], "13. exit")

    def test_exit(self):
        result = self.run_line("exit")
        self.assertTrue(result.terminate)
        self.assertTrue(result.success)

    def test_invalid_command(self):
        result = self.run_line("teleport B-1234-XY")
        self.assertFalse(result.success)
        self.assertEqual(result.message, "Invalid command")


class TestCommandProcessor(CommandTestCase):
    """Error handling and event publishing"""

    def test_unexpected_error_is_reported(self):
        with patch.object(ParkingService, "count_by_type", side_effect=RuntimeError("boom")):
            with self.assertLogs("CommandProcessor", level="ERROR"):
                result = self.run_line("type_of_vehicles Car")

        self.assertFalse(result.success)
        self.assertEqual(result.message, "Error: boom")

    def test_events_are_drained_after_each_command(self):
        with self.assertLogs("CommandProcessor", level="INFO") as logs:
            self.run_line("create_parking_lot 1")
            self.run_line("park B-1234-XY Red Car")

        self.assertFalse(self.service.lot.has_changes)
        self.assertTrue(any("lot.created" in line for line in logs.output))
        self.assertTrue(any("vehicle.parked" in line for line in logs.output))

    def test_blank_registration_is_a_reported_domain_error(self):
        """Domain errors are warnings, not tracebacks"""
        self.run_line("create_parking_lot 1")
        with self.assertLogs("CommandProcessor", level="WARNING") as logs:
            result = self.processor.process(ParkVehicleCommand(["  ", "Red", "Car"]))

        self.assertFalse(result.success)
        self.assertEqual(result.message, "Error: Registration number cannot be empty")
        self.assertFalse(any(line.startswith("ERROR") for line in logs.output))
        self.assertEqual(self.service.lot.occupied_count, 0)

    def test_event_timestamps_come_from_service_clock(self):
        self.clock.set(START + timedelta(hours=2))
        commands = [
            CreateParkingLotCommand(["1"]),
            ParkVehicleCommand(["B-1234-XY", "Red", "Car"]),
            LeaveCommand(["1"]),
        ]
        for command in commands:
            self.assertTrue(command.validate()[0])
            command.execute(self.service)
            self.clock.advance(timedelta(minutes=5))

        self.assertEqual(
            [event.timestamp for event in self.service.lot.clear_events()],
            [
                START + timedelta(hours=2),
                START + timedelta(hours=2, minutes=5),
                START + timedelta(hours=2, minutes=10),
            ]
        )

    def test_process_command_object(self):
        result = self.processor.process(ExitCommand())
        self.assertEqual(result.command_type, "exit")
        self.assertEqual(result.to_dict()["terminate"], True)


if __name__ == "__main__":
    unittest.main()
