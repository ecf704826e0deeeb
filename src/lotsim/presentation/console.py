# File: src/lotsim/presentation/console.py
"""
Console front end for the Parking Lot Simulator

Architecture:
- MVC Pattern: ConsoleView (input/output), ParkingAppController (mediates
  between the view and the command processor), ParkingConsoleApp (loop)
- One command is read, executed and printed at a time
- The loop ends on the exit command or end of input
"""

from typing import Optional, TextIO
import io
import logging
import sys

from ..application.commands import CommandProcessor, CommandResult
from ..application.parking_service import ParkingService


class AppConfig:
    """Console constants"""
    APP_NAME = "Parking Management System"
    PROMPT = "Input command: "


# ============================================================================
# VIEW
# ============================================================================

class ConsoleView:
    """Reads command lines and writes results"""

    def __init__(
        self,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        interactive: Optional[bool] = None
    ):
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout
        # Undecodable bytes become U+FFFD instead of ending the session
        for stream in (self.input_stream, self.output_stream):
            if isinstance(stream, io.TextIOWrapper):
                stream.reconfigure(errors="replace")
        if interactive is None:
            isatty = getattr(self.input_stream, "isatty", None)
            interactive = bool(isatty and isatty())
        self.interactive = interactive

    def show_welcome(self) -> None:
        self._write(f"Welcome to {AppConfig.APP_NAME}")
        self._write("Type 'command_list' for a list of available commands.")

    def read_command(self) -> Optional[str]:
        """Next input line without its newline, None at end of input"""
        if self.interactive:
            self.output_stream.write(AppConfig.PROMPT)
            self.output_stream.flush()
        line = self.input_stream.readline()
        if line == "":
            return None
        return line.rstrip("\r\n")

    def show_result(self, result: CommandResult) -> None:
        self._write(result.message)

    def _write(self, text: str) -> None:
        self.output_stream.write(text + "\n")
        self.output_stream.flush()


# ============================================================================
# CONTROLLER
# ============================================================================

class ParkingAppController:
    """Main application controller"""

    def __init__(self, service: ParkingService):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.service = service
        self.command_processor = CommandProcessor(service)

    def handle(self, line: str) -> Optional[CommandResult]:
        """Run one input line; blank lines are ignored and return None"""
        if not line.strip():
            return None
        return self.command_processor.process_line(line)


# ============================================================================
# MAIN APPLICATION
# ============================================================================

class ParkingConsoleApp:
    """Read-eval-print loop over a single parking lot"""

    def __init__(self, service: ParkingService, view: Optional[ConsoleView] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.view = view or ConsoleView()
        self.controller = ParkingAppController(service)

    def run(self) -> int:
        """
        Run until 'exit' or end of input

        Returns: process exit status
        """
        if self.view.interactive:
            self.view.show_welcome()

        self.logger.info("Session started")
        while True:
            line = self.view.read_command()
            if line is None:
                self.logger.info("End of input")
                break

            result = self.controller.handle(line)
            if result is None:
                continue
            if result.terminate:
                self.logger.info("Exit requested")
                break
            self.view.show_result(result)

        return 0
