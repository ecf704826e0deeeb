# File: src/lotsim/main.py
"""
Main application entry point for the Parking Lot Simulator

Sets up logging and configuration, wires the lot, service and console
front end together, then runs the command loop.
"""

from pathlib import Path
from typing import List, Optional
import argparse
import logging
import sys

from . import __version__
from .application.parking_service import ParkingServiceFactory
from .infrastructure.clock import SystemClock
from .infrastructure.config import AppConfig, ConfigurationError, load_config
from .presentation.console import ConsoleView, ParkingConsoleApp


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """
    Setup application logging configuration

    Log records go to stderr so they never interleave with command output,
    and additionally to 'log_file' when given.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=handlers
    )
    return logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lotsim',
        description='Interactive parking lot simulator'
    )
    parser.add_argument('input_file', nargs='?', type=Path,
                        help='Replay commands from this file instead of standard input')
    parser.add_argument('--config', '-c', type=Path,
                        help='YAML configuration file (rates, currency, logging)')
    parser.add_argument('--log-level',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the configured log level')
    parser.add_argument('--log-file', help='Also write log records to this file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config: AppConfig = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    log_file = args.log_file or config.logging.file
    try:
        logger = setup_logging(level=args.log_level or config.logging.level, log_file=log_file)
    except OSError as e:
        print(f"Cannot open log file {log_file}: {e}", file=sys.stderr)
        return 2
    logger.info(f"Starting lotsim {__version__}")

    service = ParkingServiceFactory.create_service_with_config(config, clock=SystemClock())

    if args.input_file:
        try:
            with args.input_file.open('r', encoding='utf-8', errors='replace') as fh:
                return ParkingConsoleApp(service, ConsoleView(input_stream=fh, interactive=False)).run()
        except OSError as e:
            logger.error(f"Cannot read input file {args.input_file}: {e}")
            print(f"Cannot read input file {args.input_file}: {e}", file=sys.stderr)
            return 2

    return ParkingConsoleApp(service).run()


if __name__ == "__main__":
    sys.exit(main())
