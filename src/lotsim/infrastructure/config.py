# File: src/lotsim/infrastructure/config.py
"""
Application configuration

Settings come from built-in defaults, optionally overridden by a YAML file:

    currency: IDR
    rates:
      car_hourly_rate: 10000
      motorcycle_hourly_rate: 5000
    logging:
      level: INFO
      file: logs/lotsim.log

The file is parsed with PyYAML and validated with pydantic; unknown keys are
rejected so typos do not silently fall back to defaults.
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional, Union
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..domain.models import ParkingRates


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be read or validated"""
    pass


class RatesConfig(BaseModel):
    """Hourly tariff section"""
    model_config = ConfigDict(extra='forbid')

    car_hourly_rate: Decimal = Field(default=Decimal('10000'), gt=0, description="Hourly rate for cars")
    motorcycle_hourly_rate: Decimal = Field(default=Decimal('5000'), gt=0, description="Hourly rate for motorcycles")


class LoggingConfig(BaseModel):
    """Logging section"""
    model_config = ConfigDict(extra='forbid')

    level: str = Field(default="WARNING", description="Root log level")
    file: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


class AppConfig(BaseModel):
    """Top-level application configuration"""
    model_config = ConfigDict(extra='forbid')

    currency: str = Field(default="IDR", min_length=3, max_length=3, description="ISO 4217 currency code")
    rates: RatesConfig = Field(default_factory=RatesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()

    def parking_rates(self) -> ParkingRates:
        """Build the domain rate table from this configuration"""
        return ParkingRates(
            car_hourly_rate=self.rates.car_hourly_rate,
            motorcycle_hourly_rate=self.rates.motorcycle_hourly_rate,
            currency=self.currency
        )


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load configuration from a YAML file, or return defaults when no path is given

    Raises: ConfigurationError if the file is unreadable, not a mapping, or invalid
    """
    if path is None:
        return AppConfig()

    path = Path(path)
    try:
        with path.open('r', encoding='utf-8') as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e
