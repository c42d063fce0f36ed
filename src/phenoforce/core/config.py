"""
Configuration system with validation and environment variable overrides.
Based on Pydantic Settings for robust configuration management.
"""
import logging
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings

from phenoforce.core.calendar_context import CalendarContext
from phenoforce.core.exceptions import ConfigurationError, ErrorContext
from phenoforce.core.types import InsolationType


class CalendarConfig(BaseSettings):
    """Configuration of the simulation calendar"""

    first_calendar_year: int = Field(1901, description="Calendar year of simulation year 0")
    leap_years: bool = Field(False, description="Use Gregorian leap years")
    subdaily: int = Field(0, ge=0, description="Sub-daily steps per day (0 = daily only)")

    def create_calendar(self) -> CalendarContext:
        return CalendarContext(
            first_calendar_year=self.first_calendar_year,
            leap_years=self.leap_years,
            subdaily=self.subdaily,
        )


class InterpolationConfig(BaseSettings):
    """Physical bounds applied when disaggregating monthly forcing"""

    temperature_min: float = Field(-273.15, description="Lowest admissible daily temperature (°C)")
    temperature_max: float = Field(100.0, description="Highest admissible daily temperature (°C)")
    insolation_min: float = Field(0.0, description="Lowest admissible daily insolation")
    sunshine_max: float = Field(100.0, description="Upper bound for percent sunshine")
    precipitation_min: float = Field(0.0, description="Lowest admissible daily precipitation (mm)")

    @model_validator(mode="after")
    def validate_bounds(self):
        if self.temperature_min >= self.temperature_max:
            raise ValueError("temperature_min must be < temperature_max")
        if self.insolation_min >= self.sunshine_max:
            raise ValueError("insolation_min must be < sunshine_max")
        return self


class PrecipitationConfig(BaseSettings):
    """Configuration for the stochastic daily precipitation generator"""

    truncate: bool = Field(True, description="Zero daily amounts below 0.1 mm after rescaling")
    max_retries: Optional[int] = Field(
        None, gt=0,
        description="Cap on redraws of a month with negligible total (None = unbounded)"
    )
    random_seed: int = Field(12345678, gt=0, description="Initial generator state")


class SolarConfig(BaseSettings):
    """Configuration for solar geometry and evapotranspiration"""

    insolation_type: InsolationType = InsolationType.SUNSHINE


class AccountingConfig(BaseSettings):
    """Configuration for daily accounting and soil respiration response"""

    carbon_freeze: bool = Field(False, description="Allow decomposition in frozen soil")
    min_decomp_temp: float = Field(-4.0, lt=0, description="Soil temperature where decomposition stops (°C)")
    two_layer_soil: bool = Field(False, description="Use the two-layer soil scheme")
    organic_soil_properties: bool = Field(False)
    multilayer_snow: bool = Field(False)

    @model_validator(mode="after")
    def validate_soil_scheme(self):
        """Two-layer soil excludes the options that need a multilayer soil"""
        if self.two_layer_soil and (
            self.organic_soil_properties or self.carbon_freeze or self.multilayer_snow
        ):
            raise ValueError(
                "organic_soil_properties, carbon_freeze and multilayer_snow "
                "must all be off when two_layer_soil is on"
            )
        return self


class LoggingConfig(BaseSettings):
    """Configuration for logging"""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


class PhenoforceConfig(BaseSettings):
    """Main configuration for the phenoforce system"""

    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    interpolation: InterpolationConfig = Field(default_factory=InterpolationConfig)
    precipitation: PrecipitationConfig = Field(default_factory=PrecipitationConfig)
    solar: SolarConfig = Field(default_factory=SolarConfig)
    accounting: AccountingConfig = Field(default_factory=AccountingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        env_prefix="PHENOFORCE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "PhenoforceConfig":
        """Load configuration from YAML file"""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                f"Config file must contain a mapping, got {type(yaml_config).__name__}",
                ErrorContext(component="config", operation="from_yaml",
                             details={"path": str(yaml_path)})
            )

        return cls(**yaml_config)

    def to_yaml(self, yaml_path: Union[str, Path]):
        """Save configuration to YAML file"""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Apply logging level and format to the root logger"""
    config = config or get_config().logging
    logging.basicConfig(level=config.log_level, format=config.log_format)


# Global configuration instance
_config: Optional[PhenoforceConfig] = None


def get_config(config_path: Optional[Path] = None) -> PhenoforceConfig:
    """Get or create configuration instance (singleton pattern)"""
    global _config

    if _config is None:
        if config_path and Path(config_path).exists():
            _config = PhenoforceConfig.from_yaml(config_path)
        else:
            # Try to load from environment
            _config = PhenoforceConfig()

    return _config


def set_config(config: PhenoforceConfig):
    """Set configuration (useful for testing)"""
    global _config
    _config = config


def reset_config():
    """Drop the cached configuration so the next get_config rebuilds it"""
    global _config
    _config = None
