"""
Configuration system with validation and environment awareness.
Based on Pydantic Settings for robust configuration management.
"""
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Literal, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from soiln.core.constants import (
    DEFAULT_TRIGGER, DEFAULT_EFFICIENCY, DEFAULT_SPLITS, DEFAULT_LOG_FORMAT
)
from soiln.core.exceptions import ConfigurationError, ErrorContext


class CropPeriod(BaseModel):
    """Establishment and harvest bounds of one crop in the rotation"""
    establish_date: date
    harvest_date: date

    @model_validator(mode="after")
    def validate_order(self):
        if self.harvest_date < self.establish_date:
            raise ValueError(
                f"harvest_date {self.harvest_date} is before "
                f"establish_date {self.establish_date}"
            )
        return self


class FieldConfig(BaseSettings):
    """Field-level fertiliser policy"""

    trigger: float = Field(
        DEFAULT_TRIGGER, ge=0,
        description="Minimum acceptable soil mineral N (kg N/ha)"
    )
    efficiency: float = Field(
        DEFAULT_EFFICIENCY, gt=0, le=1,
        description="Fraction of applied N that becomes plant available"
    )
    splits: int = Field(
        DEFAULT_SPLITS, ge=0,
        description="Number of equal applications the requirement is split into"
    )

    # Existing applications record the loss rate (1 - efficiency) in LostN,
    # scheduled ones the lost quantity. True stores quantities for both.
    lost_n_as_quantity: bool = Field(
        False, description="Record lost N of existing applications as kg N/ha"
    )

    model_config = SettingsConfigDict(env_prefix="SOILN_FIELD_", case_sensitive=False)


class LogConfig(BaseSettings):
    """Logging settings"""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: str = Field(DEFAULT_LOG_FORMAT)

    model_config = SettingsConfigDict(env_prefix="SOILN_LOG_", case_sensitive=False)


class NBalanceConfig(BaseSettings):
    """Main configuration for a nitrogen balance run"""

    current: CropPeriod = Field(description="Crop being scheduled")
    following: CropPeriod = Field(
        description="Next crop; bounds the residual effect of an application"
    )
    field: FieldConfig = Field(default_factory=FieldConfig)
    log: LogConfig = Field(default_factory=LogConfig)

    model_config = SettingsConfigDict(
        env_prefix="SOILN_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_config(self):
        """Cross-field validation"""
        if self.following.harvest_date < self.current.harvest_date:
            raise ValueError(
                "Following crop harvest_date must not be before the current harvest_date"
            )
        return self

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "NBalanceConfig":
        """Load configuration from YAML file"""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)

        return cls(**yaml_config)

    def to_yaml(self, yaml_path: Union[str, Path]):
        """Save configuration to YAML file"""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False)


def configure_logging(config: Optional[LogConfig] = None):
    """Apply log level and format to the ``soiln`` logger hierarchy"""
    config = config or LogConfig()
    logging.basicConfig(format=config.log_format)
    logging.getLogger("soiln").setLevel(config.log_level)


# Global configuration instance
_config: Optional[NBalanceConfig] = None


def get_config(config_path: Optional[Path] = None) -> NBalanceConfig:
    """Get or create configuration instance (singleton pattern)"""
    global _config

    if _config is None:
        try:
            if config_path and Path(config_path).exists():
                _config = NBalanceConfig.from_yaml(config_path)
            else:
                # Crop periods must then come from the environment
                _config = NBalanceConfig()
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid nitrogen balance configuration: {e}",
                ErrorContext(component="config", operation="get_config"),
            ) from e

    return _config


def set_config(config: Optional[NBalanceConfig]):
    """Set configuration (useful for testing)"""
    global _config
    _config = config
