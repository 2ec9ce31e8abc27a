from pathlib import Path
from typing import Optional

import platformdirs
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shotgate import constants
from shotgate.logging import SHOTGATE_LOGGER
from shotgate.quality.thresholds import QualityThresholds
from shotgate.settings.config_manager import ConfigManager


def _default_upload_dir() -> Path:
    return Path(platformdirs.user_data_dir(constants.APP_NAME, appauthor=constants.APP_AUTHOR)) / "uploads"


class ShotGateSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHOTGATE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Remote classification / persistence service
    service_url: str = constants.DEFAULT_SERVICE_URL
    request_timeout_seconds: float = Field(default=constants.DEFAULT_REQUEST_TIMEOUT_SECONDS, gt=0)
    persist_accepted: bool = False

    # Upload validation
    max_upload_bytes: int = Field(default=constants.DEFAULT_MAX_UPLOAD_BYTES, gt=0)
    min_width: int = Field(default=0, ge=0)  # 0 disables the minimum-dimension rule
    min_height: int = Field(default=0, ge=0)

    # Heuristic analyzer
    resize_target_edge: int = Field(default=constants.DEFAULT_RESIZE_TARGET_EDGE, ge=3)
    overexposed_fraction_max: float = Field(default=constants.DEFAULT_OVEREXPOSED_FRACTION_MAX, ge=0, le=1)
    underexposed_fraction_max: float = Field(default=constants.DEFAULT_UNDEREXPOSED_FRACTION_MAX, ge=0, le=1)
    blur_variance_min: float = Field(default=constants.DEFAULT_BLUR_VARIANCE_MIN, ge=0)
    brightness_min: float = Field(default=constants.DEFAULT_BRIGHTNESS_MIN, ge=0, le=255)
    brightness_max: float = Field(default=constants.DEFAULT_BRIGHTNESS_MAX, ge=0, le=255)

    # Lifecycle pacing (artificial progress steps while "uploading")
    progress_step_delay_seconds: float = Field(default=0.0, ge=0)

    # Bundled web service
    upload_dir: Path = Field(default_factory=_default_upload_dir)
    web_host: str = constants.DEFAULT_WEB_HOST
    web_port: int = constants.DEFAULT_WEB_PORT

    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_brightness_band(self):
        if self.brightness_min > self.brightness_max:
            raise ValueError("brightness_min must not exceed brightness_max")
        return self

    @classmethod
    def load(cls, config_file: Optional[Path] = None, **overrides) -> "ShotGateSettings":
        """Build settings from the JSON config file plus explicit overrides.

        Explicit keyword arguments win over file values, which win over
        environment variables and defaults.
        """
        file_values = ConfigManager(config_file, known_keys=cls.model_fields).load_config()
        values = {**file_values, **{k: v for k, v in overrides.items() if v is not None}}
        return cls(**values)

    def thresholds(self) -> QualityThresholds:
        return QualityThresholds(
            overexposed_fraction_max=self.overexposed_fraction_max,
            underexposed_fraction_max=self.underexposed_fraction_max,
            blur_variance_min=self.blur_variance_min,
            brightness_min=self.brightness_min,
            brightness_max=self.brightness_max,
        )

    def to_dict(self) -> dict:
        """Persistable view of the settings (paths as strings)."""
        return self.model_dump(mode="json")

    def save(self, config_file: Optional[Path] = None) -> Path:
        """Write the current settings to the JSON config file and return its path."""
        manager = ConfigManager(config_file)
        manager.save_config(self.to_dict())
        SHOTGATE_LOGGER.info(f"Configuration saved to {manager.get_config_path()}")
        return manager.get_config_path()
