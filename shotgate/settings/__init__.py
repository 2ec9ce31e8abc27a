from shotgate.settings._shotgate_settings import ShotGateSettings
from shotgate.settings.config_manager import ConfigManager

__all__ = ["ConfigManager", "ShotGateSettings"]
