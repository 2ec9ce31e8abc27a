"""JSON config file storage for ShotGate settings.

The file lives in the platformdirs user config directory unless an explicit
path is given (``shotgate serve --config``).
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import platformdirs

from shotgate.constants import APP_AUTHOR, APP_NAME
from shotgate.logging import SHOTGATE_LOGGER


class ConfigManager:
    """Reads and atomically writes the settings file."""

    def __init__(self, config_file: Optional[Path] = None, known_keys: Optional[Iterable[str]] = None):
        """
        Args:
            config_file: Explicit config file path. Defaults to ``config.json`` in the
                platform config directory.
            known_keys: Setting names accepted from the file. Other keys are dropped
                with a warning. None accepts every key.
        """
        if config_file is not None:
            self.config_file = Path(config_file)
        else:
            self.config_file = Path(platformdirs.user_config_dir(APP_NAME, appauthor=APP_AUTHOR)) / "config.json"
        self.known_keys = frozenset(known_keys) if known_keys is not None else None

    def load_config(self) -> Dict[str, Any]:
        """Load the settings file.

        Returns:
            Dict of setting values; empty when the file is missing, unreadable
            or not a JSON object.
        """
        if not self.config_file.exists():
            return {}

        try:
            with open(self.config_file, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            SHOTGATE_LOGGER.error(f"Error loading config file {self.config_file}: {e}")
            return {}

        if not isinstance(data, dict):
            SHOTGATE_LOGGER.error(f"Ignoring config file {self.config_file}: expected a JSON object")
            return {}

        if self.known_keys is None:
            return data
        unknown = sorted(set(data) - self.known_keys)
        if unknown:
            SHOTGATE_LOGGER.warning(f"Ignoring unknown settings in {self.config_file}: {', '.join(unknown)}")
        return {key: value for key, value in data.items() if key in self.known_keys}

    def save_config(self, config: Dict[str, Any]) -> None:
        """Write ``config`` as JSON, readable by the owner only.

        Raises:
            IOError: If the file could not be written
        """
        self.config_file.parent.mkdir(parents=True, mode=0o700, exist_ok=True)

        # Write to temp file first, then atomic rename
        temp_file = self.config_file.with_suffix(".json.tmp")
        try:
            with open(temp_file, "w") as f:
                json.dump(config, f, indent=2, default=str)
            os.chmod(temp_file, 0o600)
            temp_file.replace(self.config_file)
        except OSError as e:
            temp_file.unlink(missing_ok=True)
            raise IOError(f"Failed to save config: {e}") from e

    def get_config_path(self) -> Path:
        return self.config_file
