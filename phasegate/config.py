"""
Runtime access to the workspace settings in .phasegate/config.json.

ConfigManager is read-only and independent of StorageManager, which owns
writing the file. A missing or unreadable file means "all defaults".
"""
import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from phasegate.constants import PHASEGATE_DIR_NAME
from phasegate.models.files import ConfigFile

CONFIG_FILE_NAME = "config.json"


class ConfigManager:
    """
    Lazily loads and caches the ConfigFile of one working tree.

    Usage:
        config = ConfigManager(phasegate_dir=root / ".phasegate")
        step = config.settings.task_id_step
    """

    def __init__(self, phasegate_dir: Optional[Path] = None, config_path: Optional[Path] = None) -> None:
        """
        Args:
            phasegate_dir: The .phasegate/ directory holding config.json.
            config_path: Explicit file path; wins over phasegate_dir.
        """
        if config_path is None:
            config_path = Path(phasegate_dir or PHASEGATE_DIR_NAME) / CONFIG_FILE_NAME
        self._config_path = config_path
        self._settings: Optional[ConfigFile] = None

    @property
    def config_path(self) -> Path:
        return self._config_path

    def _read(self) -> ConfigFile:
        if not self._config_path.exists():
            return ConfigFile()
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            return ConfigFile()
        if not isinstance(data, dict):
            return ConfigFile()
        try:
            return ConfigFile.model_validate(data)
        except ValidationError:
            return ConfigFile()

    @property
    def settings(self) -> ConfigFile:
        """Validated settings, read from disk on first access."""
        if self._settings is None:
            self._settings = self._read()
        return self._settings

    def reload(self) -> ConfigFile:
        """Drop the cached settings and read the file again."""
        self._settings = None
        return self.settings

