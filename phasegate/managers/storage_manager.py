"""
Storage manager for the Phasegate CLI.

Handles loading and saving of the project state file (YAML) and writing
of the workspace config file (JSON) in the .phasegate/ directory. Config
is read back through ConfigManager.
"""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from pydantic import ValidationError

from phasegate.constants import (
    DEFAULT_PROJECT_DIR,
    PHASEGATE_DIR_NAME,
)
from phasegate.config import ConfigManager
from phasegate.exceptions import (
    CorruptStateError,
    NoProjectError,
    StorageError,
)
from phasegate.models.files import ConfigFile
from phasegate.models.project import ProjectState


def _dump_yaml(data: Dict[str, Any], handle) -> None:
    yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)


def _dump_json(data: Dict[str, Any], handle) -> None:
    json.dump(data, handle, indent=2)


class StorageManager:
    """
    Manages persistence of the project state for one working tree.

    Handles atomic writes to prevent data corruption: data goes to a
    sibling temp file which is fsynced and then renamed over the target,
    so a reader never sees a partially written file and a crash before
    the rename leaves the previous file intact.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        """
        Initialize the StorageManager for a working tree.

        Args:
            root: Working tree root. Defaults to the current directory.
        """
        self.root = Path(root) if root else Path(".")
        self.phasegate_dir = self.root / PHASEGATE_DIR_NAME
        self.config = ConfigManager(phasegate_dir=self.phasegate_dir)

    @property
    def state_path(self) -> Path:
        """Path of the project state file."""
        return self.phasegate_dir / self.config.settings.state_file

    @property
    def project_dir(self) -> Path:
        """Directory holding the state file and project artifacts."""
        return self.state_path.parent

    def _atomic_write(
        self,
        file_path: Path,
        data: Dict[str, Any],
        dump: Callable[[Dict[str, Any], Any], None],
    ) -> None:
        """Write data to a file atomically to prevent corruption.

        Args:
            file_path: Path to the file to write.
            data: Dictionary data to write.
            dump: Serializer writing data to an open text handle.

        Raises:
            StorageError: If writing to file fails.
        """
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=file_path.parent, prefix=".tmp_phasegate_", suffix=file_path.suffix
            )
        except OSError as e:
            raise StorageError(f"Failed to write to {file_path}: {e}")

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as temp_file:
                dump(data, temp_file)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_path, file_path)
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to write to {file_path}: {e}")

    # =========================================================================
    # Project State File
    # =========================================================================

    def exists(self) -> bool:
        """Whether a project state file exists for this working tree."""
        return self.state_path.exists()

    def load_state(self) -> ProjectState:
        """Load the state file and return it as a ProjectState model.

        Raises:
            NoProjectError: If the state file does not exist.
            CorruptStateError: If the file is not valid YAML or does not
                match the ProjectState schema.
            StorageError: If the file cannot be read.
        """
        file_path = self.state_path
        if not file_path.exists():
            raise NoProjectError(file_path)

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise CorruptStateError(
                f"Corrupt state file {file_path} (manual repair required): {e}"
            )
        except OSError as e:
            raise StorageError(f"Failed to read {file_path}: {e}")

        if not isinstance(data, dict):
            raise CorruptStateError(
                f"Corrupt state file {file_path} (manual repair required): "
                f"expected a mapping at the top level"
            )
        try:
            return ProjectState.model_validate(data)
        except ValidationError as e:
            raise CorruptStateError(
                f"Corrupt state file {file_path} (manual repair required): {e}"
            )

    def save_state(self, state: ProjectState) -> None:
        """Save a ProjectState model to the state file.

        Refreshes the project's updated_at timestamp before writing.
        """
        state.touch()
        self._atomic_write(self.state_path, state.model_dump(mode="json"), _dump_yaml)

    def delete_project(self) -> None:
        """Remove the project directory, state file included.

        Raises:
            NoProjectError: If there is no project to delete.
            StorageError: If removal fails.
        """
        if not self.exists():
            raise NoProjectError(self.state_path)
        target = self.project_dir
        if target.resolve() == self.phasegate_dir.resolve():
            target = self.phasegate_dir / DEFAULT_PROJECT_DIR
        try:
            if target.exists():
                shutil.rmtree(target)
            if self.state_path.exists():
                self.state_path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to remove project directory {target}: {e}")

    # =========================================================================
    # Config File
    # =========================================================================

    def save_config(self, data: ConfigFile) -> None:
        """Save ConfigFile model to config.json."""
        self._atomic_write(self.config.config_path, data.model_dump(mode="json"), _dump_json)
        self.config.reload()
