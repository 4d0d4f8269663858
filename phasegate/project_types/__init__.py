"""
Project type registry.

Maps a project type name to its ProjectTypeConfig. The four built-in types
are registered when this package is imported.
"""

from typing import Dict, List

from phasegate.exceptions import ConfigurationError, DuplicateError

from .base import DECIDE, ENABLED, SKIPPED, ProjectTypeConfig
from .breakdown import BREAKDOWN
from .design import DESIGN
from .exploration import EXPLORATION
from .standard import STANDARD

DEFAULT_PROJECT_TYPE = "standard"

_REGISTRY: Dict[str, ProjectTypeConfig] = {}


def register(config: ProjectTypeConfig, replace: bool = False) -> None:
    """Register a project type.

    Raises:
        DuplicateError: If the name is taken and replace is False.
    """
    if config.name in _REGISTRY and not replace:
        raise DuplicateError(f"Project type '{config.name}' is already registered.")
    _REGISTRY[config.name] = config


def get_project_type(name: str) -> ProjectTypeConfig:
    """Look up a project type by name.

    Raises:
        ConfigurationError: If no such type is registered.
    """
    config = _REGISTRY.get(name)
    if config is None:
        raise ConfigurationError(
            f"Unknown project type '{name}': must be one of {', '.join(project_type_names())}."
        )
    return config


def project_type_names() -> List[str]:
    return list(_REGISTRY)


for _config in (STANDARD, EXPLORATION, DESIGN, BREAKDOWN):
    register(_config)


__all__ = [
    "DECIDE",
    "DEFAULT_PROJECT_TYPE",
    "ENABLED",
    "SKIPPED",
    "ProjectTypeConfig",
    "get_project_type",
    "project_type_names",
    "register",
]
