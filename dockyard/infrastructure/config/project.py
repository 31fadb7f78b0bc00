"""
Project file discovery and validation.

A project file (``.dockyard.yml`` by default) names the app and lists its
compose files and inline services. Only the keys modelled here are
validated; everything else is kept and handed to plugins untouched.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ...core.domain.errors import ConfigError


class ProjectFile(BaseModel):
    """Validation model for a project file."""

    model_config = ConfigDict(extra="allow")

    name: str
    recipe: Optional[str] = None
    compose: List[str] = []
    services: Dict[str, Any] = {}

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the app name has some content."""
        if not v.strip():
            raise ValueError('Project name cannot be blank')
        return v

    @field_validator('compose', mode='before')
    @classmethod
    def validate_compose(cls, v: Any) -> Any:
        """Accept a single compose file as shorthand for a list."""
        if isinstance(v, str):
            return [v]
        return v if v is not None else []

    @field_validator('services', mode='before')
    @classmethod
    def validate_services(cls, v: Any) -> Any:
        return v if v is not None else {}


def find_project_file(start: Union[str, Path], filename: str) -> Optional[Path]:
    """Walk up from ``start`` looking for ``filename``."""
    current = Path(start).resolve()
    for directory in (current, *current.parents):
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


def load_project(path: Union[str, Path]) -> Tuple[ProjectFile, Dict[str, Any]]:
    """
    Read and validate a project file.

    Returns:
        The validated model and the raw mapping (with defaults applied)

    Raises:
        ConfigError: If the file is missing, not YAML or fails validation
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Project file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Project file {path} must contain a mapping")

    try:
        project = ProjectFile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid project file {path}: {e}") from e

    return project, project.model_dump()
