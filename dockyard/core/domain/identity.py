"""
Project identity value object.

An identity names one project: its display name, the canonical app slug,
the compose project name and the configuration file it was read from. The
``id`` is a content hash over the slug and the configuration file path so
external caches can key on it.
"""

import hashlib
import re
from dataclasses import dataclass

from .errors import ConfigError

_SLUG_INVALID = re.compile(r"[^a-z0-9._-]+")
_PROJECT_INVALID = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Canonicalize a display name into an app slug.

    Every run of whitespace or unsupported characters becomes a single dash,
    so ``"My  Big Site"`` gives ``"my-big-site"``.

    Raises:
        ConfigError: If nothing usable is left of the name.
    """
    slug = _SLUG_INVALID.sub("-", name.strip().lower()).strip("-")
    if not slug:
        raise ConfigError(f"Cannot derive an app name from {name!r}")
    return slug


def composify(name: str) -> str:
    """Reduce a display name to a compose-safe project name."""
    return _PROJECT_INVALID.sub("", name.lower())


def identity_hash(slug: str, config_file: str) -> str:
    """Deterministic id for a (slug, config file) pair."""
    return hashlib.sha1(f"{slug}-{config_file}".encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ProjectIdentity:
    """Immutable identity of a single project."""

    name: str
    """Display name as written by the user."""

    slug: str
    """Canonical app name."""

    project: str
    """Compose project name."""

    config_file: str
    """Path of the project configuration file."""

    id: str
    """Content-derived identifier."""

    @classmethod
    def create(cls, name: str, config_file: str) -> "ProjectIdentity":
        """Build an identity from a display name and its config file."""
        slug = slugify(name)
        project = composify(name)
        if not project:
            raise ConfigError(f"Cannot derive a compose project name from {name!r}")
        return cls(
            name=name,
            slug=slug,
            project=project,
            config_file=str(config_file),
            id=identity_hash(slug, str(config_file)),
        )
