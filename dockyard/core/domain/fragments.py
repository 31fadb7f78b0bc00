"""
Fragment and extension records.

Fragments are the unit of compose configuration: the project itself, every
plugin and the synthesized globals each contribute one. Extensions are the
typed records plugins hand back to the loader.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .errors import ConfigError

EXTENSION_FIELDS = ("config", "fragments", "env", "labels")


def _require_mapping(value: Any, what: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{what} must be a mapping, got {type(value).__name__}")
    return dict(value)


def validate_services(services: Any, what: str) -> None:
    """Check a compose ``services`` table: a mapping of mappings (or empty definitions)."""
    if services is None:
        return
    if not isinstance(services, Mapping):
        raise ConfigError(f"{what} services must be a mapping")
    for name, definition in services.items():
        if definition is not None and not isinstance(definition, Mapping):
            raise ConfigError(
                f"{what} service '{name}' must be a mapping, got {type(definition).__name__}")


@dataclass
class Fragment:
    """
    Named unit of compose configuration.

    Content is either inline (``documents``) or referenced by compose files
    relative to the project root (``files``). When both are present the
    files come first.
    """

    name: str
    documents: List[Dict[str, Any]] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigError("Fragment name cannot be empty")
        for document in self.documents:
            if not isinstance(document, Mapping):
                raise ConfigError(
                    f"Fragment '{self.name}' has a non-mapping document: {document!r}")
            validate_services(document.get("services"), f"Fragment '{self.name}'")

    @classmethod
    def inline(cls, name: str, data: Mapping[str, Any]) -> "Fragment":
        """Fragment carrying a single inline compose document."""
        return cls(name=name, documents=[dict(data)])

    @classmethod
    def from_mapping(cls, data: Any, default_name: str) -> "Fragment":
        """
        Coerce a plugin-provided value into a fragment.

        Accepts a ``Fragment``, a mapping with ``name``/``documents``/``files``
        keys, or a bare compose document.
        """
        if isinstance(data, Fragment):
            return data
        if not isinstance(data, Mapping):
            raise ConfigError(f"Cannot build a fragment from {type(data).__name__}")
        if "documents" in data or "files" in data:
            return cls(
                name=data.get("name", default_name),
                documents=[dict(d) for d in data.get("documents", [])],
                files=[str(f) for f in data.get("files", [])],
            )
        document = {key: value for key, value in data.items() if key != "name"}
        return cls.inline(data.get("name", default_name), document)

    @classmethod
    def from_project_config(cls, config: Mapping[str, Any]) -> "Fragment":
        """Base fragment describing the project's own configuration."""
        files = config.get("compose") or []
        if isinstance(files, str):
            files = [files]
        if not isinstance(files, list):
            raise ConfigError("Project 'compose' must be a list of files")
        documents = []
        services = config.get("services")
        if services:
            documents.append({"services": _require_mapping(services, "Project 'services'")})
        return cls(name="compose", documents=documents, files=[str(f) for f in files])


@dataclass
class Extension:
    """Whitelisted output of one plugin's app loader."""

    config: Dict[str, Any] = field(default_factory=dict)
    fragments: List[Fragment] = field(default_factory=list)
    env: Dict[str, Any] = field(default_factory=dict)
    labels: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_result(cls, plugin: str, result: Any) -> "Extension":
        """
        Normalize whatever a loader returned into an extension.

        Unknown keys are dropped. ``compose_data`` is accepted as an alias
        for ``fragments``.
        """
        if result is None:
            return cls()
        if isinstance(result, Extension):
            return result
        if not isinstance(result, Mapping):
            raise ConfigError(
                f"Plugin '{plugin}' returned {type(result).__name__}, expected a mapping")

        raw_fragments = result.get("fragments", result.get("compose_data")) or []
        if isinstance(raw_fragments, (Mapping, Fragment)):
            raw_fragments = [raw_fragments]
        fragments = [
            Fragment.from_mapping(item, default_name=f"{plugin}-{index}")
            for index, item in enumerate(raw_fragments)
        ]
        return cls(
            config=_require_mapping(result.get("config"), f"Plugin '{plugin}' config"),
            fragments=fragments,
            env=_require_mapping(result.get("env"), f"Plugin '{plugin}' env"),
            labels=_require_mapping(result.get("labels"), f"Plugin '{plugin}' labels"),
        )


@dataclass(frozen=True)
class AssembledCompose:
    """Result of assembling a fragment list onto disk."""

    path: Path
    document: Dict[str, Any]
    content: str

    @property
    def services(self) -> List[str]:
        return sorted(self.document.get("services", {}))

