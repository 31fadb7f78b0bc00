"""
Ordered fragment collection with flatten and assemble operations.

The store owns the compose view of an app. Fragments are kept in the order
they were added (or prepended); every derived value (the service set, the
merged compose document, the file written for the engine) is recomputed
from that order and nothing else, so the same fragments always give the
same result.
"""

import copy
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Mapping, Optional, Union

import yaml
from loguru import logger

from ..domain.errors import ConfigError
from ..domain.fragments import AssembledCompose, Fragment, validate_services
from ..utils import deep_merge

if TYPE_CHECKING:
    from .orchestrator import Orchestrator

COMPOSE_FILENAME = "docker-compose.yml"

# Service keys compose accepts either as a mapping or as a KEY=VALUE list
KEY_VALUE_FIELDS = ("environment", "labels")


class FragmentStore:
    """Ordered list of fragments rooted at a project directory."""

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)
        self._fragments: List[Fragment] = []
        self._file_cache: Dict[Path, Dict[str, Any]] = {}

    @property
    def root(self) -> Path:
        return self._root

    @property
    def names(self) -> List[str]:
        return [fragment.name for fragment in self._fragments]

    def __iter__(self) -> Iterator[Fragment]:
        return iter(list(self._fragments))

    def __len__(self) -> int:
        return len(self._fragments)

    def __getitem__(self, index: int) -> Fragment:
        return self._fragments[index]

    def add(self, fragment: Fragment, front: bool = False) -> None:
        """Append a fragment, or prepend it when ``front`` is True."""
        if not isinstance(fragment, Fragment):
            raise ConfigError(f"Expected a Fragment, got {type(fragment).__name__}")
        if front:
            self._fragments.insert(0, fragment)
        else:
            self._fragments.append(fragment)
        logger.debug(f"Added fragment '{fragment.name}' ({'front' if front else 'back'})")

    def get(self, name: str) -> Optional[Fragment]:
        for fragment in self._fragments:
            if fragment.name == name:
                return fragment
        return None

    def resolve(self, fragment: Fragment) -> List[Dict[str, Any]]:
        """
        Compose documents of a fragment: referenced files first, then inline.

        Raises:
            ConfigError: If a referenced file is missing or not a YAML mapping
        """
        documents = [self._load_file(file_ref, fragment.name) for file_ref in fragment.files]
        documents.extend(copy.deepcopy(document) for document in fragment.documents)
        return documents

    def flatten_services(self) -> Dict[str, Dict[str, Any]]:
        """
        Service definitions keyed by name across all fragments.

        A later fragment's definition replaces an earlier one of the same
        name; names keep the position where they first appeared.
        """
        services: Dict[str, Dict[str, Any]] = {}
        for fragment in self._fragments:
            for document in self.resolve(fragment):
                for name, definition in (document.get("services") or {}).items():
                    services[name] = copy.deepcopy(definition) if definition else {}
        return services

    def merge(self) -> Dict[str, Any]:
        """Merge every document in order, later values overriding earlier ones."""
        merged: Dict[str, Any] = {}
        for fragment in self._fragments:
            for document in self.resolve(fragment):
                merged = deep_merge(merged, _normalize_document(document))
        return merged

    def assemble(self, target_dir: Union[str, Path]) -> AssembledCompose:
        """
        Write the merged compose document into ``target_dir``.

        The output is serialized with sorted keys so identical fragment lists
        produce byte-identical files.
        """
        document = self.merge()
        content = yaml.safe_dump(document, default_flow_style=False, sort_keys=True)

        target = Path(target_dir)
        target.mkdir(parents=True, exist_ok=True)
        path = target / COMPOSE_FILENAME
        path.write_text(content, encoding="utf-8")

        logger.debug(f"Assembled {len(self._fragments)} fragment(s) into {path}")
        return AssembledCompose(path=path, document=document, content=content)

    def default_info(self, app: "Orchestrator") -> List[Dict[str, Any]]:
        """
        Descriptive info for every service, merged with ``app.info``.

        Existing entries win over computed defaults for the same service;
        existing entries for services the store does not know are kept
        after the defaults.
        """
        existing: Dict[str, Dict[str, Any]] = {}
        extras: List[Dict[str, Any]] = []
        for entry in app.info:
            if isinstance(entry, Mapping) and "service" in entry:
                existing[entry["service"]] = dict(entry)
            else:
                extras.append(entry)

        info: List[Dict[str, Any]] = []
        for name in self.flatten_services():
            defaults = {
                "service": name,
                "app": app.identity.slug,
                "project": app.identity.project,
                "type": "compose",
                "urls": [],
            }
            info.append({**defaults, **existing.pop(name, {})})

        info.extend(existing.values())
        info.extend(extras)
        return info

    def _load_file(self, file_ref: str, fragment_name: str) -> Dict[str, Any]:
        path = Path(file_ref)
        if not path.is_absolute():
            path = self._root / path

        if path not in self._file_cache:
            if not path.is_file():
                raise ConfigError(f"Compose file for fragment '{fragment_name}' not found: {path}")
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
            if not isinstance(data, Mapping):
                raise ConfigError(f"Compose file {path} must contain a mapping")
            validate_services(data.get("services"), f"Compose file {path}")
            self._file_cache[path] = dict(data)

        return copy.deepcopy(self._file_cache[path])


def _key_value_mapping(value: Any, field_name: str, service: str) -> Dict[str, Any]:
    """Turn a compose ``KEY=VALUE`` list into a mapping; mappings pass through."""
    if isinstance(value, Mapping):
        return dict(value)
    if not isinstance(value, list):
        raise ConfigError(f"Service '{service}' {field_name} must be a mapping or a list")

    result: Dict[str, Any] = {}
    for item in value:
        key, sep, item_value = str(item).partition("=")
        # A bare KEY takes its value from the engine's environment
        result[key] = item_value if sep else None
    return result


def _normalize_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Use the mapping form for key/value service fields so they merge per key."""
    services = document.get("services")
    if not services:
        return document
    for name, definition in services.items():
        if not definition:
            continue
        for field_name in KEY_VALUE_FIELDS:
            if field_name in definition and definition[field_name] is not None:
                definition[field_name] = _key_value_mapping(definition[field_name], field_name, name)
    return document
