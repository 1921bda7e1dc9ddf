"""Settings loading and validation for the optional YAML config file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from bluectl.core.errors import ConfigLoadError, ConfigValidationError
from bluectl.core.model import BatteryThresholds, Settings, SourceKind

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    source: Path | None
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("bluectl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "bluectl" / "config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def build_settings(doc: dict[str, Any], source: Path | str = "<config>") -> Settings:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    defaults = Settings()
    thresholds_doc = doc.get("battery_thresholds", {})
    thresholds = BatteryThresholds(
        healthy=int(thresholds_doc.get("healthy", defaults.battery_thresholds.healthy)),
        critical=int(thresholds_doc.get("critical", defaults.battery_thresholds.critical)),
    )
    if thresholds.critical >= thresholds.healthy:
        raise ConfigValidationError(
            f"battery_thresholds.critical ({thresholds.critical}) must be below "
            f"battery_thresholds.healthy ({thresholds.healthy}) in {source}"
        )

    sources = defaults.sources
    if "sources" in doc:
        sources = tuple(SourceKind(value) for value in doc["sources"])

    return Settings(
        sources=sources,
        merge_duplicates=bool(doc.get("merge_duplicates", defaults.merge_duplicates)),
        registry_battery=doc.get("registry_battery", defaults.registry_battery),
        command_timeout_s=float(doc.get("command_timeout_s", defaults.command_timeout_s)),
        battery_thresholds=thresholds,
        log_level=doc.get("log_level", defaults.log_level),
    )


def load_settings(path: Path | None = None) -> LoadedSettings:
    path = path or config_path()
    if not path.exists():
        return LoadedSettings(settings=Settings(), source=None, warnings=())

    doc = _read_yaml(path)
    warnings: list[str] = []
    settings = build_settings(doc, path)
    if len(set(settings.sources)) != len(settings.sources) and not settings.merge_duplicates:
        warning = f"Config {path} lists a source more than once; its devices will be duplicated"
        LOGGER.debug(warning)
        warnings.append(warning)
    return LoadedSettings(settings=settings, source=path, warnings=tuple(warnings))
