"""User configuration loading and validation for devicehub."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from devicehub.core.errors import ConfigError

DEFAULT_DEVICES_FILE = "devices.xml"
DEFAULT_LOG_LEVEL = "WARNING"
DEVICES_FILE_ENV = "DEVICEHUB_DEVICES_FILE"
LOGGER = logging.getLogger(__name__)


class _ConfigLoader(yaml.SafeLoader):
    """Safe loader whose mappings refuse a key that appears twice."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                line = key_node.start_mark.line + 1
                raise ConfigError(f"Duplicate key '{key}' on line {line}")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


@dataclass(frozen=True)
class Config:
    devices_file: Path
    log_level: str = DEFAULT_LOG_LEVEL
    source: Path | None = None


@lru_cache(maxsize=1)
def _config_validator() -> Any:
    schema_file = resources.files("devicehub.schemas") / "config.schema.json"
    schema = json.loads(schema_file.read_text(encoding="utf-8"))
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "devicehub/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=_ConfigLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at root")
    return loaded


def load_config(path: Path | None = None) -> Config:
    source = path or config_path()
    doc: dict[str, Any] = {}
    if source.exists():
        doc = _read_yaml(source)
        validator = _config_validator()
        try:
            validator.validate(doc)
        except ValidationError as exc:
            where = ".".join(str(p) for p in exc.path)
            where = f" ({where})" if where else ""
            raise ConfigError(f"Schema validation failed for {source}{where}: {exc.message}") from exc
    else:
        source = None

    devices_file = Path(doc.get("devices_file", DEFAULT_DEVICES_FILE)).expanduser()
    override = os.environ.get(DEVICES_FILE_ENV)
    if override:
        if "devices_file" in doc:
            LOGGER.warning("%s overrides devices_file from %s", DEVICES_FILE_ENV, source)
        devices_file = Path(override).expanduser()

    return Config(
        devices_file=devices_file,
        log_level=doc.get("log_level", DEFAULT_LOG_LEVEL),
        source=source,
    )
