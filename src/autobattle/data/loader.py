from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from importlib import resources
from jsonschema import Draft7Validator

from ..errors import ConfigError, DataValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaInfo:
    name: str
    uri: str
    schema: Dict[str, Any]


class SchemaRegistry:
    """Registry for bundled JSON Schemas.

    Discovers schemas from the package resource directory 'autobattle.data.schemas'.
    A schema's "name" is its filename without the ".schema.json" suffix.
    """

    _PKG = "autobattle.data.schemas"

    def __init__(self) -> None:
        self._schemas_by_name: Dict[str, SchemaInfo] = {}
        self._schemas_by_uri: Dict[str, SchemaInfo] = {}
        self._load_all()

    def _load_all(self) -> None:
        for entry in resources.files(self._PKG).iterdir():
            if not entry.name.endswith(".schema.json"):
                continue
            name = entry.name[: -len(".schema.json")]
            with entry.open("rb") as fh:
                schema = json.load(fh)
            uri = schema.get("$id") or f"resource://{self._PKG}/{entry.name}"
            info = SchemaInfo(name=name, uri=uri, schema=schema)
            self._schemas_by_name[name] = info
            self._schemas_by_uri[uri] = info
            logger.debug("Registered schema '%s' (uri=%s)", name, uri)

    def get(self, name_or_uri: str) -> Optional[SchemaInfo]:
        return self._schemas_by_name.get(name_or_uri) or self._schemas_by_uri.get(name_or_uri)

    def names(self) -> List[str]:
        return sorted(self._schemas_by_name.keys())

    def make_validator(self, name_or_uri: str) -> Draft7Validator:
        info = self.get(name_or_uri)
        if not info:
            raise KeyError(f"Schema not found: {name_or_uri}")
        return Draft7Validator(info.schema)


class DataLoader:
    """Load YAML documents and validate them against a bundled schema.

    JSON is a subset of YAML, so ``.json`` files load through the same path.
    """

    def __init__(self, schema_registry: Optional[SchemaRegistry] = None) -> None:
        self.schemas = schema_registry or SchemaRegistry()

    def load(self, path: os.PathLike | str, *, schema: Optional[str] = None) -> Any:
        """Read a document and optionally validate it.

        Raises:
            ConfigError: if the file is missing or not parseable.
            DataValidationError: if validation fails.
        """
        abs_path = Path(path).resolve()
        logger.debug("Loading document: %s", abs_path)
        if not abs_path.exists():
            raise ConfigError(f"File not found: {abs_path}")
        try:
            with abs_path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {abs_path}: {e}") from e
        if schema:
            self.validate_data(data, schema)
        return data

    def validate_data(self, data: Any, schema_name_or_uri: str) -> None:
        try:
            validator = self.schemas.make_validator(schema_name_or_uri)
        except KeyError as e:
            raise DataValidationError(f"Unknown schema: {schema_name_or_uri}") from e

        errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
        if errors:
            message = f"Validation failed for schema '{schema_name_or_uri}'"
            raise DataValidationError(message, errors)
