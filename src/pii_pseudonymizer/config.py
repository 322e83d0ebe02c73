# Copyright 2025 Lars Marowsky-Brée <lars@marowsky-bree.eu>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Compilation of PII enrichment configuration into field rules.

A configuration looks like::

    {
      "parameters": {
        "pii": [
          {"pojo": {"field": "user_ipaddress"}},
          {"json": {"field": "contexts",
                    "schemaCriterion": "iglu:com.acme/ua/jsonschema/1-*-*",
                    "jsonPath": "$.useragent"}}
        ],
        "strategy": {"pseudonymize": {"hashFunction": "SHA-256"}}
      }
    }

Every problem in the document is collected before giving up, so all of them
can be fixed in one go.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import (
    ConfigError,
    InvalidConfig,
    PseudonymizerError,
    UnsupportedConfigSchema,
)
from .json_redactor import compile_json_path
from .models import JsonField, PiiField, PojoField
from .pipeline import PiiPseudonymizer
from .schema import SchemaCriterion, SchemaKey
from .strategy import PiiStrategy, PseudonymizeStrategy

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMA = SchemaCriterion(
    "com.snowplowanalytics.snowplow.enrichments", "pii_enrichment_config", "jsonschema", 1
)
# name used by the first releases of the enrichment
LEGACY_SCHEMA = SchemaCriterion(
    "com.snowplowanalytics.snowplow.enrichments", "pii_pseudonymizer_config", "jsonschema", 1
)


def _check_schema(schema_key: str) -> list[PseudonymizerError]:
    """Check the claimed schema of a configuration document."""
    try:
        key = SchemaKey.parse(schema_key)
        supported = SUPPORTED_SCHEMA.matches(key) or LEGACY_SCHEMA.matches(key)
    except PseudonymizerError:
        supported = False
    if supported:
        return []
    return [
        UnsupportedConfigSchema(
            f"Schema key {schema_key} is not supported. A '{SUPPORTED_SCHEMA.name}' "
            f"enrichment must have schema '{SUPPORTED_SCHEMA}'."
        )
    ]


def _lookup(data: Any, *keys: str) -> Any:
    """Follow ``keys`` through nested mappings, raising InvalidConfig if one is missing."""
    for depth, key in enumerate(keys):
        if not isinstance(data, dict) or key not in data:
            path = ".".join(keys[: depth + 1])
            raise InvalidConfig(f"missing required field '{path}'")
        data = data[key]
    return data


def _build_strategy(config: Any) -> PiiStrategy:
    hash_function = _lookup(config, "parameters", "strategy", "pseudonymize", "hashFunction")
    if not isinstance(hash_function, str):
        raise InvalidConfig("'parameters.strategy.pseudonymize.hashFunction' must be a string")
    return PseudonymizeStrategy(hash_function)


def _require_str(body: dict[str, Any], key: str, kind: str) -> str:
    value = body.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidConfig(f"'{kind}.{key}' must be a non-empty string")
    return value


def _parse_field(
    entry: Any, strategy: PiiStrategy | None
) -> tuple[PiiField | None, list[PseudonymizerError]]:
    """Parse one ``pii`` entry.

    Returns the field (None when there were errors or no usable strategy) and
    every error found in the entry.
    """
    if not isinstance(entry, dict) or len(entry) != 1:
        return None, [InvalidConfig("must be a mapping with a single 'pojo' or 'json' key")]
    ((kind, body),) = entry.items()
    if kind not in ("pojo", "json"):
        return None, [InvalidConfig(f"unknown field type '{kind}' (must be: json, pojo)")]
    if not isinstance(body, dict):
        return None, [InvalidConfig(f"'{kind}' must be a mapping")]

    errors: list[PseudonymizerError] = []
    field_name = criterion = json_path = None
    try:
        field_name = _require_str(body, "field", kind)
    except PseudonymizerError as e:
        errors.append(e)

    if kind == "pojo":
        if errors or strategy is None:
            return None, errors
        return PojoField(strategy, field_name), errors

    try:
        criterion = SchemaCriterion.parse(_require_str(body, "schemaCriterion", kind))
    except PseudonymizerError as e:
        errors.append(e)
    try:
        json_path = _require_str(body, "jsonPath", kind)
        compile_json_path(json_path)
    except PseudonymizerError as e:
        errors.append(e)

    if errors or strategy is None:
        return None, errors
    return JsonField(strategy, field_name, criterion, json_path), errors


def _compile(config: Any, schema_key: str) -> tuple[list[PiiField], list[PseudonymizerError]]:
    """Compile a configuration, collecting every error instead of stopping at the first."""
    errors = _check_schema(schema_key)

    strategy: PiiStrategy | None = None
    try:
        strategy = _build_strategy(config)
    except PseudonymizerError as e:
        errors.append(e)

    try:
        entries = _lookup(config, "parameters", "pii")
        if not isinstance(entries, list):
            raise InvalidConfig("'parameters.pii' must be a list")
    except PseudonymizerError as e:
        errors.append(e)
        entries = []

    fields: list[PiiField] = []
    for index, entry in enumerate(entries):
        pii_field, entry_errors = _parse_field(entry, strategy)
        # keep the error type, add the position of the offending entry
        errors.extend(type(e)(f"PII field {index + 1}: {e}") for e in entry_errors)
        if pii_field is not None:
            fields.append(pii_field)

    return fields, errors


def parse_config(config: Any, schema_key: str) -> PiiPseudonymizer:
    """Compile a configuration document claimed to conform to ``schema_key``.

    Raises ConfigError holding every problem found if the document is invalid.
    """
    fields, errors = _compile(config, schema_key)
    if errors:
        raise ConfigError(errors)
    logger.debug("Compiled %d PII field(s)", len(fields))
    return PiiPseudonymizer(fields)


def validate_config(config: Any, schema_key: str) -> list[str]:
    """Validate a configuration document, return list of error messages (empty if valid)."""
    _, errors = _compile(config, schema_key)
    return [str(e) for e in errors]


def _read_self_describing(path: Path) -> tuple[Any, str]:
    """Read a ``{"schema": ..., "data": ...}`` document from a JSON or YAML file."""
    try:
        with path.open() as f:
            document = json.load(f) if path.suffix == ".json" else yaml.safe_load(f)
    except OSError as e:
        raise ConfigError([InvalidConfig(f"Cannot read {path}: {e.strerror}")]) from None
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError([InvalidConfig(f"Syntax error in {path}: {e}")]) from None

    if not isinstance(document, dict):
        raise ConfigError(
            [InvalidConfig("Invalid format: expected a mapping with 'schema' and 'data' keys")]
        )
    schema_key = document.get("schema")
    if not isinstance(schema_key, str):
        raise ConfigError([InvalidConfig("missing required field 'schema'")])
    if "data" not in document:
        raise ConfigError([InvalidConfig("missing required field 'data'")])
    return document["data"], schema_key


def load_config_file(path: Path) -> PiiPseudonymizer:
    """Load and compile a self-describing configuration file."""
    config, schema_key = _read_self_describing(path)
    return parse_config(config, schema_key)


def validate_config_file(path: Path) -> list[str]:
    """Validate a configuration file, return list of error messages (empty if valid)."""
    try:
        config, schema_key = _read_self_describing(path)
    except ConfigError as e:
        return e.messages
    return validate_config(config, schema_key)
