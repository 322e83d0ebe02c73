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

"""Tests for schema keys and criteria."""

import pytest

from pii_pseudonymizer.errors import InvalidSchemaCriterion, InvalidSchemaKey
from pii_pseudonymizer.schema import SchemaCriterion, SchemaKey, matches_schema


def test_parse_schema_key() -> None:
    """Test parsing a full iglu schema key."""
    key = SchemaKey.parse("iglu:com.acme/ua/jsonschema/1-0-2")
    assert key == SchemaKey("com.acme", "ua", "jsonschema", 1, 0, 2)
    assert str(key) == "iglu:com.acme/ua/jsonschema/1-0-2"


@pytest.mark.parametrize(
    "text",
    [
        "com.acme/ua/jsonschema/1-0-0",
        "iglu:com.acme/ua/jsonschema",
        "iglu:com.acme/ua/jsonschema/1-0",
        "iglu:com.acme/ua/jsonschema/0-0-0",
        "iglu:com.acme/ua/jsonschema/1-*-0",
        "not a schema",
    ],
)
def test_invalid_schema_key(text: str) -> None:
    """Test malformed schema keys are rejected."""
    with pytest.raises(InvalidSchemaKey):
        SchemaKey.parse(text)


def test_parse_criterion_with_wildcards() -> None:
    """Test parsing a criterion with wildcard revision and addition."""
    criterion = SchemaCriterion.parse("iglu:com.acme/ua/jsonschema/1-*-*")
    assert criterion == SchemaCriterion("com.acme", "ua", "jsonschema", 1, None, None)
    assert str(criterion) == "iglu:com.acme/ua/jsonschema/1-*-*"


def test_parse_criterion_without_version() -> None:
    """Test a criterion without prefix or version matches every version."""
    criterion = SchemaCriterion.parse("com.acme/ua/jsonschema")
    assert criterion.version == "*-*-*"
    assert criterion.matches(SchemaKey.parse("iglu:com.acme/ua/jsonschema/3-1-4"))


@pytest.mark.parametrize("text", ["", "com.acme/ua", "iglu:com.acme/ua/jsonschema/x-0-0"])
def test_invalid_criterion(text: str) -> None:
    """Test malformed criteria are rejected."""
    with pytest.raises(InvalidSchemaCriterion):
        SchemaCriterion.parse(text)


@pytest.mark.parametrize(
    ("criterion", "key", "expected"),
    [
        ("iglu:com.acme/ua/jsonschema/1-*-*", "iglu:com.acme/ua/jsonschema/1-0-0", True),
        ("iglu:com.acme/ua/jsonschema/1-*-*", "iglu:com.acme/ua/jsonschema/1-2-3", True),
        ("iglu:com.acme/ua/jsonschema/1-*-*", "iglu:com.acme/ua/jsonschema/2-0-0", False),
        ("iglu:com.acme/ua/jsonschema/1-0-*", "iglu:com.acme/ua/jsonschema/1-1-0", False),
        ("iglu:com.acme/ua/jsonschema/1-0-0", "iglu:com.acme/ua/jsonschema/1-0-0", True),
        ("iglu:com.acme/ua/jsonschema/1-0-0", "iglu:com.acme/ua/jsonschema/1-0-1", False),
        ("iglu:com.acme/ua/jsonschema/*-*-*", "iglu:com.acme/ua/jsonschema/5-0-0", True),
        ("iglu:com.acme/ua/jsonschema/1-*-*", "iglu:com.other/ua/jsonschema/1-0-0", False),
        ("iglu:com.acme/ua/jsonschema/1-*-*", "iglu:com.acme/geo/jsonschema/1-0-0", False),
    ],
)
def test_criterion_matches(criterion: str, key: str, expected: bool) -> None:
    """Test matching keys against criteria."""
    assert SchemaCriterion.parse(criterion).matches(SchemaKey.parse(key)) is expected


def test_matches_schema_unparsable_key() -> None:
    """Test an unparsable schema string never matches."""
    criterion = SchemaCriterion.parse("com.acme/ua/jsonschema")
    assert matches_schema(criterion, "iglu:com.acme/ua/jsonschema/1-0-0")
    assert not matches_schema(criterion, "com.acme/ua/jsonschema/1-0-0")
    assert not matches_schema(criterion, "")
