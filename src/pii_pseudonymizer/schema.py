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

"""Iglu schema keys and the criteria used to match them."""

import re
from dataclasses import dataclass

from .errors import InvalidSchemaCriterion, InvalidSchemaKey

_KEY_RE = re.compile(
    r"^iglu:([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_-]+)/([a-zA-Z0-9_-]+)/"
    r"([1-9][0-9]*)-(0|[1-9][0-9]*)-(0|[1-9][0-9]*)$"
)
_CRITERION_RE = re.compile(
    r"^(?:iglu:)?([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_-]+)/([a-zA-Z0-9_-]+)"
    r"(?:/([1-9][0-9]*|\*)-(0|[1-9][0-9]*|\*)-(0|[1-9][0-9]*|\*))?$"
)


@dataclass(frozen=True)
class SchemaKey:
    """A concrete schema identifier, e.g. ``iglu:com.acme/ua/jsonschema/1-0-0``."""

    vendor: str
    name: str
    format: str
    model: int
    revision: int
    addition: int

    @classmethod
    def parse(cls, text: str) -> "SchemaKey":
        m = _KEY_RE.match(text)
        if not m:
            raise InvalidSchemaKey(f"'{text}' is not a valid schema key")
        vendor, name, fmt, model, revision, addition = m.groups()
        return cls(vendor, name, fmt, int(model), int(revision), int(addition))

    @property
    def version(self) -> str:
        return f"{self.model}-{self.revision}-{self.addition}"

    def __str__(self) -> str:
        return f"iglu:{self.vendor}/{self.name}/{self.format}/{self.version}"


@dataclass(frozen=True)
class SchemaCriterion:
    """A family of schemas; ``None`` version components are wildcards."""

    vendor: str
    name: str
    format: str
    model: int | None = None
    revision: int | None = None
    addition: int | None = None

    @classmethod
    def parse(cls, text: str) -> "SchemaCriterion":
        """Parse ``[iglu:]vendor/name/format[/M-R-A]`` where M, R and A may be ``*``.

        A criterion without a version part matches every version.
        """
        m = _CRITERION_RE.match(text)
        if not m:
            raise InvalidSchemaCriterion(f"'{text}' is not a valid schema criterion")
        vendor, name, fmt, *version = m.groups()
        model, revision, addition = (
            None if part is None or part == "*" else int(part) for part in version
        )
        return cls(vendor, name, fmt, model, revision, addition)

    def matches(self, key: SchemaKey) -> bool:
        if (self.vendor, self.name, self.format) != (key.vendor, key.name, key.format):
            return False
        return all(
            expected is None or expected == actual
            for expected, actual in (
                (self.model, key.model),
                (self.revision, key.revision),
                (self.addition, key.addition),
            )
        )

    @property
    def version(self) -> str:
        parts = (self.model, self.revision, self.addition)
        return "-".join("*" if p is None else str(p) for p in parts)

    def __str__(self) -> str:
        return f"iglu:{self.vendor}/{self.name}/{self.format}/{self.version}"


def matches_schema(criterion: SchemaCriterion, schema: str) -> bool:
    """Check a raw schema string against a criterion; unparsable keys never match."""
    try:
        key = SchemaKey.parse(schema)
    except InvalidSchemaKey:
        return False
    return criterion.matches(key)
