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

"""Data models for PII field rules."""

from dataclasses import dataclass, field

from jsonpath_ng.jsonpath import JSONPath

from .json_redactor import compile_json_path, redact_contexts
from .schema import SchemaCriterion
from .strategy import PiiStrategy


@dataclass(frozen=True)
class PojoField:
    """A scalar event field, pseudonymized as a whole."""

    strategy: PiiStrategy
    field_name: str

    def apply_strategy(self, value: str) -> str:
        return self.strategy.scramble(value)


@dataclass(frozen=True)
class JsonField:
    """Values inside the contexts stored in a JSON event field.

    Only contexts whose schema matches ``schema_criterion`` are touched, and
    within them only the values selected by ``json_path``.
    """

    strategy: PiiStrategy
    field_name: str
    schema_criterion: SchemaCriterion
    json_path: str
    compiled_path: JSONPath = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled_path", compile_json_path(self.json_path))

    def apply_strategy(self, value: str) -> str:
        return redact_contexts(value, self.schema_criterion, self.compiled_path, self.strategy)


PiiField = PojoField | JsonField
