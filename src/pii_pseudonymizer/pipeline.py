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

"""Injection of pseudonymization into an event's field transform map."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .models import PiiField

logger = logging.getLogger(__name__)

# Converts raw inputs into a field value; failure is signalled by raising
TransformFunction = Callable[..., str]
# input field name -> (conversion, output field name)
TransformMap = dict[str, tuple[TransformFunction, str]]

Predicate = Callable[[str], bool]
Wrapper = Callable[[TransformFunction], TransformFunction]


def _wrap(pii_field: PiiField, func: TransformFunction) -> TransformFunction:
    """Run ``func`` and pseudonymize its result; exceptions from ``func`` propagate."""

    def wrapped(*args: Any) -> str:
        return pii_field.apply_strategy(func(*args))

    return wrapped


def _wrappers(fields: list[PiiField]) -> list[tuple[Predicate, Wrapper]]:
    """Build one (predicate, wrapper) pair per field, in field order."""
    pairs: list[tuple[Predicate, Wrapper]] = []
    for pii_field in fields:

        def predicate(output_field: str, name: str = pii_field.field_name) -> bool:
            return output_field == name

        def wrapper(func: TransformFunction, f: PiiField = pii_field) -> TransformFunction:
            return _wrap(f, func)

        pairs.append((predicate, wrapper))
    return pairs


def augment(transform_map: TransformMap, fields: list[PiiField]) -> TransformMap:
    """Return a copy of ``transform_map`` whose targeted conversions also pseudonymize.

    Several fields targeting the same output field are applied in list order,
    each on the result of the previous one. Untargeted entries are passed
    through unchanged and the input map is never modified.
    """
    result = dict(transform_map)
    for predicate, wrapper in _wrappers(fields):
        for input_field, (func, output_field) in list(result.items()):
            if predicate(output_field):
                result[input_field] = (wrapper(func), output_field)
    return result


@dataclass(frozen=True)
class PiiPseudonymizer:
    """The compiled enrichment: every configured PII field, in configuration order.

    The configuration format only allows a single strategy, so every field
    currently carries the same one.
    """

    field_list: list[PiiField] = field(default_factory=list)

    def transformer(self, transform_map: TransformMap) -> TransformMap:
        targeted = {f.field_name for f in self.field_list}
        logger.debug("Pseudonymizing fields: %s", ", ".join(sorted(targeted)))
        return augment(transform_map, self.field_list)
