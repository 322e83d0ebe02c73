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

"""Schema-scoped, path-scoped redaction of contexts inside a JSON field.

A contexts field holds a document shaped like::

    {"schema": "...", "data": [{"schema": "iglu:...", "data": {...}}, ...]}

Only elements of the ``data`` array whose schema matches the rule's criterion
are rewritten, and within those only the values selected by the JSON path.
"""

import json
import logging
from typing import Any

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse as parse_path
from jsonpath_ng.ext.filter import Filter
from jsonpath_ng.jsonpath import (
    Child,
    DatumInContext,
    Descendants,
    Fields,
    Index,
    JSONPath,
    Root,
    Slice,
    This,
    Union,
    Where,
)

from .errors import InvalidJsonPath, MalformedEventJson
from .schema import SchemaCriterion, matches_schema
from .strategy import PiiStrategy

logger = logging.getLogger(__name__)


# Node types that address real locations in the document. Exact types are
# checked because the extended functions (`sorted`, `str()`, ...) subclass This.
_LOCATION_NODES = (Root, This, Fields, Index, Slice)
_BRANCH_NODES = (Child, Descendants, Union, Where)


def _check_locations(node: JSONPath) -> bool:
    """Check that every node of a parsed path selects values in place."""
    if type(node) in _LOCATION_NODES:
        return True
    if type(node) in _BRANCH_NODES:
        return _check_locations(node.left) and _check_locations(node.right)
    if type(node) is Filter:
        return all(_check_locations(e.target) for e in node.expressions)
    return False


def compile_json_path(expression: str) -> JSONPath:
    """Compile a JSON path expression, raising InvalidJsonPath on bad syntax.

    Filters are allowed; functions and arithmetic compute new values instead of
    selecting existing ones, so they are rejected.
    """
    if not expression or not expression.strip():
        raise InvalidJsonPath("JSON path must not be empty")
    try:
        path = parse_path(expression)
    except JSONPathError as e:
        raise InvalidJsonPath(f"Invalid JSON path '{expression}': {e}") from None
    if not _check_locations(path):
        raise InvalidJsonPath(
            f"Invalid JSON path '{expression}': functions and arithmetic are not supported"
        )
    return path


def _scramble_value(value: Any, strategy: PiiStrategy) -> Any:
    """Redact one selected value according to its JSON kind."""
    if isinstance(value, str):
        return strategy.scramble(value)
    if isinstance(value, list):
        return [strategy.scramble(v) if isinstance(v, str) else v for v in value]
    # objects, numbers, booleans and null are left alone
    return value


def _is_located(data: Any, match: DatumInContext) -> bool:
    """Check that a match is a value stored in ``data``, not a computed one."""
    return any(d.value is match.value for d in match.full_path.find(data))


def replace_path(data: Any, path: JSONPath, strategy: PiiStrategy) -> Any:
    """Scramble every value ``path`` selects in ``data``.

    Containers are modified in place; the (possibly new) root is returned, which
    only differs from ``data`` when the path selects the root itself. Raises
    MalformedEventJson when the path cannot be evaluated against ``data``.
    """
    try:
        matches = [m for m in path.find(data) if _is_located(data, m)]
    except TypeError as e:
        raise MalformedEventJson(f"JSON path {path} cannot be evaluated: {e}") from None
    for match in matches:
        replacement = _scramble_value(match.value, strategy)
        if replacement is not match.value:
            data = match.full_path.update(data, replacement)
    return data


def _is_context(element: Any) -> bool:
    return isinstance(element, dict) and isinstance(element.get("schema"), str) and "data" in element


def redact_contexts(
    text: str, criterion: SchemaCriterion, path: JSONPath, strategy: PiiStrategy
) -> str:
    """Redact matching contexts in a serialized contexts document.

    Raises MalformedEventJson when ``text`` is not JSON or has no ``data`` array.
    """
    try:
        document = json.loads(text)
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        raise MalformedEventJson(f"Contexts field is not valid JSON: {e}") from None

    if not isinstance(document, dict):
        raise MalformedEventJson("Contexts field must be a JSON object")
    contexts = document.get("data")
    if not isinstance(contexts, list):
        raise MalformedEventJson("Contexts field must have a 'data' array")

    for element in contexts:
        if not _is_context(element):
            continue
        if not matches_schema(criterion, element["schema"]):
            logger.debug("Skipping context %s, does not match %s", element["schema"], criterion)
            continue
        element["data"] = replace_path(element["data"], path, strategy)

    return json.dumps(document, separators=(",", ":"), ensure_ascii=False)
