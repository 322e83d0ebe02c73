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

"""Exceptions raised while compiling and applying pseudonymization rules."""


class PseudonymizerError(ValueError):
    """Base class for all pseudonymizer errors."""


class UnsupportedConfigSchema(PseudonymizerError):
    """The configuration document claims a schema this enrichment cannot read."""


class UnsupportedAlgorithm(PseudonymizerError):
    """The configured hash function is unknown or has no fixed digest size."""


class InvalidSchemaKey(PseudonymizerError):
    """A string is not a valid iglu schema key."""


class InvalidSchemaCriterion(PseudonymizerError):
    """A string is not a valid schema criterion."""


class InvalidJsonPath(PseudonymizerError):
    """A configured JSON path does not compile."""


class InvalidConfig(PseudonymizerError):
    """The configuration document has the wrong shape."""


class MalformedEventJson(PseudonymizerError):
    """An event field expected to hold contexts is not a usable JSON document."""


class ConfigError(PseudonymizerError):
    """Aggregate of every problem found in a configuration document."""

    def __init__(self, errors: list[PseudonymizerError]) -> None:
        self.errors = errors
        super().__init__("; ".join(str(e) for e in errors))

    @property
    def messages(self) -> list[str]:
        return [str(e) for e in self.errors]
