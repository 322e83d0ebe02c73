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

"""Strategies computing the replacement value for a PII field."""

import hashlib
from dataclasses import dataclass, field
from typing import Protocol

from .errors import UnsupportedAlgorithm

# Java MessageDigest names, as written in enrichment configurations
_JAVA_NAMES = {
    "MD5": "md5",
    "SHA": "sha1",
    "SHA-1": "sha1",
    "SHA-224": "sha224",
    "SHA-256": "sha256",
    "SHA-384": "sha384",
    "SHA-512": "sha512",
    "SHA-512/224": "sha512_224",
    "SHA-512/256": "sha512_256",
    "SHA3-224": "sha3_224",
    "SHA3-256": "sha3_256",
    "SHA3-384": "sha3_384",
    "SHA3-512": "sha3_512",
}


class PiiStrategy(Protocol):
    """A deterministic, one-way replacement for a single string value."""

    def scramble(self, value: str) -> str: ...


def resolve_hash_function(name: str) -> str:
    """Map a configured hash function name to a hashlib algorithm name."""
    algorithm = _JAVA_NAMES.get(name.upper(), name.lower())
    if algorithm.startswith("shake_"):
        raise UnsupportedAlgorithm(f"Hash function '{name}' has no fixed digest size")
    try:
        hashlib.new(algorithm)
    except ValueError:
        raise UnsupportedAlgorithm(f"Hash function '{name}' is not supported") from None
    return algorithm


@dataclass(frozen=True)
class PseudonymizeStrategy:
    """Replace a value with the lowercase hex digest of its UTF-8 encoding."""

    hash_function: str
    algorithm: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "algorithm", resolve_hash_function(self.hash_function))

    @property
    def digest_width(self) -> int:
        """Number of hex characters produced by :meth:`scramble`."""
        return hashlib.new(self.algorithm).digest_size * 2

    def scramble(self, value: str) -> str:
        return hashlib.new(self.algorithm, value.encode("utf-8")).hexdigest()
