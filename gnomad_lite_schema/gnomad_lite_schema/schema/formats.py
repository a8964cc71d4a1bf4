# Copyright 2026 TIER IV, inc.
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

"""Named format checkers for gnomAD identifiers.

A schema node that declares ``"format": "<name>"`` is checked with the
predicate registered under that name. The compiler resolves every format name
against a :class:`FormatRegistry` and refuses unknown names, so the evaluation
engine never sees an unbound format.
"""

import re
from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping


FormatChecker = Callable[[str], bool]

CHROMOSOMES = frozenset([str(n) for n in range(1, 23)] + ["X", "Y", "M"])

_VARIANT_ID_RE = re.compile(r"([0-9]{1,2}|X|Y|M)-([0-9]+)-([ACGT]+)-([ACGT]+)")
_ENSEMBL_GENE_ID_RE = re.compile(r"ENSG[0-9]{11}")


def is_chromosome(value: str) -> bool:
    """Check a chromosome name: 1-22, X, Y or M (no ``chr`` prefix)."""
    return value in CHROMOSOMES


def is_variant_id(value: str) -> bool:
    """Check a ``chrom-pos-ref-alt`` variant id such as ``1-234-A-C``.

    The position may carry leading zeros but must denote a positive integer.
    """
    m = _VARIANT_ID_RE.fullmatch(value)
    if m is None:
        return False
    chrom, pos, _ref, _alt = m.groups()
    return is_chromosome(chrom) and int(pos) > 0


def is_ensembl_gene_id(value: str) -> bool:
    """Check an Ensembl gene id: ``ENSG`` followed by exactly 11 digits."""
    return _ENSEMBL_GENE_ID_RE.fullmatch(value) is not None


class FormatRegistry:
    """Mapping from format name to checker predicate."""

    def __init__(self, checkers: Mapping[str, FormatChecker] = None):
        self._checkers: Dict[str, FormatChecker] = {}
        for name, checker in (checkers or {}).items():
            self.register(name, checker)

    def register(self, name: str, checker: FormatChecker) -> None:
        """Register ``checker`` under ``name``.

        Raises:
            ValueError: If the name is empty or already registered.
            TypeError: If the checker is not callable.
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f"Format name must be a non-empty string, got: {name!r}")
        if not callable(checker):
            raise TypeError(f"Checker for format '{name}' is not callable")
        if name in self._checkers:
            raise ValueError(f"Format '{name}' is already registered")
        self._checkers[name] = checker

    def get(self, name: str) -> FormatChecker:
        return self._checkers[name]

    def names(self) -> list:
        return sorted(self._checkers)

    def snapshot(self) -> Mapping[str, FormatChecker]:
        """Read-only copy of the current bindings."""
        return MappingProxyType(dict(self._checkers))

    def __contains__(self, name: object) -> bool:
        return name in self._checkers

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._checkers)


BUILTIN_FORMATS: Mapping[str, FormatChecker] = MappingProxyType({
    "variant-id": is_variant_id,
    "ensembl-gene-id": is_ensembl_gene_id,
    "chromosome": is_chromosome,
})


def default_registry() -> FormatRegistry:
    """Return a new registry holding the built-in gnomAD formats."""
    return FormatRegistry(BUILTIN_FORMATS)
