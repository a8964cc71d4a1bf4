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

"""Version utilities for the bundled gnomad-lite schemas.

Bundled schemas live in ``schema/<MAJOR.MINOR.PATCH>/`` directories.

Compatibility rule (semver-like):
  * **Major** must match exactly.
  * **Minor** and **patch** only select the closest available schema.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..exceptions import SchemaVersionError


_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True)
class SemanticVersion:
    """A parsed semantic version (major, minor, patch)."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_format_version(raw: str) -> SemanticVersion:
    """Parse a version string like ``1.0.0`` (with or without 'v' prefix).

    Returns:
        A :class:`SemanticVersion` instance.

    Raises:
        SchemaVersionError: If the string cannot be parsed.
    """
    if not isinstance(raw, str):
        raise SchemaVersionError(
            f"Schema version must be a string, got {type(raw).__name__}: {raw!r}"
        )

    m = _VERSION_RE.match(raw.strip())
    if m is None:
        raise SchemaVersionError(
            f"Invalid schema version string: '{raw}'. "
            "Expected 'MAJOR.MINOR.PATCH' (e.g. '1.0.0')."
        )
    return SemanticVersion(int(m.group(1)), int(m.group(2)), int(m.group(3)))
