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

"""Loader for the versioned JSON Schemas bundled with the package."""

import json
import logging
from pathlib import Path
from typing import Dict, List

from ..exceptions import ParseError, SchemaVersionError
from ..utils.format_version import SemanticVersion, parse_format_version

logger = logging.getLogger(__name__)


# Schema cache to avoid reloading files
_SCHEMA_CACHE: Dict[str, dict] = {}


def get_schema_dir() -> Path:
    return Path(__file__).parent.parent / "schema"


def get_schema_path(name: str, version: str) -> Path:
    """Get the path to a bundled JSON Schema file.

    Args:
        name: Schema name (e.g. "gnomad_lite")
        version: Schema version string (e.g., "1.0.0")

    Returns:
        Path to the schema file
    """
    return get_schema_dir() / version / f"{name}.json"


def available_versions(name: str) -> List[SemanticVersion]:
    """List the bundled versions of a schema, oldest first."""
    versions = []
    for version_dir in get_schema_dir().iterdir():
        if not version_dir.is_dir():
            continue
        try:
            dir_version = parse_format_version(version_dir.name)
        except SchemaVersionError:
            # Skip directories that don't match the version pattern
            continue
        if (version_dir / f"{name}.json").exists():
            versions.append(dir_version)
    return sorted(versions, key=lambda v: (v.major, v.minor, v.patch))


def resolve_schema_version(name: str, version: str) -> str:
    """Resolve the schema version, using the closest available schema within the same major version.

    Version resolution rules:
    - Major version must match exactly
    - If exact version exists, use it
    - Otherwise, use the largest patch of the same minor version
    - Otherwise, use the largest patch of the closest larger minor version
    - Otherwise, use the largest available version

    Args:
        name: Schema name
        version: Requested version string

    Returns:
        Resolved version string that exists, or the original version if none found

    Raises:
        SchemaVersionError: If the requested version cannot be parsed
    """
    parsed_version = parse_format_version(version)

    if get_schema_path(name, str(parsed_version)).exists():
        return str(parsed_version)

    candidates = [v for v in available_versions(name) if v.major == parsed_version.major]
    if not candidates:
        # No schemas found for this major version, return original (will cause error)
        return version

    same_minor_versions = [v for v in candidates if v.minor == parsed_version.minor]
    if same_minor_versions:
        return str(max(same_minor_versions, key=lambda v: v.patch))

    larger_minor_versions = [v for v in candidates if v.minor > parsed_version.minor]
    if larger_minor_versions:
        min_larger_minor = min(v.minor for v in larger_minor_versions)
        closest = [v for v in larger_minor_versions if v.minor == min_larger_minor]
        return str(max(closest, key=lambda v: v.patch))

    return str(max(candidates, key=lambda v: (v.minor, v.patch)))


def load_schema(name: str, version: str, use_cache: bool = True) -> dict:
    """Load a bundled JSON Schema file.

    Args:
        name: Schema name (e.g. "gnomad_lite")
        version: Schema version string (e.g., "1.0.0")
        use_cache: Whether to reuse a previously loaded document

    Returns:
        Schema dictionary

    Raises:
        FileNotFoundError: If the schema file doesn't exist
        ParseError: If the schema file is invalid JSON
    """
    resolved_version = resolve_schema_version(name, version)
    if resolved_version != version:
        logger.info(f"Schema {name} version {version} resolved to {resolved_version}")

    cache_key = f"{name}-v{resolved_version}"
    if use_cache and cache_key in _SCHEMA_CACHE:
        return _SCHEMA_CACHE[cache_key]

    schema_path = get_schema_path(name, resolved_version)
    if not schema_path.exists():
        raise FileNotFoundError(
            f"Schema file not found for {name} version {version} "
            f"(resolved to {resolved_version}): {schema_path}"
        )

    try:
        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Invalid JSON in schema file {schema_path}: {e.msg}",
            source=str(schema_path),
            line=e.lineno,
            column=e.colno,
        ) from e

    if use_cache:
        _SCHEMA_CACHE[cache_key] = schema

    return schema


def clear_cache() -> None:
    """Clear the schema cache. Useful for testing."""
    _SCHEMA_CACHE.clear()
