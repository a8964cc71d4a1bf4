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

"""Schema and document text parser with caching support."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ...config import validator_config
from ...exceptions import ParseError

logger = logging.getLogger(__name__)

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"'{name}' is not valid JSON")


class DocumentParser:
    """Turns JSON or YAML text into a tree of JSON-like values."""

    def __init__(self, cache_enabled: bool = None):
        """Initialize document parser.

        Args:
            cache_enabled: Whether to enable caching. If None, uses global config.
        """
        self.cache_enabled = cache_enabled if cache_enabled is not None else validator_config.cache_enabled
        self._cache: Dict[Path, Any] = {}

    @staticmethod
    def format_for_path(path: Path) -> str:
        suffix = path.suffix.lower()
        if suffix in YAML_SUFFIXES:
            return "yaml"
        if suffix in JSON_SUFFIXES:
            return "json"
        raise ParseError(f"Unsupported file type '{suffix}' (expected .json, .yaml or .yml)", source=str(path))

    def parse_text(self, content: str, fmt: str = "json", source: Optional[str] = None) -> Any:
        """Parse text content.

        Args:
            content: Raw text
            fmt: "json" or "yaml"
            source: Name of the origin of the text, used in error messages

        Raises:
            ParseError: If the text is not well-formed
        """
        where = source or "<string>"
        if fmt == "json":
            try:
                return json.loads(content, parse_constant=_reject_constant)
            except json.JSONDecodeError as exc:
                raise ParseError(
                    f"Failed to parse JSON {where}: {exc.msg} at line {exc.lineno} column {exc.colno}",
                    source=source,
                    line=exc.lineno,
                    column=exc.colno,
                ) from exc
            except ValueError as exc:
                raise ParseError(f"Failed to parse JSON {where}: {exc}", source=source) from exc

        if fmt == "yaml":
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError as exc:
                mark = getattr(exc, "problem_mark", None)
                raise ParseError(
                    f"Failed to parse YAML {where}: {exc}",
                    source=source,
                    line=mark.line + 1 if mark is not None else None,
                    column=mark.column + 1 if mark is not None else None,
                ) from exc

        raise ValueError(f"Unknown document format: {fmt}")

    def load_file(self, file_path: Union[str, Path]) -> Any:
        """Load and parse a JSON or YAML file.

        Raises:
            FileNotFoundError: If the path is not an existing file
            ParseError: If the content is not well-formed
        """
        path = Path(file_path)

        if not path.is_file():
            raise FileNotFoundError(f"Document file not found: {path}")

        if self.cache_enabled and path in self._cache:
            logger.debug(f"Loading document from cache: {path}")
            return self._cache[path]

        logger.debug(f"Loading document file: {path}")
        fmt = self.format_for_path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"File {path} is not valid UTF-8: {exc}", source=str(path)) from exc
        data = self.parse_text(content, fmt=fmt, source=str(path))

        if self.cache_enabled:
            self._cache[path] = data
        return data

    def clear_cache(self) -> None:
        self._cache.clear()


# Global parser instance
document_parser = DocumentParser()
