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

"""Custom exceptions for the gnomad-lite schema validator."""

from typing import Any, List, Optional


class SchemaValidatorError(Exception):
    """Base exception for schema validator related errors."""
    pass


class ParseError(SchemaValidatorError):
    """Exception raised when schema or document text is not well-formed."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.source = source
        self.line = line
        self.column = column
        super().__init__(message)


class MetaSchemaError(SchemaValidatorError):
    """Exception raised when a schema document violates the meta-schema.

    ``issues`` holds every violated meta-constraint, not just the first one.
    """

    def __init__(self, issues: List[Any]):
        self.issues = list(issues)
        details = "\n".join(f"  - {issue}" for issue in self.issues)
        super().__init__(f"Schema does not conform to the meta-schema:\n{details}")


class CompileError(SchemaValidatorError):
    """Exception raised when a valid schema cannot be compiled."""

    def __init__(self, message: str, schema_path: str = ""):
        self.schema_path = schema_path
        if schema_path:
            message = f"{message} (schema_path={schema_path})"
        super().__init__(message)


class SchemaVersionError(SchemaValidatorError):
    """Exception raised when a schema version string cannot be parsed."""
    pass
