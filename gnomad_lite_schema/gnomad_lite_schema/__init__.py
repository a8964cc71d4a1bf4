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

"""Schema-driven validation of gnomad-lite variant and gene records."""

__version__ = "0.1.0"

# Version of the bundled gnomad-lite schema used when none is requested.
SCHEMA_VERSION = "1.0.0"

from .exceptions import (  # noqa: E402
    CompileError,
    MetaSchemaError,
    ParseError,
    SchemaValidatorError,
)
from .schema import (  # noqa: E402
    CompiledValidator,
    FormatRegistry,
    ViolationKind,
    ViolationRecord,
    compile_schema,
    default_registry,
    is_valid,
    validate,
    validate_schema,
)

__all__ = [
    "SCHEMA_VERSION",
    "CompileError",
    "CompiledValidator",
    "FormatRegistry",
    "MetaSchemaError",
    "ParseError",
    "SchemaValidatorError",
    "ViolationKind",
    "ViolationRecord",
    "compile_schema",
    "default_registry",
    "is_valid",
    "validate",
    "validate_schema",
]
