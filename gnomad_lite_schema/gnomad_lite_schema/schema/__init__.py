"""Schema model, meta-validation, compilation and evaluation.

This package intentionally avoids depending on the record rules, loaders and
the checker CLI so that the engine stays independent of gnomAD specifics
other than the built-in format checkers.

Versioned schema documents shipped with the package live next to these
modules in ``<MAJOR.MINOR.PATCH>/`` directories.
"""

from .compiler import CompiledValidator, compile_schema
from .evaluator import is_valid, validate
from .formats import FormatRegistry, default_registry
from .meta_validator import MetaSchemaIssue, check_schema, validate_schema
from .violations import ViolationKind, ViolationRecord
