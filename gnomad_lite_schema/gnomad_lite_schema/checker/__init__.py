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

"""Record checker: validates gnomad-lite record files against a compiled schema."""

import logging
from pathlib import Path
from typing import List

from ..exceptions import ParseError
from ..models.parsing import document_parser
from ..schema.compiler import CompiledValidator
from .report import CheckResult

__all__ = ['check_files', 'CheckResult']

logger = logging.getLogger(__name__)


def check_files(file_paths: List[Path], validator: CompiledValidator) -> List[CheckResult]:
    """Validate a list of record files.

    Args:
        file_paths: List of JSON or YAML files
        validator: Compiled validator applied to every file

    Returns:
        List of CheckResult objects, one per file
    """
    results = []

    for file_path in file_paths:
        result = CheckResult(file_path)

        try:
            document = document_parser.load_file(file_path)
        except ParseError as e:
            result.add_error(str(e), kind='ParseError', line=e.line, column=e.column)
            results.append(result)
            continue
        except OSError as e:
            result.add_error(f"Failed to read file: {e}", kind='ParseError')
            results.append(result)
            continue

        for violation in validator.validate(document):
            result.add_error(
                violation.message,
                kind=violation.kind.value,
                path=violation.location,
                pointer=violation.pointer,
            )

        logger.debug(f"Checked {file_path}: {len(result.errors)} error(s)")
        results.append(result)

    return results
