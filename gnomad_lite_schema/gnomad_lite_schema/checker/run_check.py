#!/usr/bin/env python3
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

"""CLI entry point for checking gnomad-lite record files."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import check_files, CheckResult
from ..config import validator_config
from ..exceptions import CompileError, MetaSchemaError, ParseError, SchemaVersionError
from ..models.parsing import document_parser
from ..models.records import build_gnomad_validator
from ..schema.compiler import CompiledValidator, compile_schema
from ..schema.meta_validator import check_schema

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSIONS = ['.json', '.yaml', '.yml']


def find_document_files(paths: List[str], exclude: Optional[Path] = None) -> List[Path]:
    """Find all record files in given paths."""
    document_files = []

    for path_str in paths:
        path = Path(path_str)

        if not path.exists():
            logger.warning(f"Path does not exist: {path}")
            continue

        if path.is_file():
            if path.suffix.lower() in DOCUMENT_EXTENSIONS:
                document_files.append(path)
            else:
                logger.warning(f"File does not have a record file extension: {path}")
        elif path.is_dir():
            for ext in DOCUMENT_EXTENSIONS:
                document_files.extend(path.rglob(f'*{ext}'))
        else:
            logger.warning(f"Path is neither file nor directory: {path}")

    if exclude is not None:
        excluded = exclude.resolve()
        document_files = [p for p in document_files if p.resolve() != excluded]

    return sorted(set(document_files))


def _load_validator(schema_file: Optional[str], schema_version: Optional[str]) -> CompiledValidator:
    if schema_file is None:
        return build_gnomad_validator(version=schema_version)
    schema_doc = document_parser.load_file(schema_file)
    return compile_schema(schema_doc)


def _run_schema_only(schema_file: Optional[str]) -> int:
    if schema_file is None:
        print("--schema-only requires --schema FILE", file=sys.stderr)
        return 2
    try:
        schema_doc = document_parser.load_file(schema_file)
    except (ParseError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    issues = check_schema(schema_doc)
    if issues:
        print(f"error: {schema_file} does not conform to the meta-schema:")
        for issue in issues:
            print(f"  - {issue}")
        return 1
    print(f"schema: {schema_file} is valid.")
    return 0


def _print_results(results: List[CheckResult], output_format: str) -> None:
    if output_format == 'json':
        output = {
            'files': len(results),
            'errors': sum(len(r.errors) for r in results),
            'results': [r.to_dict() for r in results],
        }
        print(json.dumps(output, indent=2))
    elif output_format == 'github-actions':
        for result in results:
            for error in result.errors:
                location = f" at {error['path']}" if 'path' in error else ""
                print(
                    f"::error file={result.file_path},line={error.get('line', 1)}::"
                    f"{error['kind']}{location}: {error['message']}"
                )
    else:  # human-readable
        for result in results:
            if result.errors:
                print(f"\n{result.file_path}:")
                for error in result.errors:
                    location = f" {error['path']}" if 'path' in error else ""
                    print(f"  {error['kind']}{location}: {error['message']}")


def main(argv: List[str] | None = None) -> None:
    """Main entry point for the checker CLI."""
    parser = argparse.ArgumentParser(
        description='Validate gnomad-lite variant and gene record files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        'paths',
        nargs='*',
        default=None,
        help='File paths or directories to check (default: current directory)',
    )
    parser.add_argument(
        '--schema',
        default=None,
        help='Schema file to validate against (default: bundled gnomad-lite schema with record rules)',
    )
    parser.add_argument(
        '--schema-version',
        default=None,
        help=f'Bundled schema version (default: {validator_config.schema_version})',
    )
    parser.add_argument(
        '--schema-only',
        action='store_true',
        help='Only check that the --schema file conforms to the meta-schema',
    )
    parser.add_argument(
        '--format',
        choices=['human', 'json', 'github-actions'],
        default='human',
        help='Output format (default: human)',
    )

    args = parser.parse_args(argv)
    validator_config.set_logging(report_on_stdout=args.format != 'human')

    if args.schema_only:
        sys.exit(_run_schema_only(args.schema))

    try:
        validator = _load_validator(args.schema, args.schema_version)
    except (ParseError, MetaSchemaError, CompileError, SchemaVersionError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)

    if not args.paths:
        args.paths = ['.']

    exclude = Path(args.schema) if args.schema else None
    document_files = find_document_files(args.paths, exclude=exclude)

    if not document_files:
        print("No record files found.", file=sys.stderr)
        sys.exit(1)

    results = check_files(document_files, validator)
    _print_results(results, args.format)

    # Exit with error code if any errors found
    failed = [r for r in results if not r.ok]
    if failed:
        if args.format == 'human':
            print(f"\n{len(failed)} of {len(results)} file(s) failed validation.")
        sys.exit(1)
    if args.format == 'human':
        print(f"Checked {len(results)} file(s) with no errors.")
    sys.exit(0)


if __name__ == '__main__':
    main()
