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

"""Configuration management for the gnomad-lite schema validator."""

import os
import logging
from dataclasses import dataclass

from . import SCHEMA_VERSION
from .utils.logging_utils import configure_checker_logging


@dataclass
class ValidatorConfig:
    """Configuration class for validation sessions and the checker CLI."""
    log_level: str = "INFO"
    print_level: str = "ERROR"
    cache_enabled: bool = True
    schema_version: str = SCHEMA_VERSION

    @classmethod
    def from_env(cls) -> 'ValidatorConfig':
        """Create configuration from environment variables."""
        return cls(
            log_level=os.getenv('GNOMAD_LITE_SCHEMA_LOG_LEVEL', 'INFO'),
            print_level=os.getenv('GNOMAD_LITE_SCHEMA_PRINT_LEVEL', 'ERROR'),
            cache_enabled=os.getenv('GNOMAD_LITE_SCHEMA_CACHE_ENABLED', 'true').lower() == 'true',
            schema_version=os.getenv('GNOMAD_LITE_SCHEMA_VERSION', SCHEMA_VERSION),
        )

    def set_logging(self, report_on_stdout: bool = False) -> logging.Logger:
        """Setup logging based on configuration.

        Args:
            report_on_stdout: The checker writes a machine-readable report to
                stdout, so every log record goes to stderr.
        """
        return configure_checker_logging(
            level=getattr(logging, self.log_level.upper(), logging.INFO),
            print_level=getattr(logging, self.print_level.upper(), logging.ERROR),
            report_on_stdout=report_on_stdout,
        )


# Global configuration instance
validator_config = ValidatorConfig.from_env()
