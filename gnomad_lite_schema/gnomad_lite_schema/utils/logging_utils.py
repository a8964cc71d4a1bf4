import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "gnomad_lite_schema"

LOG_FORMAT = "%(name)s - %(levelname)s - %(message)s"


class _BelowLevelFilter(logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self._level


def configure_checker_logging(
    *,
    level: int = logging.INFO,
    print_level: int = logging.ERROR,
    report_on_stdout: bool = False,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Logger:
    """Attach console handlers to the package logger.

    Records at ``print_level`` and above always go to stderr. Records below it
    go to stdout, unless the checker writes a machine-readable report there
    (``report_on_stdout``): then they go to stderr as well, so
    ``--format json > report.json`` stays parseable.

    Only the ``gnomad_lite_schema`` logger is touched; an application that
    embeds the engine keeps its own root configuration.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    if formatter is None:
        formatter = logging.Formatter(LOG_FORMAT)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setFormatter(formatter)
    if report_on_stdout:
        stderr_handler.setLevel(logging.NOTSET)
        logger.addHandler(stderr_handler)
        return logger

    stderr_handler.setLevel(max(print_level, logging.DEBUG))

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.addFilter(_BelowLevelFilter(print_level))
    stdout_handler.setFormatter(formatter)

    logger.addHandler(stdout_handler)
    logger.addHandler(stderr_handler)
    return logger
