"""Logging configuration, called once at CLI startup.

Every module logs through ``logging.getLogger(__name__)``; this installs a
single Rich handler on stderr so log records share the themed console with
the status lines.
"""

import logging

from rich.logging import RichHandler

from shellstrap.utils.formatting import err_console

# Third-party loggers that are noisy at DEBUG
_NOISY_LOGGERS = ("urllib3", "markdown_it")


def resolve_level(verbose: bool = False, quiet: bool = False) -> int:
    """Map CLI flags to a log level; --quiet wins over --verbose."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(verbose: bool = False, quiet: bool = False) -> int:
    """Configure the root logger for the whole process.

    Safe to call more than once; previous handlers are replaced.

    Returns:
        The level that was applied.
    """
    level = resolve_level(verbose, quiet)

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setLevel(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return level
