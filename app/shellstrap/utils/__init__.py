"""Utility modules for shellstrap.

This module exports commonly used utility functions.
"""

from shellstrap.utils.formatting import (
    console,
    err_console,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
)
from shellstrap.utils.shell import (
    CommandResult,
    command_exists,
    privileged,
    run_command,
    run_script,
)

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "print_error",
    "print_header",
    "print_info",
    "print_success",
    "print_warning",
    "privileged",
    "run_command",
    "run_script",
]
