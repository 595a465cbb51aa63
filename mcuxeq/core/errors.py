"""Mapping of session failures to user-visible outcomes.

Components raise; only the command line entry point decides how a
failure is shown and which exit status the process ends with.
"""

from typing import Optional, TextIO, TYPE_CHECKING
import sys

from mcuxeq.core.exceptions import McuxeqError, ConfigError, PromptPatternError

if TYPE_CHECKING:
    from mcuxeq.logging.session_logger import SessionLogger

EXIT_SUCCESS = 0
EXIT_USAGE = 1
EXIT_FAILURE = 255


def exit_status(error: Optional[BaseException]) -> int:
    """Process exit status for the outcome of a run.

    Returns:
        0 without error, 1 for configuration problems, 255 for a prompt
        that does not compile and for every failure of the device session
    """
    if error is None:
        return EXIT_SUCCESS
    if isinstance(error, PromptPatternError):
        return EXIT_FAILURE
    if isinstance(error, ConfigError):
        return EXIT_USAGE
    return EXIT_FAILURE


def report(error: BaseException,
           stream: Optional[TextIO] = None,
           logger: Optional['SessionLogger'] = None) -> int:
    """Report a fatal error once and return the matching exit status.

    Args:
        error: The failure that ended the run
        stream: Where the message goes (default: sys.stderr)
        logger: Also record the failure in the session log

    Returns:
        Exit status for the process
    """
    stream = stream or sys.stderr

    if isinstance(error, McuxeqError):
        message = str(error)
    else:
        message = f"{type(error).__name__}: {error}"

    print(f"Error: {message}", file=stream)

    # Console output of the logger would duplicate the line above
    if logger and logger.log_file_path:
        console = logger.enable_console
        logger.enable_console = False
        try:
            logger.log_error(source=type(error).__name__, error=message)
        finally:
            logger.enable_console = console

    return exit_status(error)
