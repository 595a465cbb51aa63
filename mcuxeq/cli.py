"""mcuxeq command line interface.

Sends one command to a microcontroller shell on a serial device and
prints the response, without the echoed command and the trailing prompt.
"""

import argparse
import logging
import sys
from typing import List, Optional

from mcuxeq import __version__
from mcuxeq.config import ConfigLoader, build_session_config
from mcuxeq.config.defaults import (
    DEV_ENV,
    PROMPT_ENV,
    CONFIG_ENV,
    DEFAULT_PROMPT,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_CONFIG_PATH
)
from mcuxeq.core import (
    ConfigError,
    McuxeqError,
    execute,
    report,
    EXIT_SUCCESS,
    EXIT_USAGE,
    EXIT_FAILURE
)
from mcuxeq.logging import SessionLogger


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exiting with the usage status instead of 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="mcuxeq",
        description="Microcontroller Command/Response Utility",
        usage="%(prog)s [options] [--] <command> ...",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s -s /dev/ttyUSB0 gpio 0 pulse
  %(prog)s -s /dev/ttyACM0 -p '^uart:~\\$ $' -t 5000 kernel version
  {DEV_ENV}=/dev/ttyUSB0 %(prog)s -d -- help -v

Settings are also read from ${CONFIG_ENV} or {DEFAULT_CONFIG_PATH}.
        """
    )

    parser.add_argument(
        '-s', '--device',
        metavar='DEV',
        help=f'Serial device to use (default: value of ${DEV_ENV} if set)'
    )

    parser.add_argument(
        '-p', '--prompt',
        metavar='PROMPT',
        help=f'Expected prompt regex (default: value of ${PROMPT_ENV} if set, '
             f'else "{DEFAULT_PROMPT}")'
    )

    parser.add_argument(
        '-t', '--timeout',
        type=int,
        metavar='MS',
        help=f'Timeout value in milliseconds, 0 waits forever (default: {DEFAULT_TIMEOUT_MS})'
    )

    parser.add_argument(
        '-b', '--baud',
        type=int,
        metavar='RATE',
        help='Baud rate applied when opening the device (default: 115200)'
    )

    parser.add_argument(
        '-d', '--debug',
        action='count',
        default=0,
        help='Increase debug level (twice adds hex dumps of received data)'
    )

    parser.add_argument(
        '-f', '--force',
        action='store_true',
        help='Force open when busy (needs CAP_SYS_ADMIN)'
    )

    parser.add_argument(
        '-c', '--config',
        metavar='PATH',
        help='Configuration file (YAML)'
    )

    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Also write diagnostics to this file (rotated when large)'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        'command',
        nargs=argparse.REMAINDER,
        help='Command words sent to the device, joined by single spaces'
    )

    return parser


def _command_words(args: argparse.Namespace) -> List[str]:
    words = list(args.command)
    if words and words[0] == '--':
        words = words[1:]
    return words


def _configure_logging(debug_level: int) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug_level > 0 else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    words = _command_words(args)
    if not words:
        parser.print_usage(sys.stderr)
        return report(ConfigError("No command given"))

    _configure_logging(args.debug)

    try:
        config = ConfigLoader(args.config).load()
    except ConfigError as e:
        return report(e)

    if not (args.device or config.serial.device):
        parser.print_usage(sys.stderr)
        return report(ConfigError(f"No serial device given (use --device or ${DEV_ENV})"))

    try:
        session_config = build_session_config(
            config,
            device=args.device,
            prompt=args.prompt,
            timeout_ms=args.timeout,
            baud_rate=args.baud,
            force=args.force,
            debug_level=args.debug
        )
    except ConfigError as e:
        return report(e)

    try:
        logger = SessionLogger.from_config(config.logging, args.debug, log_file_path=args.log_file)
    except OSError as e:
        return report(ConfigError(f"Cannot open log file: {e}"))

    try:
        result = execute(session_config, words, output=sys.stdout.buffer, logger=logger)
        logger.debug("CommandSession", str(result), port=session_config.device)
        return EXIT_SUCCESS
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_FAILURE
    except (McuxeqError, OSError) as e:
        return report(e, logger=logger)
    finally:
        logger.close()


if __name__ == '__main__':
    sys.exit(main())
