"""
Command line entry point.

Exit status: 0 on quit, 1 when startup fails (nmcli missing or no wifi
interface), 2 on usage errors.
"""

from __future__ import annotations

import argparse
import signal
import sys
from typing import Optional, Sequence

from rich.console import Console

from .capability_check import check_capabilities
from .constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_RESCAN_DELAY,
    NMCLI_BINARY,
)
from .control import NetworkControl
from .exceptions import ScanError, StartupError
from .logging import get_logger, setup_logging
from .menu import PickerMenu, build_table, read_secret
from .negotiator import Negotiator
from .scanner import scan

logger = get_logger('wifipicker.cli')

EXIT_OK = 0
EXIT_STARTUP = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='wifipicker',
        description='Pick and join Wi-Fi networks through NetworkManager (nmcli).',
    )
    parser.add_argument('-i', '--interface',
                        help='Wireless interface (default: first wifi device)')
    parser.add_argument('--nmcli', default=NMCLI_BINARY,
                        help='nmcli executable (default: %(default)s)')
    parser.add_argument('--connect-timeout', type=int, default=DEFAULT_CONNECT_TIMEOUT,
                        help='Seconds nmcli waits for an activation (default: %(default)s)')
    parser.add_argument('--command-timeout', type=float, default=DEFAULT_COMMAND_TIMEOUT,
                        help='Seconds before any other nmcli call is abandoned (default: %(default)s)')
    parser.add_argument('--rescan-delay', type=float, default=DEFAULT_RESCAN_DELAY,
                        help='Pause before re-listing after an empty scan (default: %(default)s)')
    parser.add_argument('--problem-driver', action='append', default=[], metavar='DRIVER',
                        help='Treat DRIVER as unable to connect to a pinned BSSID (repeatable)')
    parser.add_argument('--no-ask', action='store_true',
                        help='Always prompt for secrets here instead of through nmcli --ask')
    parser.add_argument('--list', action='store_true',
                        help='Print the scan table once and exit')

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log errors')
    return parser


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    # Terminal hangups and kill requests unwind like Ctrl-C so attempt
    # scopes get to delete their transient profiles.
    signal.signal(signal.SIGTERM, _raise_interrupt)
    if hasattr(signal, 'SIGHUP'):
        signal.signal(signal.SIGHUP, _raise_interrupt)

    console = Console()
    control = NetworkControl(binary=args.nmcli, command_timeout=args.command_timeout)

    try:
        context = check_capabilities(
            control,
            interface=args.interface,
            connect_timeout=args.connect_timeout,
            command_timeout=args.command_timeout,
            rescan_delay=args.rescan_delay,
            problem_drivers=args.problem_driver,
            allow_ask=not args.no_ask,
        )
    except StartupError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return EXIT_STARTUP
    except KeyboardInterrupt:
        return EXIT_OK

    logger.debug(f"Startup context: {context.to_dict()}")

    if args.list:
        try:
            records = scan(control, context)
        except ScanError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            return EXIT_STARTUP
        console.print(build_table(records))
        return EXIT_OK

    negotiator = Negotiator(control, context, secret_prompt=read_secret)
    menu = PickerMenu(control, context, negotiator, console=console)

    try:
        return menu.run()
    except KeyboardInterrupt:
        console.print()
        console.print('Bye.')
        return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
