"""
Interactive menu loop.

Redraws the network table after every action and dispatches numbered
selections and single-letter commands. Only StartupError (raised before the
loop) is fatal; everything else is reported and the loop continues.
"""

from __future__ import annotations

import getpass
import time
from enum import Enum
from typing import Callable, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .constants import BAND_UNKNOWN, MENU_COMMANDS, SSID_DISPLAY_WIDTH
from .context import PickerContext
from .control import NetworkControl
from .exceptions import InputError, ScanError, ToolError
from .logging import get_logger
from .models import Connected, ConnectResult, NetworkRecord
from .negotiator import Negotiator, disconnect
from .scanner import rescan, scan

logger = get_logger('wifipicker.menu')

PROMPT = 'Select # / C / D / R / Q: '


class MenuCommand(str, Enum):
    """Menu actions."""
    SELECT = 'select'
    HIDDEN = 'c'
    DISCONNECT = 'd'
    RESCAN = 'r'
    QUIT = 'q'

    def __str__(self) -> str:
        return self.value


_LETTER_COMMANDS = {
    MenuCommand.HIDDEN.value: MenuCommand.HIDDEN,
    MenuCommand.DISCONNECT.value: MenuCommand.DISCONNECT,
    MenuCommand.RESCAN.value: MenuCommand.RESCAN,
    MenuCommand.QUIT.value: MenuCommand.QUIT,
}


def parse_choice(text: str, count: int) -> tuple[MenuCommand, Optional[int]]:
    """
    Interpret one line of menu input.

    Args:
        text: Raw user input.
        count: Number of networks currently displayed.

    Returns:
        (command, zero-based index) - the index is only set for SELECT.

    Raises:
        InputError: Unknown command, non-numeric or out-of-range number.
    """
    choice = (text or '').strip().lower()

    if choice in _LETTER_COMMANDS:
        return _LETTER_COMMANDS[choice], None

    if not choice or not choice.isdecimal():
        raise InputError('Invalid choice.')

    index = int(choice)
    if index < 1 or index > count:
        raise InputError('Invalid number.')
    return MenuCommand.SELECT, index - 1


def build_table(records: list[NetworkRecord]) -> Table:
    """Render scan records as a numbered table."""
    table = Table(show_edge=False, pad_edge=False, box=None, header_style='bold')
    table.add_column('#', justify='right')
    table.add_column('*')
    table.add_column('SSID', no_wrap=True)
    table.add_column('BAND')
    table.add_column('SECURITY')
    table.add_column('SIGNAL', justify='right')

    for number, record in enumerate(records, start=1):
        band = record.band if record.band == BAND_UNKNOWN else f"{record.band} GHz"
        table.add_row(
            str(number),
            '*' if record.in_use else '',
            Text(record.ssid[:SSID_DISPLAY_WIDTH]),
            band,
            Text(record.security),
            str(record.signal),
        )

    return table


class PickerMenu:
    """
    The interactive picker.

    Args:
        control: nmcli wrapper.
        context: Startup context.
        negotiator: Connection negotiator bound to the same context.
        console: rich Console used for all output.
        read_line: Reads one line of plain input for a prompt.
        pause_after_action: Wait for Enter after connect/disconnect.
        sleep: Delay function used around rescans.
    """

    def __init__(
        self,
        control: NetworkControl,
        context: PickerContext,
        negotiator: Negotiator,
        console: Optional[Console] = None,
        read_line: Optional[Callable[[str], str]] = None,
        pause_after_action: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.control = control
        self.context = context
        self.negotiator = negotiator
        self.console = console or Console()
        self.read_line = read_line or self.console.input
        self.pause_after_action = pause_after_action
        self.sleep = sleep

        # Current scan snapshot, replaced wholesale on every refresh
        self.records: list[NetworkRecord] = []
        self.scan_error: Optional[str] = None

    def run(self) -> int:
        """Loop until the user quits. Returns the process exit status."""
        needs_scan = True

        while True:
            if needs_scan:
                self.refresh()
            needs_scan = True
            self.render()

            try:
                line = self.read_line(PROMPT)
            except EOFError:
                self.console.print('Bye.')
                return 0

            try:
                command, index = parse_choice(line, len(self.records))
            except InputError as e:
                self.console.print(f"[yellow]{e}[/yellow]")
                needs_scan = False
                continue

            if command is MenuCommand.QUIT:
                self.console.print('Bye.')
                return 0
            if command is MenuCommand.RESCAN:
                self.console.print('Rescanning…')
                rescan(self.control, self.context, sleep=self.sleep)
                continue

            if command is MenuCommand.SELECT:
                self.connect_record(self.records[index])
            elif command is MenuCommand.HIDDEN:
                self.connect_hidden()
            elif command is MenuCommand.DISCONNECT:
                self.disconnect_current()
            self._pause()

    def refresh(self) -> None:
        """Replace the snapshot with a fresh scan; keep the old one on failure."""
        try:
            self.records = scan(self.control, self.context, sleep=self.sleep)
            self.scan_error = None
        except ScanError as e:
            logger.warning(str(e))
            self.scan_error = str(e)

    def render(self) -> None:
        self.console.print()
        self.console.print(f"[bold]Interface: {self.context.interface}[/bold]")
        self.console.print()

        if self.scan_error:
            self.console.print(Text.assemble((self.scan_error, 'red'), ' (press R to rescan)'))
        if self.records:
            self.console.print(build_table(self.records))
        else:
            self.console.print('No networks found.')

        self.console.print()
        self.console.print(MENU_COMMANDS, markup=False)

    def connect_record(self, record: NetworkRecord) -> ConnectResult:
        self.console.print()
        self.console.print(Text.assemble(('Connecting to SSID: ', 'bold'), record.ssid))
        result = self.negotiator.connect(record)
        self._report(result)
        return result

    def connect_hidden(self) -> Optional[ConnectResult]:
        try:
            ssid = self.read_line('Enter SSID (exact, case-sensitive): ')
            if not ssid:
                return None
            hint = self.read_line('Security (press Enter if unknown): ')
        except EOFError:
            return None

        self.console.print()
        self.console.print(Text.assemble(('Connecting to hidden SSID: ', 'bold'), ssid))
        result = self.negotiator.connect_hidden(ssid, self.records, hint=hint or None)
        self._report(result)
        return result

    def disconnect_current(self) -> None:
        try:
            name = disconnect(self.control, self.context)
        except ToolError as e:
            self.console.print(Text(f"Disconnect failed: {e}", style='red'))
            return

        if name is None:
            self.console.print(f"No active Wi-Fi connection on {self.context.interface}.")
        else:
            self.console.print(Text(f'Disconnected "{name}".', style='green'))

    def _report(self, result: ConnectResult) -> None:
        if isinstance(result, Connected):
            self.console.print(Text(f"Connected to {result.ssid}.", style='green'))
        else:
            self.console.print(Text(result.reason, style='red'))

    def _pause(self) -> None:
        if not self.pause_after_action:
            return
        try:
            self.read_line('Press Enter to continue…')
        except EOFError:
            pass


def read_secret(prompt: str) -> str:
    """Read a credential from the controlling terminal with echo disabled."""
    return getpass.getpass(prompt=prompt)
