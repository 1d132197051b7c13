"""
Startup context shared by the scanner, negotiator and menu.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_RESCAN_DELAY,
)


@dataclass(frozen=True)
class PickerContext:
    """
    Values probed once at startup.

    Attributes:
        interface: Wireless device every command is scoped to.
        driver: Kernel driver name, None if it could not be identified.
        driver_flagged: Driver is on the problematic list; BSSID-pinned
            attempts are skipped.
        ask_supported: nmcli can prompt for secrets itself (--ask).
        connect_timeout: Activation wait passed to nmcli -w.
        command_timeout: Timeout for every other nmcli call.
        rescan_delay: Pause before the single re-list after an empty scan.
    """
    interface: str
    driver: Optional[str] = None
    driver_flagged: bool = False
    ask_supported: bool = False
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    rescan_delay: float = DEFAULT_RESCAN_DELAY

    def to_dict(self) -> dict:
        return {
            'interface': self.interface,
            'driver': self.driver,
            'driver_flagged': self.driver_flagged,
            'ask_supported': self.ask_supported,
            'connect_timeout': self.connect_timeout,
            'command_timeout': self.command_timeout,
            'rescan_delay': self.rescan_delay,
        }
