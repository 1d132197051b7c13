"""
Error taxonomy for wifipicker.

StartupError aborts before the menu loop. Everything else is reported to the
user and the loop keeps running.
"""

from __future__ import annotations

from typing import Optional, Sequence


class WifiPickerError(Exception):
    """Base class for wifipicker errors."""


class ToolError(WifiPickerError):
    """A single control tool invocation failed."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = '',
        timed_out: bool = False,
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = (stderr or '').strip()
        self.timed_out = timed_out
        super().__init__(self._describe())

    def _describe(self) -> str:
        name = self.command[0] if self.command else 'command'
        if self.timed_out:
            return f"{name} timed out"
        if self.stderr:
            return self.stderr
        return f"{name} exited with status {self.returncode}"


class ToolUnavailableError(ToolError):
    """The control tool binary could not be executed."""

    def _describe(self) -> str:
        name = self.command[0] if self.command else 'command'
        return f"{name} not found"


class StartupError(WifiPickerError):
    """Control tool missing or no wireless interface available."""


class ScanError(WifiPickerError):
    """Listing scan results failed."""


class InputError(WifiPickerError):
    """Invalid menu selection."""
