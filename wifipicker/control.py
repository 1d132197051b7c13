"""
Thin wrapper around the NetworkManager command-line client.

Every call is synchronous and bounded by a timeout. Failures surface as
ToolError; nothing here retries.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from typing import Optional, Sequence

from .constants import (
    ASK_INPUT_ALLOWANCE,
    CONNECT_TIMEOUT_SLACK,
    DEFAULT_COMMAND_TIMEOUT,
    NMCLI_BINARY,
    SCAN_FIELDS,
)
from .exceptions import ToolError, ToolUnavailableError
from .logging import get_logger
from .parsers.nmcli import split_nmcli_fields

logger = get_logger('wifipicker.control')

# Arguments whose following value must never reach a log line
_SECRET_ARGS = frozenset({'password', 'wifi-sec.psk', 'wifi-sec.wep-key0'})

_WIFI_CONNECTION_TYPES = frozenset({'802-11-wireless', 'wifi'})

_VERSION_PATTERN = re.compile(r'(\d+)\.(\d+)(?:\.(\d+))?')


def format_command(cmd: Sequence[str]) -> str:
    """Render a command for logging with secrets masked."""
    out = []
    mask_next = False
    for arg in cmd:
        out.append('****' if mask_next else arg)
        mask_next = arg in _SECRET_ARGS
    return ' '.join(out)


class NetworkControl:
    """
    Runs nmcli subcommands and returns their stdout.

    Args:
        binary: nmcli executable name or path.
        command_timeout: Default timeout for non-activation calls (seconds).
    """

    def __init__(
        self,
        binary: str = NMCLI_BINARY,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ):
        self.binary = binary
        self.command_timeout = command_timeout

    def is_available(self) -> bool:
        """Check if nmcli is on PATH."""
        return shutil.which(self.binary) is not None

    def run(
        self,
        args: Sequence[str],
        timeout: Optional[float] = None,
        interactive: bool = False,
    ) -> str:
        """
        Run one nmcli command.

        Args:
            args: Arguments after the binary name.
            timeout: Seconds before the call is abandoned.
            interactive: Inherit the terminal instead of capturing output
                (used for --ask prompting).

        Returns:
            Captured stdout ('' for interactive calls).

        Raises:
            ToolUnavailableError: nmcli could not be executed.
            ToolError: Non-zero exit or timeout.
        """
        cmd = [self.binary, *args]
        timeout = self.command_timeout if timeout is None else timeout
        logger.debug(f"Running: {format_command(cmd)}")

        try:
            if interactive:
                result = subprocess.run(cmd, text=True, timeout=timeout)
            else:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=timeout,
                )
        except (FileNotFoundError, PermissionError) as e:
            raise ToolUnavailableError(cmd, stderr=str(e)) from e
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Timed out after {timeout}s: {format_command(cmd)}")
            raise ToolError(cmd, timed_out=True) from e

        if result.returncode != 0:
            stderr = result.stderr if not interactive else ''
            logger.debug(f"nmcli exited {result.returncode}: {(stderr or '').strip()}")
            raise ToolError(cmd, result.returncode, stderr or '')

        return result.stdout if not interactive else ''

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def version(self) -> Optional[tuple[int, ...]]:
        """nmcli version as a tuple, None when it cannot be read."""
        output = self.run(['--version'])
        match = _VERSION_PATTERN.search(output)
        if not match:
            return None
        return tuple(int(g) for g in match.groups() if g is not None)

    def device_status(self) -> list[tuple[str, str]]:
        """List (device, type) pairs."""
        output = self.run(['-t', '-f', 'DEVICE,TYPE', 'device', 'status'])
        devices = []
        for line in output.splitlines():
            parts = split_nmcli_fields(line)
            if len(parts) >= 2 and parts[0]:
                devices.append((parts[0], parts[1]))
        return devices

    def wifi_devices(self) -> list[str]:
        """Names of devices with TYPE=wifi, in nmcli order."""
        return [device for device, kind in self.device_status() if kind == 'wifi']

    def device_driver(self, interface: str) -> Optional[str]:
        """Driver name reported by NetworkManager for an interface."""
        output = self.run(['-g', 'GENERAL.DRIVER', 'device', 'show', interface])
        driver = output.strip()
        return driver or None

    def wifi_list(self, interface: str) -> str:
        """Raw terse scan listing for an interface."""
        return self.run([
            '-t', '-f', SCAN_FIELDS,
            'device', 'wifi', 'list', 'ifname', interface,
        ])

    def connection_uuids(self) -> set[str]:
        """UUIDs of every stored connection profile."""
        output = self.run(['-t', '-f', 'UUID', 'connection', 'show'])
        return {line.strip() for line in output.splitlines() if line.strip()}

    def active_wifi_connections(self, interface: str) -> list[str]:
        """Names of active wifi connections on an interface."""
        output = self.run([
            '-t', '-f', 'NAME,TYPE,DEVICE', 'connection', 'show', '--active',
        ])
        names = []
        for line in output.splitlines():
            parts = split_nmcli_fields(line)
            if len(parts) < 3:
                continue
            name, kind, device = parts[0], parts[1], parts[2]
            if kind in _WIFI_CONNECTION_TYPES and device == interface:
                names.append(name)
        return names

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def radio_wifi_on(self) -> None:
        self.run(['radio', 'wifi', 'on'])

    def wifi_rescan(self, interface: str) -> None:
        self.run(['device', 'wifi', 'rescan', 'ifname', interface])

    def wifi_connect(
        self,
        ssid: str,
        interface: str,
        wait: int,
        password: Optional[str] = None,
        wep_key: bool = False,
        bssid: Optional[str] = None,
        hidden: bool = False,
        ask: bool = False,
    ) -> None:
        """
        Activate a network with 'device wifi connect'.

        The daemon reuses or creates a profile named after the SSID.
        With ask=True nmcli prompts on the inherited terminal for any
        missing secret.
        """
        args = []
        if ask:
            args.append('--ask')
        args += ['-w', str(wait), 'device', 'wifi', 'connect', ssid]
        if password is not None:
            args += ['password', password]
            if wep_key:
                args += ['wep-key-type', 'key']
        args += ['ifname', interface]
        if bssid:
            args += ['bssid', bssid]
        if hidden:
            args += ['hidden', 'yes']

        self.run(args, timeout=self._activation_timeout(wait, ask), interactive=ask)

    def connection_add(
        self,
        name: str,
        ssid: str,
        interface: str,
        key_mgmt: Optional[str] = None,
        psk: Optional[str] = None,
        bssid: Optional[str] = None,
        hidden: bool = False,
    ) -> None:
        """Create a wifi profile that does not autoconnect."""
        args = [
            'connection', 'add', 'type', 'wifi',
            'con-name', name, 'ifname', interface, 'ssid', ssid,
            'connection.autoconnect', 'no',
        ]
        if key_mgmt:
            args += ['wifi-sec.key-mgmt', key_mgmt]
        if psk is not None:
            args += ['wifi-sec.psk', psk]
        if bssid:
            args += ['802-11-wireless.bssid', bssid]
        if hidden:
            args += ['802-11-wireless.hidden', 'yes']
        self.run(args)

    def connection_up(self, name: str, wait: int, ask: bool = False) -> None:
        args = ['--ask'] if ask else []
        args += ['-w', str(wait), 'connection', 'up', 'id', name]
        self.run(args, timeout=self._activation_timeout(wait, ask), interactive=ask)

    def connection_modify(self, name: str, settings: dict[str, str]) -> None:
        args = ['connection', 'modify', 'id', name]
        for key, value in settings.items():
            args += [key, value]
        self.run(args)

    def connection_down(self, name: str) -> None:
        self.run(['connection', 'down', 'id', name])

    def connection_delete(self, identifier: str, by: str = 'uuid') -> None:
        """Delete a profile by 'uuid' or 'id'."""
        self.run(['connection', 'delete', by, identifier])

    def device_disconnect(self, interface: str) -> None:
        self.run(['device', 'disconnect', interface])

    @staticmethod
    def _activation_timeout(wait: int, ask: bool) -> float:
        timeout = wait + CONNECT_TIMEOUT_SLACK
        if ask:
            timeout += ASK_INPUT_ALLOWANCE
        return timeout
