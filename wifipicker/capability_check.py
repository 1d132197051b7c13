"""
Startup probing.

Resolves the wireless interface, turns the radio on, identifies the driver
and decides whether nmcli may prompt for secrets itself. Runs once before the
menu loop; any fatal problem raises StartupError.
"""

from __future__ import annotations

import os
import sys
from typing import Iterable, Optional

from .constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_RESCAN_DELAY,
    NMCLI_ASK_MIN_VERSION,
    PROBLEMATIC_DRIVERS,
    SYSFS_DRIVER_PATH,
)
from .context import PickerContext
from .control import NetworkControl
from .exceptions import StartupError, ToolError, ToolUnavailableError
from .logging import get_logger

logger = get_logger('wifipicker.capability_check')


def check_capabilities(
    control: NetworkControl,
    interface: Optional[str] = None,
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
    rescan_delay: float = DEFAULT_RESCAN_DELAY,
    problem_drivers: Iterable[str] = (),
    allow_ask: bool = True,
) -> PickerContext:
    """
    Build the startup context.

    Args:
        control: nmcli wrapper.
        interface: Explicit interface; the first wifi device when None.
        connect_timeout: Activation wait for nmcli -w.
        command_timeout: Timeout for other nmcli calls.
        rescan_delay: Pause before the re-list after an empty scan.
        problem_drivers: Extra driver names to treat as problematic.
        allow_ask: Permit delegating secret prompts to nmcli --ask.

    Raises:
        StartupError: nmcli missing or no usable wifi interface.
    """
    if not control.is_available():
        raise StartupError(f"Missing {control.binary}; NetworkManager is required")

    interface = resolve_interface(control, interface)
    logger.info(f"Using interface {interface}")

    try:
        control.radio_wifi_on()
    except ToolError as e:
        logger.warning(f"Could not switch wifi radio on: {e}")

    driver = probe_driver(control, interface)
    flagged_drivers = PROBLEMATIC_DRIVERS | {d.strip() for d in problem_drivers if d.strip()}
    driver_flagged = driver is not None and driver in flagged_drivers
    if driver_flagged:
        logger.info(f"Driver {driver} is flagged; BSSID-pinned connects disabled")

    return PickerContext(
        interface=interface,
        driver=driver,
        driver_flagged=driver_flagged,
        ask_supported=allow_ask and probe_ask_support(control),
        connect_timeout=connect_timeout,
        command_timeout=command_timeout,
        rescan_delay=rescan_delay,
    )


def resolve_interface(control: NetworkControl, interface: Optional[str] = None) -> str:
    """Pick the wifi interface, or validate the one the user asked for."""
    try:
        wifi_devices = control.wifi_devices()
    except ToolUnavailableError as e:
        raise StartupError(f"Missing {control.binary}; NetworkManager is required") from e
    except ToolError as e:
        raise StartupError(f"Could not list network devices: {e}") from e

    if interface:
        if interface not in wifi_devices:
            raise StartupError(f"{interface} is not a wifi device")
        return interface

    if not wifi_devices:
        raise StartupError("No Wi-Fi interface found (TYPE=wifi)")
    return wifi_devices[0]


def probe_driver(control: NetworkControl, interface: str) -> Optional[str]:
    """
    Identify the kernel driver behind an interface.

    Reads the sysfs driver symlink first and falls back to NetworkManager's
    GENERAL.DRIVER property.
    """
    link = SYSFS_DRIVER_PATH.format(interface=interface)
    try:
        driver = os.path.basename(os.readlink(link))
        if driver:
            return driver
    except OSError:
        logger.debug(f"No sysfs driver link at {link}")

    try:
        return control.device_driver(interface)
    except ToolError as e:
        logger.debug(f"Driver lookup failed: {e}")
        return None


def probe_ask_support(control: NetworkControl) -> bool:
    """nmcli can prompt for secrets only on a new enough release and a real terminal."""
    if not sys.stdin.isatty():
        return False
    try:
        version = control.version()
    except ToolError as e:
        logger.debug(f"Could not read nmcli version: {e}")
        return False
    return version is not None and version[:2] >= NMCLI_ASK_MIN_VERSION
