"""
Scan normalizer.

Lists nearby networks through nmcli and turns the terse listing into a
sorted list of NetworkRecord. Every call builds a fresh list; nothing is
carried over between scans.
"""

from __future__ import annotations

import time
from typing import Callable, Iterable

from .constants import USER_RESCAN_SETTLE
from .context import PickerContext
from .control import NetworkControl
from .exceptions import ScanError, ToolError
from .logging import get_logger
from .models import NetworkRecord
from .parsers.nmcli import parse_nmcli_scan

logger = get_logger('wifipicker.scanner')


def sort_records(records: Iterable[NetworkRecord]) -> list[NetworkRecord]:
    """Signal descending, then SSID, then BSSID."""
    return sorted(records, key=lambda r: r.sort_key)


def scan(
    control: NetworkControl,
    context: PickerContext,
    sleep: Callable[[float], None] = time.sleep,
) -> list[NetworkRecord]:
    """
    List networks visible on the context's interface.

    An empty first listing triggers one rescan request and one more listing
    after context.rescan_delay, to absorb first-scan latency.

    Raises:
        ScanError: nmcli missing, timed out or exited non-zero.
    """
    records = _list_records(control, context)

    if not records:
        logger.info("No networks found, rescanning once")
        _request_rescan(control, context)
        sleep(context.rescan_delay)
        records = _list_records(control, context)

    logger.debug(f"Scan on {context.interface} returned {len(records)} networks")
    return sort_records(records)


def rescan(
    control: NetworkControl,
    context: PickerContext,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """User-requested rescan. Failure is logged; the next listing shows what the daemon has."""
    _request_rescan(control, context)
    sleep(USER_RESCAN_SETTLE)


def _list_records(control: NetworkControl, context: PickerContext) -> list[NetworkRecord]:
    try:
        output = control.wifi_list(context.interface)
    except ToolError as e:
        raise ScanError(f"Scan failed on {context.interface}: {e}") from e
    return parse_nmcli_scan(output)


def _request_rescan(control: NetworkControl, context: PickerContext) -> None:
    try:
        control.wifi_rescan(context.interface)
    except ToolError as e:
        # nmcli refuses rescans issued too soon after the previous one
        logger.warning(f"Rescan request failed: {e}")
