r"""
Parser for NetworkManager nmcli terse output.

Example output from 'nmcli -t -f SSID,BSSID,FREQ,SIGNAL,SECURITY,IN-USE device wifi list':
MyWiFi:00\:11\:22\:33\:44\:55:2437 MHz:75:WPA2:*
Cafe\:Guest:00\:11\:22\:33\:44\:66:5180 MHz:60:--:
:00\:11\:22\:33\:44\:77:2462 MHz:40:WPA2:

The SSID may itself contain escaped delimiters, so lines are split on every
raw ':' and parsed from the right: the trailing structure is fixed, the SSID
is whatever is left over.
"""

from __future__ import annotations

import re
from typing import Optional

from ..constants import (
    BSSID_SEGMENTS,
    IN_USE_MARKER,
    NMCLI_DELIMITER,
    NMCLI_ESCAPE,
    SECURITY_NONE_TOKEN,
    SIGNAL_MAX,
    SIGNAL_MIN,
)
from ..logging import get_logger
from ..models import NetworkRecord

logger = get_logger('wifipicker.parsers.nmcli')

# in-use, security, signal, frequency
_TRAILING_SCALAR_FIELDS = 4

# SSID needs at least one segment, even if empty
_MIN_SEGMENTS = 1 + BSSID_SEGMENTS + _TRAILING_SCALAR_FIELDS

# An absent BSSID is printed as a single empty field
_MIN_SEGMENTS_NO_BSSID = 2 + _TRAILING_SCALAR_FIELDS

_NON_DIGIT = re.compile(r'\D')
_NON_BSSID = re.compile(r'[^0-9A-Fa-f:]')
_BSSID_PATTERN = re.compile(r'^[0-9A-F]{2}(?::[0-9A-F]{2}){5}$')


def escape_nmcli_value(value: str) -> str:
    """Escape a value the way nmcli does in terse mode."""
    return (
        value
        .replace(NMCLI_ESCAPE, NMCLI_ESCAPE * 2)
        .replace(NMCLI_DELIMITER, NMCLI_ESCAPE + NMCLI_DELIMITER)
    )


def unescape_nmcli_value(value: str) -> str:
    """Undo nmcli terse escaping (backslash escapes the next character)."""
    out = []
    i = 0

    while i < len(value):
        if value[i] == NMCLI_ESCAPE and i + 1 < len(value):
            out.append(value[i + 1])
            i += 2
        else:
            out.append(value[i])
            i += 1

    return ''.join(out)


def split_nmcli_fields(line: str) -> list[str]:
    """Split a fixed-column nmcli terse line handling escaped delimiters."""
    parts = []
    current = []
    i = 0

    while i < len(line):
        if line[i] == NMCLI_ESCAPE and i + 1 < len(line):
            # Escaped character - add literally
            current.append(line[i + 1])
            i += 2
        elif line[i] == NMCLI_DELIMITER:
            # Field delimiter
            parts.append(''.join(current))
            current = []
            i += 1
        else:
            current.append(line[i])
            i += 1

    # Add last field
    parts.append(''.join(current))

    return parts


def parse_nmcli_scan(output: str) -> list[NetworkRecord]:
    """
    Parse nmcli terse scan output.

    Args:
        output: Raw output from nmcli with -t flag and SCAN_FIELDS.

    Returns:
        NetworkRecord list in input order. Lines that do not match the
        trailing structure and lines with an empty SSID are dropped.
    """
    records = []

    for line in output.splitlines():
        if not line.strip():
            continue

        record = parse_nmcli_line(line)
        if record:
            records.append(record)

    return records


def parse_nmcli_line(line: str) -> Optional[NetworkRecord]:
    """Parse a single line of nmcli terse scan output."""
    parts = line.split(NMCLI_DELIMITER)

    if len(parts) >= _MIN_SEGMENTS:
        bssid_width = BSSID_SEGMENTS
    elif len(parts) >= _MIN_SEGMENTS_NO_BSSID and parts[-_TRAILING_SCALAR_FIELDS - 1] == '':
        bssid_width = 1
    else:
        logger.debug(f"Skipping short nmcli line ({len(parts)} segments): {line!r}")
        return None

    in_use_str = parts.pop()
    security_str = parts.pop()
    signal_str = parts.pop()
    freq_str = parts.pop()
    bssid_parts = parts[-bssid_width:]
    ssid_parts = parts[:-bssid_width]

    ssid = unescape_nmcli_value(NMCLI_DELIMITER.join(ssid_parts))
    if not ssid:
        return None

    return NetworkRecord(
        ssid=ssid,
        bssid=normalize_bssid(NMCLI_DELIMITER.join(bssid_parts)),
        frequency_mhz=parse_number(freq_str),
        signal=parse_signal(signal_str),
        security=unescape_nmcli_value(security_str).strip() or SECURITY_NONE_TOKEN,
        in_use=in_use_str.strip() == IN_USE_MARKER,
    )


def parse_number(value: str) -> Optional[int]:
    """Strip every non-digit character and read what is left (e.g. '2437 MHz')."""
    digits = _NON_DIGIT.sub('', value or '')
    return int(digits) if digits else None


def parse_signal(value: str) -> int:
    """Signal percentage, 0 when missing, clamped to 0..100."""
    signal = parse_number(value)
    if signal is None:
        return SIGNAL_MIN
    return max(SIGNAL_MIN, min(SIGNAL_MAX, signal))


def normalize_bssid(value: str) -> Optional[str]:
    """Reduce a raw BSSID to upper-case hex and ':'; None if not a MAC."""
    bssid = _NON_BSSID.sub('', value or '').upper()
    if not _BSSID_PATTERN.match(bssid):
        return None
    return bssid
