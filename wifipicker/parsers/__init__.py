"""
Scan output parsers.

Each parser converts tool-specific output into NetworkRecord objects.
"""

from .nmcli import (
    escape_nmcli_value,
    normalize_bssid,
    parse_nmcli_line,
    parse_nmcli_scan,
    split_nmcli_fields,
    unescape_nmcli_value,
)

__all__ = [
    'escape_nmcli_value',
    'normalize_bssid',
    'parse_nmcli_line',
    'parse_nmcli_scan',
    'split_nmcli_fields',
    'unescape_nmcli_value',
]
