"""
Constants for the wifipicker terminal utility.
"""

from __future__ import annotations

# =============================================================================
# CONTROL TOOL
# =============================================================================

# NetworkManager command-line client
NMCLI_BINARY = 'nmcli'

# Terse field delimiter and escape character used by `nmcli -t`
NMCLI_DELIMITER = ':'
NMCLI_ESCAPE = '\\'

# Fields requested for a scan listing. Order matters: the parser anchors on
# the fixed-width trailing fields and treats the remainder as the SSID.
SCAN_FIELDS = 'SSID,BSSID,FREQ,SIGNAL,SECURITY,IN-USE'

# Number of raw segments in a terse BSSID (six octets)
BSSID_SEGMENTS = 6

# Marker printed in the IN-USE column for the active network
IN_USE_MARKER = '*'

# Security column value nmcli prints for open networks
SECURITY_NONE_TOKEN = '--'

# Prefix for connection profiles created for a single attempt
TRANSIENT_PROFILE_PREFIX = 'wifipicker-'

# Oldest nmcli release with a usable --ask flag
NMCLI_ASK_MIN_VERSION = (1, 0)

# =============================================================================
# TIMEOUTS (seconds)
# =============================================================================

# Wait passed to nmcli -w for activation requests
DEFAULT_CONNECT_TIMEOUT = 20

# Upper bound for a single non-activation nmcli call
DEFAULT_COMMAND_TIMEOUT = 15.0

# Slack added on top of -w so subprocess timeout fires after nmcli gives up
CONNECT_TIMEOUT_SLACK = 5.0

# Extra time allowed for a user typing into an interactive nmcli --ask prompt
ASK_INPUT_ALLOWANCE = 120.0

# Delay before the single automatic re-list after an empty scan
DEFAULT_RESCAN_DELAY = 2.0

# Settle delay after a user-requested rescan
USER_RESCAN_SETTLE = 1.0

# =============================================================================
# BANDS
# =============================================================================

BAND_2_4_GHZ = '2.4'
BAND_5_GHZ = '5'
BAND_6_GHZ = '6'
BAND_UNKNOWN = 'unknown'

# Inclusive frequency ranges (MHz)
BAND_RANGES = (
    (2400, 2500, BAND_2_4_GHZ),
    (4900, 5895, BAND_5_GHZ),
    (5925, 7125, BAND_6_GHZ),
)

# =============================================================================
# SIGNAL
# =============================================================================

SIGNAL_MIN = 0
SIGNAL_MAX = 100

# =============================================================================
# SECURITY TOKEN MATCHING
# =============================================================================

# Whole-word patterns matched against the space-padded raw security column.
# Checked in order; first hit wins.
ENHANCED_OPEN_TOKENS = (' OWE ',)
SAE_TOKENS = (' SAE ', ' WPA3 ')
WPA_PERSONAL_TOKENS = (' WPA ', ' WPA1 ', ' WPA2 ', ' WPA-PSK ', ' PSK ')
WEP_TOKENS = (' WEP ',)
OPEN_TOKENS = (' -- ', ' NONE ', ' OPEN ')

# =============================================================================
# DRIVERS
# =============================================================================

# Drivers known to fail activations pinned to a specific BSSID/channel
PROBLEMATIC_DRIVERS = frozenset({
    'brcmfmac',
    'rtl8xxxu',
    'r8188eu',
    'rtl88x2bu',
})

# sysfs location of an interface's driver symlink
SYSFS_DRIVER_PATH = '/sys/class/net/{interface}/device/driver'

# =============================================================================
# DISPLAY
# =============================================================================

# SSIDs longer than this are truncated in the menu (kept whole internally)
SSID_DISPLAY_WIDTH = 32

MENU_COMMANDS = '[C] Connect hidden   [D] Disconnect current   [R] Rescan   [Q] Quit'


def get_band_from_frequency(frequency_mhz) -> str:
    """Get band name from a frequency in MHz."""
    if not isinstance(frequency_mhz, int) or isinstance(frequency_mhz, bool):
        return BAND_UNKNOWN
    for low, high, band in BAND_RANGES:
        if low <= frequency_mhz <= high:
            return band
    return BAND_UNKNOWN
