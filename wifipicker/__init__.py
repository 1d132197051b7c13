"""
wifipicker: pick and join Wi-Fi networks from a terminal.

Thin front end over NetworkManager's nmcli:
- Scan normalizer: nmcli terse listing -> sorted NetworkRecord list
- Connection negotiator: ordered SSID-first / BSSID-pinned attempts with
  cleanup of any profile a failed attempt created
"""

from .models import (
    Attempt,
    AttemptKind,
    Connected,
    ConnectFailed,
    ConnectResult,
    NetworkRecord,
    SecurityProfile,
)

from .context import PickerContext

from .control import NetworkControl

from .exceptions import (
    InputError,
    ScanError,
    StartupError,
    ToolError,
    ToolUnavailableError,
    WifiPickerError,
)

from .constants import (
    # Bands
    BAND_2_4_GHZ,
    BAND_5_GHZ,
    BAND_6_GHZ,
    BAND_UNKNOWN,
    # Helper functions
    get_band_from_frequency,
)

from .scanner import (
    rescan,
    scan,
    sort_records,
)

from .negotiator import (
    Negotiator,
    classify_security,
    disconnect,
    guess_hidden_security,
    plan_attempts,
)

from .capability_check import check_capabilities

__version__ = '0.1.0'

__all__ = [
    # Scanner
    'scan',
    'rescan',
    'sort_records',

    # Negotiator
    'Negotiator',
    'classify_security',
    'disconnect',
    'guess_hidden_security',
    'plan_attempts',

    # Startup
    'check_capabilities',
    'PickerContext',
    'NetworkControl',

    # Models
    'Attempt',
    'AttemptKind',
    'Connected',
    'ConnectFailed',
    'ConnectResult',
    'NetworkRecord',
    'SecurityProfile',

    # Errors
    'InputError',
    'ScanError',
    'StartupError',
    'ToolError',
    'ToolUnavailableError',
    'WifiPickerError',

    # Constants - Bands
    'BAND_2_4_GHZ',
    'BAND_5_GHZ',
    'BAND_6_GHZ',
    'BAND_UNKNOWN',

    # Helper functions
    'get_band_from_frequency',
]
