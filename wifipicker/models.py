"""
Data models for scan results and connection attempts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .constants import get_band_from_frequency


class SecurityProfile(str, Enum):
    """Connection strategy family derived from a security token."""
    OPEN = 'open'
    WEP = 'wep'
    WPA_PERSONAL = 'wpa-personal'
    SAE = 'sae'                      # WPA3-Personal
    ENHANCED_OPEN = 'enhanced-open'  # OWE

    def __str__(self) -> str:
        return self.value


class AttemptKind(str, Enum):
    """How a single connection attempt talks to the daemon."""
    SILENT = 'silent'                # reuse whatever the daemon has stored
    OPEN = 'open'
    ENHANCED_OPEN = 'enhanced-open'
    WEP = 'wep'
    PSK = 'psk'
    SAE = 'sae'

    def __str__(self) -> str:
        return self.value


@dataclass
class NetworkRecord:
    """One row of a scan listing."""
    ssid: str
    bssid: Optional[str] = None
    frequency_mhz: Optional[int] = None
    signal: int = 0
    security: str = '--'
    in_use: bool = False

    @property
    def band(self) -> str:
        return get_band_from_frequency(self.frequency_mhz)

    @property
    def sort_key(self) -> tuple:
        return (-self.signal, self.ssid, self.bssid or '')

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'ssid': self.ssid,
            'bssid': self.bssid,
            'frequency_mhz': self.frequency_mhz,
            'band': self.band,
            'signal': self.signal,
            'security': self.security,
            'in_use': self.in_use,
        }


@dataclass(frozen=True)
class Attempt:
    """A single step of a connection negotiation."""
    kind: AttemptKind
    profile: SecurityProfile
    bssid: Optional[str] = None
    hidden: bool = False

    @property
    def pinned(self) -> bool:
        return self.bssid is not None

    def describe(self) -> str:
        target = f"BSSID {self.bssid}" if self.bssid else 'SSID'
        return f"{self.kind} via {target}"


@dataclass(frozen=True)
class Connected:
    """Negotiation ended with an active connection."""
    ssid: str
    profile: SecurityProfile
    attempt: Attempt


@dataclass(frozen=True)
class ConnectFailed:
    """Every applicable attempt failed."""
    reason: str


ConnectResult = Union[Connected, ConnectFailed]
