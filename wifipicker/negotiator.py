"""
Connection negotiator.

Drives one network to Connected or ConnectFailed by evaluating an ordered
list of Attempt variants, stopping at the first success:

1. SSID-first attempts, letting the daemon pick the access point. Some
   drivers fail when nmcli forces a specific BSSID/channel.
2. The same attempts pinned to the record's BSSID, unless there is no BSSID
   or the driver is flagged as problematic.

Every attempt runs inside a scope that removes the connection profiles it
created if it does not succeed, so failed runs leave nothing behind.
"""

from __future__ import annotations

import contextlib
import uuid
from typing import Callable, Iterable, Iterator, Optional

from .constants import (
    ENHANCED_OPEN_TOKENS,
    OPEN_TOKENS,
    SAE_TOKENS,
    TRANSIENT_PROFILE_PREFIX,
    WEP_TOKENS,
    WPA_PERSONAL_TOKENS,
)
from .context import PickerContext
from .control import NetworkControl
from .exceptions import ToolError
from .logging import get_logger
from .models import (
    Attempt,
    AttemptKind,
    Connected,
    ConnectFailed,
    ConnectResult,
    NetworkRecord,
    SecurityProfile,
)

logger = get_logger('wifipicker.negotiator')

SecretPrompt = Callable[[str], str]

# Attempt kinds tried for each profile, in order. The trailing PSK step for
# SAE covers mixed-mode access points advertising both WPA2 and WPA3.
ATTEMPT_PLANS: dict[SecurityProfile, tuple[tuple[AttemptKind, SecurityProfile], ...]] = {
    SecurityProfile.OPEN: (
        (AttemptKind.OPEN, SecurityProfile.OPEN),
    ),
    SecurityProfile.ENHANCED_OPEN: (
        (AttemptKind.ENHANCED_OPEN, SecurityProfile.ENHANCED_OPEN),
    ),
    SecurityProfile.WEP: (
        (AttemptKind.SILENT, SecurityProfile.WEP),
        (AttemptKind.WEP, SecurityProfile.WEP),
    ),
    SecurityProfile.WPA_PERSONAL: (
        (AttemptKind.SILENT, SecurityProfile.WPA_PERSONAL),
        (AttemptKind.PSK, SecurityProfile.WPA_PERSONAL),
    ),
    SecurityProfile.SAE: (
        (AttemptKind.SILENT, SecurityProfile.SAE),
        (AttemptKind.SAE, SecurityProfile.SAE),
        (AttemptKind.PSK, SecurityProfile.WPA_PERSONAL),
    ),
}


class SecretUnavailable(Exception):
    """No credential was entered for an attempt that needs one."""


def classify_security(token: str) -> SecurityProfile:
    """
    Map a raw security column to a connection profile.

    Matching is case-sensitive and whole-word: the token is padded with
    spaces so 'SAE' cannot match inside an unrelated word. Combined tokens
    such as 'WPA2 WPA3' resolve to the strongest family present.
    """
    token = (token or '').strip()
    if not token:
        return SecurityProfile.OPEN

    padded = f' {token} '
    if any(t in padded for t in ENHANCED_OPEN_TOKENS):
        return SecurityProfile.ENHANCED_OPEN
    if any(t in padded for t in SAE_TOKENS):
        return SecurityProfile.SAE
    if any(t in padded for t in WPA_PERSONAL_TOKENS):
        return SecurityProfile.WPA_PERSONAL
    if any(t in padded for t in WEP_TOKENS):
        return SecurityProfile.WEP
    if any(t in padded for t in OPEN_TOKENS):
        return SecurityProfile.OPEN

    # Unknown vocabulary (802.1X and friends): try as a passphrase network
    return SecurityProfile.WPA_PERSONAL


def classify_hint(hint: str) -> SecurityProfile:
    """Classify a security type typed by the user (case-insensitive)."""
    hint = hint.strip()
    try:
        return SecurityProfile(hint.lower())
    except ValueError:
        return classify_security(hint.upper())


def guess_hidden_security(ssid: str, records: Iterable[NetworkRecord]) -> SecurityProfile:
    """
    Best-effort guess for a manually entered SSID.

    Reuses the security of a prior scan record with the same name. The
    match may belong to a different access point, so this is only a default.
    """
    for record in records:
        if record.ssid == ssid:
            return classify_security(record.security)
    return SecurityProfile.WPA_PERSONAL


def plan_attempts(
    profile: SecurityProfile,
    context: PickerContext,
    bssid: Optional[str] = None,
    hidden: bool = False,
) -> list[Attempt]:
    """Ordered attempts: SSID-first, then BSSID-pinned when allowed."""
    targets: list[Optional[str]] = [None]

    if bssid and not hidden:
        if context.driver_flagged:
            logger.info(
                f"Skipping BSSID-pinned fallback: driver {context.driver} is flagged"
            )
        else:
            targets.append(bssid)

    return [
        Attempt(kind=kind, profile=attempt_profile, bssid=target, hidden=hidden)
        for target in targets
        for kind, attempt_profile in ATTEMPT_PLANS[profile]
    ]


class _AttemptScope:
    """Bookkeeping for one attempt."""

    def __init__(self, ssid: str):
        self.ssid = ssid
        self.transient_name: Optional[str] = None

    def new_transient_name(self) -> str:
        self.transient_name = f"{TRANSIENT_PROFILE_PREFIX}{uuid.uuid4().hex[:8]}"
        return self.transient_name


class Negotiator:
    """
    Connects to networks through nmcli.

    Args:
        control: nmcli wrapper.
        context: Startup context.
        secret_prompt: Reads a credential with echo disabled.
    """

    def __init__(
        self,
        control: NetworkControl,
        context: PickerContext,
        secret_prompt: SecretPrompt,
    ):
        self.control = control
        self.context = context
        self.secret_prompt = secret_prompt
        self._secret: Optional[str] = None
        self._handlers: dict[AttemptKind, Callable[[str, Attempt, _AttemptScope], None]] = {
            AttemptKind.SILENT: self._connect_plain,
            AttemptKind.OPEN: self._connect_plain,
            AttemptKind.ENHANCED_OPEN: self._connect_enhanced_open,
            AttemptKind.WEP: self._connect_wep,
            AttemptKind.PSK: self._connect_psk,
            AttemptKind.SAE: self._connect_sae,
        }

    def connect(self, record: NetworkRecord) -> ConnectResult:
        """Connect to a scanned network."""
        profile = classify_security(record.security)
        attempts = plan_attempts(profile, self.context, bssid=record.bssid)
        return self.negotiate(record.ssid, attempts)

    def connect_hidden(
        self,
        ssid: str,
        records: Iterable[NetworkRecord] = (),
        hint: Optional[str] = None,
    ) -> ConnectResult:
        """Connect to a manually entered (hidden) SSID; never pins a BSSID."""
        if hint and hint.strip():
            profile = classify_hint(hint)
        else:
            profile = guess_hidden_security(ssid, records)
        logger.info(f"Hidden network {ssid!r} treated as {profile}")
        attempts = plan_attempts(profile, self.context, hidden=True)
        return self.negotiate(ssid, attempts)

    def negotiate(self, ssid: str, attempts: list[Attempt]) -> ConnectResult:
        """Evaluate attempts in order, stopping at the first success."""
        last_error = 'no connection strategy applies'
        try:
            for attempt in attempts:
                logger.info(f"Connecting to {ssid!r}: {attempt.describe()}")
                try:
                    self._run_attempt(ssid, attempt)
                except SecretUnavailable:
                    last_error = 'no credential entered'
                    logger.info(f"{attempt.describe()} skipped: no credential")
                    continue
                except ToolError as e:
                    last_error = str(e)
                    logger.info(f"{attempt.describe()} failed: {e}")
                    continue
                return Connected(ssid=ssid, profile=attempt.profile, attempt=attempt)
        finally:
            self._secret = None

        return ConnectFailed(reason=f"Could not connect to {ssid}: {last_error}")

    def _run_attempt(self, ssid: str, attempt: Attempt) -> None:
        handler = self._handlers[attempt.kind]
        with self._attempt_scope(ssid) as scope:
            handler(ssid, attempt, scope)

    # -------------------------------------------------------------------------
    # Profile bookkeeping
    # -------------------------------------------------------------------------

    @contextlib.contextmanager
    def _attempt_scope(self, ssid: str) -> Iterator[_AttemptScope]:
        before = self._snapshot_profiles()
        scope = _AttemptScope(ssid)
        succeeded = False
        try:
            yield scope
            succeeded = True
        finally:
            if succeeded:
                self._promote(scope)
            else:
                self._discard(scope, before)

    def _snapshot_profiles(self) -> Optional[set[str]]:
        try:
            return self.control.connection_uuids()
        except ToolError as e:
            logger.warning(f"Could not list connection profiles: {e}")
            return None

    def _discard(self, scope: _AttemptScope, before: Optional[set[str]]) -> None:
        """Delete every profile the failed attempt left behind."""
        if before is None:
            if scope.transient_name:
                self._delete(scope.transient_name, by='id')
            return

        after = self._snapshot_profiles()
        if after is None:
            if scope.transient_name:
                self._delete(scope.transient_name, by='id')
            return

        for leftover in sorted(after - before):
            self._delete(leftover, by='uuid')

    def _delete(self, identifier: str, by: str) -> None:
        try:
            self.control.connection_delete(identifier, by=by)
            logger.debug(f"Deleted leftover profile {by} {identifier}")
        except ToolError as e:
            logger.warning(f"Could not delete profile {identifier}: {e}")

    def _promote(self, scope: _AttemptScope) -> None:
        """Rename a successful transient profile after its SSID."""
        if not scope.transient_name:
            return
        try:
            self.control.connection_modify(scope.transient_name, {
                'connection.id': scope.ssid,
                'connection.autoconnect': 'yes',
            })
        except ToolError as e:
            logger.warning(f"Connected, but could not rename {scope.transient_name}: {e}")

    # -------------------------------------------------------------------------
    # Attempt handlers
    # -------------------------------------------------------------------------

    def _get_secret(self, ssid: str, label: str) -> str:
        if self._secret is None:
            try:
                secret = self.secret_prompt(f'{label} for "{ssid}": ')
            except EOFError as e:
                raise SecretUnavailable() from e
            if not secret:
                raise SecretUnavailable()
            self._secret = secret
        return self._secret

    def _delegate_prompt(self) -> bool:
        return self.context.ask_supported and self._secret is None

    def _connect_plain(self, ssid: str, attempt: Attempt, scope: _AttemptScope) -> None:
        self.control.wifi_connect(
            ssid,
            self.context.interface,
            self.context.connect_timeout,
            bssid=attempt.bssid,
            hidden=attempt.hidden,
        )

    def _connect_enhanced_open(self, ssid: str, attempt: Attempt, scope: _AttemptScope) -> None:
        name = scope.new_transient_name()
        self.control.connection_add(
            name, ssid, self.context.interface,
            key_mgmt='owe', bssid=attempt.bssid, hidden=attempt.hidden,
        )
        self.control.connection_up(name, self.context.connect_timeout)

    def _connect_wep(self, ssid: str, attempt: Attempt, scope: _AttemptScope) -> None:
        key = self._get_secret(ssid, 'WEP key')
        self.control.wifi_connect(
            ssid,
            self.context.interface,
            self.context.connect_timeout,
            password=key,
            wep_key=True,
            bssid=attempt.bssid,
            hidden=attempt.hidden,
        )

    def _connect_psk(self, ssid: str, attempt: Attempt, scope: _AttemptScope) -> None:
        if self._delegate_prompt():
            self.control.wifi_connect(
                ssid,
                self.context.interface,
                self.context.connect_timeout,
                bssid=attempt.bssid,
                hidden=attempt.hidden,
                ask=True,
            )
            return

        password = self._get_secret(ssid, 'Wi-Fi password')
        self.control.wifi_connect(
            ssid,
            self.context.interface,
            self.context.connect_timeout,
            password=password,
            bssid=attempt.bssid,
            hidden=attempt.hidden,
        )

    def _connect_sae(self, ssid: str, attempt: Attempt, scope: _AttemptScope) -> None:
        ask = self._delegate_prompt()
        psk = None if ask else self._get_secret(ssid, 'Wi-Fi password')
        name = scope.new_transient_name()
        self.control.connection_add(
            name, ssid, self.context.interface,
            key_mgmt='sae', psk=psk, bssid=attempt.bssid, hidden=attempt.hidden,
        )
        self.control.connection_up(name, self.context.connect_timeout, ask=ask)


def disconnect(control: NetworkControl, context: PickerContext) -> Optional[str]:
    """
    Bring down the active wifi connection on the context's interface.

    Returns:
        Name of the connection brought down, None if nothing was active.

    Raises:
        ToolError: Both 'connection down' and 'device disconnect' failed.
    """
    active = control.active_wifi_connections(context.interface)
    if not active:
        return None

    name = active[0]
    logger.info(f"Disconnecting {name!r} on {context.interface}")
    try:
        control.connection_down(name)
    except ToolError as e:
        logger.warning(f"connection down failed ({e}), disconnecting device")
        control.device_disconnect(context.interface)
    return name
