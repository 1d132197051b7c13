"""Shared fixtures for wifipicker tests."""

import itertools

import pytest

from wifipicker.context import PickerContext
from wifipicker.exceptions import ToolError
from wifipicker.parsers.nmcli import escape_nmcli_value


def make_scan_line(
    ssid,
    bssid='00:11:22:33:44:55',
    freq='2437 MHz',
    signal='70',
    security='WPA2',
    in_use='',
):
    """Build one line of 'nmcli -t' scan output with nmcli escaping."""
    return ':'.join([
        escape_nmcli_value(ssid),
        escape_nmcli_value(bssid),
        freq,
        signal,
        security,
        in_use,
    ])


class FakeControl:
    """
    Stateful stand-in for NetworkControl.

    Activation outcomes are consumed in order from `outcomes` (True means
    success); when the list runs out every activation fails. Failed
    'device wifi connect' calls leave a profile behind when
    `leave_profile_on_failure` is set, the way older nmcli releases do.
    """

    def __init__(self, outcomes=None, scan_outputs=None, profiles=None,
                 leave_profile_on_failure=False):
        self.outcomes = list(outcomes or [])
        self.scan_outputs = list(scan_outputs or [])
        self.profiles = dict(profiles or {})  # uuid -> name
        self.leave_profile_on_failure = leave_profile_on_failure
        self.calls = []
        self.active = []
        self._uuids = (f"uuid-{n}" for n in itertools.count(1))

    def _activate(self, cmd):
        ok = self.outcomes.pop(0) if self.outcomes else False
        if not ok:
            raise ToolError(cmd, 4, 'Error: Connection activation failed.')

    def wifi_list(self, interface):
        self.calls.append(('wifi_list', interface))
        if not self.scan_outputs:
            return ''
        output = self.scan_outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output

    def wifi_rescan(self, interface):
        self.calls.append(('wifi_rescan', interface))

    def connection_uuids(self):
        return set(self.profiles)

    def wifi_connect(self, ssid, interface, wait, password=None, wep_key=False,
                     bssid=None, hidden=False, ask=False):
        self.calls.append(('wifi_connect', {
            'ssid': ssid, 'password': password, 'wep_key': wep_key,
            'bssid': bssid, 'hidden': hidden, 'ask': ask,
        }))
        try:
            self._activate(['nmcli', 'device', 'wifi', 'connect', ssid])
        except ToolError:
            if self.leave_profile_on_failure:
                self.profiles[next(self._uuids)] = ssid
            raise
        if ssid not in self.profiles.values():
            self.profiles[next(self._uuids)] = ssid
        self.active = [ssid]

    def connection_add(self, name, ssid, interface, key_mgmt=None, psk=None,
                       bssid=None, hidden=False):
        self.calls.append(('connection_add', {
            'name': name, 'ssid': ssid, 'key_mgmt': key_mgmt, 'psk': psk,
            'bssid': bssid, 'hidden': hidden,
        }))
        self.profiles[next(self._uuids)] = name

    def connection_up(self, name, wait, ask=False):
        self.calls.append(('connection_up', {'name': name, 'ask': ask}))
        self._activate(['nmcli', 'connection', 'up', 'id', name])
        self.active = [name]

    def connection_modify(self, name, settings):
        self.calls.append(('connection_modify', {'name': name, 'settings': settings}))
        for uuid, current in list(self.profiles.items()):
            if current == name and 'connection.id' in settings:
                self.profiles[uuid] = settings['connection.id']

    def connection_delete(self, identifier, by='uuid'):
        self.calls.append(('connection_delete', identifier))
        if by == 'uuid':
            self.profiles.pop(identifier, None)
        else:
            for uuid, name in list(self.profiles.items()):
                if name == identifier:
                    del self.profiles[uuid]

    def active_wifi_connections(self, interface):
        return list(self.active)

    def connection_down(self, name):
        self.calls.append(('connection_down', name))
        self.active = []

    def device_disconnect(self, interface):
        self.calls.append(('device_disconnect', interface))
        self.active = []

    def call_names(self):
        return [name for name, _ in self.calls]

    def calls_named(self, name):
        return [args for call, args in self.calls if call == name]


@pytest.fixture
def context():
    """Context for an unflagged driver without nmcli --ask."""
    return PickerContext(interface='wlan0', driver='iwlwifi', rescan_delay=2.0)


@pytest.fixture
def flagged_context():
    """Context for a driver on the problematic list."""
    return PickerContext(interface='wlan0', driver='brcmfmac', driver_flagged=True)


@pytest.fixture
def ask_context():
    """Context where nmcli prompts for secrets itself."""
    return PickerContext(interface='wlan0', driver='iwlwifi', ask_supported=True)


@pytest.fixture
def scan_line():
    """Builder for escaped nmcli scan lines."""
    return make_scan_line


@pytest.fixture
def make_control():
    """Factory for FakeControl instances."""
    return FakeControl
