"""Unit tests for startup probing."""

from unittest.mock import MagicMock, patch

import pytest

from wifipicker.capability_check import (
    check_capabilities,
    probe_ask_support,
    probe_driver,
    resolve_interface,
)
from wifipicker.exceptions import StartupError, ToolError, ToolUnavailableError


@pytest.fixture
def control():
    """Mock NetworkControl with one wifi device."""
    control = MagicMock()
    control.binary = 'nmcli'
    control.is_available.return_value = True
    control.wifi_devices.return_value = ['wlan0']
    control.device_driver.return_value = 'iwlwifi'
    control.version.return_value = (1, 42, 4)
    return control


@pytest.fixture
def no_sysfs():
    with patch('wifipicker.capability_check.os.readlink', side_effect=OSError):
        yield


class TestResolveInterface:
    """Tests for interface selection."""

    def test_first_wifi_device(self, control):
        control.wifi_devices.return_value = ['wlan1', 'wlan0']
        assert resolve_interface(control) == 'wlan1'

    def test_no_wifi_device(self, control):
        control.wifi_devices.return_value = []
        with pytest.raises(StartupError, match='No Wi-Fi interface'):
            resolve_interface(control)

    def test_explicit_interface_must_be_wifi(self, control):
        with pytest.raises(StartupError):
            resolve_interface(control, 'eth0')

    def test_explicit_interface(self, control):
        assert resolve_interface(control, 'wlan0') == 'wlan0'

    def test_listing_failure_is_fatal(self, control):
        control.wifi_devices.side_effect = ToolError(['nmcli'], 8, 'NetworkManager is not running')
        with pytest.raises(StartupError, match='not running'):
            resolve_interface(control)

    def test_binary_vanished(self, control):
        control.wifi_devices.side_effect = ToolUnavailableError(['nmcli'])
        with pytest.raises(StartupError, match='Missing nmcli'):
            resolve_interface(control)


class TestProbeDriver:
    """Tests for driver identification."""

    def test_sysfs_link(self, control):
        with patch('wifipicker.capability_check.os.readlink',
                   return_value='../../../../bus/sdio/drivers/brcmfmac'):
            assert probe_driver(control, 'wlan0') == 'brcmfmac'
        control.device_driver.assert_not_called()

    def test_falls_back_to_nmcli(self, control, no_sysfs):
        assert probe_driver(control, 'wlan0') == 'iwlwifi'

    def test_unknown_driver(self, control, no_sysfs):
        control.device_driver.side_effect = ToolError(['nmcli'], 10)
        assert probe_driver(control, 'wlan0') is None


class TestProbeAskSupport:
    """Tests for nmcli --ask detection."""

    def test_terminal_and_new_nmcli(self, control):
        with patch('wifipicker.capability_check.sys.stdin') as stdin:
            stdin.isatty.return_value = True
            assert probe_ask_support(control) is True

    def test_piped_stdin(self, control):
        with patch('wifipicker.capability_check.sys.stdin') as stdin:
            stdin.isatty.return_value = False
            assert probe_ask_support(control) is False

    def test_old_nmcli(self, control):
        control.version.return_value = (0, 9, 10)
        with patch('wifipicker.capability_check.sys.stdin') as stdin:
            stdin.isatty.return_value = True
            assert probe_ask_support(control) is False


class TestCheckCapabilities:
    """Tests for check_capabilities()."""

    def test_missing_nmcli(self, control):
        control.is_available.return_value = False
        with pytest.raises(StartupError, match='Missing nmcli'):
            check_capabilities(control)

    def test_builds_context(self, control, no_sysfs):
        context = check_capabilities(control, connect_timeout=30, allow_ask=False)

        assert context.interface == 'wlan0'
        assert context.driver == 'iwlwifi'
        assert context.driver_flagged is False
        assert context.ask_supported is False
        assert context.connect_timeout == 30
        control.radio_wifi_on.assert_called_once()

    def test_builtin_problem_driver_flagged(self, control, no_sysfs):
        control.device_driver.return_value = 'brcmfmac'
        assert check_capabilities(control, allow_ask=False).driver_flagged is True

    def test_extra_problem_driver_flagged(self, control, no_sysfs):
        context = check_capabilities(control, problem_drivers=['iwlwifi'], allow_ask=False)
        assert context.driver_flagged is True

    def test_radio_failure_not_fatal(self, control, no_sysfs):
        control.radio_wifi_on.side_effect = ToolError(['nmcli'], 1, 'Not authorized')
        assert check_capabilities(control, allow_ask=False).interface == 'wlan0'
