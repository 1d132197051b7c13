"""Unit tests for nmcli terse scan parsing."""

import pytest

from wifipicker.constants import get_band_from_frequency
from wifipicker.parsers.nmcli import (
    escape_nmcli_value,
    normalize_bssid,
    parse_nmcli_line,
    parse_nmcli_scan,
    split_nmcli_fields,
    unescape_nmcli_value,
)


class TestEscaping:
    """Tests for nmcli escape handling."""

    @pytest.mark.parametrize('ssid', [
        'Home',
        'Cafe:Guest',
        '::',
        'back\\slash',
        'trailing\\',
        'a\\:b',
        '',
        'Ünïcødé 📶',
    ])
    def test_unescape_reverses_escape(self, ssid):
        """Escaping then unescaping returns the original text."""
        assert unescape_nmcli_value(escape_nmcli_value(ssid)) == ssid

    def test_escape_matches_nmcli(self):
        """Delimiters and backslashes are escaped with a backslash."""
        assert escape_nmcli_value('a:b\\c') == 'a\\:b\\\\c'

    def test_split_fixed_columns(self):
        """Escaped delimiters stay inside their field."""
        assert split_nmcli_fields('My\\:Conn:802-11-wireless:wlan0') == [
            'My:Conn', '802-11-wireless', 'wlan0',
        ]


class TestParseLine:
    """Tests for single-line parsing."""

    def test_basic_line(self, scan_line):
        """All fields are extracted from a plain line."""
        record = parse_nmcli_line(scan_line(
            'Home', bssid='aa:bb:cc:dd:ee:ff', freq='5180 MHz',
            signal='64', security='WPA2', in_use='*',
        ))

        assert record.ssid == 'Home'
        assert record.bssid == 'AA:BB:CC:DD:EE:FF'
        assert record.frequency_mhz == 5180
        assert record.band == '5'
        assert record.signal == 64
        assert record.security == 'WPA2'
        assert record.in_use is True

    def test_ssid_with_escaped_delimiter(self, scan_line):
        """SSIDs containing ':' are rebuilt from the left-over segments."""
        record = parse_nmcli_line(scan_line('Cafe:Guest:5G'))
        assert record.ssid == 'Cafe:Guest:5G'
        assert record.bssid == '00:11:22:33:44:55'

    def test_raw_nmcli_line(self):
        """A line copied from nmcli output parses."""
        line = 'Cafe\\:Guest:00\\:11\\:22\\:33\\:44\\:66:5180 MHz:60:--:'
        record = parse_nmcli_line(line)

        assert record.ssid == 'Cafe:Guest'
        assert record.bssid == '00:11:22:33:44:66'
        assert record.security == '--'
        assert record.in_use is False

    def test_unescaped_ssid_delimiter(self):
        """Right-anchored parsing copes with a tool that did not escape the SSID."""
        line = 'a:b:00:11:22:33:44:55:2412:50:WPA2:'
        record = parse_nmcli_line(line)
        assert record.ssid == 'a:b'
        assert record.bssid == '00:11:22:33:44:55'

    def test_combined_security_token(self, scan_line):
        """Multi-word security tokens are kept verbatim."""
        record = parse_nmcli_line(scan_line('Mixed', security='WPA2 WPA3'))
        assert record.security == 'WPA2 WPA3'

    def test_empty_security_becomes_open_marker(self, scan_line):
        """An empty security column is normalized to '--'."""
        record = parse_nmcli_line(scan_line('Open', security=''))
        assert record.security == '--'

    def test_empty_ssid_discarded(self, scan_line):
        """Hidden broadcasts without a name are not returned."""
        assert parse_nmcli_line(scan_line('')) is None

    def test_short_line_skipped(self):
        """Lines without the full trailing structure are ignored."""
        assert parse_nmcli_line('Home:2437:70:WPA2') is None

    def test_missing_bssid(self, scan_line):
        """A malformed BSSID is reported as absent."""
        record = parse_nmcli_line(scan_line('Home', bssid='--:::::'))
        assert record.bssid is None

    def test_empty_bssid_field(self):
        """An empty BSSID field keeps the network with no BSSID."""
        record = parse_nmcli_line('Home::2437 MHz:70:WPA2:')
        assert record.ssid == 'Home'
        assert record.bssid is None
        assert record.frequency_mhz == 2437
        assert record.signal == 70
        assert record.security == 'WPA2'

    def test_empty_bssid_field_with_escaped_ssid(self, scan_line):
        record = parse_nmcli_line(scan_line('Cafe:Guest', bssid=''))
        assert record.ssid == 'Cafe:Guest'
        assert record.bssid is None


class TestNumericFields:
    """Tests for frequency and signal sanitizing."""

    def test_frequency_unit_stripped(self, scan_line):
        record = parse_nmcli_line(scan_line('Home', freq='2412 MHz'))
        assert record.frequency_mhz == 2412

    def test_missing_frequency(self, scan_line):
        record = parse_nmcli_line(scan_line('Home', freq=''))
        assert record.frequency_mhz is None
        assert record.band == 'unknown'

    def test_non_numeric_signal_is_zero(self, scan_line):
        record = parse_nmcli_line(scan_line('Home', signal='n/a'))
        assert record.signal == 0

    def test_signal_clamped(self, scan_line):
        record = parse_nmcli_line(scan_line('Home', signal='250'))
        assert record.signal == 100


class TestParseScan:
    """Tests for whole-listing parsing."""

    def test_blank_and_nameless_lines_dropped(self, scan_line):
        """Only named networks survive."""
        output = '\n'.join([
            scan_line('Home'),
            '',
            scan_line(''),
            scan_line('Cafe'),
            'garbage',
        ])
        records = parse_nmcli_scan(output)
        assert [r.ssid for r in records] == ['Home', 'Cafe']

    def test_empty_output(self):
        assert parse_nmcli_scan('') == []


class TestBand:
    """Tests for band derivation."""

    @pytest.mark.parametrize('frequency,band', [
        (2412, '2.4'),
        (5180, '5'),
        (6135, '6'),
        (2400, '2.4'),
        (2500, '2.4'),
        (4900, '5'),
        (5895, '5'),
        (5925, '6'),
        (7125, '6'),
        (5900, 'unknown'),
        (0, 'unknown'),
        (None, 'unknown'),
        ('2412', 'unknown'),
    ])
    def test_band_from_frequency(self, frequency, band):
        assert get_band_from_frequency(frequency) == band


class TestNormalizeBssid:
    """Tests for BSSID normalization."""

    def test_escaped_bssid(self):
        assert normalize_bssid('aa\\:bb\\:cc\\:dd\\:ee\\:ff') == 'AA:BB:CC:DD:EE:FF'

    def test_empty_bssid(self):
        assert normalize_bssid('') is None
