"""
Tests for DeviceManager.
"""

import pytest

from ec600npy.types import SIMState
from ec600npy.exceptions import ParseError


def test_get_imei(modem, mock_transport):
    """Test getting IMEI."""
    mock_transport.add_reply("AT+CGSN", ["861536030196001", "OK"])

    imei = modem.device.get_imei()

    assert imei == "861536030196001"
    assert len(imei) == 15


def test_get_imei_with_echo(modem, mock_transport):
    """Test IMEI parsing when the module echoes the command."""
    mock_transport.add_reply("AT+CGSN", ["AT+CGSN", "861536030196001", "OK"])

    assert modem.device.get_imei() == "861536030196001"


def test_get_imei_missing(modem, mock_transport):
    """Test a response without an IMEI raises ParseError."""
    mock_transport.add_reply("AT+CGSN", ["ERROR"])

    with pytest.raises(ParseError):
        modem.device.get_imei()


def test_get_sim_state_ready(modem, mock_transport):
    """Test getting SIM state when ready."""
    mock_transport.add_reply("AT+CPIN?", ["+CPIN: READY", "OK"])

    assert modem.device.get_sim_state() == SIMState.READY


def test_get_sim_state_pin_required(modem, mock_transport):
    """Test SIM PIN is reported, not raised."""
    mock_transport.add_reply("AT+CPIN?", ["+CPIN: SIM PIN", "OK"])

    assert modem.device.get_sim_state() == SIMState.SIM_PIN


def test_get_sim_state_no_sim(modem, mock_transport):
    """Test an error response maps to UNKNOWN."""
    mock_transport.add_reply("AT+CPIN?", ["+CME ERROR: 10"])

    assert modem.device.get_sim_state() == SIMState.UNKNOWN
