"""
Tests for EC600NModem: connection lifecycle, calls and network monitoring.
"""

import queue
import time

import pytest

from ec600npy import EC600NModem, MockTransport, ModemConfig
from ec600npy.types import CallState, CallStatus, RegistrationState
from ec600npy.exceptions import (
    TransportError,
    DeviceDisconnectedError,
    ModemNotConnectedError,
    ValidationError,
    DialError,
    HangupError,
    NotifyError,
)
from ec600npy.notify import NotificationSink


STATUS_COMMANDS = ["AT+CSQ", "AT+CREG?", "AT+CPIN?", "AT+COPS?", "AT+CGSN"]


class FailingSink(NotificationSink):
    def __init__(self):
        self.attempts = 0

    def send(self, text):
        self.attempts += 1
        raise NotifyError("webhook unreachable")


def test_requires_port_or_transport():
    """Test construction without a port or transport fails."""
    with pytest.raises(ValueError):
        EC600NModem()


def test_connect(mock_transport, fast_config):
    """Test connect() checks the module with AT."""
    mock_transport.add_reply("AT", ["OK"])
    modem = EC600NModem(transport=mock_transport, config=fast_config)

    assert modem.is_connected() is False
    modem.connect()

    assert modem.is_connected() is True
    assert mock_transport.commands == ["AT"]
    assert modem.connection.connected is True
    modem.close()
    assert modem.is_connected() is False


def test_connect_open_failure_is_fatal(fast_config):
    """Test an open failure leaves the modem disconnected and unusable."""
    transport = MockTransport(auto_open=False)
    transport.fail_open = True
    modem = EC600NModem(transport=transport, config=fast_config)

    with pytest.raises(TransportError):
        modem.connect()

    assert modem.is_connected() is False
    with pytest.raises(ModemNotConnectedError):
        modem.make_call("10086")
    with pytest.raises(ModemNotConnectedError):
        modem.check_network_status()
    assert transport.written == []


def test_connect_silent_module(mock_transport, fast_config):
    """Test a module that does not answer AT fails the connection."""
    modem = EC600NModem(transport=mock_transport, config=fast_config)

    with pytest.raises(TransportError, match="did not answer"):
        modem.connect()

    assert modem.is_connected() is False
    assert mock_transport.is_open() is False


def test_context_manager(mock_transport, fast_config):
    """Test the context manager connects and closes."""
    mock_transport.add_reply("AT", ["OK"])

    with EC600NModem(transport=mock_transport, config=fast_config) as modem:
        assert modem.is_connected() is True

    assert modem.is_connected() is False
    assert mock_transport.is_open() is False


def test_port_and_baudrate_override_config():
    """Test explicit port/baudrate arguments win over the config."""
    config = ModemConfig(port="/dev/ttyUSB0")
    modem = EC600NModem(port="/dev/ttyUSB3", baudrate=9600, config=config)

    # The caller's config is left untouched
    assert config.port == "/dev/ttyUSB0"
    assert config.baudrate == 115200
    assert modem.config is not config

    assert modem.connection.port == "/dev/ttyUSB3"
    assert modem.connection.baudrate == 9600
    assert modem.connection.connected is False


@pytest.mark.timeout(10)
def test_make_call_and_hangup(modem, mock_transport):
    """Test dialing starts a monitor and hangup stops it."""
    mock_transport.add_reply("ATD13800138000;", ["OK"])
    mock_transport.add_reply("ATH", ["OK"])

    session = modem.make_call(" 138-0013-8000 ")

    assert session.number == "13800138000"
    assert 0 <= session.elapsed < 2.0
    assert modem.session is session
    assert modem.calls.state is CallState.DIALING

    mock_transport.add_response(["CONNECT"])
    assert session.monitor.get(timeout=2.0) is CallStatus.CONNECTED
    assert modem.calls.state is CallState.CONNECTED

    modem.hangup_call()

    assert mock_transport.commands[-1] == "ATH"
    assert session.monitor.closed is True
    assert modem.session is None
    assert modem.calls.state is CallState.IDLE


@pytest.mark.timeout(10)
def test_terminal_status_ends_session(modem, mock_transport):
    """Test a terminal status clears the session without a hangup."""
    mock_transport.add_reply("ATD10086;", ["OK"])
    session = modem.make_call("10086")

    mock_transport.add_response(["RING", "BUSY"])

    assert list(session.monitor) == [CallStatus.BUSY]
    assert modem.session is None
    assert modem.calls.state is CallState.IDLE
    assert modem.calls.last_status is CallStatus.BUSY
    assert "ATH" not in mock_transport.commands


def test_make_call_empty_number(modem, mock_transport):
    """Test an empty number is refused before anything is written."""
    written = list(mock_transport.written)

    with pytest.raises(ValidationError):
        modem.make_call("   ")

    assert mock_transport.written == written
    assert modem.session is None


def test_make_call_rejected(modem, mock_transport):
    """Test a rejected dial starts no monitor."""
    mock_transport.add_reply("ATD10086;", ["ERROR"])

    with pytest.raises(DialError):
        modem.make_call("10086")

    assert modem.session is None


def test_hangup_without_call(modem, mock_transport):
    """Test hangup works when no session is tracked."""
    mock_transport.add_reply("ATH", ["OK"])

    modem.hangup_call()

    assert mock_transport.commands[-1] == "ATH"


def test_hangup_failure(modem, mock_transport):
    """Test a failed hangup raises HangupError."""
    mock_transport.add_reply("ATH", ["ERROR"])

    with pytest.raises(HangupError):
        modem.hangup_call()


@pytest.mark.timeout(10)
def test_call_hangs_up_after_duration(modem, mock_transport):
    """Test call() keeps the line up for the duration, then hangs up."""
    mock_transport.add_reply("ATD10086;", ["OK", "CONNECT"])
    mock_transport.add_reply("ATH", ["OK"])

    started = time.monotonic()
    last = modem.call("10086", duration=0.5)

    assert time.monotonic() - started >= 0.5

    assert last is CallStatus.CONNECTED
    assert mock_transport.commands[-2:] == ["ATD10086;", "ATH"]
    assert modem.session is None


@pytest.mark.timeout(10)
def test_call_returns_early_on_terminal_status(modem, mock_transport):
    """Test call() returns as soon as the far end is busy."""
    mock_transport.add_reply("ATD10086;", ["OK", "BUSY"])

    last = modem.call("10086", duration=5.0)

    assert last is CallStatus.BUSY
    assert "ATH" not in mock_transport.commands


@pytest.mark.timeout(10)
def test_call_uses_configured_duration(mock_transport, fast_config, sink):
    """Test call() falls back to config.call_duration."""
    fast_config.call_duration = 0.2
    mock_transport.add_reply("AT", ["OK"])
    mock_transport.add_reply("ATD10086;", ["OK"])
    mock_transport.add_reply("ATH", ["OK"])

    with EC600NModem(transport=mock_transport, config=fast_config, sink=sink) as modem:
        assert modem.call("10086") is None

    assert mock_transport.commands[-1] == "ATH"


def test_call_dial_failure_is_notified(modem, mock_transport, sink):
    """Test dial failures from call() are reported to the sink."""
    mock_transport.add_reply("ATD10086;", ["ERROR"])

    with pytest.raises(DialError):
        modem.call("10086")

    assert len(sink.messages) == 1
    assert sink.messages[0].startswith("Call to 10086 failed")


@pytest.mark.timeout(10)
def test_status_callback(mock_transport, fast_config):
    """Test the on_call_status callback receives monitor statuses."""
    seen = []
    mock_transport.add_reply("AT", ["OK"])
    mock_transport.add_reply("ATD10086;", ["OK"])

    with EC600NModem(transport=mock_transport, config=fast_config, on_call_status=seen.append) as modem:
        session = modem.make_call("10086")
        mock_transport.add_response(["NO ANSWER"])
        assert list(session.monitor) == [CallStatus.NO_ANSWER]

    assert seen == [CallStatus.NO_ANSWER]


def test_check_network_status(modem, mock_transport, healthy_status_responses):
    """Test check_network_status() returns a snapshot."""
    for command, lines in zip(STATUS_COMMANDS, healthy_status_responses):
        mock_transport.add_reply(command, lines)

    status = modem.check_network_status()

    assert status.signal_strength == 24
    assert status.registration_state is RegistrationState.REGISTERED_HOME


def test_start_network_monitoring_normal(modem, mock_transport, sink, healthy_status_responses):
    """Test monitoring reports a normal network."""
    for command, lines in zip(STATUS_COMMANDS, healthy_status_responses):
        mock_transport.add_reply(command, lines)

    assert modem.start_network_monitoring() is True
    assert "Status: Normal" in sink.messages[0]


def test_start_network_monitoring_abnormal(modem, mock_transport, sink):
    """Test monitoring signals an abnormal network and still reports it."""
    mock_transport.add_reply("AT+CSQ", ["+CSQ: 3,99", "OK"])

    assert modem.start_network_monitoring() is False
    assert "Status: Abnormal" in sink.messages[0]


def test_start_network_monitoring_sink_failure(mock_transport, fast_config):
    """Test sink failures are raised once, without retry."""
    failing = FailingSink()
    mock_transport.add_reply("AT", ["OK"])

    with EC600NModem(transport=mock_transport, config=fast_config, sink=failing) as modem:
        with pytest.raises(NotifyError):
            modem.start_network_monitoring()

    assert failing.attempts == 1


def test_send_raw_at(modem, mock_transport):
    """Test raw commands return the response text."""
    mock_transport.add_reply("ATI", ["Quectel", "EC600N", "Revision: EC600NCNLCR03A03M08", "OK"])

    response = modem.send_raw_at("ATI")

    assert response.splitlines() == ["Quectel", "EC600N", "Revision: EC600NCNLCR03A03M08", "OK"]


def test_repr(modem):
    """Test string representation."""
    assert repr(modem) == "<EC600NModem status=connected>"


@pytest.mark.timeout(10)
def test_close_cancels_active_call(modem, mock_transport):
    """Test close() stops a running monitor."""
    mock_transport.add_reply("ATD10086;", ["OK"])
    session = modem.make_call("10086")

    modem.close()

    assert session.monitor.wait_closed(timeout=1.0)
    assert session.monitor.get(timeout=0.1) is None
    assert modem.session is None


@pytest.mark.timeout(10)
def test_device_disconnect_during_call(modem, mock_transport):
    """Test a pulled device keeps the monitor alive and fails the hangup."""
    mock_transport.add_reply("ATD10086;", ["OK"])
    session = modem.make_call("10086")

    mock_transport.close()

    # Read errors are not call progress; the scan keeps running until cancelled
    with pytest.raises(queue.Empty):
        session.monitor.get(timeout=0.3)
    assert session.monitor.closed is False

    with pytest.raises(DeviceDisconnectedError):
        modem.hangup_call()
    assert session.monitor.closed is True


def test_device_disconnect_status_check(modem, mock_transport):
    """Test status checks on a pulled device degrade to an empty snapshot."""
    mock_transport.close()

    status = modem.check_network_status()

    assert status.signal_strength == 0
    assert status.registration_state is RegistrationState.UNKNOWN
    with pytest.raises(DeviceDisconnectedError):
        modem.send_raw_at("ATI")


@pytest.mark.timeout(10)
def test_redial_after_error_stops_previous_monitor(modem, mock_transport):
    """Test a redial after an ERROR status retires the old monitor."""
    mock_transport.add_reply("ATD111;", ["OK"])
    mock_transport.add_reply("ATD222;", ["OK"])
    first = modem.make_call("111")

    mock_transport.add_response(["CONNECT", "ERROR"])
    assert first.monitor.get(timeout=2.0) is CallStatus.CONNECTED
    assert first.monitor.get(timeout=2.0) is CallStatus.ERROR
    assert modem.calls.state is CallState.ERROR

    second = modem.make_call("222")

    assert first.monitor.closed is True
    assert first.monitor.cancelled is True
    assert modem.session is second

    mock_transport.add_response(["NO CARRIER"])
    assert second.monitor.get(timeout=2.0) is CallStatus.NO_CARRIER
    assert modem.session is None
    assert modem.calls.state is CallState.IDLE
    assert modem.calls.last_status is CallStatus.NO_CARRIER


@pytest.mark.timeout(10)
def test_make_call_while_active_keeps_session(modem, mock_transport):
    """Test a refused second dial leaves the running call untouched."""
    mock_transport.add_reply("ATD111;", ["OK"])
    first = modem.make_call("111")

    with pytest.raises(DialError, match="already in progress"):
        modem.make_call("222")

    assert modem.session is first
    assert first.monitor.closed is False
    assert "ATD222;" not in mock_transport.commands


@pytest.mark.timeout(10)
def test_reconnect_after_close_during_call(fast_config):
    """Test closing mid-call resets the call state so a new call can be placed."""
    transport = MockTransport(auto_open=False)
    transport.add_reply("AT", ["OK"])
    transport.add_reply("ATD111;", ["OK"])
    modem = EC600NModem(transport=transport, config=fast_config)
    modem.connect()
    modem.make_call("111")

    modem.close()

    assert modem.calls.state is CallState.IDLE
    assert modem.calls.number is None

    transport.add_reply("AT", ["OK"])
    transport.add_reply("ATD222;", ["OK"])
    modem.connect()
    session = modem.make_call("222")

    assert transport.open_count == 2
    assert session.number == "222"
    assert modem.calls.state is CallState.DIALING
    modem.close()
