"""
Pytest configuration and fixtures.

Provides shared test fixtures for ec600npy tests.
"""

import pytest
import logging

from ec600npy.core import MockTransport, ModemCore
from ec600npy import EC600NModem, ModemConfig, NotificationSink


# Enable logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class RecordingSink(NotificationSink):
    """Sink that keeps every message it receives."""

    def __init__(self):
        self.messages = []

    def send(self, text):
        self.messages.append(text)


@pytest.fixture
def fast_config():
    """
    ModemConfig with short delays so tests do not wait on real-port timings.
    """
    return ModemConfig(
        settle_delay=0.0,
        read_timeout=0.05,
        monitor_read_timeout=0.1
    )


@pytest.fixture
def mock_transport():
    """
    Create a MockTransport instance for testing.

    Example:
        def test_something(mock_transport):
            mock_transport.add_response(["OK"])
            # ... test code ...
    """
    transport = MockTransport()
    yield transport
    transport.close()


@pytest.fixture
def modem_core(mock_transport, fast_config):
    """
    Create a connected ModemCore with MockTransport.

    Example:
        def test_at_command(modem_core, mock_transport):
            mock_transport.add_response(["+CSQ: 24,99", "OK"])
            response = modem_core.send_at("AT+CSQ")
            assert "+CSQ: 24,99" in response
    """
    mock_transport.add_reply("AT", ["OK"])
    core = ModemCore(transport=mock_transport, config=fast_config)
    core.connect()
    yield core
    core.close()


@pytest.fixture
def sink():
    """Notification sink recording sent messages."""
    return RecordingSink()


@pytest.fixture
def modem(mock_transport, fast_config, sink):
    """
    Create a connected EC600NModem with MockTransport.

    Example:
        def test_imei(modem, mock_transport):
            mock_transport.add_response(["861536030196001", "OK"])
            assert modem.device.get_imei() == "861536030196001"
    """
    mock_transport.add_reply("AT", ["OK"])
    modem_instance = EC600NModem(transport=mock_transport, config=fast_config, sink=sink)
    modem_instance.connect()
    yield modem_instance
    modem_instance.close()


@pytest.fixture
def healthy_status_responses():
    """Responses for a full status check on a healthy module, in query order."""
    return [
        ["+CSQ: 24,99", "OK"],
        ["+CREG: 0,1", "OK"],
        ["+CPIN: READY", "OK"],
        ['+COPS: 0,0,"CHINA MOBILE",7', "OK"],
        ["861536030196001", "OK"],
    ]
