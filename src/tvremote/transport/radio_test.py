import errno
import socket
import unittest
from unittest.mock import Mock, call, patch

from hamcrest import assert_that, is_, instance_of, calling, raises

from tvremote.keys import KeyEvent
from tvremote.model import Device, DeviceKind
from tvremote.transport import radio
from tvremote.errors import TransportUnavailableError, DeviceNotFoundError, NotConnectedError, \
    ConnectionTimeoutError, LinkLostError, UnknownTransportError, UnsupportedKeyEventError
from tvremote.transport.base import Result
from tvremote.transport.radio import RadioTransportClient, translate_socket_error

device = Device("Living Room TV", "AA:BB:CC:DD:EE:FF", DeviceKind.RADIO)


class TranslateSocketErrorTest(unittest.TestCase):
    def test_timeout(self):
        assert_that(translate_socket_error(socket.timeout("timed out")), is_(instance_of(ConnectionTimeoutError)))

    def test_link_errors(self):
        assert_that(translate_socket_error(BrokenPipeError()), is_(instance_of(LinkLostError)))
        assert_that(translate_socket_error(ConnectionResetError()), is_(instance_of(LinkLostError)))
        assert_that(translate_socket_error(OSError(errno.ENOTCONN, "not connected")), is_(instance_of(LinkLostError)))

    def test_other(self):
        error = translate_socket_error(OSError(113, "No route to host"))
        assert_that(error, is_(instance_of(UnknownTransportError)))


class RfcommSocketTest(unittest.TestCase):
    def test_unsupported_platform(self):
        with patch.object(radio, 'socket', Mock(spec=['socket', 'SOCK_STREAM'])):
            assert_that(calling(radio.rfcomm_socket), raises(TransportUnavailableError))


class RadioTransportClientTest(unittest.TestCase):
    def setUp(self):
        self.sock = Mock()
        self.sock.fileno.return_value = 7
        self.adapter = Mock(enabled=True)
        self.adapter.service_channel.return_value = None
        self.sleep = Mock()
        self.sut = RadioTransportClient(self.adapter, channel=3, connect_timeout=4, write_timeout=1,
                                        settle_delay=0.05, socket_factory=Mock(return_value=self.sock),
                                        sleep=self.sleep)

    @property
    def writes(self):
        return [c[0][0] for c in self.sock.makefile.return_value.write.call_args_list]

    def test_connect(self):
        assert_that(self.sut.connect(device), is_(Result.success()))
        assert_that(self.sut.connected, is_(True))
        assert_that(self.sut.address, is_(device.address))
        self.sock.connect.assert_called_once_with(("AA:BB:CC:DD:EE:FF", 3))
        assert_that(self.sock.settimeout.call_args_list, is_([call(4), call(1)]))

    def test_connect_uses_service_channel(self):
        self.adapter.service_channel.return_value = 6
        self.sut.connect(device)
        self.sock.connect.assert_called_once_with(("AA:BB:CC:DD:EE:FF", 6))

    def test_connect_adapter_disabled(self):
        self.adapter.enabled = False
        result = self.sut.connect(device)
        assert_that(result.error, is_(instance_of(TransportUnavailableError)))
        assert_that(result.reason, is_("Bluetooth is not enabled"))
        self.sut.socket_factory.assert_not_called()

    def test_connect_invalid_address(self):
        result = self.sut.connect(Device("tv", "192.168.1.5", DeviceKind.RADIO))
        assert_that(result.error, is_(instance_of(DeviceNotFoundError)))
        assert_that(result.reason, is_("Device not found: 192.168.1.5"))

    def test_connect_refused(self):
        self.sock.connect.side_effect = ConnectionRefusedError(111, "Connection refused")
        result = self.sut.connect(device)
        assert_that(result.failed, is_(True))
        assert_that(self.sut.connected, is_(False))
        self.sock.close.assert_called_once()

    def test_connect_timeout(self):
        self.sock.connect.side_effect = socket.timeout("timed out")
        result = self.sut.connect(device)
        assert_that(result.error, is_(instance_of(ConnectionTimeoutError)))

    def test_send_dpad_up(self):
        self.sut.connect(device)
        assert_that(self.sut.send_key(KeyEvent.DPAD_UP), is_(Result.success()))
        assert_that(self.writes, is_([bytes([0, 0, 0x52, 0, 0, 0, 0, 0]), bytes(8)]))
        self.sleep.assert_called_once_with(0.05)

    def test_send_home(self):
        self.sut.connect(device)
        self.sut.send_key(KeyEvent.HOME)
        assert_that(self.writes, is_([bytes([0x23, 0x02]), bytes([0x00, 0x00])]))

    def test_send_not_connected(self):
        result = self.sut.send_key(KeyEvent.BACK)
        assert_that(result.error, is_(instance_of(NotConnectedError)))
        self.sut.socket_factory.assert_not_called()

    def test_send_unsupported(self):
        self.sut.connect(device)
        result = self.sut.send_key(42)
        assert_that(result.error, is_(instance_of(UnsupportedKeyEventError)))
        assert_that(self.writes, is_([]))

    def test_send_broken_pipe(self):
        self.sut.connect(device)
        self.sock.makefile.return_value.write.side_effect = BrokenPipeError(32, "Broken pipe")
        result = self.sut.send_key(KeyEvent.VOLUME_DOWN)
        assert_that(result.error, is_(instance_of(LinkLostError)))

    def test_disconnect(self):
        self.sut.connect(device)
        self.sut.disconnect()
        assert_that(self.sut.connected, is_(False))
        assert_that(self.sut.conduit, is_(None))
        self.sock.close.assert_called_once()
        self.sut.disconnect()
        self.sock.close.assert_called_once()

    def test_reconnect_closes_previous(self):
        self.sut.connect(device)
        self.sut.connect(device)
        self.sock.close.assert_called_once()
        assert_that(self.sut.connected, is_(True))
