import errno
import logging
import socket
import time

from tvremote import codecs, settings
from tvremote.discovery.bluez import BlueZAdapter, is_mac_address
from tvremote.model import DeviceKind
from tvremote.errors import TransportUnavailableError, DeviceNotFoundError, ConnectionTimeoutError, LinkLostError, \
    UnknownTransportError, TransportError
from tvremote.transport.base import TransportClient
from tvremote.transport.conduit import SocketConduit

logger = logging.getLogger(__name__)

# socket errors that mean the peer has gone
link_errors = (BrokenPipeError, ConnectionResetError, ConnectionAbortedError)


def rfcomm_socket() -> socket.socket:
    family = getattr(socket, 'AF_BLUETOOTH', None)
    protocol = getattr(socket, 'BTPROTO_RFCOMM', None)
    if family is None or protocol is None:
        raise TransportUnavailableError("Bluetooth sockets are not supported on this platform")
    return socket.socket(family, socket.SOCK_STREAM, protocol)


def translate_socket_error(e: OSError) -> TransportError:
    if isinstance(e, (socket.timeout, TimeoutError)):
        return ConnectionTimeoutError(str(e) or "socket operation timed out")
    if isinstance(e, link_errors) or e.errno == errno.ENOTCONN:
        return LinkLostError(str(e) or type(e).__name__)
    return UnknownTransportError(e)


class RadioTransportClient(TransportClient):
    """
    Sends key reports to a paired device over an RFCOMM stream socket.

    The socket is opened against the serial port profile rather than the HID profile, so the reports
    are only understood by receivers that accept HID reports over a serial link.
    """

    kind = DeviceKind.RADIO

    def __init__(self, adapter: BlueZAdapter = None, uuid=None, channel=None, connect_timeout=None,
                 write_timeout=None, settle_delay=None, socket_factory=rfcomm_socket, sleep=time.sleep):
        self.adapter = adapter
        self.uuid = uuid or settings.spp_uuid
        self.channel = channel or settings.rfcomm_channel
        self.connect_timeout = connect_timeout if connect_timeout is not None else settings.connect_timeout
        self.write_timeout = write_timeout if write_timeout is not None else settings.command_timeout
        self.settle_delay = settle_delay if settle_delay is not None else settings.key_settle_delay
        self.socket_factory = socket_factory
        self.sleep = sleep
        self._conduit = None
        self._address = None

    @property
    def connected(self):
        return self._conduit is not None and self._conduit.open

    @property
    def address(self):
        return self._address

    @property
    def conduit(self):
        return self._conduit

    def _resolve_channel(self, address):
        channel = None
        if self.adapter is not None:
            channel = self.adapter.service_channel(address, self.uuid)
        if channel is None:
            logger.debug("no service record for %s on %s, using channel %d" % (self.uuid, address, self.channel))
            channel = self.channel
        return channel

    def _connect(self, device):
        self.disconnect()
        if self.adapter is not None and not self.adapter.enabled:
            raise TransportUnavailableError("Bluetooth is not enabled")
        if not is_mac_address(device.address):
            raise DeviceNotFoundError("Device not found: %s" % device.address)
        channel = self._resolve_channel(device.address)
        logger.info("connecting to %s (%s) on channel %d" % (device.name, device.address, channel))
        sock = self.socket_factory()
        try:
            sock.settimeout(self.connect_timeout)
            sock.connect((device.address, channel))
            sock.settimeout(self.write_timeout)
        except OSError as e:
            sock.close()
            raise translate_socket_error(e) from e
        self._conduit = SocketConduit(sock)
        self._address = device.address
        logger.info("connected to %s" % device.address)

    def _disconnect(self):
        conduit = self._conduit
        self._conduit = None
        self._address = None
        if conduit is not None:
            try:
                conduit.close()
            except OSError as e:
                logger.warning("error closing socket: %s" % e)
            logger.info("disconnected")

    def _send_key(self, key):
        report = codecs.encode(key)
        try:
            self._conduit.send(report.press)
            self.sleep(self.settle_delay)
            self._conduit.send(report.release)
        except OSError as e:
            raise translate_socket_error(e) from e
        logger.debug("sent key event %s" % key.name)
