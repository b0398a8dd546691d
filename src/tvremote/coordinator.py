import ipaddress
import logging
from typing import List

from tvremote.discovery.bluez import BlueZAdapter
from tvremote.discovery.network import NetworkScanner
from tvremote.discovery.radio import RadioDeviceEnumerator
from tvremote.model import Device, DeviceKind, ConnectionState
from tvremote.session import ConnectionSession, StateSubscription
from tvremote.errors import TransportUnavailableError, DeviceNotFoundError, ConnectionInProgressError
from tvremote.transport.base import Result
from tvremote.transport.network import NetworkTransportClient
from tvremote.transport.radio import RadioTransportClient

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE_NAME = "Unknown Device"


class SessionCoordinator:
    """
    The single entry point for a user interface: scans for devices in the selected mode, connects to
    one of them and relays key presses.

    The mode is the DeviceKind used for scanning. Connecting to a device switches the mode to that
    device's kind.
    """

    def __init__(self, network_scanner: NetworkScanner = None, radio_enumerator: RadioDeviceEnumerator = None,
                 adapter: BlueZAdapter = None, session: ConnectionSession = None, mode=DeviceKind.NETWORK):
        self.adapter = adapter if adapter is not None else BlueZAdapter()
        self.network_scanner = network_scanner if network_scanner is not None else NetworkScanner()
        self.radio_enumerator = radio_enumerator if radio_enumerator is not None \
            else RadioDeviceEnumerator(self.adapter)
        self.session = session if session is not None else ConnectionSession(self.default_client_factories())
        self.mode = mode

    def default_client_factories(self):
        adapter = self.adapter
        return {
            DeviceKind.NETWORK: NetworkTransportClient,
            DeviceKind.RADIO: lambda: RadioTransportClient(adapter),
        }

    def set_mode(self, mode: DeviceKind):
        self.mode = mode

    def scan(self, mode: DeviceKind = None, subnet=None) -> List[Device]:
        """
        Scans for devices of one kind.
        :param mode: the kind of devices to scan for. Defaults to the current mode, and becomes the
            current mode.
        :param subnet: the network to scan in network mode. Defaults to the local network.
        :return: the candidates found. The coordinator keeps no reference to the list.
        """
        if mode is not None:
            self.mode = mode
        logger.info("scanning for %s devices" % self.mode.value)
        if self.mode is DeviceKind.RADIO:
            return self.radio_enumerator.scan()
        return self.network_scanner.scan(subnet)

    def connect(self, device: Device) -> Result:
        """
        Connects to the device. The mode follows the device kind unless the session rejected the
        request outright.
        """
        result = self.session.connect(device)
        if device is not None and device.address and not isinstance(result.error, ConnectionInProgressError):
            self.mode = device.kind
        return result

    def connect_manual(self, address) -> Result:
        """
        Connects to a network device by its address, without scanning. Only available in network mode.
        """
        if self.mode is not DeviceKind.NETWORK:
            return Result.failure(TransportUnavailableError("Manual IP only works with Wi-Fi mode"))
        try:
            ipaddress.IPv4Address(address)
        except ValueError:
            return Result.failure(DeviceNotFoundError("Invalid IP address: %s" % address))
        device = Device("Manual IP: %s" % address, address, DeviceKind.NETWORK)
        return self.connect(device)

    def disconnect(self):
        self.session.disconnect()

    def send(self, key) -> Result:
        return self.session.send_key(key)

    @property
    def state(self) -> ConnectionState:
        return self.session.state

    def observe_state(self) -> StateSubscription:
        return self.session.observe_state()

    @property
    def device_name(self) -> str:
        state = self.session.state
        return state.device.name if state.is_connected else UNKNOWN_DEVICE_NAME

    def is_radio_supported(self) -> bool:
        return self.adapter.supported

    def is_radio_enabled(self) -> bool:
        return self.adapter.enabled

    def is_network_transport_active(self) -> bool:
        return self._is_active(DeviceKind.NETWORK)

    def is_radio_transport_active(self) -> bool:
        return self._is_active(DeviceKind.RADIO)

    def _is_active(self, kind):
        return self.session.state.is_connected and self.session.active_kind is kind
