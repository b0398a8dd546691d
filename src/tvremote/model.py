"""
Value objects exchanged between the scanners, the session and its observers.
"""
from enum import Enum

from tvremote.support.mixins import CommonEqualityMixin, StringerMixin


class DeviceKind(Enum):
    """ The transport used to reach a device. """
    NETWORK = 'network'
    RADIO = 'radio'


class Device(CommonEqualityMixin, StringerMixin):
    """
    A display device found by a scan.
    The address identifies the device within its kind: an IPv4 address for network devices,
    a Bluetooth MAC address for radio devices. The name is for display only.
    """
    def __init__(self, name, address, kind: DeviceKind):
        self.name = name
        self.address = address
        self.kind = kind

    def __repr__(self):
        return "Device(%r, %r, %s)" % (self.name, self.address, self.kind)


class Status(Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    ERROR = 'error'


class ConnectionState(CommonEqualityMixin, StringerMixin):
    """
    The state of a session: a status tag plus the payload for that status.
    CONNECTED carries the device and ERROR carries the reason. Build instances with the
    factory methods rather than the constructor.
    """
    def __init__(self, status: Status, device: Device = None, reason: str = None):
        self.status = status
        self.device = device
        self.reason = reason

    @classmethod
    def disconnected(cls):
        return cls(Status.DISCONNECTED)

    @classmethod
    def connecting(cls):
        return cls(Status.CONNECTING)

    @classmethod
    def connected(cls, device: Device):
        return cls(Status.CONNECTED, device=device)

    @classmethod
    def error(cls, reason: str):
        return cls(Status.ERROR, reason=reason)

    @property
    def is_disconnected(self):
        return self.status is Status.DISCONNECTED

    @property
    def is_connecting(self):
        return self.status is Status.CONNECTING

    @property
    def is_connected(self):
        return self.status is Status.CONNECTED

    @property
    def is_error(self):
        return self.status is Status.ERROR

    def __repr__(self):
        if self.is_connected:
            return "ConnectionState.connected(%r)" % (self.device,)
        if self.is_error:
            return "ConnectionState.error(%r)" % (self.reason,)
        return "ConnectionState.%s()" % self.status.value
