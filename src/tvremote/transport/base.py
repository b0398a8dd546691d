import logging
from abc import abstractmethod

from tvremote.errors import TransportError, DeviceNotFoundError, NotConnectedError, UnknownTransportError
from tvremote.support.mixins import CommonEqualityMixin

logger = logging.getLogger(__name__)


class Result(CommonEqualityMixin):
    """
    The outcome of a transport operation: success, or failure carrying a TransportError.
    A Result is truthy when the operation succeeded.
    """
    def __init__(self, error: TransportError = None):
        self.error = error

    @classmethod
    def success(cls):
        return cls()

    @classmethod
    def failure(cls, error: TransportError):
        return cls(error)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def reason(self):
        return None if self.error is None else self.error.reason

    def __bool__(self):
        return self.succeeded

    def __repr__(self):
        return "Result.success()" if self.succeeded else "Result.failure(%r)" % (self.error,)


def run_guarded(operation, description, *args) -> Result:
    """
    Runs an operation that signals failure by raising TransportError, and converts the outcome
    to a Result. Unexpected exceptions are logged and reported as UnknownTransportError.
    """
    try:
        operation(*args)
        return Result.success()
    except TransportError as e:
        logger.warning("%s failed: %s" % (description, e.reason))
        return Result.failure(e)
    except Exception as e:
        logger.exception("unexpected error during %s" % description)
        return Result.failure(UnknownTransportError(e))


class TransportClient:
    """
    Manages the link to a single device over one kind of transport.

    Subclasses implement the template methods _connect, _disconnect and _send_key, which raise
    TransportError on failure. The public methods never raise: connect and send_key return a Result,
    and disconnect always succeeds.
    """

    kind = None

    @property
    @abstractmethod
    def connected(self) -> bool:
        """ Determines if this client currently holds a link to a device. """
        raise NotImplementedError

    @property
    @abstractmethod
    def address(self):
        """ The address of the connected device, or None. """
        raise NotImplementedError

    def connect(self, device) -> Result:
        """
        Connects to the device, replacing any previous link held by this client.
        """
        if not device.address:
            return Result.failure(DeviceNotFoundError("Device has no address"))
        return run_guarded(self._connect, "connect to %s" % device.address, device)

    def disconnect(self):
        """
        Releases the link. Errors are logged and never reported to the caller.
        Disconnecting when not connected does nothing.
        """
        try:
            self._disconnect()
        except Exception as e:
            logger.warning("error disconnecting %s: %s" % (self.kind, e))

    def send_key(self, key) -> Result:
        """
        Sends a key press to the connected device.
        Fails with NotConnectedError, without any I/O, when there is no link.
        """
        if not self.connected:
            return Result.failure(NotConnectedError("Not connected to any device"))
        return run_guarded(self._send_key, "send %s" % (key,), key)

    @abstractmethod
    def _connect(self, device):
        raise NotImplementedError

    @abstractmethod
    def _disconnect(self):
        raise NotImplementedError

    @abstractmethod
    def _send_key(self, key):
        raise NotImplementedError
