"""
The errors reported by transports and the session. Failures cross public boundaries as a
Result carrying one of these, never as a raised exception.
"""


class TransportError(Exception):
    """ Indicates an error condition with a transport. """

    @property
    def reason(self) -> str:
        return str(self) or type(self).__name__


class TransportUnavailableError(TransportError):
    """ The transport's adapter is absent or disabled. """


class DeviceNotFoundError(TransportError):
    """ The requested device cannot be reached or does not exist. """


class ConnectionTimeoutError(TransportError):
    """ An operation did not complete within its time limit. """


class CommandFailedError(TransportError):
    """ An external command completed unsuccessfully. """
    def __init__(self, message, exit_info=None):
        super().__init__(message)
        self.exit_info = exit_info


class NotConnectedError(TransportError):
    """ A connection is required but there is none. """


class UnsupportedKeyEventError(TransportError):
    """ The key event has no encoding for the transport. """


class ConnectionInProgressError(TransportError):
    """ A connection attempt is already under way. """


class LinkLostError(TransportError):
    """ The link to the device has gone away. """


class UnknownTransportError(TransportError):
    """ Wraps an unexpected exception raised by the underlying platform. """
    def __init__(self, cause):
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause
