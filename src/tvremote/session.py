"""
The connection session: owns at most one transport client and publishes every state change.

State transitions:

    Disconnected, Error --connect--> Connecting --> Connected(device) | Error(reason)
    Connected --send_key--> Connected, or Error(reason) when the link is lost
    any --disconnect--> Disconnected

A connect requested while another connect is in progress is rejected with ConnectionInProgressError.
This includes an attempt abandoned by disconnect() whose transport call has not yet returned, so
no more than one transport client is ever open.
"""
import logging
import threading

from tvremote.model import ConnectionState, Device
from tvremote.support.events import EventSource, QueuedListener
from tvremote.errors import ConnectionInProgressError, DeviceNotFoundError, NotConnectedError, LinkLostError, \
    TransportUnavailableError, UnknownTransportError
from tvremote.transport.base import Result, TransportClient

logger = logging.getLogger(__name__)


class StateSubscription(QueuedListener):
    """
    A live view of a session's state. The queue starts with the state current at the time of
    subscription and then receives every transition, in order.
    """

    def __init__(self, session):
        self.session = session
        super().__init__(session.events, initial=session.state)

    @property
    def current(self) -> ConnectionState:
        return self.session.state


class ConnectionSession:
    """
    Connects to one device at a time, choosing the transport client that matches the device kind.

    :param client_factories: a mapping from DeviceKind to a callable that creates a new, unconnected
        TransportClient for that kind. A new client is created for each connection attempt.
    """

    def __init__(self, client_factories):
        self.client_factories = dict(client_factories)
        self.events = EventSource()
        self._lock = threading.RLock()
        self._send_lock = threading.Lock()
        self._state = ConnectionState.disconnected()
        self._client = None
        self._kind = None
        self._attempt = 0
        # true from the start of a connection attempt until its transport call has returned
        self._in_flight = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def active_kind(self):
        """ the kind of the device currently connected, or None. """
        return self._kind

    @property
    def client(self) -> TransportClient:
        return self._client

    def _set_state(self, state: ConnectionState):
        """ publishes a state change. Must be called with the lock held so observers see changes in order. """
        self._state = state
        logger.debug("state %r" % state)
        self.events.fire(state)

    def _create_client(self, kind) -> TransportClient:
        factory = self.client_factories.get(kind)
        if factory is None:
            raise TransportUnavailableError("no transport for %s devices" % (kind,))
        return factory()

    def connect(self, device: Device) -> Result:
        """
        Connects to the device. Publishes Connecting, then Connected or Error before returning.
        Any previously connected client is closed first.
        :return: the result of the connection attempt.
        """
        if device is None or not device.address:
            return Result.failure(DeviceNotFoundError("Device has no address"))
        with self._lock:
            if self._state.is_connecting or self._in_flight:
                logger.warning("rejecting connect to %s: connection already in progress" % device.address)
                return Result.failure(ConnectionInProgressError("connection already in progress"))
            previous, self._client, self._kind = self._client, None, None
            self._attempt += 1
            attempt = self._attempt
            self._in_flight = True
            self._set_state(ConnectionState.connecting())

        if previous is not None:
            previous.disconnect()

        try:
            client = self._create_client(device.kind)
        except TransportUnavailableError as e:
            result, client = Result.failure(e), None
        except Exception as e:
            logger.exception("unable to create a transport client for %s" % device.address)
            result, client = Result.failure(UnknownTransportError(e)), None
        else:
            result = client.connect(device)

        with self._lock:
            self._in_flight = False
            if attempt != self._attempt:
                # disconnected while the attempt was in flight
                if client is not None:
                    client.disconnect()
                return Result.failure(NotConnectedError("disconnected while connecting"))
            if result.succeeded:
                self._client, self._kind = client, device.kind
                logger.info("connected to %s (%s)" % (device.name, device.address))
                self._set_state(ConnectionState.connected(device))
            else:
                if client is not None:
                    client.disconnect()
                logger.info("connection to %s failed: %s" % (device.address, result.reason))
                self._set_state(ConnectionState.error(result.reason or "Connection failed"))
        return result

    def send_key(self, key) -> Result:
        """
        Sends a key to the connected device. The state is unchanged unless the transport reports that
        the link is lost, in which case the session moves to Error.
        :return: the transport's result, or a NotConnectedError failure when not connected.
        """
        with self._lock:
            client = self._client if self._state.is_connected else None
        if client is None:
            return Result.failure(NotConnectedError("Not connected to any device"))

        with self._send_lock:
            result = client.send_key(key)

        if result.failed and isinstance(result.error, LinkLostError):
            with self._lock:
                if self._client is client:
                    self._client, self._kind = None, None
                    self._set_state(ConnectionState.error(result.reason))
            client.disconnect()
        return result

    def disconnect(self):
        """
        Closes the active client, if any, and moves to Disconnected. Never fails; disconnecting
        an already disconnected session does nothing.
        """
        with self._lock:
            client, self._client, self._kind = self._client, None, None
            self._attempt += 1
            if client is not None:
                client.disconnect()
            if not self._state.is_disconnected:
                self._set_state(ConnectionState.disconnected())

    def observe_state(self) -> StateSubscription:
        """
        Subscribes to state changes. Close the subscription to stop receiving them.
        """
        with self._lock:
            return StateSubscription(self)
