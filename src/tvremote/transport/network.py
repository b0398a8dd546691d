import logging
import re
import subprocess

from tvremote import settings
from tvremote.keys import KeyEvent
from tvremote.model import DeviceKind
from tvremote.errors import ConnectionTimeoutError, CommandFailedError, TransportUnavailableError, LinkLostError, \
    UnsupportedKeyEventError
from tvremote.transport.base import TransportClient

logger = logging.getLogger(__name__)

# bridge replies that mean the device is no longer attached
link_lost_pattern = re.compile(r"device offline|device '.*' not found|no devices/emulators found")


def run_bridge(args, timeout):
    """
    Runs a bridge client command to completion.
    :param args: the command line, starting with the bridge executable
    :param timeout: seconds to wait for the command to complete. The process is killed when the
        time runs out.
    :return: a tuple of the exit status and the combined stdout/stderr text, stripped.
    :raises ConnectionTimeoutError: when the command did not complete in time
    :raises TransportUnavailableError: when the bridge executable cannot be started
    """
    try:
        process = subprocess.Popen(args, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE,
                                   stderr=subprocess.STDOUT, universal_newlines=True)
    except OSError as e:
        raise TransportUnavailableError("cannot run %s: %s" % (args[0], e)) from e
    try:
        output, _ = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        process.communicate()
        raise ConnectionTimeoutError("%s timed out after %ss" % (' '.join(args[1:2]), timeout))
    return process.returncode, (output or '').strip()


class NetworkTransportClient(TransportClient):
    """
    Controls a device through the debug bridge client. Each operation is a separate invocation of
    the bridge executable with its own timeout:
    connect <address>:<port>, shell input keyevent <code> and disconnect <address>:<port>.
    """

    kind = DeviceKind.NETWORK

    def __init__(self, executable=None, port=None, connect_timeout=None, command_timeout=None,
                 disconnect_timeout=None, runner=run_bridge):
        self.executable = executable or settings.bridge_executable
        self.port = port or settings.bridge_port
        self.connect_timeout = connect_timeout if connect_timeout is not None else settings.connect_timeout
        self.command_timeout = command_timeout if command_timeout is not None else settings.command_timeout
        self.disconnect_timeout = disconnect_timeout if disconnect_timeout is not None \
            else settings.disconnect_timeout
        self.runner = runner
        self._address = None

    @property
    def connected(self):
        return self._address is not None

    @property
    def address(self):
        return self._address

    def endpoint(self, address):
        return "%s:%d" % (address, self.port)

    def _run(self, timeout, *args):
        command = [self.executable] + list(args)
        logger.debug("executing: %s" % ' '.join(command))
        return self.runner(command, timeout)

    def _connect(self, device):
        """
        Within a session each attempt gets a fresh client and the session closes the previous one.
        A client reused on its own drops its previous endpoint here before connecting.
        """
        self.disconnect()
        endpoint = self.endpoint(device.address)
        logger.info("connecting to %s" % endpoint)
        try:
            exit_status, output = self._run(self.connect_timeout, 'connect', endpoint)
        except ConnectionTimeoutError as e:
            raise ConnectionTimeoutError("Connection timeout") from e
        logger.debug("connect output: %s" % output)
        if exit_status != 0 or 'connected' not in output:
            raise CommandFailedError("Failed to connect: %s" % output, exit_status)
        self._address = device.address

    def _disconnect(self):
        address = self._address
        self._address = None
        if address is None:
            return
        logger.info("disconnecting from %s" % self.endpoint(address))
        try:
            exit_status, output = self._run(self.disconnect_timeout, 'disconnect', self.endpoint(address))
            logger.debug("disconnect output: %s" % output)
        except (ConnectionTimeoutError, TransportUnavailableError) as e:
            logger.warning("error disconnecting from %s: %s" % (address, e.reason))

    def _send_key(self, key):
        if not isinstance(key, KeyEvent):
            raise UnsupportedKeyEventError("Unsupported key event: %s" % (key,))
        try:
            exit_status, output = self._run(self.command_timeout, 'shell', 'input', 'keyevent', str(key.code))
        except ConnectionTimeoutError as e:
            raise ConnectionTimeoutError("Command timeout") from e
        if exit_status != 0:
            if link_lost_pattern.search(output):
                raise LinkLostError(output)
            raise CommandFailedError("Command failed: %s" % output, exit_status)
