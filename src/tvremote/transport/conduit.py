import logging
import socket

logger = logging.getLogger(__name__)


class SocketConduit:
    """
    Writes whole reports to a connected stream socket. Each send is flushed before returning so a
    press report is on the wire before the matching release is queued.
    """

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.stream = sock.makefile('wb')

    @property
    def open(self) -> bool:
        """ False once the socket has been closed. """
        return self.sock.fileno() >= 0

    def send(self, data: bytes):
        self.stream.write(data)
        self.stream.flush()

    def close(self):
        """ releases the socket. Errors from a peer that is already gone are ignored. """
        try:
            self.stream.close()
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            logger.debug("ignoring error closing socket: %s" % e)
        finally:
            self.sock.close()
