import logging
import socket

from spotify_info.codecs import Codec, DelimitedCodec
from spotify_info.conduit.base import LoggingConduit
from spotify_info.conduit.websocket_conduit import accept_websocket
from spotify_info.connection import Connection, ConnectionOpenedEvent
from spotify_info.errors import ListenerClosedError, TransportError
from spotify_info.session import EventStream
from spotify_info.support.cancellation import CancellationToken
from spotify_info.support.events import EventSource

logger = logging.getLogger(__name__)

DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 19532


class Listener:
    """
    Owns the bound local socket and hands out one handshaken Connection per accept.
    A failed accept or a lost connection never prevents the next accept.

    Create instances with bind(), bind_local() or bind_default().

    :param sock: the bound, listening socket
    :param codec: the wire grammar used by the connections
    :param token: shared by every loop built on this listener. close() cancels it.
    :param poll_interval: how often, in seconds, blocking accepts and receives check the token
    :param handshake_timeout: how long to wait for the WebSocket upgrade request, in seconds
    """

    def __init__(self, sock: socket.socket, codec: Codec=None, token: CancellationToken=None,
                 poll_interval=0.5, handshake_timeout=5):
        self.sock = sock
        self.codec = codec if codec is not None else DelimitedCodec()
        self.token = token if token is not None else CancellationToken()
        self.poll_interval = poll_interval
        self.handshake_timeout = handshake_timeout
        self.events = EventSource()
        self._disposed = False
        self._address = sock.getsockname()[:2]
        sock.settimeout(poll_interval)

    @classmethod
    def bind_default(cls, **kwargs) -> 'Listener':
        """ Binds to 127.0.0.1:19532 """
        return cls.bind_local(DEFAULT_PORT, **kwargs)

    @classmethod
    def bind_local(cls, port, **kwargs) -> 'Listener':
        """ Binds to 127.0.0.1 with a custom port """
        return cls.bind((DEFAULT_HOST, port), **kwargs)

    @classmethod
    def bind(cls, address, backlog=1, **kwargs) -> 'Listener':
        """
        Binds to the given (host, port) address.
        :raises TransportError: the address could not be bound
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(address)
            sock.listen(backlog)
        except OSError as e:
            sock.close()
            raise TransportError("unable to bind to %s:%s" % tuple(address)) from e
        listener = cls(sock, **kwargs)
        logger.info("listening for the player on %s:%s" % listener.address)
        return listener

    @property
    def address(self):
        """ the (host, port) this listener is bound to """
        return self._address

    @property
    def closed(self) -> bool:
        return self.token.cancelled

    def accept_once(self) -> Connection:
        """
        Waits for one inbound connection and performs the WebSocket handshake.
        :raises ListenerClosedError: close() was called before a connection arrived
        :raises HandshakeError: the upgrade was malformed or rejected. The listener remains usable.
        :raises TransportError: the accept failed. The listener remains usable.
        """
        while True:
            if self.token.cancelled:
                raise ListenerClosedError("listener on %s:%s is closed" % self.address)
            try:
                client, peer = self.sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                raise TransportError("accept failed") from e
            break

        client.settimeout(None)
        conduit = accept_websocket(client, self.handshake_timeout)
        logger.info("player connected from %s:%s" % peer[:2])
        connection = Connection(LoggingConduit(conduit, logger), self.codec, self.token, self.poll_interval,
                                self.events)
        self.events.fire(ConnectionOpenedEvent(connection))
        return connection

    def incoming(self, progress_interval=None):
        """
        A blocking sequence of the events from successive connections. See EventStream.
        """
        return EventStream(self, progress_interval)

    def close(self):
        """
        Asks the loops built on this listener to stop at their next suspension point.
        An accept or receive in progress is not interrupted, but returns within poll_interval.
        """
        self.token.cancel()

    def dispose(self):
        """ Cancels and releases the bound socket. """
        self.close()
        if not self._disposed:
            self._disposed = True
            self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.dispose()
