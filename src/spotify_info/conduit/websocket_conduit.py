import logging
import socket

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.protocol import State
from websockets.server import ServerProtocol
from websockets.sync.server import ServerConnection

from spotify_info.conduit import base
from spotify_info.errors import HandshakeError, TransportError

logger = logging.getLogger(__name__)


class WebSocketConduit(base.Conduit):
    """
    A conduit that exchanges frames over an established WebSocket session.
    :param connection the handshaken server side of the WebSocket connection
    """
    def __init__(self, connection: ServerConnection):
        self.connection = connection
        # getpeername() fails once the peer has disconnected
        try:
            self._target = connection.remote_address
        except OSError:
            self._target = None

    @property
    def target(self):
        return self._target

    def receive(self, timeout=None):
        try:
            return self.connection.recv(timeout)
        except ConnectionClosed as e:
            logger.debug("connection from %s closed: %s" % (self.target, e))
            return None

    def send(self, frame):
        try:
            self.connection.send(frame)
        except (ConnectionClosed, OSError) as e:
            raise TransportError("unable to send to %s" % (self.target,)) from e

    @property
    def open(self) -> bool:
        return self.connection.protocol.state is State.OPEN

    def close(self):
        try:
            self.connection.close()
        except OSError:
            # the peer may have already dropped the socket
            pass


def accept_websocket(sock: socket.socket, handshake_timeout=5) -> WebSocketConduit:
    """
    Performs the server side of the WebSocket opening handshake on a freshly accepted socket.
    The socket is closed if the handshake fails.
    :param sock: the accepted client socket
    :param handshake_timeout: how long to wait for the upgrade request, in seconds
    :raises HandshakeError: the upgrade request was malformed, rejected or did not arrive in time
    :raises TransportError: the socket failed during the handshake
    """
    try:
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, True)
        connection = ServerConnection(sock, ServerProtocol())
    except Exception as e:
        sock.close()
        raise TransportError("unable to set up connection: %s" % e) from e

    try:
        connection.handshake(timeout=handshake_timeout)
    except TimeoutError as e:
        _discard(connection)
        raise HandshakeError("timed out waiting for the WebSocket upgrade request") from e
    except WebSocketException as e:
        _discard(connection)
        raise HandshakeError("WebSocket handshake failed: %s" % e) from e
    except OSError as e:
        _discard(connection)
        raise TransportError("socket failed during WebSocket handshake") from e

    if connection.protocol.state is not State.OPEN:
        _discard(connection)
        raise HandshakeError("WebSocket handshake was rejected")
    return WebSocketConduit(connection)


def _discard(connection: ServerConnection):
    connection.close_socket()
    connection.recv_events_thread.join()
