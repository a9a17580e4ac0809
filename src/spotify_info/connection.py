import logging

from spotify_info.codecs import Codec, DelimitedCodec
from spotify_info.conduit.base import Conduit
from spotify_info.errors import TransportError
from spotify_info.events import ControlMessage, Event
from spotify_info.support.cancellation import CancellationToken
from spotify_info.support.events import EventSource

logger = logging.getLogger(__name__)


class ConnectionEvent:
    """ base class for connection lifecycle events. """
    def __init__(self, connection):
        self.connection = connection


class ConnectionOpenedEvent(ConnectionEvent):
    """ A producer connected and completed the WebSocket handshake. """


class ConnectionClosedEvent(ConnectionEvent):
    """ The connection to the producer was lost or closed. """


class Connection:
    """
    One live connection to the producer. Frames received are decoded with the codec.

    :param conduit: the handshaken frame channel
    :param codec: converts frames to events, and control messages to frames
    :param token: when cancelled, receive_next() reports the connection closed at the next poll
    :param poll_interval: the longest time in seconds a receive blocks before checking the token.
        None blocks until a frame arrives.
    :param events: receives ConnectionClosedEvent when the connection is closed
    """

    def __init__(self, conduit: Conduit, codec: Codec=None, token: CancellationToken=None,
                 poll_interval=0.5, events: EventSource=None):
        self.conduit = conduit
        self.codec = codec if codec is not None else DelimitedCodec()
        self.token = token if token is not None else CancellationToken()
        self.poll_interval = poll_interval
        self.events = events if events is not None else EventSource()
        self._closed = False

    @property
    def target(self):
        return self.conduit.target

    @property
    def closed(self) -> bool:
        return self._closed

    def receive_next(self) -> Event:
        """
        Waits for the next frame and decodes it.
        :return: the decoded event, or None once the connection is closed.
        :raises DecodeError: the frame could not be decoded. The connection remains open.
        """
        while not self._closed:
            if self.token.cancelled:
                self.close()
                break
            try:
                frame = self.conduit.receive(self.poll_interval)
            except TimeoutError:
                continue
            except OSError as e:
                logger.warning("error reading from %s: %s" % (self.target, e))
                self.close()
                break
            if frame is None:
                self.close()
                break
            return self.codec.decode(frame)
        return None

    def send_control(self, message: ControlMessage):
        """
        Sends a control message to the producer.
        :raises TransportError: the message could not be written. The connection is closed.
        """
        frame = self.codec.encode(message)
        try:
            self.conduit.send(frame)
        except TransportError:
            self.close()
            raise
        except OSError as e:
            self.close()
            raise TransportError("unable to send %s to %s" % (message, self.target)) from e

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self.conduit.close()
        finally:
            logger.info("producer disconnected: %s" % (self.target,))
            self.events.fire(ConnectionClosedEvent(self))

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
