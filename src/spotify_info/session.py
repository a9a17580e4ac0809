"""
The delivery state machine shared by the blocking and the background delivery models.

    IDLE -> ACCEPTING -> CONNECTED -> (ACCEPTING | CLOSED)

A lost connection always goes back to accepting. Only cancellation of the listener's
token ends the session. The token is checked before each accept and before each receive.
"""
import logging
from enum import Enum

from spotify_info.connection import Connection
from spotify_info.errors import DecodeError, ListenerClosedError, TransportError
from spotify_info.events import ProgressUpdateInterval
from spotify_info.support.events import EventSource

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = 'idle'
    ACCEPTING = 'accepting'
    CONNECTED = 'connected'
    CLOSED = 'closed'


class ListenSession:
    """
    Drives a listener: accepts a connection, pumps its events, and accepts again when it is lost.

    :param listener: the Listener providing connections. Its token stops the session.
    :param progress_interval: when given, the progress update interval in milliseconds requested
        from each producer as it connects.
    :param errors: receives the recoverable errors: decode errors, failed accepts and handshakes,
        and connections lost to transport errors.
    """

    def __init__(self, listener, progress_interval=None, errors: EventSource=None):
        self.listener = listener
        self.progress_interval = progress_interval
        self.errors = errors if errors is not None else EventSource()
        self.state = SessionState.IDLE
        self.connection = None

    @property
    def token(self):
        return self.listener.token

    def run(self):
        """
        Generates the events from successive connections until the token is cancelled.
        """
        token = self.token
        try:
            while not token.cancelled:
                self.state = SessionState.ACCEPTING
                try:
                    connection = self.listener.accept_once()
                except ListenerClosedError:
                    break
                except TransportError as e:
                    logger.warning("unable to accept the player connection: %s" % e)
                    self.errors.fire(e)
                    continue
                self.state = SessionState.CONNECTED
                self.connection = connection
                try:
                    self._request_progress_interval(connection)
                    yield from self._pump(connection)
                finally:
                    self.connection = None
                    connection.close()
        finally:
            self.state = SessionState.CLOSED

    def _pump(self, connection: Connection):
        token = self.token
        while not token.cancelled:
            try:
                event = connection.receive_next()
            except DecodeError as e:
                logger.warning("discarding frame from %s: %s" % (connection.target, e))
                self.errors.fire(e)
                continue
            except (TransportError, OSError) as e:
                logger.warning("lost connection to %s: %s" % (connection.target, e))
                self.errors.fire(e)
                break
            if event is None:
                break
            yield event

    def _request_progress_interval(self, connection: Connection):
        if self.progress_interval is None:
            return
        try:
            connection.send_control(ProgressUpdateInterval(self.progress_interval))
        except TransportError as e:
            logger.warning("unable to set the progress interval on %s: %s" % (connection.target, e))
            self.errors.fire(e)

    def set_progress_interval(self, milliseconds):
        """
        Changes the progress update interval. It is sent to the current producer, if any,
        and to every producer that connects later.
        """
        self.progress_interval = milliseconds
        connection = self.connection
        if connection is not None:
            self._request_progress_interval(connection)


class EventStream:
    """
    The blocking delivery model: iterating yields the events from the producer on the calling thread,
    reconnecting transparently. Iteration ends only when the listener is closed.

    Decode errors do not interrupt iteration; they are logged and fired to `errors`.
    """

    def __init__(self, listener, progress_interval=None):
        self.session = ListenSession(listener, progress_interval)

    @property
    def errors(self) -> EventSource:
        return self.session.errors

    @property
    def state(self) -> SessionState:
        return self.session.state

    def __iter__(self):
        return self.session.run()

    def close(self):
        self.session.listener.close()
