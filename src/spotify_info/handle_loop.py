import logging

from spotify_info.events import EventVisitor
from spotify_info.handle import Handle
from spotify_info.session import ListenSession
from spotify_info.support.events import QueuedEventSource
from spotify_info.support.loop import AsyncLoop

logger = logging.getLogger(__name__)


class _HandleWriter(EventVisitor):
    """ merges each event into the handle's snapshot. """
    def __init__(self, handle: Handle):
        self.handle = handle

    def track_changed(self, event):
        self.handle.update(event.track)

    def state_changed(self, event):
        self.handle.update_state(event.state)

    def progress_changed(self, event):
        self.handle.update_progress(event.fraction)


class HandleLoop(AsyncLoop):
    """
    The shared-handle delivery model. A daemon thread accepts producers and merges their events into
    a Handle, which any number of threads may read without blocking the writer.

    Every event is also posted to `events`, a QueuedEventSource. Consumers register handlers and call
    events.publish() on their own thread, so a slow consumer never holds up the connection.

    :param listener: provides the connections. Its token stops the loop.
    :param handle: the handle to write. A new one is created if not given.
    :param progress_interval: the progress update interval to request from each producer, in milliseconds
    :param max_queued: the maximum number of events held for publish(). 0 is unbounded.
    """

    def __init__(self, listener, handle: Handle=None, progress_interval=None, max_queued=0, log=logger):
        super().__init__(token=listener.token, log=log)
        self.listener = listener
        self.handle = handle if handle is not None else Handle()
        self.events = QueuedEventSource(max_queued)
        self.session = ListenSession(listener, progress_interval)
        self._writer = _HandleWriter(self.handle)

    @property
    def errors(self):
        """ recoverable errors, fired on the background thread """
        return self.session.errors

    @property
    def state(self):
        return self.session.state

    def loop(self):
        for event in self.session.run():
            event.apply(self._writer)
            self.events.fire(event)

    def set_progress_interval(self, milliseconds):
        self.session.set_progress_interval(milliseconds)

    def stop(self, timeout=None):
        """
        Closes the listener and waits for the background thread to exit. The thread notices within
        the listener's poll interval.
        """
        self.listener.close()
        super().stop(timeout)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
