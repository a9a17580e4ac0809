"""
Push delivery of events to registered handlers.
"""
import logging
import threading
from queue import Empty, Full, Queue

logger = logging.getLogger(__name__)


class EventSource:
    """
    Calls each registered handler with every fired event, on the firing thread.

    Handlers may be added or removed from any thread while events are being fired,
    including by a handler. A change takes effect from the next fired event.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._handlers = ()

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        with self._lock:
            self._handlers += (handler,)
        return self

    def remove(self, handler):
        with self._lock:
            handlers = list(self._handlers)
            if handler in handlers:
                handlers.remove(handler)
                self._handlers = tuple(handlers)
        return self

    def handlers(self) -> tuple:
        return self._handlers

    def fire(self, event):
        self._fire(event)

    def _fire(self, event):
        for handler in self._handlers:
            handler(event)


class QueuedEventSource(EventSource):
    """
    Holds fired events until a consumer calls publish(), which calls the handlers on the
    consumer's thread. Firing never waits for the handlers.

    :param maxsize: the most events held. When full, the oldest event is dropped to make
        room, so firing never blocks either. 0 holds any number.
    """

    def __init__(self, maxsize=0):
        super().__init__()
        self.event_queue = Queue(maxsize)

    def fire(self, event):
        self._put(event)

    def _put(self, event):
        queue = self.event_queue
        while True:
            try:
                queue.put_nowait(event)
                return
            except Full:
                try:
                    logger.debug("event queue full, dropped %s" % (queue.get_nowait(),))
                except Empty:
                    pass

    def publish(self) -> int:
        """
        Calls the handlers with the queued events, oldest first.
        :return: the number of events published
        """
        count = 0
        while True:
            try:
                event = self.event_queue.get_nowait()
            except Empty:
                return count
            self._fire(event)
            count += 1
