import threading


class CancellationToken:
    """
    A one-shot cooperative stop signal. Loops poll it at their suspension points
    (before each accept and before each receive). Once cancelled it stays cancelled.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout=None) -> bool:
        """
        Blocks until the token is cancelled or the timeout elapses.
        :return: True if the token was cancelled.
        """
        return self._event.wait(timeout)
