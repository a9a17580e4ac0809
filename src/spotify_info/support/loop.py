"""
Runs a function repeatedly on a background thread until cancelled.
"""
import logging
import threading
from typing import Callable

from spotify_info.support.cancellation import CancellationToken

logger = logging.getLogger(__name__)


class AsyncLoop:
    """ Calls loop() over and over on a daemon thread until the token is cancelled.

        An exception raised by loop() is passed to exception_handler() and the loop carries on
        after error_delay seconds, so a persistent failure does not spin the thread.
    """

    def __init__(self, fn: Callable=None, args=(), token: CancellationToken=None, log=logger, error_delay=0.1):
        """
        :param fn the function to run, unless loop() is overridden
        :param args arguments to pass to fn
        :param token stops the loop when cancelled. A new token is created when not given.
        """
        self.fn = fn
        self.args = args
        self.token = token if token is not None else CancellationToken()
        self.error_delay = error_delay
        self.background_thread = None
        self.logger = log
        self._start_lock = threading.Lock()

    def start(self):
        """ Starts the background thread, unless it is already running. """
        with self._start_lock:
            if self.background_thread is None:
                self.background_thread = threading.Thread(target=self._run, name=type(self).__name__, daemon=True)
                self.background_thread.start()

    def exception_handler(self, e):
        self.logger.exception(e)

    def _run(self):
        self._do(self.startup)
        while self.running():
            if not self._do(self.loop):
                self.token.wait(self.error_delay)
        self._do(self.shutdown)
        logger.info("%s thread exiting" % type(self).__name__)

    def _do(self, callme) -> bool:
        try:
            callme()
            return True
        except Exception as e:
            self.exception_handler(e)
            return False

    def startup(self):
        """ template method called on the background thread before the first loop() """

    def loop(self):
        self.fn(*self.args)

    def shutdown(self):
        """ template method called on the background thread after the last loop() """

    def running(self):
        return not self.token.cancelled

    def stop(self, timeout=None):
        """
        Cancels the token and waits for the background thread to finish the loop() in progress.
        """
        self.token.cancel()
        self.join(timeout)

    def join(self, timeout=None):
        """ waits for the background thread to exit. """
        thread = self.background_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if not thread.is_alive():
                self.background_thread = None
