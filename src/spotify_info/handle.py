"""
A shared snapshot of the latest track, written by one background loop and read by any
number of threads.
"""
import threading

from spotify_info.track import TrackInfo


class _SnapshotCell:
    """ The shared state. Values are replaced whole, never modified in place. """

    def __init__(self):
        self.lock = threading.Lock()
        self.track = None
        self.progress = None


class Handle:
    """
    A reader's view of the latest track.

    read() never blocks: when the writer holds the lock, the value this handle observed previously
    is returned instead. Use clone() to give each reader thread its own view of the same cell.
    """

    def __init__(self, cell: _SnapshotCell=None):
        self._cell = cell if cell is not None else _SnapshotCell()
        self._observed = None
        self._observed_progress = None

    def clone(self) -> 'Handle':
        return Handle(self._cell)

    def read(self) -> TrackInfo:
        """
        :return: the latest track, or None if no track has been received yet.
        """
        cell = self._cell
        if cell.lock.acquire(blocking=False):
            try:
                self._observed = cell.track
                self._observed_progress = cell.progress
            finally:
                cell.lock.release()
        return self._observed

    @property
    def progress(self):
        """ the latest progress fraction, as of the last read(). None until a progress event arrives. """
        self.read()
        return self._observed_progress

    def update(self, track: TrackInfo):
        """ replaces the snapshot. Called only by the writing loop. """
        cell = self._cell
        with cell.lock:
            cell.track = track

    def update_progress(self, fraction):
        cell = self._cell
        with cell.lock:
            cell.progress = fraction

    def update_state(self, state):
        """ replaces the snapshot with a copy carrying the new playback state. Ignored until a track is known. """
        track = self._cell.track
        if track is not None:
            self.update(track.with_state(state))
