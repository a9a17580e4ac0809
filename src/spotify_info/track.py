"""
The track data reported by the player: the playback state and the track description.
"""
from datetime import timedelta
from enum import IntEnum

from spotify_info.support.mixins import CommonEqualityMixin, StringerMixin


class PlaybackState(IntEnum):
    """
    The state of the track, whether it's Playing, Paused or Stopped.
    The integer values are the wire codes.
    """
    STOPPED = 0
    PAUSED = 1
    PLAYING = 2

    @classmethod
    def from_code(cls, code) -> 'PlaybackState':
        """
        2 is PLAYING, 1 is PAUSED and anything else is STOPPED.

        >>> PlaybackState.from_code(2)
        <PlaybackState.PLAYING: 2>
        >>> PlaybackState.from_code(999)
        <PlaybackState.STOPPED: 0>
        """
        if code == 2:
            return cls.PLAYING
        if code == 1:
            return cls.PAUSED
        return cls.STOPPED

    def __str__(self):
        return self.name.capitalize()


class TrackInfo(CommonEqualityMixin, StringerMixin):
    """
    Describes one track. Instances are immutable; use with_state() to derive
    a copy with another playback state.

    :param uid: unique id of the track
    :param uri: the uri of the track
    :param state: the PlaybackState
    :param duration: the track length, a timedelta or a number of milliseconds
    :param artist: a single name or a sequence of names
    :param cover_url: cover art location, or None
    :param background_url: full screen background art location, or None
    """

    def __init__(self, uid='', uri='', state=PlaybackState.STOPPED, duration=timedelta(0),
                 title='', album='', artist=(), cover_url=None, background_url=None):
        if not isinstance(duration, timedelta):
            duration = timedelta(milliseconds=duration)
        if duration < timedelta(0):
            raise ValueError("duration must not be negative: %s" % duration)
        if isinstance(artist, str):
            artist = (artist,)
        self._uid = uid
        self._uri = uri
        self._state = PlaybackState.from_code(state)
        self._duration = duration
        self._title = title
        self._album = album
        self._artist = tuple(artist)
        self._cover_url = cover_url
        self._background_url = background_url

    @property
    def uid(self) -> str:
        return self._uid

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def duration(self) -> timedelta:
        return self._duration

    @property
    def duration_ms(self) -> int:
        return self._duration // timedelta(milliseconds=1)

    @property
    def title(self) -> str:
        return self._title

    @property
    def album(self) -> str:
        return self._album

    @property
    def artist(self) -> tuple:
        """ the artist names. There can be more than one. """
        return self._artist

    @property
    def cover_url(self):
        return self._cover_url

    @property
    def background_url(self):
        """ the art shown in the player's full screen view """
        return self._background_url

    def with_state(self, state: PlaybackState) -> 'TrackInfo':
        return TrackInfo(self._uid, self._uri, state, self._duration, self._title, self._album,
                         self._artist, self._cover_url, self._background_url)

    def same_track(self, other: 'TrackInfo') -> bool:
        return same_track(self, other)


def same_track(a: TrackInfo, b: TrackInfo) -> bool:
    """
    Compares tracks by uid only. The playback state and all other fields are ignored,
    so a paused track is the same track as when it was playing.
    """
    return a.uid == b.uid
