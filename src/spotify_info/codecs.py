"""
Converts between the on-wire text frames and events.

Two interchangeable grammars are provided:

- DelimitedCodec: the tagged positional format, e.g. `STATE_CHANGED;2`
- JsonCodec: one JSON object per frame, keyed by the event name, e.g. `{"StateChanged": 2}`

A connection uses a single codec for its lifetime.
"""
import json
import logging
from abc import abstractmethod
from datetime import timedelta

from spotify_info.errors import InvalidDataError, UnsupportedFrameError
from spotify_info.events import ControlMessage, Event, EventVisitor, ProgressChanged, ProgressUpdateInterval, \
    StateChanged, TrackChanged
from spotify_info.track import PlaybackState, TrackInfo

logger = logging.getLogger(__name__)


class Codec:
    """
    Knows how to convert events and control messages to/from the on-wire data format.
    """

    def decode(self, frame) -> Event:
        """
        decodes a single frame.
        :param frame: the frame content, str for text frames and bytes for binary frames.
        :raises InvalidDataError: the frame is not a valid event
        :raises UnsupportedFrameError: the frame is not a text frame
        """
        if not isinstance(frame, str):
            raise UnsupportedFrameError("Unsupported message type, only supports Text", frame)
        return self._decode(frame)

    @abstractmethod
    def _decode(self, text: str) -> Event:
        raise NotImplementedError()

    @abstractmethod
    def encode(self, message: ControlMessage) -> str:
        """ Encodes a control message sent to the player. """
        raise NotImplementedError()

    @abstractmethod
    def encode_event(self, event: Event) -> str:
        """ Encodes an event as the player would send it. """
        raise NotImplementedError()


def parse_int(text, default=0):
    """
    Parses an unsigned integer field, falling back to the default.

    >>> parse_int('42')
    42
    >>> parse_int('abc')
    0
    >>> parse_int('-5')
    0
    """
    try:
        value = int(text)
    except (TypeError, ValueError):
        return default
    return value if value >= 0 else default


def parse_float(text, default=0.0):
    """
    >>> parse_float('0.25')
    0.25
    >>> parse_float('half')
    0.0
    """
    try:
        return float(text)
    except (TypeError, ValueError):
        return default


def parse_duration(text) -> timedelta:
    """
    Parses a duration in milliseconds. Durations too long to represent are 0, like unparsable ones.

    >>> parse_duration('1500')
    datetime.timedelta(seconds=1, microseconds=500000)
    >>> parse_duration('99999999999999999999')
    datetime.timedelta(0)
    """
    try:
        return timedelta(milliseconds=parse_int(text))
    except OverflowError:
        return timedelta(0)


class DelimitedCodec(Codec):
    """
    The tagged positional format. A frame is `KIND;field1;field2;...`

    - TRACK_CHANGED;uid;uri;state;duration_ms;title;album;artist;cover;background
    - STATE_CHANGED;state
    - PROGRESS_CHANGED;fraction

    Numeric fields that fail to parse are taken as zero. The cover and background
    are NONE when not available. Title, album and artist carry the escape token
    in place of the delimiter.
    """
    delimiter = ';'
    escape = '%3B'
    no_value = 'NONE'
    track_fields = 9

    def _decode(self, text):
        data = text.split(self.delimiter)
        kind = data.pop(0)
        if kind == 'TRACK_CHANGED' and len(data) >= self.track_fields:
            return TrackChanged(self._track_info(data))
        if kind == 'STATE_CHANGED' and data:
            return StateChanged(PlaybackState.from_code(parse_int(data[0])))
        if kind == 'PROGRESS_CHANGED' and data:
            return ProgressChanged(parse_float(data[0]))
        raise InvalidDataError("Invalid data", text)

    def _track_info(self, data):
        return TrackInfo(
            uid=data[0],
            uri=data[1],
            state=PlaybackState.from_code(parse_int(data[2])),
            duration=parse_duration(data[3]),
            title=self.unescape(data[4]),
            album=self.unescape(data[5]),
            artist=[self.unescape(data[6])],
            cover_url=self._optional(data[7]),
            background_url=self._optional(data[8]))

    def _optional(self, value):
        return None if value is None or value == self.no_value else value

    def optional_text(self, value):
        return self.no_value if value is None else value

    def unescape(self, text):
        return text.replace(self.escape, self.delimiter)

    def escape_text(self, text):
        return text.replace(self.delimiter, self.escape)

    def encode(self, message: ControlMessage):
        if isinstance(message, ProgressUpdateInterval):
            return self._join('SET_PROGRESS_INTERVAL', message.milliseconds)
        raise ValueError("unsupported control message %s" % message)

    def encode_event(self, event: Event):
        return event.apply(_DelimitedEventEncoder(self))

    def _join(self, *fields):
        return self.delimiter.join(str(f) for f in fields)


class _DelimitedEventEncoder(EventVisitor):
    def __init__(self, codec: DelimitedCodec):
        self.codec = codec

    def track_changed(self, event):
        codec = self.codec
        track = event.track
        return codec._join('TRACK_CHANGED', track.uid, track.uri, int(track.state), track.duration_ms,
                           codec.escape_text(track.title), codec.escape_text(track.album),
                           codec.escape_text(', '.join(track.artist)),
                           codec.optional_text(track.cover_url), codec.optional_text(track.background_url))

    def state_changed(self, event):
        return self.codec._join('STATE_CHANGED', int(event.state))

    def progress_changed(self, event):
        return self.codec._join('PROGRESS_CHANGED', event.fraction)


class JsonCodec(Codec):
    """
    The structured format. Each frame is a JSON object with a single key naming the event:

    - {"TrackChanged": {"uid": ..., "uri": ..., "state": 2, "duration": 180000, "title": ..., "album": ...,
       "artist": [...], "cover_url": ..., "background_url": ...}}
      The track may also be given as an array with the fields in that order.
    - {"StateChanged": 1}
    - {"ProgressChanged": 0.5}

    Unlike the delimited format, values of the wrong type are rejected.
    """
    track_fields = ('uid', 'uri', 'state', 'duration', 'title', 'album', 'artist', 'cover_url',
                    'background_url')

    def _decode(self, text):
        try:
            message = json.loads(text)
        except ValueError as e:
            raise InvalidDataError("Invalid JSON: %s" % e, text) from e
        if not isinstance(message, dict) or len(message) != 1:
            raise InvalidDataError("Expected an object with a single event key", text)
        (kind, payload), = message.items()
        try:
            if kind == 'TrackChanged':
                return TrackChanged(self._track_info(payload))
            if kind == 'StateChanged':
                return StateChanged(PlaybackState.from_code(self._integer(payload)))
            if kind == 'ProgressChanged':
                return ProgressChanged(self._number(payload))
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise InvalidDataError("Invalid %s payload: %s" % (kind, e), text) from e
        raise InvalidDataError("Unknown event %s" % kind, text)

    def _track_info(self, payload):
        if isinstance(payload, list):
            if len(payload) < len(self.track_fields) - 2:
                raise ValueError("expected at least %d fields" % (len(self.track_fields) - 2))
            payload = dict(zip(self.track_fields, payload))
        if not isinstance(payload, dict):
            raise TypeError("track must be an object or an array")
        artist = payload['artist']
        if isinstance(artist, str):
            artist = [artist]
        if not isinstance(artist, list) or not all(isinstance(a, str) for a in artist):
            raise TypeError("artist must be a string or a list of strings")
        duration = self._integer(payload['duration'])
        if duration < 0:
            raise ValueError("duration must not be negative")
        return TrackInfo(
            uid=self._string(payload['uid']),
            uri=self._string(payload['uri']),
            state=PlaybackState.from_code(self._integer(payload['state'])),
            duration=timedelta(milliseconds=duration),
            title=self._string(payload['title']),
            album=self._string(payload['album']),
            artist=artist,
            cover_url=self._optional(payload.get('cover_url')),
            background_url=self._optional(payload.get('background_url')))

    @staticmethod
    def _string(value):
        if not isinstance(value, str):
            raise TypeError("expected a string, got %r" % (value,))
        return value

    @staticmethod
    def _integer(value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("expected an integer, got %r" % (value,))
        return value

    @staticmethod
    def _number(value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError("expected a number, got %r" % (value,))
        return float(value)

    def _optional(self, value):
        return None if value is None else self._string(value)

    def encode(self, message: ControlMessage):
        if isinstance(message, ProgressUpdateInterval):
            return self._dumps({'ProgressUpdateInterval': message.milliseconds})
        raise ValueError("unsupported control message %s" % message)

    def encode_event(self, event: Event):
        return self._dumps(event.apply(_JsonEventEncoder()))

    @staticmethod
    def _dumps(value):
        return json.dumps(value, separators=(",", ":"))


class _JsonEventEncoder(EventVisitor):
    def track_changed(self, event):
        track = event.track
        return {'TrackChanged': {
            'uid': track.uid,
            'uri': track.uri,
            'state': int(track.state),
            'duration': track.duration_ms,
            'title': track.title,
            'album': track.album,
            'artist': list(track.artist),
            'cover_url': track.cover_url,
            'background_url': track.background_url,
        }}

    def state_changed(self, event):
        return {'StateChanged': int(event.state)}

    def progress_changed(self, event):
        return {'ProgressChanged': event.fraction}


codecs = {
    'delimited': DelimitedCodec,
    'json': JsonCodec,
}


def codec_for(name) -> Codec:
    """
    Creates the codec registered under the given name.
    :raises KeyError: the name is not a known codec
    """
    factory = codecs.get(name)
    if not factory:
        raise KeyError("unknown codec '%s', expected one of %s" % (name, ', '.join(sorted(codecs))))
    return factory()
