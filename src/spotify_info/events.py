"""
The events decoded from the player, and the control messages sent back to it.

Each event is a value object. Consumers can either check the type, or implement
EventVisitor and call event.apply(visitor).
"""
from abc import abstractmethod

from spotify_info.support.mixins import CommonEqualityMixin, StringerMixin
from spotify_info.track import PlaybackState, TrackInfo


class EventVisitor:
    """
    Receives a callback for each kind of event. The default implementations do nothing.
    """

    def track_changed(self, event: 'TrackChanged'):
        """ the user changed the track """

    def state_changed(self, event: 'StateChanged'):
        """ the track was played, paused or stopped. Not sent when the track changes. """

    def progress_changed(self, event: 'ProgressChanged'):
        """ the position within the track. Sent periodically while playing. """


class Event(CommonEqualityMixin, StringerMixin):
    """
    The base class for the events sent by the player.
    """

    @abstractmethod
    def apply(self, visitor: EventVisitor):
        raise NotImplementedError()


class TrackChanged(Event):
    def __init__(self, track: TrackInfo):
        self.track = track

    def apply(self, visitor: EventVisitor):
        return visitor.track_changed(self)


class StateChanged(Event):
    def __init__(self, state: PlaybackState):
        self.state = PlaybackState.from_code(state)

    def apply(self, visitor: EventVisitor):
        return visitor.state_changed(self)


class ProgressChanged(Event):
    """
    :param fraction: the position as a fraction of the track length, nominally 0..1.
        Values outside that range are passed through as received.
    """
    def __init__(self, fraction: float):
        self.fraction = fraction

    def apply(self, visitor: EventVisitor):
        return visitor.progress_changed(self)


class ControlMessage(CommonEqualityMixin, StringerMixin):
    """
    A message sent to the player.
    """


class ProgressUpdateInterval(ControlMessage):
    """
    Asks the player to send ProgressChanged events at the given interval.
    :param milliseconds: the interval between progress updates
    """
    def __init__(self, milliseconds: int):
        milliseconds = int(milliseconds)
        if milliseconds < 0:
            raise ValueError("invalid progress interval %d" % milliseconds)
        self.milliseconds = milliseconds
