from enum import Enum


class SpotifyInfoError(Exception):
    """ base class for the errors raised by this package. """


class TransportError(SpotifyInfoError, IOError):
    """
    A socket level failure: binding, accepting, reading or writing.
    Fatal to the connection it occurred on, never to the listener.
    """


class HandshakeError(TransportError):
    """ The WebSocket upgrade was malformed or rejected. Only the attempted connection is lost. """


class ListenerClosedError(TransportError):
    """ Raised by a blocking accept once the listener has been asked to stop. """


class DecodeErrorKind(Enum):
    INVALID_DATA = 'InvalidData'
    UNSUPPORTED_FRAME = 'UnsupportedFrame'


class DecodeError(SpotifyInfoError, ValueError):
    """
    A frame could not be decoded into an event. The connection remains usable.
    :param frame: the offending frame
    """
    kind = None

    def __init__(self, message, frame=None):
        super().__init__(message)
        self.frame = frame


class InvalidDataError(DecodeError):
    """ The frame is malformed, too short or of an unknown kind. """
    kind = DecodeErrorKind.INVALID_DATA


class UnsupportedFrameError(DecodeError):
    """ The frame is not a text frame. """
    kind = DecodeErrorKind.UNSUPPORTED_FRAME
