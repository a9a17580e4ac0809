import threading
import unittest
from unittest.mock import Mock

import timeout_decorator
from hamcrest import assert_that, is_, calling, raises, equal_to, instance_of

from spotify_info.codecs import JsonCodec
from spotify_info.conduit.base_test import QueueConduit
from spotify_info.connection import Connection, ConnectionClosedEvent
from spotify_info.errors import InvalidDataError, TransportError, UnsupportedFrameError
from spotify_info.events import ProgressUpdateInterval, StateChanged, ProgressChanged
from spotify_info.support.cancellation import CancellationToken
from spotify_info.support.events import EventSource
from spotify_info.support.loop_test import debug_timeout
from spotify_info.track import PlaybackState


class ConnectionTest(unittest.TestCase):
    def setUp(self):
        self.conduit = QueueConduit('producer')
        self.token = CancellationToken()
        self.events = EventSource()
        self.listener = Mock()
        self.events += self.listener
        self.sut = Connection(self.conduit, token=self.token, poll_interval=0.01, events=self.events)

    def test_defaults(self):
        sut = Connection(self.conduit)
        assert_that(sut.poll_interval, is_(0.5))
        assert_that(sut.closed, is_(False))
        assert_that(sut.target, is_('producer'))

    def test_receive_decodes_frames_in_order(self):
        self.conduit.put('STATE_CHANGED;2', 'PROGRESS_CHANGED;0.5')
        assert_that(self.sut.receive_next(), is_(equal_to(StateChanged(PlaybackState.PLAYING))))
        assert_that(self.sut.receive_next(), is_(equal_to(ProgressChanged(0.5))))

    def test_decode_error_leaves_connection_open(self):
        self.conduit.put('STATE_CHANGED', b'\x00', 'STATE_CHANGED;1')
        assert_that(calling(self.sut.receive_next), raises(InvalidDataError))
        assert_that(calling(self.sut.receive_next), raises(UnsupportedFrameError))
        assert_that(self.sut.receive_next(), is_(equal_to(StateChanged(PlaybackState.PAUSED))))
        assert_that(self.sut.closed, is_(False))

    def test_peer_close_ends_the_connection(self):
        self.conduit.end()
        assert_that(self.sut.receive_next(), is_(None))
        assert_that(self.sut.closed, is_(True))
        assert_that(self.conduit.open, is_(False))
        assert_that(self.sut.receive_next(), is_(None))

    def test_close_fires_event_once(self):
        self.sut.close()
        self.sut.close()
        self.listener.assert_called_once()
        event = self.listener.call_args[0][0]
        assert_that(event, is_(instance_of(ConnectionClosedEvent)))
        assert_that(event.connection, is_(self.sut))

    @timeout_decorator.timeout(debug_timeout(2))
    def test_cancelled_token_ends_the_connection(self):
        self.token.cancel()
        assert_that(self.sut.receive_next(), is_(None))
        assert_that(self.sut.closed, is_(True))

    @timeout_decorator.timeout(debug_timeout(2))
    def test_cancel_while_waiting_returns_promptly(self):
        threading.Timer(0.05, self.token.cancel).start()
        assert_that(self.sut.receive_next(), is_(None))

    def test_read_failure_closes_the_connection(self):
        self.conduit.receive = Mock(side_effect=ConnectionResetError("reset"))
        assert_that(self.sut.receive_next(), is_(None))
        assert_that(self.sut.closed, is_(True))

    def test_send_control(self):
        self.sut.send_control(ProgressUpdateInterval(250))
        assert_that(self.conduit.sent, is_(['SET_PROGRESS_INTERVAL;250']))

    def test_send_control_uses_the_codec(self):
        sut = Connection(self.conduit, JsonCodec())
        sut.send_control(ProgressUpdateInterval(250))
        assert_that(self.conduit.sent, is_(['{"ProgressUpdateInterval":250}']))

    def test_send_failure_closes_the_connection(self):
        self.conduit.close()
        assert_that(calling(self.sut.send_control).with_args(ProgressUpdateInterval(1)), raises(TransportError))
        assert_that(self.sut.closed, is_(True))

    def test_socket_error_on_send_is_a_transport_error(self):
        self.conduit.send = Mock(side_effect=BrokenPipeError())
        assert_that(calling(self.sut.send_control).with_args(ProgressUpdateInterval(1)), raises(TransportError))
        assert_that(self.sut.closed, is_(True))

    def test_context_manager_closes(self):
        with self.sut as connection:
            assert_that(connection, is_(self.sut))
        assert_that(self.sut.closed, is_(True))
