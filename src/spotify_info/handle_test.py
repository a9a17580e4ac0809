import threading
import unittest

import timeout_decorator
from hamcrest import assert_that, is_, none, equal_to

from spotify_info.handle import Handle
from spotify_info.support.loop_test import debug_timeout
from spotify_info.track import PlaybackState, TrackInfo


def numbered_track(n):
    """ every field derives from n, so a mix of two tracks is detectable """
    return TrackInfo('id%d' % n, 'uri%d' % n, PlaybackState.PLAYING, n, 'title%d' % n, 'album%d' % n,
                     'artist%d' % n, 'cover%d' % n, 'background%d' % n)


def is_consistent(track):
    n = track.duration_ms
    return track == numbered_track(n)


class HandleTest(unittest.TestCase):
    def test_empty_until_updated(self):
        sut = Handle()
        assert_that(sut.read(), is_(none()))
        assert_that(sut.progress, is_(none()))

    def test_read_latest(self):
        sut = Handle()
        sut.update(numbered_track(1))
        sut.update(numbered_track(2))
        assert_that(sut.read(), is_(equal_to(numbered_track(2))))

    def test_update_state_replaces_the_state(self):
        sut = Handle()
        sut.update(numbered_track(1))
        sut.update_state(PlaybackState.PAUSED)
        track = sut.read()
        assert_that(track.state, is_(PlaybackState.PAUSED))
        assert_that(track.title, is_('title1'))

    def test_update_state_without_a_track_is_ignored(self):
        sut = Handle()
        sut.update_state(PlaybackState.PLAYING)
        assert_that(sut.read(), is_(none()))

    def test_progress(self):
        sut = Handle()
        sut.update_progress(0.25)
        assert_that(sut.progress, is_(0.25))

    def test_clones_share_the_snapshot(self):
        sut = Handle()
        clone = sut.clone()
        sut.update(numbered_track(3))
        assert_that(clone.read(), is_(equal_to(numbered_track(3))))
        assert_that(Handle().read(), is_(none()))

    def test_read_does_not_block_while_the_writer_holds_the_lock(self):
        sut = Handle()
        sut.update(numbered_track(1))
        assert_that(sut.read(), is_(equal_to(numbered_track(1))))
        cell = sut._cell
        with cell.lock:
            cell.track = numbered_track(2)
            assert_that(sut.read(), is_(equal_to(numbered_track(1))))
            assert_that(Handle(cell).read(), is_(none()))
        assert_that(sut.read(), is_(equal_to(numbered_track(2))))

    @timeout_decorator.timeout(debug_timeout(10))
    def test_concurrent_readers_never_see_a_torn_track(self):
        sut = Handle()
        sut.update(numbered_track(0))
        writes = 2000
        done = threading.Event()
        failures = []
        reads = []

        def reader(handle):
            count = 0
            last = 0
            while not done.is_set():
                track = handle.read()
                if track is None:
                    continue
                count += 1
                if not is_consistent(track):
                    failures.append(track)
                elif track.duration_ms < last:
                    failures.append(('went backwards', last, track))
                else:
                    last = track.duration_ms
            reads.append(count)

        readers = [threading.Thread(target=reader, args=(sut.clone(),)) for _ in range(4)]
        for t in readers:
            t.start()
        for n in range(1, writes + 1):
            sut.update(numbered_track(n))
        done.set()
        for t in readers:
            t.join()

        assert_that(failures, is_([]))
        assert_that(len(reads), is_(4))
        assert_that(sut.read(), is_(equal_to(numbered_track(writes))))
