"""Playback scheduler timing, driven by the manual clock."""

from stopmotion.playback import PlaybackScheduler

from .conftest import make_frame


def scheduler_for(session, clock):
    return PlaybackScheduler(session, timer_factory=clock.timer)


class TestPlayback:
    def test_four_frames_at_four_fps_wrap_after_one_second(self, filled_session, clock):
        filled_session.project.fps = 4
        sched = scheduler_for(filled_session, clock)
        ticks = []
        sched.cursor_changed.connect(ticks.append)
        sched.start()
        clock.advance(999)
        assert ticks == [1, 2, 3]
        clock.advance(1)
        assert ticks == [1, 2, 3, 0]
        assert sched.cursor == 0

    def test_no_tick_after_stop(self, filled_session, clock):
        filled_session.project.fps = 4
        sched = scheduler_for(filled_session, clock)
        sched.start()
        clock.advance(300)
        assert sched.cursor == 1
        sched.stop()
        clock.advance(5000)
        assert sched.cursor == 1
        assert not sched.is_playing

    def test_start_on_empty_sequence_is_noop(self, session, clock):
        sched = scheduler_for(session, clock)
        sched.start()
        assert not sched.is_playing
        clock.advance(1000)
        assert sched.cursor == 0

    def test_start_twice_does_not_double_tick(self, filled_session, clock):
        filled_session.project.fps = 4
        sched = scheduler_for(filled_session, clock)
        sched.start()
        sched.start()
        clock.advance(250)
        assert sched.cursor == 1

    def test_resumes_from_retained_cursor(self, filled_session, clock):
        filled_session.project.fps = 10
        sched = scheduler_for(filled_session, clock)
        sched.start()
        clock.advance(200)
        sched.stop()
        assert sched.cursor == 2
        sched.start()
        clock.advance(100)
        assert sched.cursor == 3

    def test_fps_change_applies_after_one_stale_tick(self, filled_session, clock):
        filled_session.project.fps = 4
        sched = scheduler_for(filled_session, clock)
        sched.start()
        clock.advance(100)
        filled_session.project.fps = 10
        # the pending tick still fires on the old 250ms interval
        clock.advance(149)
        assert sched.cursor == 0
        clock.advance(1)
        assert sched.cursor == 1
        clock.advance(100)
        assert sched.cursor == 2

    def test_sequence_growth_picked_up_on_next_tick(self, filled_session, clock):
        filled_session.project.fps = 4
        sched = scheduler_for(filled_session, clock)
        sched.seek(3)
        sched.start()
        filled_session.store.append(make_frame("e"))
        clock.advance(250)
        assert sched.cursor == 4

    def test_emptied_sequence_stops_playback(self, filled_session, clock):
        filled_session.project.fps = 4
        sched = scheduler_for(filled_session, clock)
        sched.start()
        filled_session.store.delete_indices({0, 1, 2, 3})
        clock.advance(250)
        assert not sched.is_playing
        assert sched.cursor == 0


class TestNavigation:
    def test_cursor_clamped_after_delete(self, filled_session, clock):
        sched = scheduler_for(filled_session, clock)
        sched.seek(3)
        filled_session.store.delete_indices({2, 3})
        assert sched.cursor == 1

    def test_step_stops_and_clamps(self, filled_session, clock):
        filled_session.project.fps = 4
        sched = scheduler_for(filled_session, clock)
        sched.start()
        sched.step(10)
        assert not sched.is_playing
        assert sched.cursor == 3
        sched.step(-10)
        assert sched.cursor == 0

    def test_interval_from_fps(self, filled_session, clock):
        sched = scheduler_for(filled_session, clock)
        filled_session.project.fps = 12
        assert sched.interval_ms == 83
        filled_session.project.fps = 24
        assert sched.interval_ms == 41
