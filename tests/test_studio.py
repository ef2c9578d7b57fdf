"""Keyboard routing and end-to-end wiring."""

from stopmotion.studio import Studio

from .conftest import FakeSource


def make_studio(json_store, clock, bitmap):
    return Studio(store=json_store, source=FakeSource(bitmap), timer_factory=clock.timer)


def test_keys_ignored_without_open_project(json_store, clock, bitmap):
    studio = make_studio(json_store, clock, bitmap)
    assert not studio.handle_key(" ")
    assert len(studio.frames) == 0


def test_capture_play_and_onion_keys(json_store, clock, bitmap):
    studio = make_studio(json_store, clock, bitmap)
    studio.manager.open(studio.manager.projects[0])
    assert studio.handle_key(" ")
    assert studio.handle_key(" ")
    assert len(studio.frames) == 2
    assert studio.session.cursor == 1
    assert studio.handle_key("p")
    assert studio.scheduler.is_playing
    assert studio.handle_key("p")
    assert not studio.scheduler.is_playing
    assert studio.handle_key("o")
    assert studio.onion.depth == 1
    assert not studio.handle_key("x")


def test_shutdown_flushes_captures(json_store, clock, bitmap):
    studio = make_studio(json_store, clock, bitmap)
    studio.manager.open(studio.manager.projects[0])
    studio.handle_key(" ")
    studio.shutdown()
    (project,) = json_store.load_all()
    assert len(project.frames) == 1
    assert studio.pipeline.source.closed >= 1
