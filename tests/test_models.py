"""Frame and Project records."""

import pytest

from stopmotion.models import Frame, Project

from .conftest import make_frame


def test_derived_fields_follow_frames():
    p = Project(name="p", fps=4)
    assert p.thumbnail is None
    assert p.duration == 0
    p.frames.extend([make_frame("a"), make_frame("b")])
    assert p.thumbnail == "thumb-a"
    assert p.duration == pytest.approx(0.5)


def test_stored_projections_are_ignored_on_load():
    data = Project(name="p", frames=[make_frame("a")]).to_dict()
    data["thumbnail"] = "stale"
    data["duration"] = 99
    loaded = Project.from_dict(data)
    assert loaded.thumbnail == "thumb-a"
    assert loaded.duration == pytest.approx(1 / 12)


def test_from_dict_tolerates_gaps():
    loaded = Project.from_dict({"name": "x", "fps": "junk", "frames": [{"id": "1"}, make_frame("b").to_dict()]})
    assert loaded.fps == 12
    assert [f.image for f in loaded.frames] == ["full-b"]
    assert loaded.last_modified == loaded.created_at


def test_frame_copy_has_new_identity():
    f = Frame(image="i", thumbnail="t", imported=True)
    c = f.copy()
    assert c.id != f.id
    assert (c.image, c.thumbnail, c.imported) == ("i", "t", True)


@pytest.mark.parametrize("record", [
    {"image": None, "thumbnail": None},
    {"image": "full-a", "thumbnail": None},
    {"image": 42, "thumbnail": "thumb-a"},
    {"image": "", "thumbnail": "thumb-a"},
    None,
])
def test_frames_without_usable_payloads_are_dropped(record):
    loaded = Project.from_dict({"name": "x", "frames": [record, make_frame("b").to_dict()]})
    assert [f.image for f in loaded.frames] == ["full-b"]
