import pytest

from tracklog.errors import EmptyTrackError
from tracklog.models import Track
from tracklog.recorder import TrackRecorder
from tracklog.visualize import accuracy_color, create_track_map

from conftest import make_fix


def test_accuracy_color_bands():
    assert accuracy_color(None) == "gray"
    assert accuracy_color(4.0) == "green"
    assert accuracy_color(15.0) == "orange"
    assert accuracy_color(60.0) == "red"


def test_track_map_is_written(tmp_path):
    recorder = TrackRecorder()
    recorder.add_fix(make_fix(52.52, 13.405, t=0.0))
    recorder.add_fix(make_fix(52.521, 13.406, t=30.0))
    recorder.add_fix(make_fix(52.521, 13.406, accuracy=None, t=60.0))

    output = tmp_path / "track.html"
    create_track_map(recorder.track, str(output))

    html = output.read_text()
    assert "Stopovers: 1" in html
    assert "Waypoints: 3" in html


def test_empty_track_has_no_map(tmp_path):
    with pytest.raises(EmptyTrackError):
        create_track_map(Track(), str(tmp_path / "empty.html"))
