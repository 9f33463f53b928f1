import json

from body_overlay.config import AppConfig, load_config


def write(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "nope.json") == AppConfig()


def test_malformed_file_gives_defaults(tmp_path):
    assert load_config(write(tmp_path, "{oops")) == AppConfig()
    assert load_config(write(tmp_path, "[1, 2]")) == AppConfig()


def test_values_are_parsed(tmp_path):
    cfg = load_config(write(tmp_path, {
        "tracking": {"backend": "Replay", "recording_path": "rec.json", "min_visibility": "0.7"},
        "overlay": {"skeleton_2d": "body_torso_12", "marker_radius_2d": 8},
        "reset": {"policy": "IMMEDIATE", "debounce_seconds": 1.5},
        "display": {"orientation": "portrait", "mirror": "yes", "fps": 15, "show_2d": 1},
    }))

    assert cfg.tracking.backend == "replay"
    assert cfg.tracking.recording_path == "rec.json"
    assert cfg.tracking.min_visibility == 0.7
    assert cfg.overlay.skeleton_2d == "BODY_TORSO_12"
    assert cfg.overlay.marker_radius_2d == 8.0
    assert cfg.reset.policy == "immediate"
    assert cfg.reset.debounce_seconds == 1.5
    assert cfg.display.orientation == "portrait"
    assert cfg.display.mirror is True
    assert cfg.display.fps == 15
    assert cfg.display.show_2d is True
    assert cfg.display.show_3d is False


def test_out_of_range_values_fall_back(tmp_path):
    cfg = load_config(write(tmp_path, {
        "tracking": {"min_visibility": 3, "model_complexity": 7, "camera_index": -2},
        "overlay": {"skeleton_2d": "COCO", "skeleton_3d": "nope"},
        "reset": {"policy": "whenever", "debounce_seconds": -1},
        "display": {"fps": 0},
    }))

    assert cfg.tracking.min_visibility == 0.5
    assert cfg.tracking.model_complexity == 1
    assert cfg.tracking.camera_index == 0
    assert cfg.overlay.skeleton_2d == "BODY_17"
    assert cfg.overlay.skeleton_3d == "BLAZEPOSE_33"
    assert cfg.reset.policy == "debounced"
    assert cfg.reset.debounce_seconds == 2.0
    assert cfg.display.fps == 30
