import pytest

from body_overlay.app import BodyOverlayWindow, apply_cli_overrides, build_arg_parser, build_session
from body_overlay.canvas import JointOverlayCanvas, Skeleton3DView
from body_overlay.config import AppConfig, DisplayConfig, OverlayConfig, ResetConfig
from body_overlay.controls import ControlPanel
from body_overlay.models import Marker2D, Marker3D
from body_overlay.overlay import OverlayStore
from body_overlay.session import ReplaySession, UnsupportedDeviceError
from body_overlay.status import TrackingStatus


def replay_data():
    joints = {"nose": {"x": 0.5, "y": 0.2, "tracked": True}, "left_wrist": {"x": 0.3, "y": 0.6, "tracked": False}}
    return {"image_size": [640, 480], "frames": [{"timestamp": 0.0, "body": {"joints": joints}}]}


def test_control_panel_signals(qtbot):
    panel = ControlPanel()
    qtbot.addWidget(panel)

    with qtbot.waitSignal(panel.show_2d_changed) as blocker:
        panel.joints_2d_btn.click()
    assert blocker.args == [True]

    panel.joints_3d_btn.click()
    with qtbot.waitSignal(panel.clear_requested):
        panel.clear_btn.click()
    assert not panel.joints_2d_btn.isChecked()
    assert not panel.joints_3d_btn.isChecked()


def test_control_panel_labels(qtbot):
    panel = ControlPanel()
    qtbot.addWidget(panel)

    panel.set_tracking_status(TrackingStatus(("neck",)))
    assert panel.warning_label.text() == "Untracked joints:\nneck"

    panel.set_body_anchor_present(True)
    assert panel.presence_label.text() == "Body anchor presence: true"


def test_canvas_as_overlay_surface(qtbot):
    canvas = JointOverlayCanvas()
    qtbot.addWidget(canvas)
    store = OverlayStore(canvas)

    store.add(Marker2D((10.0, 10.0)))
    store.add(Marker2D((10.0, 10.0)))
    assert len(canvas.markers) == 2

    store.clear()
    assert canvas.markers == []


def test_3d_view_projects_markers(qtbot):
    view = Skeleton3DView()
    qtbot.addWidget(view)
    view.resize(400, 400)
    store = OverlayStore(view)
    store.add(Marker3D((0.0, 0.0, 1.0)))
    store.add(Marker3D((0.0, 0.0, -1.0)))

    projected = view.projected_markers()
    # 먼 것부터 그림
    assert projected[0][0].position == (0.0, 0.0, 1.0)
    assert projected[1][3] > projected[0][3]


def test_window_wires_processor_to_panel(qtbot):
    session = ReplaySession.from_dict(replay_data())
    config = AppConfig(display=DisplayConfig(show_2d=True), reset=ResetConfig(policy="immediate"),
                       overlay=OverlayConfig(skeleton_2d="BODY_17"))
    window = BodyOverlayWindow(session, config)
    qtbot.addWidget(window)

    assert session.delegate is window.processor
    assert window.control_panel.joints_2d_btn.isChecked()

    session.step()

    assert window.control_panel.warning_label.text().startswith("Untracked joints:")
    assert "left_wrist" in window.control_panel.warning_label.text()
    assert [m.joint_name for m in window.canvas.markers] == ["nose"]
    assert session.run_history

    window.control_panel.clear_btn.click()
    assert window.canvas.markers == []
    assert not window.processor.toggles.show_2d


def test_build_session_from_cli(tmp_path):
    args = build_arg_parser().parse_args(["--replay", str(tmp_path / "missing.json"), "--policy", "immediate"])
    config = apply_cli_overrides(AppConfig(), args)

    assert config.tracking.backend == "replay"
    assert config.reset.policy == "immediate"
    with pytest.raises(UnsupportedDeviceError):
        build_session(config)


def test_unknown_backend_is_unsupported():
    from body_overlay.config import TrackingConfig
    with pytest.raises(UnsupportedDeviceError):
        build_session(AppConfig(tracking=TrackingConfig(backend="kinect")))
