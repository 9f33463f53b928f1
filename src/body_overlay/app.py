"""
Body Overlay Viewer - Main Application Window
"""

import argparse
import dataclasses
import logging
import sys
from typing import Optional

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QStatusBar, QSplitter
)
from PySide6.QtCore import Qt, QTimer

from .canvas import JointOverlayCanvas, Skeleton3DView
from .config import AppConfig, load_config
from .controls import ControlPanel
from .models import DisplayToggles, Orientation
from .overlay import OverlayStore
from .processor import FrameProcessor, ResetPolicy
from .session import RecordingFormatError, ReplaySession, SessionRecorder, TrackingSession, UnsupportedDeviceError
from .skeletons import get_skeleton
from .status import TrackingStatus
from .timers import QtDeadlineTimer

logger = logging.getLogger(__name__)


def parse_orientation(value: str) -> Orientation:
    try:
        return Orientation(str(value).strip().lower())
    except ValueError:
        logger.warning("unknown orientation %r; using landscape_right", value)
        return Orientation.LANDSCAPE_RIGHT


class BodyOverlayWindow(QMainWindow):
    """메인 윈도우"""

    def __init__(self, session: TrackingSession, config: Optional[AppConfig] = None,
                 record_path: Optional[str] = None):
        super().__init__()
        self.config = config or AppConfig()
        self.session = session
        self.record_path = record_path

        self._setup_ui()

        overlay_cfg = self.config.overlay
        display_cfg = self.config.display
        orientation = parse_orientation(display_cfg.orientation)
        self.canvas.set_orientation(orientation, display_cfg.mirror)

        self.reset_timer = QtDeadlineTimer(self)
        self.processor = FrameProcessor(
            session,
            joints_2d=get_skeleton(overlay_cfg.skeleton_2d).joint_names,
            joints_3d=get_skeleton(overlay_cfg.skeleton_3d).joint_names,
            overlay_2d=OverlayStore(self.canvas),
            overlay_3d=OverlayStore(self.view_3d),
            reset_timer=self.reset_timer,
            reset_policy=ResetPolicy.parse(self.config.reset.policy),
            debounce_seconds=self.config.reset.debounce_seconds,
            toggles=DisplayToggles(display_cfg.show_2d, display_cfg.show_3d),
            viewport_size=(float(self.canvas.width()), float(self.canvas.height())),
            orientation=orientation,
            mirror=display_cfg.mirror,
            marker_radius_2d=overlay_cfg.marker_radius_2d,
            marker_color_2d=overlay_cfg.marker_color_2d,
            marker_radius_3d=overlay_cfg.marker_radius_3d,
            marker_color_3d=overlay_cfg.marker_color_3d,
        )
        logger.info("reset policy: %s", self.processor.reset_policy.value)

        self.recorder = SessionRecorder(self.processor) if record_path else None
        session.delegate = self.recorder or self.processor

        # 세션 스텝 타이머 (메인 스레드에서 프레임 처리)
        self.step_timer = QTimer(self)
        self.step_timer.timeout.connect(self._on_timer_tick)

        self._connect_signals()
        self.control_panel.set_toggles(display_cfg.show_2d, display_cfg.show_3d)

    def _setup_ui(self):
        self.setWindowTitle("Body Overlay Viewer")
        self.setMinimumSize(1100, 700)
        self.setStyleSheet("""
            QMainWindow {
                background-color: #1a1a2e;
            }
            QStatusBar {
                background-color: #16213e;
                color: #e0e0e0;
            }
        """)

        central = QWidget()
        self.setCentralWidget(central)

        outer_layout = QVBoxLayout(central)
        outer_layout.setContentsMargins(10, 10, 10, 10)

        self.canvas = JointOverlayCanvas()

        # 오른쪽: 3D 뷰 + 컨트롤 패널
        side = QWidget()
        side_layout = QVBoxLayout(side)
        side_layout.setContentsMargins(0, 0, 0, 0)
        self.view_3d = Skeleton3DView()
        self.control_panel = ControlPanel()
        side_layout.addWidget(self.view_3d, 1)
        side_layout.addWidget(self.control_panel)
        side.setFixedWidth(320)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.canvas)
        splitter.addWidget(side)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 0)

        content = QHBoxLayout()
        content.addWidget(splitter)
        outer_layout.addLayout(content, 1)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

    def _connect_signals(self):
        self.control_panel.show_2d_changed.connect(self.processor.set_show_2d)
        self.control_panel.show_3d_changed.connect(self.processor.set_show_3d)
        self.control_panel.clear_requested.connect(self.processor.clear)
        self.canvas.resized.connect(self._on_canvas_resized)

        self.processor.frame_listeners.append(lambda frame: self.canvas.set_frame_image(frame.image))
        self.processor.status_listeners.append(self._on_status)
        self.processor.presence_listeners.append(self.control_panel.set_body_anchor_present)

    def _on_canvas_resized(self, width: float, height: float):
        self.processor.set_viewport((width, height))

    def _on_status(self, status: TrackingStatus):
        self.control_panel.set_tracking_status(status)

    def start(self):
        self.session.start()
        fps = max(1, self.config.display.fps)
        self.step_timer.start(int(1000 / fps))
        self.status_bar.showMessage(f"✓ {self.session.name()} 세션 시작")

    def _on_timer_tick(self):
        if not self.session.step():
            self.step_timer.stop()
            self.status_bar.showMessage("■ 세션 종료")

    def closeEvent(self, event):
        self.step_timer.stop()
        self.processor.shutdown()
        self.session.close()
        if self.recorder is not None:
            self.recorder.save(self.record_path)
        super().closeEvent(event)


def build_session(config: AppConfig) -> TrackingSession:
    """설정에 맞는 트래킹 세션 생성 (사용 불가 시 UnsupportedDeviceError)"""
    tracking = config.tracking
    if tracking.backend == "replay":
        if not tracking.recording_path:
            raise UnsupportedDeviceError("replay backend needs a recording path")
        return ReplaySession.from_file(tracking.recording_path, loop=tracking.loop_replay)
    if tracking.backend == "mediapipe":
        from .mediapipe_session import MediaPipeSession
        return MediaPipeSession(
            camera_index=tracking.camera_index,
            model_complexity=tracking.model_complexity,
            min_detection_confidence=tracking.min_detection_confidence,
            min_tracking_confidence=tracking.min_tracking_confidence,
            min_visibility=tracking.min_visibility,
        )
    raise UnsupportedDeviceError(f"unknown tracking backend {tracking.backend!r}")


def apply_cli_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    tracking = config.tracking
    if args.replay:
        tracking = dataclasses.replace(tracking, backend="replay", recording_path=args.replay)
    if args.camera is not None:
        tracking = dataclasses.replace(tracking, backend="mediapipe", camera_index=args.camera)
    reset = config.reset
    if args.policy:
        reset = dataclasses.replace(reset, policy=args.policy)
    return dataclasses.replace(config, tracking=tracking, reset=reset)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="body-overlay", description="Body tracking overlay viewer")
    parser.add_argument("--config", help="Path to a JSON config file.")
    parser.add_argument("--replay", help="Replay a recorded session JSON instead of the camera.")
    parser.add_argument("--camera", type=int, help="Camera index for live MediaPipe tracking.")
    parser.add_argument("--policy", choices=[p.value for p in ResetPolicy], help="Tracking reset policy.")
    parser.add_argument("--record", help="Save the tracked session to this JSON file on exit.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    config = apply_cli_overrides(load_config(args.config), args)
    try:
        session = build_session(config)
        session.check_supported()
    except (UnsupportedDeviceError, RecordingFormatError) as e:
        logger.critical("Body tracking is not available: %s", e)
        sys.exit(f"Body tracking is not available: {e}")

    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    window = BodyOverlayWindow(session, config, record_path=args.record)
    window.show()
    window.start()
    sys.exit(app.exec())


def run_app():
    """Entry point for the application."""
    main()


if __name__ == "__main__":
    main()
