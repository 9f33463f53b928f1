"""
FrameProcessor - keeps joint overlays and tracking status in sync with a session.

Two independent event streams drive it:
- per-frame 2D skeletons: classify joints, redraw 2D markers, report status and
  apply the tracking reset policy
- anchor updates/removals: redraw 3D markers for body anchors, track presence
"""

import enum
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .geometry import apply_transform, compose_transforms, decompose_transform, display_transform, to_view_pixels
from .models import (
    Anchor, BodyAnchor, BodyFrame, DisplayToggles, Marker2D, Marker3D, Orientation, RunOptions,
)
from .overlay import OverlayStore
from .session import SessionDelegate, TrackingSession
from .status import TrackingStatus, compute_tracking_status
from .timers import DeadlineTimer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 2.0


class ResetPolicy(enum.Enum):
    """트래킹 리셋 정책"""
    # 매 프레임: 전부 추적되면 리셋, 아니면 기존 앵커 제거
    IMMEDIATE = "immediate"
    # 전부 추적되면 디바운스 타이머 후 한 번만 리셋
    DEBOUNCED = "debounced"

    @classmethod
    def parse(cls, value: str) -> "ResetPolicy":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown reset policy {value!r}; expected 'immediate' or 'debounced'") from None


class FrameProcessor(SessionDelegate):
    """세션 이벤트를 받아 2D/3D 오버레이와 추적 상태를 갱신"""

    def __init__(
        self,
        session: TrackingSession,
        joints_2d: Sequence[str],
        joints_3d: Sequence[str],
        overlay_2d: Optional[OverlayStore] = None,
        overlay_3d: Optional[OverlayStore] = None,
        reset_timer: Optional[DeadlineTimer] = None,
        reset_policy: ResetPolicy = ResetPolicy.DEBOUNCED,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        toggles: Optional[DisplayToggles] = None,
        viewport_size: Tuple[float, float] = (640.0, 480.0),
        orientation: Orientation = Orientation.LANDSCAPE_RIGHT,
        mirror: bool = False,
        marker_radius_2d: float = 5.0,
        marker_color_2d: str = "#00FF00",
        marker_radius_3d: float = 0.025,
        marker_color_3d: str = "#0000FF",
    ):
        if reset_policy is ResetPolicy.DEBOUNCED and reset_timer is None:
            raise ValueError("debounced reset policy needs a reset_timer")

        self.session = session
        self.joints_2d = tuple(joints_2d)
        self.joints_3d = tuple(joints_3d)
        self.overlay_2d = overlay_2d if overlay_2d is not None else OverlayStore()
        self.overlay_3d = overlay_3d if overlay_3d is not None else OverlayStore()
        self.reset_timer = reset_timer
        self.reset_policy = reset_policy
        self.debounce_seconds = float(debounce_seconds)
        self.toggles = toggles if toggles is not None else DisplayToggles()
        self.viewport_size = tuple(viewport_size)
        self.orientation = orientation
        self.mirror = mirror

        self.marker_radius_2d = marker_radius_2d
        self.marker_color_2d = marker_color_2d
        self.marker_radius_3d = marker_radius_3d
        self.marker_color_3d = marker_color_3d

        self.status: Optional[TrackingStatus] = None
        self.body_anchor_present: bool = False
        self.frame_listeners: List[Callable[[BodyFrame], None]] = []
        self.status_listeners: List[Callable[[TrackingStatus], None]] = []
        self.presence_listeners: List[Callable[[bool], None]] = []

    # --- UI 액션 ---

    def set_show_2d(self, show: bool):
        self.toggles.show_2d = bool(show)
        if not show:
            self.overlay_2d.clear()

    def set_show_3d(self, show: bool):
        self.toggles.show_3d = bool(show)
        if not show:
            self.overlay_3d.clear()

    def clear(self):
        """두 토글을 끄고 오버레이를 즉시 비움"""
        self.set_show_2d(False)
        self.set_show_3d(False)

    def set_viewport(self, size: Tuple[float, float], orientation: Optional[Orientation] = None):
        self.viewport_size = (float(size[0]), float(size[1]))
        if orientation is not None:
            self.orientation = orientation

    def shutdown(self):
        if self.reset_timer is not None:
            self.reset_timer.cancel()

    # --- 2D 경로 ---

    def on_frame(self, frame: BodyFrame) -> Optional[TrackingStatus]:
        for listener in self.frame_listeners:
            listener(frame)

        skeleton = frame.detected_body
        if skeleton is None:
            return None

        self.overlay_2d.clear()
        tracked = skeleton.tracked_by_name(self.joints_2d)
        status = compute_tracking_status(self.joints_2d, tracked)

        if self.toggles.show_2d:
            transform = display_transform(frame.image_size, self.viewport_size, self.orientation, self.mirror)
            drawn = set()
            for name in self.joints_2d:
                if not tracked[name] or name in drawn:
                    continue
                drawn.add(name)
                normalized = apply_transform(skeleton.landmark(skeleton.index_for(name)), transform)
                center = to_view_pixels(normalized, self.viewport_size)
                self.overlay_2d.add(Marker2D(center, self.marker_radius_2d, self.marker_color_2d, name))

        self._set_status(status)
        self._apply_reset_policy(status)
        return status

    def _set_status(self, status: TrackingStatus):
        self.status = status
        for listener in self.status_listeners:
            listener(status)

    def _apply_reset_policy(self, status: TrackingStatus):
        if self.reset_policy is ResetPolicy.IMMEDIATE:
            if status.all_tracked:
                self.session.run(RunOptions.RESET_TRACKING)
            else:
                self.session.run(RunOptions.REMOVE_EXISTING_ANCHORS)
            return

        # 이미 설정된 타이머는 건드리지 않음 (연속된 '전부 추적' 프레임은 리셋 한 번으로 합침)
        if status.all_tracked and not self.reset_timer.is_armed:
            logger.debug("all joints tracked; reset armed for %.2fs", self.debounce_seconds)
            self.reset_timer.arm(self.debounce_seconds, self._reset_tracking)

    def _reset_tracking(self):
        logger.info("resetting tracking after %.2fs of full tracking", self.debounce_seconds)
        self.session.run(RunOptions.RESET_TRACKING)

    # --- 3D 경로 ---

    def on_anchors_updated(self, anchors: Sequence[Anchor]) -> None:
        for anchor in anchors:
            if not isinstance(anchor, BodyAnchor):
                continue
            self._set_presence(True)
            self.overlay_3d.clear()
            if not self.toggles.show_3d:
                continue
            for name in self.joints_3d:
                model = anchor.model_transform(name)
                if model is None:
                    continue
                position, rotation = decompose_transform(compose_transforms(anchor.transform, model))
                self.overlay_3d.add(Marker3D(position, rotation, self.marker_radius_3d, self.marker_color_3d, name))

    def on_anchors_removed(self, anchors: Sequence[Anchor]) -> None:
        if any(isinstance(anchor, BodyAnchor) for anchor in anchors):
            self.overlay_3d.clear()
            self._set_presence(False)

    def _set_presence(self, present: bool):
        if present != self.body_anchor_present:
            logger.debug("body anchor presence: %s", present)
        self.body_anchor_present = present
        for listener in self.presence_listeners:
            listener(present)
