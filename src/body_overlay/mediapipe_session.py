"""
Live tracking session backed by MediaPipe Pose on an OpenCV camera capture.

Notes:
- Landmark `visibility` decides whether a joint counts as tracked.
- Pose world landmarks (meters, hip-centered, y-down) become the joints of a
  single body anchor, flipped to y-up.
"""

import itertools
import logging
import time
from typing import Optional, Sequence

import cv2
import mediapipe as mp
import numpy as np

from .geometry import translation_matrix
from .models import BodyAnchor, BodyFrame, RunOptions, SkeletonSnapshot
from .session import TrackingSession, UnsupportedDeviceError
from .skeletons import BLAZEPOSE_33

logger = logging.getLogger(__name__)


class MediaPipeSession(TrackingSession):
    """웹캠 + MediaPipe Pose 트래킹 세션"""

    def __init__(
        self,
        camera_index: int = 0,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        min_visibility: float = 0.5,
    ):
        super().__init__()
        self.camera_index = int(camera_index)
        self.model_complexity = int(model_complexity)
        self.min_detection_confidence = float(min_detection_confidence)
        self.min_tracking_confidence = float(min_tracking_confidence)
        self.min_visibility = float(min_visibility)

        self._capture: Optional[cv2.VideoCapture] = None
        self._pose = None
        self._anchor_ids = itertools.count(1)
        self._anchor: Optional[BodyAnchor] = None
        self._anchor_id: Optional[str] = None

    def name(self) -> str:
        return "mediapipe_pose"

    def check_supported(self) -> None:
        capture = cv2.VideoCapture(self.camera_index)
        try:
            if not capture.isOpened():
                raise UnsupportedDeviceError(
                    f"Body tracking needs a camera; could not open camera index {self.camera_index}"
                )
        finally:
            capture.release()

    def start(self) -> None:
        self._capture = cv2.VideoCapture(self.camera_index)
        if not self._capture.isOpened():
            raise UnsupportedDeviceError(f"could not open camera index {self.camera_index}")
        self._pose = self._create_pose()
        logger.info("mediapipe session started on camera %d", self.camera_index)

    def _create_pose(self):
        return mp.solutions.pose.Pose(
            static_image_mode=False,
            model_complexity=self.model_complexity,
            enable_segmentation=False,
            smooth_landmarks=True,
            min_detection_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence,
        )

    def step(self) -> bool:
        self._flush_removals()
        if self._capture is None or self._pose is None:
            return False

        ok, bgr = self._capture.read()
        if not ok or bgr is None:
            logger.warning("camera read failed")
            return False

        rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
        results = self._pose.process(rgb)
        h, w = rgb.shape[:2]

        if self.delegate is None:
            return True

        snapshot = self._snapshot_from(results.pose_landmarks)
        self.delegate.on_frame(BodyFrame(time.time(), (w, h), snapshot, rgb))

        anchor = self._anchor_from(results.pose_world_landmarks)
        if anchor is not None:
            self._anchor = anchor
            self.delegate.on_anchors_updated([anchor])
        elif self._anchor is not None:
            removed, self._anchor, self._anchor_id = self._anchor, None, None
            self.delegate.on_anchors_removed([removed])
        return True

    def _snapshot_from(self, landmarks) -> Optional[SkeletonSnapshot]:
        if landmarks is None:
            return None
        points = landmarks.landmark
        count = min(len(points), len(BLAZEPOSE_33))
        coords = np.array([(points[i].x, points[i].y) for i in range(count)], dtype=float)
        tracked = np.array([
            float(getattr(points[i], "visibility", 0.0) or 0.0) >= self.min_visibility
            for i in range(count)
        ], dtype=bool)
        return SkeletonSnapshot(BLAZEPOSE_33.joint_names[:count], coords, tracked)

    def _anchor_from(self, world_landmarks) -> Optional[BodyAnchor]:
        if world_landmarks is None:
            return None
        if self._anchor_id is None:
            self._anchor_id = f"body-{next(self._anchor_ids)}"
            logger.debug("body anchor added: %s", self._anchor_id)

        joints = {}
        for name, p in zip(BLAZEPOSE_33.joint_names, world_landmarks.landmark):
            joints[name] = translation_matrix(p.x, -p.y, -p.z)
        return BodyAnchor(self._anchor_id, np.eye(4), joints)

    def run(self, options: RunOptions = RunOptions.NONE) -> None:
        if RunOptions.REMOVE_EXISTING_ANCHORS in options and self._anchor is not None:
            logger.debug("removing anchor %s", self._anchor.identifier)
            self._queue_removals([self._anchor])
            self._anchor, self._anchor_id = None, None

        if RunOptions.RESET_TRACKING in options and self._pose is not None:
            logger.info("resetting pose tracking")
            self._pose.close()
            self._pose = self._create_pose()

    def close(self) -> None:
        if self._pose is not None:
            self._pose.close()
            self._pose = None
        if self._capture is not None:
            self._capture.release()
            self._capture = None
