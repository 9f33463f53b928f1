"""
Overlay canvases - the camera view with 2D joint markers and a small 3D joint view.
"""

import math
from typing import List, Optional

import numpy as np
from PySide6.QtWidgets import QWidget
from PySide6.QtCore import Qt, Signal, QPointF, QRectF
from PySide6.QtGui import QPainter, QColor, QPen, QBrush, QFont, QImage, QTransform

from .geometry import project_perspective
from .models import Marker2D, Marker3D, Orientation

_ORIENTATION_ANGLES = {
    Orientation.LANDSCAPE_RIGHT: 0,
    Orientation.PORTRAIT: 90,
    Orientation.LANDSCAPE_LEFT: 180,
    Orientation.PORTRAIT_UPSIDE_DOWN: 270,
}


def _remove_by_identity(items: list, item) -> bool:
    for i, existing in enumerate(items):
        if existing is item:
            del items[i]
            return True
    return False


class JointOverlayCanvas(QWidget):
    """카메라 영상 위에 2D 관절 마커를 그리는 캔버스"""

    # 시그널: 캔버스 크기 변경 시 (width, height)
    resized = Signal(float, float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.markers: List[Marker2D] = []
        self.frame_image: Optional[QImage] = None
        self.orientation = Orientation.LANDSCAPE_RIGHT
        self.mirror: bool = False

        self.setMinimumSize(640, 480)
        self.setStyleSheet("background-color: #1a1a2e;")

    # OverlayStore 표면 인터페이스
    def attach_marker(self, marker: Marker2D):
        self.markers.append(marker)
        self.update()

    def detach_marker(self, marker: Marker2D):
        if _remove_by_identity(self.markers, marker):
            self.update()

    def set_orientation(self, orientation: Orientation, mirror: bool = False):
        self.orientation = orientation
        self.mirror = mirror
        self.update()

    def set_frame_image(self, rgb: Optional[np.ndarray]):
        """RGB (H,W,3 uint8) 프레임을 배경으로 설정"""
        if rgb is None:
            self.frame_image = None
        else:
            rgb = np.ascontiguousarray(rgb, dtype=np.uint8)
            h, w = rgb.shape[:2]
            # QImage는 버퍼를 복사하지 않으므로 copy()로 소유권 확보
            self.frame_image = QImage(rgb.data, w, h, 3 * w, QImage.Format.Format_RGB888).copy()
        self.update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.resized.emit(float(self.width()), float(self.height()))

    def _oriented_image(self) -> QImage:
        image = self.frame_image
        angle = _ORIENTATION_ANGLES[self.orientation]
        if angle:
            image = image.transformed(QTransform().rotate(angle))
        if self.mirror:
            image = image.mirrored(True, False)
        return image

    def paintEvent(self, event):
        """캔버스 렌더링"""
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.fillRect(self.rect(), QColor("#1a1a2e"))

            if self.frame_image is not None:
                # 뷰포트를 가득 채우고 가운데 정렬 (display_transform과 동일한 aspect fill)
                image = self._oriented_image()
                scale = max(self.width() / image.width(), self.height() / image.height())
                w, h = image.width() * scale, image.height() * scale
                target = QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)
                painter.drawImage(target, image)
            elif not self.markers:
                painter.setPen(QColor("#ffffff"))
                painter.setFont(QFont("Segoe UI", 14))
                painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "트래킹 대기 중...")

            for marker in self.markers:
                color = QColor(marker.color)
                painter.setPen(QPen(color, 1))
                painter.setBrush(QBrush(color))
                painter.drawEllipse(QPointF(marker.center[0], marker.center[1]), marker.radius, marker.radius)
        finally:
            painter.end()


class Skeleton3DView(QWidget):
    """3D 관절 구체를 원근 투영으로 그리는 뷰 (드래그로 회전)"""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.markers: List[Marker3D] = []
        self.yaw: float = 0.0
        self.distance: float = 3.0
        self._drag_x: Optional[float] = None

        self.setMinimumSize(300, 300)
        self.setStyleSheet("background-color: #16213e;")

    def attach_marker(self, marker: Marker3D):
        self.markers.append(marker)
        self.update()

    def detach_marker(self, marker: Marker3D):
        if _remove_by_identity(self.markers, marker):
            self.update()

    def set_yaw(self, yaw: float):
        self.yaw = math.remainder(yaw, 2 * math.pi)
        self.update()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self._drag_x = event.position().x()

    def mouseMoveEvent(self, event):
        if self._drag_x is None:
            return
        x = event.position().x()
        self.set_yaw(self.yaw + (x - self._drag_x) * 0.01)
        self._drag_x = x

    def mouseReleaseEvent(self, event):
        self._drag_x = None

    def wheelEvent(self, event):
        steps = event.angleDelta().y() / 120.0
        self.distance = min(10.0, max(1.0, self.distance - steps * 0.25))
        self.update()

    def projected_markers(self):
        """(마커, 화면 x, 화면 y, 픽셀 반지름) 목록, 먼 것부터"""
        if not self.markers:
            return []
        focal = 1.2
        points = np.array([m.position for m in self.markers], dtype=float)
        projected = project_perspective(points, (self.width(), self.height()), self.yaw, self.distance, focal)
        half = min(self.width(), self.height()) / 2.0
        result = []
        for marker, (sx, sy, depth) in zip(self.markers, projected):
            result.append((marker, float(sx), float(sy), max(1.0, marker.radius * focal / depth * half), depth))
        result.sort(key=lambda item: -item[4])
        return [item[:4] for item in result]

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.fillRect(self.rect(), QColor("#16213e"))

            if not self.markers:
                painter.setPen(QColor("#a0a0a0"))
                painter.setFont(QFont("Segoe UI", 11))
                painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "3D 관절 없음")
                return

            for marker, sx, sy, radius in self.projected_markers():
                color = QColor(marker.color)
                painter.setPen(QPen(color.darker(150), 1))
                painter.setBrush(QBrush(color))
                painter.drawEllipse(QPointF(sx, sy), radius, radius)
        finally:
            painter.end()
