"""
Control panel for the overlay viewer - joint toggles, clear action and status labels.
"""

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QPushButton, QGroupBox
)
from PySide6.QtCore import Qt, Signal

from .status import TrackingStatus, presence_text


_TOGGLE_STYLE = """
    QPushButton {
        background-color: #2d2d44;
        color: #e0e0e0;
        border: 1px solid #3d3d5c;
        border-radius: 4px;
        padding: 8px;
    }
    QPushButton:checked {
        background-color: #4ECDC4;
        color: #1a1a2e;
        font-weight: bold;
    }
    QPushButton:hover {
        border-color: #4ECDC4;
    }
"""


class ControlPanel(QWidget):
    """컨트롤 패널 위젯"""

    # 시그널 정의
    show_2d_changed = Signal(bool)
    show_3d_changed = Signal(bool)
    clear_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.setSpacing(10)

        group_style = """
            QGroupBox {
                color: #e0e0e0;
                font-weight: bold;
                border: 1px solid #3d3d5c;
                border-radius: 6px;
                margin-top: 12px;
                padding-top: 10px;
            }
            QGroupBox::title {
                subcontrol-origin: margin;
                left: 10px;
            }
        """

        # 표시 옵션
        joints_group = QGroupBox("Joints")
        joints_group.setStyleSheet(group_style)
        joints_layout = QVBoxLayout(joints_group)

        self.joints_2d_btn = QPushButton("2D Joints")
        self.joints_2d_btn.setCheckable(True)
        self.joints_2d_btn.setStyleSheet(_TOGGLE_STYLE)
        self.joints_2d_btn.toggled.connect(self.show_2d_changed.emit)
        joints_layout.addWidget(self.joints_2d_btn)

        self.joints_3d_btn = QPushButton("3D Joints")
        self.joints_3d_btn.setCheckable(True)
        self.joints_3d_btn.setStyleSheet(_TOGGLE_STYLE)
        self.joints_3d_btn.toggled.connect(self.show_3d_changed.emit)
        joints_layout.addWidget(self.joints_3d_btn)

        self.clear_btn = QPushButton("Clear")
        self.clear_btn.setStyleSheet(_TOGGLE_STYLE)
        self.clear_btn.clicked.connect(self._on_clear)
        joints_layout.addWidget(self.clear_btn)

        layout.addWidget(joints_group)

        # 상태
        status_group = QGroupBox("Tracking")
        status_group.setStyleSheet(group_style)
        status_layout = QVBoxLayout(status_group)

        self.presence_label = QLabel(presence_text(False))
        self.presence_label.setStyleSheet("color: #e0e0e0;")
        status_layout.addWidget(self.presence_label)

        self.warning_label = QLabel("")
        self.warning_label.setWordWrap(True)
        self.warning_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.warning_label.setStyleSheet(
            "color: #1a1a2e; background-color: rgba(255, 255, 255, 128); padding: 6px; border-radius: 4px;"
        )
        status_layout.addWidget(self.warning_label)

        layout.addWidget(status_group)
        layout.addStretch(1)

    def _on_clear(self):
        # 토글 해제 시 show_*_changed(False)도 발생
        self.joints_2d_btn.setChecked(False)
        self.joints_3d_btn.setChecked(False)
        self.clear_requested.emit()

    def set_toggles(self, show_2d: bool, show_3d: bool):
        self.joints_2d_btn.setChecked(show_2d)
        self.joints_3d_btn.setChecked(show_3d)

    def set_tracking_status(self, status: TrackingStatus):
        self.warning_label.setText(status.text)

    def set_body_anchor_present(self, present: bool):
        self.presence_label.setText(presence_text(present))
