"""
Data models for body tracking events and overlay markers.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import numpy as np


class RunOptions(enum.Flag):
    """트래킹 세션 재실행 옵션"""
    NONE = 0
    RESET_TRACKING = enum.auto()
    REMOVE_EXISTING_ANCHORS = enum.auto()


class Orientation(enum.Enum):
    """화면 방향 (카메라 센서 기준 landscape_right가 원본 방향)"""
    LANDSCAPE_RIGHT = "landscape_right"
    PORTRAIT = "portrait"
    LANDSCAPE_LEFT = "landscape_left"
    PORTRAIT_UPSIDE_DOWN = "portrait_upside_down"


@dataclass
class SkeletonSnapshot:
    """한 프레임의 2D 스켈레톤 (정규화 좌표 + 추적 여부)"""
    joint_names: Tuple[str, ...]
    landmarks: np.ndarray
    tracked: np.ndarray

    def __post_init__(self):
        self.joint_names = tuple(self.joint_names)
        self.landmarks = np.asarray(self.landmarks, dtype=float).reshape(-1, 2)
        self.tracked = np.asarray(self.tracked, dtype=bool).reshape(-1)
        if not (len(self.joint_names) == len(self.landmarks) == len(self.tracked)):
            raise ValueError(
                f"skeleton size mismatch: {len(self.joint_names)} names, "
                f"{len(self.landmarks)} landmarks, {len(self.tracked)} flags"
            )

    def index_for(self, joint_name: str) -> Optional[int]:
        try:
            return self.joint_names.index(joint_name)
        except ValueError:
            return None

    def is_joint_tracked(self, index: int) -> bool:
        return bool(self.tracked[index])

    def landmark(self, index: int) -> Tuple[float, float]:
        x, y = self.landmarks[index]
        return float(x), float(y)

    def tracked_by_name(self, joint_names: Sequence[str]) -> Dict[str, bool]:
        """주어진 관절 이름별 추적 여부 (스켈레톤에 없는 관절은 False)"""
        result = {}
        for name in joint_names:
            index = self.index_for(name)
            result[name] = index is not None and self.is_joint_tracked(index)
        return result


@dataclass
class BodyFrame:
    """트래킹 프레임 하나"""
    timestamp: float
    image_size: Tuple[int, int]
    detected_body: Optional[SkeletonSnapshot] = None
    image: Optional[np.ndarray] = None


@dataclass
class Anchor:
    """월드 변환을 가진 앵커"""
    identifier: str
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))

    def __post_init__(self):
        self.transform = np.asarray(self.transform, dtype=float).reshape(4, 4)


@dataclass
class BodyAnchor(Anchor):
    """관절별 모델 공간 변환을 가진 신체 앵커"""
    joint_model_transforms: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self):
        super().__post_init__()
        self.joint_model_transforms = {
            name: np.asarray(matrix, dtype=float).reshape(4, 4)
            for name, matrix in self.joint_model_transforms.items()
        }

    def model_transform(self, joint_name: str) -> Optional[np.ndarray]:
        return self.joint_model_transforms.get(joint_name)


@dataclass(frozen=True)
class Marker2D:
    """뷰 픽셀 좌표의 2D 관절 마커"""
    center: Tuple[float, float]
    radius: float = 5.0
    color: str = "#00FF00"
    joint_name: str = ""


@dataclass(frozen=True)
class Marker3D:
    """월드 좌표의 3D 관절 구체"""
    position: Tuple[float, float, float]
    rotation: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    radius: float = 0.025
    color: str = "#0000FF"
    joint_name: str = ""


@dataclass
class DisplayToggles:
    """2D/3D 관절 표시 여부"""
    show_2d: bool = False
    show_3d: bool = False
