"""
Coordinate transforms between tracking space, the viewport and the world.
"""

from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from .models import Orientation


# 정규화 이미지 좌표 -> 방향 보정된 정규화 좌표
_ORIENTATION_MATRICES = {
    Orientation.LANDSCAPE_RIGHT: np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]),
    Orientation.PORTRAIT: np.array([[0.0, -1.0, 1.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]]),
    Orientation.LANDSCAPE_LEFT: np.array([[-1.0, 0.0, 1.0], [0.0, -1.0, 1.0], [0.0, 0.0, 1.0]]),
    Orientation.PORTRAIT_UPSIDE_DOWN: np.array([[0.0, 1.0, 0.0], [-1.0, 0.0, 1.0], [0.0, 0.0, 1.0]]),
}

_MIRROR = np.array([[-1.0, 0.0, 1.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])


def display_transform(image_size: Tuple[int, int], viewport_size: Tuple[float, float],
                      orientation: Orientation = Orientation.LANDSCAPE_RIGHT,
                      mirror: bool = False) -> np.ndarray:
    """
    정규화 이미지 좌표를 정규화 뷰포트 좌표로 바꾸는 3x3 아핀 행렬
    - 화면 방향에 맞게 회전
    - 뷰포트를 가득 채우도록 (aspect fill) 확대 후 가운데 정렬
    """
    img_w, img_h = float(image_size[0]), float(image_size[1])
    view_w, view_h = float(viewport_size[0]), float(viewport_size[1])
    if img_w <= 0 or img_h <= 0 or view_w <= 0 or view_h <= 0:
        return np.eye(3)

    rotation = _ORIENTATION_MATRICES[orientation]
    if orientation in (Orientation.PORTRAIT, Orientation.PORTRAIT_UPSIDE_DOWN):
        img_w, img_h = img_h, img_w

    scale = max(view_w / img_w, view_h / img_h)
    sx = img_w * scale / view_w
    sy = img_h * scale / view_h
    fill = np.array([
        [sx, 0.0, (1.0 - sx) / 2.0],
        [0.0, sy, (1.0 - sy) / 2.0],
        [0.0, 0.0, 1.0],
    ])

    matrix = rotation
    if mirror:
        matrix = _MIRROR @ matrix
    return fill @ matrix


def apply_transform(point: Tuple[float, float], matrix: np.ndarray) -> Tuple[float, float]:
    x, y, _ = matrix @ np.array([point[0], point[1], 1.0])
    return float(x), float(y)


def to_view_pixels(point: Tuple[float, float], viewport_size: Tuple[float, float]) -> Tuple[float, float]:
    """정규화 뷰포트 좌표 -> 뷰 픽셀 좌표"""
    return float(point[0]) * float(viewport_size[0]), float(point[1]) * float(viewport_size[1])


def translation_matrix(x: float, y: float, z: float) -> np.ndarray:
    matrix = np.eye(4)
    matrix[:3, 3] = (x, y, z)
    return matrix


def compose_transforms(anchor_transform: np.ndarray, joint_model_transform: np.ndarray) -> np.ndarray:
    """앵커 월드 변환과 관절 모델 변환 합성 (world = anchor @ joint)"""
    return np.asarray(anchor_transform, dtype=float) @ np.asarray(joint_model_transform, dtype=float)


def decompose_transform(matrix: np.ndarray) -> Tuple[Tuple[float, float, float], Tuple[float, float, float, float]]:
    """4x4 변환 -> (위치, 쿼터니언 x/y/z/w). 스케일은 버림"""
    matrix = np.asarray(matrix, dtype=float)
    position = tuple(float(v) for v in matrix[:3, 3])

    basis = matrix[:3, :3].copy()
    norms = np.linalg.norm(basis, axis=0)
    if np.any(norms < 1e-9):
        return position, (0.0, 0.0, 0.0, 1.0)
    basis /= norms
    quat = Rotation.from_matrix(basis).as_quat()
    return position, tuple(float(v) for v in quat)


def project_perspective(points: np.ndarray, size: Tuple[float, float], yaw: float = 0.0,
                        distance: float = 3.0, focal: float = 1.2) -> np.ndarray:
    """
    3D 점들을 간단한 원근 투영으로 화면 좌표에 매핑 (y-up 월드 기준)
    Returns: (N, 3) -> [screen_x, screen_y, depth]
    """
    points = np.asarray(points, dtype=float).reshape(-1, 3)
    if len(points) == 0:
        return np.zeros((0, 3))

    rotated = Rotation.from_euler("y", yaw).apply(points)
    depth = rotated[:, 2] + distance
    depth = np.where(depth < 1e-3, 1e-3, depth)

    width, height = float(size[0]), float(size[1])
    half = min(width, height) / 2.0
    screen_x = width / 2.0 + rotated[:, 0] * focal / depth * half
    screen_y = height / 2.0 - rotated[:, 1] * focal / depth * half
    return np.column_stack([screen_x, screen_y, depth])
