"""
Skeleton definitions - ordered joint name lists injected into the frame processor.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class SkeletonDefinition:
    """이름이 붙은 관절 순서 목록"""
    name: str
    joint_names: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.joint_names)


# MediaPipe Pose 랜드마크 순서 (33개)
BLAZEPOSE_33 = SkeletonDefinition("BLAZEPOSE_33", (
    "nose",
    "left_eye_inner", "left_eye", "left_eye_outer",
    "right_eye_inner", "right_eye", "right_eye_outer",
    "left_ear", "right_ear",
    "mouth_left", "mouth_right",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_pinky", "right_pinky",
    "left_index", "right_index",
    "left_thumb", "right_thumb",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
    "left_heel", "right_heel",
    "left_foot_index", "right_foot_index",
))

# COCO 17 키포인트 (BLAZEPOSE_33의 부분집합)
BODY_17 = SkeletonDefinition("BODY_17", (
    "nose",
    "left_eye", "right_eye",
    "left_ear", "right_ear",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
))

# 몸통/팔다리 주요 관절만
BODY_TORSO_12 = SkeletonDefinition("BODY_TORSO_12", (
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
))


SKELETON_MODELS: Dict[str, SkeletonDefinition] = {
    "BLAZEPOSE_33": BLAZEPOSE_33,
    "BODY_17": BODY_17,
    "BODY_TORSO_12": BODY_TORSO_12,
}


def get_skeleton(name: str) -> SkeletonDefinition:
    """이름으로 스켈레톤 정의 조회 (없으면 KeyError)"""
    key = name.strip().upper()
    if key not in SKELETON_MODELS:
        raise KeyError(f"unknown skeleton model {name!r}; expected one of {sorted(SKELETON_MODELS)}")
    return SKELETON_MODELS[key]
