"""
Tracking status computation.

Status is computed here from explicit inputs and handed to the display layer
separately, so it can be tested without any widgets.
"""

from dataclasses import dataclass
from typing import Mapping, Sequence, Tuple

ALL_TRACKED_TEXT = "Everything is fine!"
UNTRACKED_HEADER = "Untracked joints:"


@dataclass(frozen=True)
class TrackingStatus:
    """프레임별 추적 상태 (추적 안 된 관절 목록)"""
    untracked: Tuple[str, ...] = ()

    @property
    def all_tracked(self) -> bool:
        return not self.untracked

    @property
    def text(self) -> str:
        if self.all_tracked:
            return ALL_TRACKED_TEXT
        return UNTRACKED_HEADER + "\n" + "\n".join(self.untracked)


def compute_tracking_status(joint_names: Sequence[str], tracked: Mapping[str, bool]) -> TrackingStatus:
    """
    관절 목록 순서대로 추적 안 된 관절을 모아 상태 생성
    - tracked에 없는 관절은 추적 안 된 것으로 간주
    - 중복 이름은 한 번만 포함
    """
    untracked = []
    seen = set()
    for name in joint_names:
        if name in seen:
            continue
        seen.add(name)
        if not tracked.get(name, False):
            untracked.append(name)
    return TrackingStatus(untracked=tuple(untracked))


def presence_text(present: bool) -> str:
    return f"Body anchor presence: {str(bool(present)).lower()}"
