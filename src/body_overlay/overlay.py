"""
OverlayStore - the set of joint markers currently attached to a surface.
"""

from typing import Generic, List, Optional, Protocol, Tuple, TypeVar

Shape = TypeVar("Shape")


class OverlaySurface(Protocol):
    """마커를 실제로 그리는 대상 (2D 캔버스, 3D 뷰 등)"""

    def attach_marker(self, marker) -> None: ...

    def detach_marker(self, marker) -> None: ...


class OverlayStore(Generic[Shape]):
    """매 업데이트마다 전부 지우고 다시 채우는 마커 저장소"""

    def __init__(self, surface: Optional[OverlaySurface] = None):
        self.surface = surface
        self._shapes: List[Shape] = []

    def __len__(self) -> int:
        return len(self._shapes)

    @property
    def shapes(self) -> Tuple[Shape, ...]:
        return tuple(self._shapes)

    def clear(self):
        """모든 마커를 표면에서 떼어내고 비움"""
        if self.surface is not None:
            for shape in self._shapes:
                self.surface.detach_marker(shape)
        self._shapes.clear()

    def add(self, shape: Shape):
        if self.surface is not None:
            self.surface.attach_marker(shape)
        self._shapes.append(shape)
