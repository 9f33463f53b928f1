"""
Deadline timers used to debounce tracking resets.

`ManualTimer` runs on simulated time for tests; `QtDeadlineTimer` runs on the
Qt event loop in the application.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class DeadlineTimer(ABC):
    """한 번 울리는 타이머: arm / fire / cancel"""

    @property
    @abstractmethod
    def is_armed(self) -> bool: ...

    @abstractmethod
    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        """delay 초 후 callback 호출 (이미 설정돼 있으면 다시 설정)"""

    @abstractmethod
    def cancel(self) -> None: ...


class ManualTimer(DeadlineTimer):
    """시뮬레이션 시간으로 움직이는 타이머"""

    def __init__(self, now: float = 0.0):
        self.now = float(now)
        self.deadline: Optional[float] = None
        self._callback: Optional[Callable[[], None]] = None
        self.fire_count = 0

    @property
    def is_armed(self) -> bool:
        return self.deadline is not None

    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        self.deadline = self.now + max(0.0, float(delay))
        self._callback = callback

    def cancel(self) -> None:
        self.deadline = None
        self._callback = None

    def advance(self, seconds: float) -> bool:
        """시간을 진행하고 마감 시각이 지났으면 발화. 발화 여부 반환"""
        self.now += float(seconds)
        if self.deadline is None or self.now < self.deadline:
            return False
        return self.fire()

    def fire(self) -> bool:
        if self._callback is None:
            return False
        callback = self._callback
        self.deadline = None
        self._callback = None
        self.fire_count += 1
        callback()
        return True


class QtDeadlineTimer(DeadlineTimer):
    """QTimer 기반 단발 타이머 (메인 스레드 이벤트 루프에서 발화)"""

    def __init__(self, parent: Optional[QObject] = None):
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)
        self._callback: Optional[Callable[[], None]] = None

    @property
    def is_armed(self) -> bool:
        return self._timer.isActive()

    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._timer.start(max(0, int(round(float(delay) * 1000))))

    def cancel(self) -> None:
        self._timer.stop()
        self._callback = None

    def _on_timeout(self):
        callback = self._callback
        self._callback = None
        if callback is not None:
            callback()
