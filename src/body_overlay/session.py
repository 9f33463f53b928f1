"""
Tracking session boundary - the external pose feed the frame processor consumes.

A session delivers three kinds of events to its delegate: a per-frame skeleton
snapshot, anchor updates and anchor removals. Events caused by `run()` are
queued and delivered on the next `step()`, never from inside a callback.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .models import Anchor, BodyAnchor, BodyFrame, RunOptions, SkeletonSnapshot

logger = logging.getLogger(__name__)


class UnsupportedDeviceError(RuntimeError):
    """트래킹 장치/입력을 사용할 수 없음 (복구 불가)"""


class RecordingFormatError(ValueError):
    """녹화 파일 형식 오류"""


class SessionDelegate(ABC):
    """세션 이벤트 수신자"""

    @abstractmethod
    def on_frame(self, frame: BodyFrame) -> None: ...

    @abstractmethod
    def on_anchors_updated(self, anchors: Sequence[Anchor]) -> None: ...

    @abstractmethod
    def on_anchors_removed(self, anchors: Sequence[Anchor]) -> None: ...


class TrackingSession(ABC):
    """트래킹 백엔드 어댑터 인터페이스"""

    def __init__(self):
        self.delegate: Optional[SessionDelegate] = None
        self._pending_removals: List[Anchor] = []

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def check_supported(self) -> None:
        """사용 불가하면 UnsupportedDeviceError"""

    def start(self) -> None:
        pass

    @abstractmethod
    def step(self) -> bool:
        """다음 이벤트들을 delegate에 전달. 더 이상 없으면 False"""

    @abstractmethod
    def run(self, options: RunOptions = RunOptions.NONE) -> None: ...

    def close(self) -> None:
        pass

    def _queue_removals(self, anchors: Sequence[Anchor]):
        self._pending_removals.extend(anchors)

    def _flush_removals(self):
        if not self._pending_removals:
            return
        removed = self._pending_removals
        self._pending_removals = []
        if self.delegate is not None:
            self.delegate.on_anchors_removed(removed)


@dataclass
class ReplayFrame:
    """녹화된 프레임 하나"""
    timestamp: float
    body: Optional[SkeletonSnapshot] = None
    anchors: List[Anchor] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)


def _parse_matrix(value: Any, where: str) -> np.ndarray:
    try:
        matrix = np.asarray(value, dtype=float)
    except (TypeError, ValueError) as e:
        raise RecordingFormatError(f"{where}: transform is not numeric") from e
    if matrix.size != 16:
        raise RecordingFormatError(f"{where}: transform needs 16 values, got {matrix.size}")
    return matrix.reshape(4, 4)


def _parse_body(obj: Any, where: str) -> Optional[SkeletonSnapshot]:
    if obj is None:
        return None
    joints = obj.get("joints") if isinstance(obj, dict) else None
    if not isinstance(joints, dict):
        raise RecordingFormatError(f"{where}: body.joints must be an object")

    names, landmarks, tracked = [], [], []
    for name, joint in joints.items():
        if not isinstance(joint, dict):
            raise RecordingFormatError(f"{where}: joint {name!r} must be an object")
        try:
            landmarks.append((float(joint.get("x", 0.0)), float(joint.get("y", 0.0))))
        except (TypeError, ValueError) as e:
            raise RecordingFormatError(f"{where}: joint {name!r} has bad coordinates") from e
        flag = joint.get("tracked", False)
        if not isinstance(flag, bool):
            raise RecordingFormatError(f"{where}: joint {name!r} tracked must be true or false")
        names.append(str(name))
        tracked.append(flag)
    return SkeletonSnapshot(tuple(names), np.array(landmarks).reshape(-1, 2), np.array(tracked, dtype=bool))


def _parse_anchor(obj: Any, where: str) -> Anchor:
    if not isinstance(obj, dict) or "id" not in obj:
        raise RecordingFormatError(f"{where}: anchor needs an id")
    identifier = str(obj["id"])
    transform = _parse_matrix(obj.get("transform", np.eye(4).ravel().tolist()), f"{where} anchor {identifier}")
    if str(obj.get("kind", "body")).lower() != "body":
        return Anchor(identifier, transform)

    joints = obj.get("joints") or {}
    if not isinstance(joints, dict):
        raise RecordingFormatError(f"{where} anchor {identifier}: joints must be an object")
    model_transforms = {
        str(name): _parse_matrix(value, f"{where} anchor {identifier} joint {name}")
        for name, value in joints.items()
    }
    return BodyAnchor(identifier, transform, model_transforms)


def parse_recording(data: Any) -> Tuple[Tuple[int, int], List[ReplayFrame]]:
    """녹화 JSON 객체 -> (이미지 크기, 프레임 목록)"""
    if not isinstance(data, dict):
        raise RecordingFormatError("recording must be a JSON object")

    size = data.get("image_size", [1920, 1440])
    if not isinstance(size, (list, tuple)) or len(size) != 2:
        raise RecordingFormatError("image_size must be [width, height]")
    try:
        image_size = (int(size[0]), int(size[1]))
    except (TypeError, ValueError) as e:
        raise RecordingFormatError("image_size must be numeric") from e

    raw_frames = data.get("frames")
    if not isinstance(raw_frames, list):
        raise RecordingFormatError("frames must be a list")

    frames = []
    for i, raw in enumerate(raw_frames):
        where = f"frame {i}"
        if not isinstance(raw, dict):
            raise RecordingFormatError(f"{where}: must be an object")
        anchors = raw.get("anchors") or []
        removed = raw.get("removed") or []
        if not isinstance(anchors, list) or not isinstance(removed, list):
            raise RecordingFormatError(f"{where}: anchors and removed must be lists")
        try:
            timestamp = float(raw.get("timestamp", i))
        except (TypeError, ValueError) as e:
            raise RecordingFormatError(f"{where}: timestamp must be numeric") from e
        frames.append(ReplayFrame(
            timestamp=timestamp,
            body=_parse_body(raw.get("body"), where),
            anchors=[_parse_anchor(a, where) for a in anchors],
            removed=[str(r) for r in removed],
        ))
    return image_size, frames


def load_recording(path) -> Tuple[Tuple[int, int], List[ReplayFrame]]:
    p = Path(path).expanduser()
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RecordingFormatError(f"{p}: invalid JSON ({e})") from e
    except OSError as e:
        raise UnsupportedDeviceError(f"{p}: recording unreadable ({e})") from e
    return parse_recording(data)


class ReplaySession(TrackingSession):
    """녹화된 JSON을 프레임 단위로 재생하는 세션"""

    def __init__(self, frames: List[ReplayFrame], image_size: Tuple[int, int] = (1920, 1440),
                 loop: bool = False, source: str = "<memory>"):
        super().__init__()
        self.frames = list(frames)
        self.image_size = tuple(image_size)
        self.loop = loop
        self.source = source
        self.index = 0
        self.live_anchors: Dict[str, Anchor] = {}
        self.run_history: List[RunOptions] = []

    @classmethod
    def from_dict(cls, data: Dict[str, Any], loop: bool = False) -> "ReplaySession":
        image_size, frames = parse_recording(data)
        return cls(frames, image_size, loop=loop)

    @classmethod
    def from_file(cls, path, loop: bool = False) -> "ReplaySession":
        p = Path(path).expanduser()
        if not p.is_file():
            raise UnsupportedDeviceError(f"recording not found: {p}")
        image_size, frames = load_recording(p)
        return cls(frames, image_size, loop=loop, source=str(p))

    def name(self) -> str:
        return "replay"

    @property
    def reset_count(self) -> int:
        return sum(1 for options in self.run_history if RunOptions.RESET_TRACKING in options)

    def check_supported(self) -> None:
        if not self.frames:
            raise UnsupportedDeviceError(f"recording {self.source} has no frames")

    def step(self) -> bool:
        self._flush_removals()
        if self.index >= len(self.frames):
            if not self.loop or not self.frames:
                return False
            self.index = 0

        replay = self.frames[self.index]
        self.index += 1
        if self.delegate is None:
            return True

        self.delegate.on_frame(BodyFrame(replay.timestamp, self.image_size, replay.body))

        if replay.anchors:
            for anchor in replay.anchors:
                self.live_anchors[anchor.identifier] = anchor
            self.delegate.on_anchors_updated(list(replay.anchors))

        removed = [self.live_anchors.pop(i) for i in replay.removed if i in self.live_anchors]
        if removed:
            self.delegate.on_anchors_removed(removed)
        return True

    def run(self, options: RunOptions = RunOptions.NONE) -> None:
        self.run_history.append(options)
        logger.debug("replay run: %s", options)
        if RunOptions.REMOVE_EXISTING_ANCHORS in options and self.live_anchors:
            self._queue_removals(list(self.live_anchors.values()))
            self.live_anchors.clear()


def _matrix_to_list(matrix: np.ndarray) -> List[float]:
    return [float(v) for v in np.asarray(matrix, dtype=float).ravel()]


class SessionRecorder(SessionDelegate):
    """세션 이벤트를 내부 delegate에 전달하면서 녹화 포맷으로 기록"""

    def __init__(self, inner: SessionDelegate):
        self.inner = inner
        self.image_size: Tuple[int, int] = (0, 0)
        self.frames: List[Dict[str, Any]] = []

    def on_frame(self, frame: BodyFrame) -> None:
        self.image_size = tuple(frame.image_size)
        body = None
        if frame.detected_body is not None:
            skeleton = frame.detected_body
            body = {"joints": {
                name: {
                    "x": skeleton.landmark(i)[0],
                    "y": skeleton.landmark(i)[1],
                    "tracked": skeleton.is_joint_tracked(i),
                }
                for i, name in enumerate(skeleton.joint_names)
            }}
        self.frames.append({"timestamp": float(frame.timestamp), "body": body, "anchors": [], "removed": []})
        self.inner.on_frame(frame)

    def on_anchors_updated(self, anchors: Sequence[Anchor]) -> None:
        if self.frames:
            for anchor in anchors:
                entry = {"id": anchor.identifier, "kind": "other", "transform": _matrix_to_list(anchor.transform)}
                if isinstance(anchor, BodyAnchor):
                    entry["kind"] = "body"
                    entry["joints"] = {
                        name: _matrix_to_list(m) for name, m in anchor.joint_model_transforms.items()
                    }
                self.frames[-1]["anchors"].append(entry)
        self.inner.on_anchors_updated(anchors)

    def on_anchors_removed(self, anchors: Sequence[Anchor]) -> None:
        if self.frames:
            self.frames[-1]["removed"].extend(a.identifier for a in anchors)
        self.inner.on_anchors_removed(anchors)

    def to_dict(self) -> Dict[str, Any]:
        return {"image_size": list(self.image_size), "frames": self.frames}

    def save(self, path) -> Path:
        p = Path(path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict()), encoding="utf-8")
        logger.info("saved %d frames to %s", len(self.frames), p)
        return p
