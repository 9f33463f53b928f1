"""
Application configuration loaded from an optional JSON file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .skeletons import SKELETON_MODELS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingConfig:
    backend: str = "mediapipe"  # mediapipe / replay
    camera_index: int = 0
    recording_path: str = ""
    loop_replay: bool = True
    model_complexity: int = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    # Landmark visibility at or above this counts as a tracked joint.
    min_visibility: float = 0.5


@dataclass(frozen=True)
class OverlayConfig:
    skeleton_2d: str = "BODY_17"
    skeleton_3d: str = "BLAZEPOSE_33"
    marker_radius_2d: float = 5.0
    marker_color_2d: str = "#00FF00"
    marker_radius_3d: float = 0.025
    marker_color_3d: str = "#0000FF"


@dataclass(frozen=True)
class ResetConfig:
    policy: str = "debounced"  # immediate / debounced
    debounce_seconds: float = 2.0


@dataclass(frozen=True)
class DisplayConfig:
    orientation: str = "landscape_right"
    mirror: bool = False
    fps: int = 30
    show_2d: bool = False
    show_3d: bool = False


@dataclass(frozen=True)
class AppConfig:
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    reset: ResetConfig = field(default_factory=ResetConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


def _repo_root() -> Path:
    # src/body_overlay/config.py -> repo root is two levels up.
    return Path(__file__).resolve().parents[2]


def get_default_config_path() -> Path:
    return _repo_root() / "config.json"


def _deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
    return cur if cur is not None else default


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_float(v: Any, default: float) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return float(default)


def _as_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on")
    return bool(default)


def _as_str(v: Any, default: str = "") -> str:
    return str(v) if v is not None else str(default)


def _clamp01(v: float, default: float) -> float:
    return v if 0.0 <= v <= 1.0 else default


def load_config(path: Optional[str | Path] = None) -> AppConfig:
    p = Path(path).expanduser().resolve() if path else get_default_config_path()
    if not p.exists():
        # Defaults-only config; app can still run.
        return AppConfig()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("config %s unreadable (%s); using defaults", p, e)
        return AppConfig()

    if not isinstance(raw, dict):
        logger.warning("config %s is not a JSON object; using defaults", p)
        return AppConfig()

    backend = _as_str(_deep_get(raw, ["tracking", "backend"], "mediapipe"), "mediapipe").strip().lower()
    camera_index = _as_int(_deep_get(raw, ["tracking", "camera_index"], 0), 0)
    recording_path = _as_str(_deep_get(raw, ["tracking", "recording_path"], ""), "")
    loop_replay = _as_bool(_deep_get(raw, ["tracking", "loop_replay"], True), True)
    complexity = _as_int(_deep_get(raw, ["tracking", "model_complexity"], 1), 1)
    det_conf = _as_float(_deep_get(raw, ["tracking", "min_detection_confidence"], 0.5), 0.5)
    trk_conf = _as_float(_deep_get(raw, ["tracking", "min_tracking_confidence"], 0.5), 0.5)
    min_vis = _as_float(_deep_get(raw, ["tracking", "min_visibility"], 0.5), 0.5)

    skeleton_2d = _as_str(_deep_get(raw, ["overlay", "skeleton_2d"], "BODY_17"), "BODY_17").strip().upper()
    skeleton_3d = _as_str(_deep_get(raw, ["overlay", "skeleton_3d"], "BLAZEPOSE_33"), "BLAZEPOSE_33").strip().upper()
    if skeleton_2d not in SKELETON_MODELS:
        logger.warning("unknown skeleton_2d %r; using 'BODY_17'", skeleton_2d)
        skeleton_2d = "BODY_17"
    if skeleton_3d not in SKELETON_MODELS:
        logger.warning("unknown skeleton_3d %r; using 'BLAZEPOSE_33'", skeleton_3d)
        skeleton_3d = "BLAZEPOSE_33"
    radius_2d = _as_float(_deep_get(raw, ["overlay", "marker_radius_2d"], 5.0), 5.0)
    color_2d = _as_str(_deep_get(raw, ["overlay", "marker_color_2d"], "#00FF00"), "#00FF00")
    radius_3d = _as_float(_deep_get(raw, ["overlay", "marker_radius_3d"], 0.025), 0.025)
    color_3d = _as_str(_deep_get(raw, ["overlay", "marker_color_3d"], "#0000FF"), "#0000FF")

    policy = _as_str(_deep_get(raw, ["reset", "policy"], "debounced"), "debounced").strip().lower()
    if policy not in ("immediate", "debounced"):
        logger.warning("unknown reset policy %r; using 'debounced'", policy)
        policy = "debounced"
    debounce = _as_float(_deep_get(raw, ["reset", "debounce_seconds"], 2.0), 2.0)

    orientation = _as_str(_deep_get(raw, ["display", "orientation"], "landscape_right"), "landscape_right").strip().lower()
    mirror = _as_bool(_deep_get(raw, ["display", "mirror"], False), False)
    fps = _as_int(_deep_get(raw, ["display", "fps"], 30), 30)
    show_2d = _as_bool(_deep_get(raw, ["display", "show_2d"], False), False)
    show_3d = _as_bool(_deep_get(raw, ["display", "show_3d"], False), False)

    return AppConfig(
        tracking=TrackingConfig(
            backend=backend or "mediapipe",
            camera_index=max(0, camera_index),
            recording_path=recording_path,
            loop_replay=loop_replay,
            model_complexity=complexity if complexity in (0, 1, 2) else 1,
            min_detection_confidence=_clamp01(det_conf, 0.5),
            min_tracking_confidence=_clamp01(trk_conf, 0.5),
            min_visibility=_clamp01(min_vis, 0.5),
        ),
        overlay=OverlayConfig(
            skeleton_2d=skeleton_2d,
            skeleton_3d=skeleton_3d,
            marker_radius_2d=radius_2d if radius_2d > 0.0 else 5.0,
            marker_color_2d=color_2d,
            marker_radius_3d=radius_3d if radius_3d > 0.0 else 0.025,
            marker_color_3d=color_3d,
        ),
        reset=ResetConfig(
            policy=policy,
            debounce_seconds=debounce if debounce >= 0.0 else 2.0,
        ),
        display=DisplayConfig(
            orientation=orientation or "landscape_right",
            mirror=mirror,
            fps=fps if 1 <= fps <= 120 else 30,
            show_2d=show_2d,
            show_3d=show_3d,
        ),
    )
