"""
body_overlay - Body Pose Tracking Overlay Viewer
A PySide6-based tool for visualizing tracked body joints in 2D and 3D.
"""

__version__ = "0.1.0"

# Lazy imports to avoid circular dependencies
def __getattr__(name):
    if name == "FrameProcessor":
        from .processor import FrameProcessor
        return FrameProcessor
    elif name == "ResetPolicy":
        from .processor import ResetPolicy
        return ResetPolicy
    elif name == "OverlayStore":
        from .overlay import OverlayStore
        return OverlayStore
    elif name == "TrackingStatus":
        from .status import TrackingStatus
        return TrackingStatus
    elif name == "compute_tracking_status":
        from .status import compute_tracking_status
        return compute_tracking_status
    elif name == "SKELETON_MODELS":
        from .skeletons import SKELETON_MODELS
        return SKELETON_MODELS
    elif name == "ReplaySession":
        from .session import ReplaySession
        return ReplaySession
    elif name == "BodyOverlayWindow":
        from .app import BodyOverlayWindow
        return BodyOverlayWindow
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "FrameProcessor",
    "ResetPolicy",
    "OverlayStore",
    "TrackingStatus",
    "compute_tracking_status",
    "SKELETON_MODELS",
    "ReplaySession",
    "BodyOverlayWindow",
    "__version__",
]


def main():
    """Entry point for the application."""
    from .app import run_app
    run_app()
