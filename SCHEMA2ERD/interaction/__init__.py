"""Interaction state machines and the headless render session."""

from .animation import Animation, Tween, ease_cubic_in_out, lerp
from .frames import CoalescedFrame, FrameScheduler, TimerHandle
from .zoom import IDENTITY, ZoomController, ZoomTransform
from .drag import DragController
from .compaction import CompactionController
from .highlight import DEPTH_CHOICES, HighlightController, build_adjacency, reachable
from .search import SearchController, normalize_query
from .session import RenderSession, RenderedLink

__all__ = [
    "Animation",
    "Tween",
    "ease_cubic_in_out",
    "lerp",
    "CoalescedFrame",
    "FrameScheduler",
    "TimerHandle",
    "IDENTITY",
    "ZoomController",
    "ZoomTransform",
    "DragController",
    "CompactionController",
    "DEPTH_CHOICES",
    "HighlightController",
    "build_adjacency",
    "reachable",
    "SearchController",
    "normalize_query",
    "RenderSession",
    "RenderedLink",
]
