"""Anchor/handle editing, endpoint snapping and stroke merging for vector annotations."""
from __future__ import annotations

from .catalogue import EditPoint, build_catalogue, find_nearest
from .config import DrawingStyle, EngineSettings, ViewState
from .drafting import DrawingSession, ShapeDraft
from .engine import EditCtx, EditEngine
from .geometry import Affine, inverse_transform, local_to_world, transform, world_to_local
from .merge import MergeOutcome, MergeTarget, merge_path, merge_polyline
from .mutation import delete_point, move_point
from .shapes import (
    Path,
    Polyline,
    Segment,
    Shape,
    Style,
    cubic_to,
    line_to,
    make_path,
    make_polyline,
    move_to,
    quad_to,
)
from .snap import SnapResult, find_snap

__version__ = "0.1.0"

__all__ = [
    "Affine",
    "transform",
    "inverse_transform",
    "local_to_world",
    "world_to_local",
    "Polyline",
    "Path",
    "Segment",
    "Shape",
    "Style",
    "move_to",
    "line_to",
    "cubic_to",
    "quad_to",
    "make_polyline",
    "make_path",
    "EditPoint",
    "build_catalogue",
    "find_nearest",
    "move_point",
    "delete_point",
    "SnapResult",
    "find_snap",
    "MergeTarget",
    "MergeOutcome",
    "merge_polyline",
    "merge_path",
    "DrawingSession",
    "ShapeDraft",
    "EditCtx",
    "EditEngine",
    "ViewState",
    "EngineSettings",
    "DrawingStyle",
]
