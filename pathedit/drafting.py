"""Point placement for the polyline and bezier-pen drawing tools.

A ``DrawingSession`` accumulates clicked points, snapping each one (its own
start point first, then other shapes' endpoints) and remembering which
shapes the first and last points landed on. ``to_draft()`` hands the result
to ``EditEngine.complete_drawing`` for merging.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Literal, Optional, Sequence, Tuple

from .config import ViewState
from .geometry import Point, is_same_point
from .shapes import (
    MIN_ANCHORS,
    Outline,
    Segment,
    Shape,
    Style,
    cubic_to,
    line_to,
    make_path,
    make_polyline,
    move_to,
    to_path_outline,
)
from .snap import SnapResult, resolve_snap

logger = logging.getLogger(__name__)

DraftKind = Literal["polyline", "path"]
CLOSE_EPS = 1e-3


@dataclass
class ShapeDraft:
    kind: DraftKind
    points: List[Point]
    segments: Optional[List[Segment]] = None
    start_snap: Optional[SnapResult] = None
    end_snap: Optional[SnapResult] = None
    closed: bool = False

    @property
    def has_targets(self) -> bool:
        return self.start_snap is not None or self.end_snap is not None

    def build_shape(self, style: Style) -> Shape:
        if self.kind == "path" and self.segments is not None:
            return make_path(self.segments, style, closed=self.closed)
        return make_polyline(self.points, style, closed=self.closed)

    def outline(self) -> Outline:
        return to_path_outline(self.build_shape(Style()))


def _target_snap(snap: SnapResult) -> Optional[SnapResult]:
    # Only snaps onto another shape can drive a merge.
    if snap.snapped and snap.source_shape is not None:
        return snap
    return None


@dataclass
class DrawingSession:
    kind: DraftKind = "polyline"
    points: List[Point] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)
    snaps: List[Optional[SnapResult]] = field(default_factory=list)

    @property
    def drawing(self) -> bool:
        return bool(self.points)

    def preview(self, position: Sequence[float], shapes: Iterable[Shape], view: ViewState) -> SnapResult:
        """Snapped hover position for the ghost segment; nothing is committed."""
        return resolve_snap(position, shapes, view, draft_points=self.points)

    def add_point(
        self,
        position: Sequence[float],
        shapes: Iterable[Shape],
        view: ViewState,
        handles: Optional[Tuple[Point, Point]] = None,
    ) -> SnapResult:
        """Commit a point. ``handles`` makes the incoming path segment a cubic."""
        snap = resolve_snap(position, shapes, view, draft_points=self.points)
        point = snap.position if snap.snapped else (float(position[0]), float(position[1]))

        if self.kind == "path":
            if not self.segments:
                self.segments.append(move_to(point))
            elif handles is not None:
                self.segments.append(cubic_to(handles[0], handles[1], point))
            else:
                self.segments.append(line_to(point))
        self.points.append(point)
        self.snaps.append(_target_snap(snap))
        return snap

    def undo_last_point(self) -> None:
        if not self.points:
            return
        self.points.pop()
        self.snaps.pop()
        if self.segments:
            self.segments.pop()

    def reset(self) -> None:
        self.points.clear()
        self.segments.clear()
        self.snaps.clear()

    def final_points(self) -> Tuple[List[Point], bool]:
        if len(self.points) < MIN_ANCHORS:
            return list(self.points), False
        if is_same_point(self.points[0], self.points[-1], CLOSE_EPS):
            return self.points[:-1], True
        return list(self.points), False

    def to_draft(self) -> Optional[ShapeDraft]:
        """Finished draft, or None when there are not enough points to keep."""
        points, closed = self.final_points()
        if len(points) < MIN_ANCHORS:
            logger.debug("draft discarded: %d point(s)", len(points))
            return None
        return ShapeDraft(
            kind=self.kind,
            points=points,
            segments=[seg.copy() for seg in self.segments] if self.kind == "path" else None,
            start_snap=self.snaps[0],
            end_snap=None if closed else self.snaps[-1],
            closed=closed,
        )


__all__ = ["DraftKind", "ShapeDraft", "DrawingSession"]
