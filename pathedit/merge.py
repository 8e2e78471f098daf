"""Fuse a finished stroke with the shapes its endpoints snapped onto.

Two flavours share the same topology rules:

* ``merge_polyline`` splices plain point lists (polyline onto polylines).
* ``merge_path`` splices cubic outlines, used as soon as a bezier path is
  involved on either side so curves survive the merge.

Both return ``None`` when there is nothing to merge or the result would have
fewer than two anchors; the caller then keeps the unmerged shape.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from .config import DrawingStyle
from .geometry import Point, is_same_point
from .shapes import (
    MIN_ANCHORS,
    Outline,
    Segment,
    Shape,
    ShapeRef,
    Style,
    make_path,
    make_polyline,
    outline_to_segments,
    reverse_outline,
    to_path_outline,
    world_points,
)
from .snap import EndpointRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeTarget:
    shape: Shape
    role: EndpointRole


@dataclass
class MergeOutcome:
    points: List[Point]
    closed: bool
    shapes_to_remove: Set[ShapeRef] = field(default_factory=set)
    style: Style = field(default_factory=Style)
    segments: Optional[List[Segment]] = None

    @property
    def is_path(self) -> bool:
        return self.segments is not None

    def build_shape(self) -> Shape:
        """Construct the replacement shape in world coordinates."""
        if self.segments is not None:
            return make_path(self.segments, self.style.copy(), closed=self.closed)
        return make_polyline(self.points, self.style.copy(), closed=self.closed)


def resolve_style(
    start_target: Optional[MergeTarget],
    end_target: Optional[MergeTarget],
    fallback: Optional[DrawingStyle] = None,
) -> Style:
    """Start-side target wins, then end-side, then the active drawing style."""
    for target in (start_target, end_target):
        if target is not None:
            return target.shape.style.copy()
    fallback = fallback or DrawingStyle()
    return Style(fallback.stroke, fallback.stroke_width)


def _removal(*targets: Optional[MergeTarget]) -> Set[ShapeRef]:
    return {t.shape.id for t in targets if t is not None and t.shape.id is not None}


def _same_target(start_target: Optional[MergeTarget], end_target: Optional[MergeTarget]) -> bool:
    return (
        start_target is not None
        and end_target is not None
        and start_target.shape.id == end_target.shape.id
    )


def merge_polyline(
    line_points: Sequence[Point],
    start_target: Optional[MergeTarget],
    end_target: Optional[MergeTarget],
    fallback: Optional[DrawingStyle] = None,
) -> Optional[MergeOutcome]:
    if start_target is None and end_target is None:
        return None
    line = [(float(p[0]), float(p[1])) for p in line_points]
    style = resolve_style(start_target, end_target, fallback)

    if start_target is not None and _same_target(start_target, end_target):
        existing = world_points(start_target.shape)
        oriented = line if start_target.role == "end" else list(reversed(line))
        ring = existing + oriented[1:]
        if len(ring) > 1 and is_same_point(ring[0], ring[-1]):
            ring = ring[:-1]
        if len(ring) < MIN_ANCHORS:
            logger.debug("closure merge aborted: %d point(s)", len(ring))
            return None
        return MergeOutcome(ring, True, _removal(start_target), style)

    merged: List[Point] = []
    if start_target is not None:
        existing = world_points(start_target.shape)
        merged.extend(existing if start_target.role == "end" else reversed(existing))

    lo = 1 if start_target is not None else 0
    hi = len(line) - 1 if end_target is not None else len(line)
    merged.extend(line[lo:hi])

    if end_target is not None:
        existing = world_points(end_target.shape)
        merged.extend(existing if end_target.role == "start" else reversed(existing))

    if len(merged) < MIN_ANCHORS:
        logger.debug("splice merge aborted: %d point(s)", len(merged))
        return None
    return MergeOutcome(merged, False, _removal(start_target, end_target), style)


def _outline_points(outline: Outline, closed: bool) -> List[Point]:
    pts = outline.anchors()
    if closed and len(pts) > 1 and is_same_point(pts[0], pts[-1]):
        pts = pts[:-1]
    return pts


def merge_path(
    outline: Outline,
    start_target: Optional[MergeTarget],
    end_target: Optional[MergeTarget],
    fallback: Optional[DrawingStyle] = None,
) -> Optional[MergeOutcome]:
    if start_target is None and end_target is None:
        return None
    style = resolve_style(start_target, end_target, fallback)

    if start_target is not None and _same_target(start_target, end_target):
        existing = to_path_outline(start_target.shape)
        if start_target.role == "start":
            existing = reverse_outline(existing)
        oriented = outline
        if not is_same_point(existing.end, oriented.start):
            flipped = reverse_outline(oriented)
            if is_same_point(existing.end, flipped.start):
                oriented = flipped
        merged = Outline(existing.start, existing.segments + oriented.segments)
        closed = is_same_point(merged.start, merged.end)
        points = _outline_points(merged, closed)
        if len(points) < MIN_ANCHORS:
            logger.debug("path closure merge aborted: %d anchor(s)", len(points))
            return None
        return MergeOutcome(points, closed, _removal(start_target), style, outline_to_segments(merged))

    merged = outline
    if start_target is not None:
        head = to_path_outline(start_target.shape)
        if start_target.role == "start":
            head = reverse_outline(head)
        merged = Outline(head.start, head.segments + merged.segments)
    if end_target is not None:
        tail = to_path_outline(end_target.shape)
        if end_target.role == "end":
            tail = reverse_outline(tail)
        merged = Outline(merged.start, merged.segments + tail.segments)

    points = merged.anchors()
    if len(points) < MIN_ANCHORS:
        logger.debug("path splice merge aborted: %d anchor(s)", len(points))
        return None
    return MergeOutcome(points, False, _removal(start_target, end_target), style, outline_to_segments(merged))


__all__ = ["MergeTarget", "MergeOutcome", "resolve_style", "merge_polyline", "merge_path"]
