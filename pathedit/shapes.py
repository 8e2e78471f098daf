"""Shape model for the two editable kinds: anchor-list polylines and segment paths.

Shapes are plain dataclasses tagged by ``kind`` (``"polyline"`` or ``"path"``).
Per-kind behaviour lives in small dispatch tables rather than methods so the
edit/snap/merge modules can treat both kinds uniformly::

    for entry in anchors_and_controls(shape):
        ...

Every shape owns its point lists; ``copy()`` never shares them.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Literal, NamedTuple, Optional, Sequence, Tuple, Union

from .geometry import Affine, Point, bbox_center, is_same_point, local_to_world, world_to_local

logger = logging.getLogger(__name__)

PointRole = Literal["anchor", "control"]
ShapeRef = str

_POINTS_PER_COMMAND: Dict[str, int] = {"M": 1, "L": 1, "C": 3, "Q": 2}
MIN_ANCHORS = 2

_shape_counter = itertools.count(1)


def next_shape_id() -> ShapeRef:
    return f"S{next(_shape_counter):04d}"


def _pt(value: Sequence[float]) -> Point:
    return (float(value[0]), float(value[1]))


@dataclass
class Style:
    stroke: str = "#ffffff"
    stroke_width: float = 2.0

    def copy(self) -> "Style":
        return Style(self.stroke, self.stroke_width)


@dataclass
class Segment:
    """One path command. ``points[-1]`` is the anchor; anything before it is a control."""

    command: str
    points: List[Point]

    def __post_init__(self) -> None:
        expected = _POINTS_PER_COMMAND.get(self.command)
        if expected is None:
            raise ValueError(f"Unsupported path command '{self.command}'")
        if len(self.points) != expected:
            raise ValueError(f"'{self.command}' segment expects {expected} point(s), got {len(self.points)}")
        self.points = [_pt(p) for p in self.points]

    @property
    def anchor(self) -> Point:
        return self.points[-1]

    @property
    def anchor_slot(self) -> int:
        return len(self.points) - 1

    @property
    def controls(self) -> List[Point]:
        return self.points[:-1]

    def copy(self) -> "Segment":
        return Segment(self.command, list(self.points))


def move_to(p: Sequence[float]) -> Segment:
    return Segment("M", [_pt(p)])


def line_to(p: Sequence[float]) -> Segment:
    return Segment("L", [_pt(p)])


def cubic_to(cp1: Sequence[float], cp2: Sequence[float], end: Sequence[float]) -> Segment:
    return Segment("C", [_pt(cp1), _pt(cp2), _pt(end)])


def quad_to(cp: Sequence[float], end: Sequence[float]) -> Segment:
    return Segment("Q", [_pt(cp), _pt(end)])


@dataclass
class Polyline:
    points: List[Point]
    matrix: Affine = field(default_factory=Affine)
    offset: Point = (0.0, 0.0)
    style: Style = field(default_factory=Style)
    id: Optional[ShapeRef] = None
    closed: bool = False
    dirty: bool = False
    kind: Literal["polyline"] = field(default="polyline", init=False)

    def __post_init__(self) -> None:
        if len(self.points) < MIN_ANCHORS:
            raise ValueError("Polyline needs at least two points")
        self.points = [_pt(p) for p in self.points]
        self.offset = _pt(self.offset)

    def copy(self) -> "Polyline":
        return Polyline(
            points=list(self.points),
            matrix=self.matrix.copy(),
            offset=self.offset,
            style=self.style.copy(),
            id=self.id,
            closed=self.closed,
            dirty=self.dirty,
        )


@dataclass
class Path:
    segments: List[Segment]
    matrix: Affine = field(default_factory=Affine)
    offset: Point = (0.0, 0.0)
    style: Style = field(default_factory=Style)
    id: Optional[ShapeRef] = None
    closed: bool = False
    dirty: bool = False
    kind: Literal["path"] = field(default="path", init=False)

    def __post_init__(self) -> None:
        if not self.segments or self.segments[0].command != "M":
            raise ValueError("Path must start with a Move segment")
        if len(self.segments) < MIN_ANCHORS:
            raise ValueError("Path needs at least two anchors")
        self.offset = _pt(self.offset)

    def copy(self) -> "Path":
        return Path(
            segments=[seg.copy() for seg in self.segments],
            matrix=self.matrix.copy(),
            offset=self.offset,
            style=self.style.copy(),
            id=self.id,
            closed=self.closed,
            dirty=self.dirty,
        )


Shape = Union[Polyline, Path]


class PointEntry(NamedTuple):
    """One editable point of a shape, already projected into world space."""

    role: PointRole
    position: Point
    segment_index: int
    slot: int


# ---------------------------------------------------------------------------
# Point enumeration


def _polyline_entries(shape: Polyline) -> Iterator[PointEntry]:
    for i, pt in enumerate(shape.points):
        yield PointEntry("anchor", local_to_world(shape.matrix, shape.offset, pt), i, 0)


def _path_entries(shape: Path) -> Iterator[PointEntry]:
    for i, seg in enumerate(shape.segments):
        # Controls precede their segment's anchor.
        for slot, cp in enumerate(seg.controls):
            yield PointEntry("control", local_to_world(shape.matrix, shape.offset, cp), i, slot)
        yield PointEntry("anchor", local_to_world(shape.matrix, shape.offset, seg.anchor), i, seg.anchor_slot)


_ENTRIES: Dict[str, Callable[..., Iterator[PointEntry]]] = {
    "polyline": _polyline_entries,
    "path": _path_entries,
}


def anchors_and_controls(shape: Shape) -> List[PointEntry]:
    """All anchors and controls of ``shape`` in draw order, in world coordinates."""
    return list(_ENTRIES[shape.kind](shape))


def local_points(shape: Shape) -> List[Point]:
    if shape.kind == "polyline":
        return list(shape.points)
    return [pt for seg in shape.segments for pt in seg.points]


def anchor_count(shape: Shape) -> int:
    if shape.kind == "polyline":
        return len(shape.points)
    return len(shape.segments)


def anchor_world(shape: Shape, index: int) -> Optional[Point]:
    """World position of the anchor at polyline point / path segment ``index``."""
    if index < 0 or index >= anchor_count(shape):
        return None
    if shape.kind == "polyline":
        local = shape.points[index]
    else:
        local = shape.segments[index].anchor
    return local_to_world(shape.matrix, shape.offset, local)


def point_world(shape: Shape, segment_index: int, slot: int) -> Optional[Point]:
    if shape.kind == "polyline":
        return anchor_world(shape, segment_index)
    if segment_index < 0 or segment_index >= len(shape.segments):
        return None
    seg = shape.segments[segment_index]
    if slot < 0 or slot >= len(seg.points):
        return None
    return local_to_world(shape.matrix, shape.offset, seg.points[slot])


def world_points(shape: Shape) -> List[Point]:
    """Anchors only, in order, in world coordinates."""
    return [entry.position for entry in anchors_and_controls(shape) if entry.role == "anchor"]


def endpoints(shape: Shape) -> Tuple[Point, Point]:
    anchors = world_points(shape)
    return anchors[0], anchors[-1]


# ---------------------------------------------------------------------------
# Mutation


def _write_polyline(shape: Polyline, segment_index: int, slot: int, local: Point, couple_handles: bool) -> bool:
    if segment_index < 0 or segment_index >= len(shape.points):
        return False
    shape.points[segment_index] = local
    return True


def _shift(pt: Point, dx: float, dy: float) -> Point:
    return (pt[0] + dx, pt[1] + dy)


def _write_path(shape: Path, segment_index: int, slot: int, local: Point, couple_handles: bool) -> bool:
    if segment_index < 0 or segment_index >= len(shape.segments):
        return False
    seg = shape.segments[segment_index]
    if slot < 0 or slot >= len(seg.points):
        return False
    if slot == seg.anchor_slot and couple_handles:
        old = seg.anchor
        dx, dy = local[0] - old[0], local[1] - old[1]
        # Incoming handle of this segment and outgoing handle of the next one.
        if seg.command == "C":
            seg.points[1] = _shift(seg.points[1], dx, dy)
        if segment_index + 1 < len(shape.segments):
            nxt = shape.segments[segment_index + 1]
            if nxt.command == "C":
                nxt.points[0] = _shift(nxt.points[0], dx, dy)
    seg.points[slot] = local
    return True


_WRITERS: Dict[str, Callable[..., bool]] = {
    "polyline": _write_polyline,
    "path": _write_path,
}


def write_point(
    shape: Shape,
    segment_index: int,
    slot: int,
    world: Sequence[float],
    *,
    couple_handles: bool = True,
) -> bool:
    """Write ``world`` into one anchor/control slot and mark the shape dirty.

    Moving a path anchor drags the adjacent cubic handles by the same delta
    when ``couple_handles`` is set.
    """
    local = world_to_local(shape.matrix, shape.offset, world)
    ok = _WRITERS[shape.kind](shape, segment_index, slot, local, couple_handles)
    if not ok:
        logger.debug("write_point: no slot %s/%s on %s", segment_index, slot, shape.id)
        return False
    shape.dirty = True
    return True


def _delete_polyline(shape: Polyline, index: int) -> bool:
    if index < 0 or index >= len(shape.points):
        return False
    if len(shape.points) <= MIN_ANCHORS:
        return False
    del shape.points[index]
    return True


def _delete_path(shape: Path, index: int) -> bool:
    if index < 0 or index >= len(shape.segments):
        return False
    if len(shape.segments) <= MIN_ANCHORS:
        return False
    if index == 0:
        # The next anchor becomes the new start; whatever curve led to it is dropped.
        shape.segments[1] = move_to(shape.segments[1].anchor)
    del shape.segments[index]
    return True


_DELETERS: Dict[str, Callable[..., bool]] = {
    "polyline": _delete_polyline,
    "path": _delete_path,
}


def delete_anchor(shape: Shape, index: int) -> bool:
    """Remove the anchor at ``index``; returns False (no-op) when it would leave fewer than two."""
    ok = _DELETERS[shape.kind](shape, index)
    if not ok:
        logger.debug("delete_anchor rejected on %s at %s (anchors=%d)", shape.id, index, anchor_count(shape))
        return False
    shape.dirty = True
    return True


def recompute_bounds(shape: Shape) -> None:
    """Re-anchor the local origin on the centre of the local bounding box.

    The translation is left alone, so any change of origin shows up as a
    world-space shift of the whole shape until the caller compensates.
    """
    shape.offset = bbox_center(local_points(shape))
    shape.dirty = False


# ---------------------------------------------------------------------------
# Construction


def _place(shape: Shape) -> Shape:
    # Local == world: origin on the bbox centre, translation equal to it.
    shape.offset = bbox_center(local_points(shape))
    shape.matrix = Affine.translation(*shape.offset)
    if shape.id is None:
        shape.id = next_shape_id()
    return shape


def make_polyline(
    points: Sequence[Sequence[float]],
    style: Optional[Style] = None,
    *,
    closed: bool = False,
    id: Optional[ShapeRef] = None,
) -> Polyline:
    shape = Polyline(points=[_pt(p) for p in points], style=style or Style(), id=id, closed=closed)
    return _place(shape)  # type: ignore[return-value]


def make_path(
    segments: Sequence[Segment],
    style: Optional[Style] = None,
    *,
    closed: bool = False,
    id: Optional[ShapeRef] = None,
) -> Path:
    shape = Path(segments=[seg.copy() for seg in segments], style=style or Style(), id=id, closed=closed)
    return _place(shape)  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Cubic outlines (merge input)


@dataclass
class OutlineSegment:
    cp1: Point
    cp2: Point
    end: Point
    is_line: bool = False


@dataclass
class Outline:
    """A world-space start point followed by cubic (or straight) segments."""

    start: Point
    segments: List[OutlineSegment] = field(default_factory=list)

    @property
    def end(self) -> Point:
        if not self.segments:
            return self.start
        return self.segments[-1].end

    def anchors(self) -> List[Point]:
        return [self.start] + [seg.end for seg in self.segments]


def _line_segment(end: Point) -> OutlineSegment:
    return OutlineSegment(end, end, end, is_line=True)


def to_path_outline(shape: Shape) -> Outline:
    """Normalise ``shape`` into world-space cubic segments."""
    if shape.kind == "polyline":
        pts = world_points(shape)
        return Outline(pts[0], [_line_segment(p) for p in pts[1:]])

    def w(p: Point) -> Point:
        return local_to_world(shape.matrix, shape.offset, p)

    start = w(shape.segments[0].anchor)
    current = start
    out: List[OutlineSegment] = []
    for seg in shape.segments[1:]:
        end = w(seg.anchor)
        if seg.command in ("L", "M"):
            # A mid-path Move is joined with a straight edge.
            out.append(_line_segment(end))
        elif seg.command == "C":
            out.append(OutlineSegment(w(seg.points[0]), w(seg.points[1]), end))
        else:
            ctrl = w(seg.points[0])
            cp1 = (current[0] + 2.0 / 3.0 * (ctrl[0] - current[0]), current[1] + 2.0 / 3.0 * (ctrl[1] - current[1]))
            cp2 = (end[0] + 2.0 / 3.0 * (ctrl[0] - end[0]), end[1] + 2.0 / 3.0 * (ctrl[1] - end[1]))
            out.append(OutlineSegment(cp1, cp2, end))
        current = end
    if shape.closed and not is_same_point(current, start):
        out.append(_line_segment(start))
    return Outline(start, out)


def reverse_outline(outline: Outline) -> Outline:
    if not outline.segments:
        return Outline(outline.start, [])
    starts = outline.anchors()[:-1]
    reversed_segments: List[OutlineSegment] = []
    for i in range(len(outline.segments) - 1, -1, -1):
        seg = outline.segments[i]
        prev = starts[i]
        if seg.is_line:
            reversed_segments.append(_line_segment(prev))
        else:
            reversed_segments.append(OutlineSegment(seg.cp2, seg.cp1, prev))
    return Outline(outline.end, reversed_segments)


def outline_to_segments(outline: Outline) -> List[Segment]:
    segments = [move_to(outline.start)]
    for seg in outline.segments:
        if seg.is_line:
            segments.append(line_to(seg.end))
        else:
            segments.append(cubic_to(seg.cp1, seg.cp2, seg.end))
    return segments


__all__ = [
    "PointRole",
    "ShapeRef",
    "Style",
    "Segment",
    "move_to",
    "line_to",
    "cubic_to",
    "quad_to",
    "Polyline",
    "Path",
    "Shape",
    "PointEntry",
    "MIN_ANCHORS",
    "next_shape_id",
    "anchors_and_controls",
    "local_points",
    "anchor_count",
    "anchor_world",
    "point_world",
    "world_points",
    "endpoints",
    "write_point",
    "delete_anchor",
    "recompute_bounds",
    "make_polyline",
    "make_path",
    "Outline",
    "OutlineSegment",
    "to_path_outline",
    "reverse_outline",
    "outline_to_segments",
]
