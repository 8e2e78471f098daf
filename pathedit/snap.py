"""Endpoint snapping.

Candidates are the start/end anchors of every other editable shape, plus the
first point of a shape that is still being drawn (self-closing). The radius
is given in screen pixels and converted with the current zoom, so snapping
feels the same at every zoom level.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Literal, Optional, Sequence

from .config import ViewState
from .geometry import Point, distance
from .shapes import Shape, ShapeRef, endpoints

EndpointRole = Literal["start", "end"]
LOCAL_START_ID = "local-start"


@dataclass(frozen=True)
class SnapCandidate:
    position: Point
    shape_id: Optional[ShapeRef]
    role: EndpointRole

    @property
    def endpoint_id(self) -> str:
        if self.shape_id is None:
            return LOCAL_START_ID
        return f"{self.shape_id}:{self.role}"


@dataclass(frozen=True)
class SnapResult:
    snapped: bool
    position: Point
    source_endpoint_id: Optional[str] = None
    source_shape: Optional[ShapeRef] = None
    endpoint_role: Optional[EndpointRole] = None

    @classmethod
    def miss(cls, position: Sequence[float]) -> "SnapResult":
        return cls(False, (float(position[0]), float(position[1])))

    @classmethod
    def hit(cls, candidate: SnapCandidate) -> "SnapResult":
        return cls(
            True,
            candidate.position,
            source_endpoint_id=candidate.endpoint_id,
            source_shape=candidate.shape_id,
            endpoint_role=candidate.role,
        )

    @property
    def is_self_closure(self) -> bool:
        return self.snapped and self.source_endpoint_id == LOCAL_START_ID


def collect_endpoints(shapes: Iterable[Shape], exclude: Optional[ShapeRef] = None) -> List[SnapCandidate]:
    out: List[SnapCandidate] = []
    for shape in shapes:
        if exclude is not None and shape.id == exclude:
            continue
        start, end = endpoints(shape)
        out.append(SnapCandidate(start, shape.id, "start"))
        out.append(SnapCandidate(end, shape.id, "end"))
    return out


def _nearest(position: Sequence[float], candidates: Iterable[SnapCandidate], threshold: float) -> Optional[SnapCandidate]:
    best: Optional[SnapCandidate] = None
    best_dist = float("inf")
    for cand in candidates:
        dist = distance(position, cand.position)
        if dist < best_dist and dist <= threshold:
            best = cand
            best_dist = dist
    return best


def find_snap(
    position: Sequence[float],
    shapes: Iterable[Shape],
    view: ViewState,
    exclude: Optional[ShapeRef] = None,
) -> SnapResult:
    """Nearest foreign endpoint within the zoom-adjusted threshold."""
    if not view.snap_enabled:
        return SnapResult.miss(position)
    best = _nearest(position, collect_endpoints(shapes, exclude), view.snap_threshold)
    if best is None:
        return SnapResult.miss(position)
    return SnapResult.hit(best)


def find_local_snap(position: Sequence[float], draft_points: Sequence[Point], view: ViewState) -> SnapResult:
    """Closing check against the first point of an in-progress draft."""
    if not view.snap_enabled or len(draft_points) < 2:
        return SnapResult.miss(position)
    start = draft_points[0]
    if distance(position, start) <= view.snap_threshold:
        return SnapResult.hit(SnapCandidate((float(start[0]), float(start[1])), None, "start"))
    return SnapResult.miss(position)


def resolve_snap(
    position: Sequence[float],
    shapes: Iterable[Shape],
    view: ViewState,
    *,
    draft_points: Sequence[Point] = (),
    exclude: Optional[ShapeRef] = None,
) -> SnapResult:
    """Self-closing wins over snapping onto another shape."""
    local = find_local_snap(position, draft_points, view)
    if local.snapped:
        return local
    return find_snap(position, shapes, view, exclude)


__all__ = [
    "EndpointRole",
    "LOCAL_START_ID",
    "SnapCandidate",
    "SnapResult",
    "collect_endpoints",
    "find_snap",
    "find_local_snap",
    "resolve_snap",
]
