"""Edit-point catalogue and hit testing for the shape under point editing.

The catalogue is a flat, transient view over a shape's anchors and control
handles. It is rebuilt after structural edits and merely re-projected after
moves.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import EngineSettings, ViewState
from .geometry import Point, distance
from .shapes import PointRole, Shape, ShapeRef, anchors_and_controls, point_world


@dataclass(eq=False)
class EditPoint:
    shape_id: ShapeRef
    point_type: PointRole
    index: int
    segment_index: int
    slot: int
    position: Point
    # Shared list for a group of coincident anchors (self included); empty otherwise.
    linked_anchors: List["EditPoint"] = field(default_factory=list, repr=False)

    @property
    def is_anchor(self) -> bool:
        return self.point_type == "anchor"

    @property
    def control_slot(self) -> Optional[int]:
        return None if self.is_anchor else self.slot

    @property
    def is_linked(self) -> bool:
        return len(self.linked_anchors) > 1


def _link_coincident(points: Sequence[EditPoint], tol: float) -> None:
    groups: List[List[EditPoint]] = []
    for ep in points:
        if not ep.is_anchor:
            continue
        for group in groups:
            if distance(group[0].position, ep.position) <= tol:
                group.append(ep)
                break
        else:
            groups.append([ep])
    for group in groups:
        if len(group) < 2:
            continue
        for ep in group:
            ep.linked_anchors = group


def build_catalogue(shape: Shape, settings: Optional[EngineSettings] = None) -> List[EditPoint]:
    settings = settings or EngineSettings()
    if shape.id is None:
        raise ValueError("Shape must carry an id before it can be edited")
    catalogue = [
        EditPoint(
            shape_id=shape.id,
            point_type=entry.role,
            index=i,
            segment_index=entry.segment_index,
            slot=entry.slot,
            position=entry.position,
        )
        for i, entry in enumerate(anchors_and_controls(shape))
    ]
    _link_coincident(catalogue, settings.link_tolerance)
    return catalogue


def reproject(catalogue: Sequence[EditPoint], shape: Shape) -> None:
    """Refresh every cached world position from the shape's current geometry."""
    for ep in catalogue:
        pos = point_world(shape, ep.segment_index, ep.slot)
        if pos is not None:
            ep.position = pos


def marker_radius(point_type: PointRole, view: ViewState, settings: EngineSettings) -> float:
    px = settings.anchor_radius_px if point_type == "anchor" else settings.control_radius_px
    return view.pixels_to_world(px)


def find_nearest(
    position: Sequence[float],
    catalogue: Sequence[EditPoint],
    preferred_type: Optional[PointRole],
    view: ViewState,
    settings: Optional[EngineSettings] = None,
) -> Optional[EditPoint]:
    """Closest edit point within pick range, biased toward ``preferred_type``.

    Pick range is the marker's own radius plus ``hit_tolerance_px``, both in
    screen pixels. If any in-range point has the preferred type only those
    compete on distance.
    """
    settings = settings or EngineSettings()
    tolerance = view.pixels_to_world(settings.hit_tolerance_px)
    hits = []
    for ep in catalogue:
        dist = distance(position, ep.position)
        if dist <= marker_radius(ep.point_type, view, settings) + tolerance:
            hits.append((dist, ep))
    if not hits:
        return None
    preferred = [hit for hit in hits if hit[1].point_type == preferred_type]
    if preferred:
        hits = preferred
    return min(hits, key=lambda hit: hit[0])[1]


__all__ = ["EditPoint", "build_catalogue", "reproject", "marker_radius", "find_nearest"]
