"""Host-facing facade wiring hit testing, mutation, snapping and merging.

The host hands over a bundle of callables (``EditCtx``) and forwards pointer
and keyboard input::

    engine = EditEngine(ctx)
    engine.select_for_editing("S0003")
    point = engine.hit_test(cursor, "anchor")
    if point is not None:
        engine.begin_drag(point)
        engine.drag_to(cursor)      # repeated per pointer frame
        engine.end_drag()           # the one place history is notified

The engine edits a private copy of the selected shape and writes it back
through ``apply_geometry`` after every change.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional, Sequence

from .catalogue import EditPoint, build_catalogue, find_nearest
from .config import DrawingStyle, EngineSettings, ViewState
from .drafting import ShapeDraft
from .geometry import distance
from .merge import MergeOutcome, MergeTarget, merge_path, merge_polyline
from .mutation import delete_point, move_point
from .shapes import PointRole, Shape, ShapeRef, Style, anchor_count, to_path_outline, world_points
from .snap import SnapResult, find_snap

logger = logging.getLogger(__name__)

MOVE_EPS = 1e-9

NudgeDirection = Literal["left", "right", "up", "down"]
_NUDGE_VECTORS = {"left": (-1.0, 0.0), "right": (1.0, 0.0), "up": (0.0, -1.0), "down": (0.0, 1.0)}


@dataclass
class EditCtx:
    get_shapes: Callable[[], List[ShapeRef]]
    get_shape: Callable[[ShapeRef], Optional[Shape]]
    apply_geometry: Callable[[ShapeRef, Shape], None]
    add_shape: Callable[[Shape], ShapeRef]
    remove_shape: Callable[[ShapeRef], None]
    current_zoom: Callable[[], float]
    is_snap_enabled: Callable[[], bool]
    snap_pixel_threshold: Callable[[], float]
    notify_structural_change: Callable[[ShapeRef], None]
    request_repaint: Callable[[], None]
    update_status: Optional[Callable[[str], None]] = None


class EditEngine:
    def __init__(
        self,
        ctx: EditCtx,
        settings: Optional[EngineSettings] = None,
        drawing_style: Optional[DrawingStyle] = None,
    ) -> None:
        self.ctx = ctx
        self.settings = settings or EngineSettings()
        self.drawing_style = drawing_style or DrawingStyle()
        self.catalogue: List[EditPoint] = []
        self.active_snap: Optional[SnapResult] = None
        self._shape: Optional[Shape] = None
        self._drag: Optional[EditPoint] = None
        self._drag_changed = False

    # ------------------------------------------------------------------
    # Host plumbing

    def view_state(self) -> ViewState:
        zoom = float(self.ctx.current_zoom())
        if zoom <= 0.0:
            logger.debug("host reported zoom %r; assuming 1.0", zoom)
            zoom = 1.0
        threshold = float(self.ctx.snap_pixel_threshold())
        if threshold <= 0.0:
            return ViewState(zoom=zoom, snap_enabled=False)
        return ViewState(zoom=zoom, snap_enabled=bool(self.ctx.is_snap_enabled()), snap_threshold_px=threshold)

    def _status(self, message: str) -> None:
        if self.ctx.update_status is not None:
            self.ctx.update_status(message)

    def _shapes(self) -> List[Shape]:
        shapes: List[Shape] = []
        for ref in self.ctx.get_shapes():
            shape = self.ctx.get_shape(ref)
            if shape is not None:
                shapes.append(shape)
        return shapes

    def _write_back(self) -> None:
        if self._shape is None or self._shape.id is None:
            return
        self.ctx.apply_geometry(self._shape.id, self._shape.copy())
        self.ctx.request_repaint()

    @property
    def selected(self) -> Optional[ShapeRef]:
        return None if self._shape is None else self._shape.id

    @property
    def shape(self) -> Optional[Shape]:
        return self._shape

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    # ------------------------------------------------------------------
    # Selection

    def select_for_editing(self, ref: ShapeRef) -> bool:
        """Start editing ``ref``; re-selecting it re-reads the host's geometry."""
        if self._shape is not None and self._shape.id == ref and self._drag is not None:
            return True
        self.deselect()
        shape = self.ctx.get_shape(ref)
        if shape is None:
            logger.debug("select_for_editing: unknown shape %s", ref)
            return False
        self._shape = shape.copy()
        self._shape.id = ref
        self.catalogue = build_catalogue(self._shape, self.settings)
        self.ctx.request_repaint()
        return True

    def deselect(self) -> None:
        if self._drag is not None:
            self.end_drag()
        if self._shape is None:
            return
        self._shape = None
        self.catalogue = []
        self.active_snap = None
        self.ctx.request_repaint()

    def hit_test(self, position: Sequence[float], preferred_type: Optional[PointRole] = "anchor") -> Optional[EditPoint]:
        if self._shape is None:
            return None
        return find_nearest(position, self.catalogue, preferred_type, self.view_state(), self.settings)

    # ------------------------------------------------------------------
    # Drag lifecycle

    def _owns(self, point: EditPoint) -> bool:
        return self._shape is not None and point.shape_id == self._shape.id and any(
            ep is point for ep in self.catalogue
        )

    def _endpoint_role(self, point: EditPoint) -> Optional[Literal["start", "end"]]:
        if self._shape is None or not point.is_anchor:
            return None
        if point.segment_index == 0:
            return "start"
        if point.segment_index == anchor_count(self._shape) - 1:
            return "end"
        return None

    def begin_drag(self, point: EditPoint) -> bool:
        if not self._owns(point):
            logger.debug("begin_drag: point not in current catalogue")
            return False
        if self._drag is not None:
            self.end_drag()
        self._drag = point
        self._drag_changed = False
        self.active_snap = None
        return True

    def drag_to(self, position: Sequence[float]) -> bool:
        if self._drag is None or self._shape is None:
            return False
        snap = find_snap(position, self._shapes(), self.view_state(), exclude=self._shape.id)
        self.active_snap = snap
        target = snap.position if snap.snapped else position
        if distance(self._drag.position, target) <= MOVE_EPS:
            return False
        moved = move_point(self._shape, self._drag, target, self.catalogue, self.settings)
        if moved:
            self._drag_changed = True
            self._write_back()
        return moved

    def end_drag(self) -> Optional[MergeOutcome]:
        """Finish the drag; notifies history once if geometry changed.

        Returns the merge outcome when a dragged endpoint was dropped on
        another shape's endpoint and the two were fused.
        """
        point, changed, snap = self._drag, self._drag_changed, self.active_snap
        self._drag = None
        self._drag_changed = False
        self.active_snap = None
        if point is None or self._shape is None or self._shape.id is None or not changed:
            return None
        ref = self._shape.id
        if self.settings.merge_on_edit and snap is not None and snap.snapped:
            outcome = self._merge_edited(point, snap)
            if outcome is not None:
                return outcome
        self.ctx.notify_structural_change(ref)
        logger.info("edited %s", ref)
        return None

    def nudge(self, point: EditPoint, dx: float, dy: float) -> bool:
        if not self.begin_drag(point):
            return False
        x, y = point.position
        moved = self.drag_to((x + dx, y + dy))
        self.end_drag()
        return moved

    def nudge_key(self, point: EditPoint, direction: NudgeDirection, large: bool = False) -> bool:
        step = self.settings.nudge_step_large if large else self.settings.nudge_step
        ux, uy = _NUDGE_VECTORS[direction]
        return self.nudge(point, ux * step, uy * step)

    # ------------------------------------------------------------------
    # Structural edits

    def delete_point(self, point: EditPoint) -> bool:
        if not self._owns(point) or not point.is_anchor:
            return False
        if self._drag is not None:
            self.end_drag()
        # Ending the drag may have merged the shape away.
        if self._shape is None or self._shape.id is None:
            return False
        catalogue = delete_point(self._shape, point, self.settings)
        if catalogue is None:
            self._status("Delete: a shape needs at least two anchors")
            return False
        self.catalogue = catalogue
        self._write_back()
        ref = self._shape.id
        self.ctx.notify_structural_change(ref)
        logger.info("deleted anchor %d of %s", point.segment_index, ref)
        return True

    # ------------------------------------------------------------------
    # Merging

    def _merge_target(self, snap: Optional[SnapResult]) -> Optional[MergeTarget]:
        if snap is None or not snap.snapped or snap.source_shape is None or snap.endpoint_role is None:
            return None
        shape = self.ctx.get_shape(snap.source_shape)
        if shape is None or shape.closed:
            return None
        return MergeTarget(shape, snap.endpoint_role)

    def _merge(
        self,
        stroke: Shape,
        start_target: Optional[MergeTarget],
        end_target: Optional[MergeTarget],
    ) -> Optional[MergeOutcome]:
        kinds = {stroke.kind} | {t.shape.kind for t in (start_target, end_target) if t is not None}
        if "path" in kinds:
            return merge_path(to_path_outline(stroke), start_target, end_target, self.drawing_style)
        return merge_polyline(world_points(stroke), start_target, end_target, self.drawing_style)

    def _commit_merge(self, outcome: MergeOutcome) -> ShapeRef:
        for ref in sorted(outcome.shapes_to_remove):
            self.ctx.remove_shape(ref)
        new_ref = self.ctx.add_shape(outcome.build_shape())
        self.ctx.notify_structural_change(new_ref)
        self.ctx.request_repaint()
        kind = "closed" if outcome.closed else "open"
        logger.info("merged %s into %s (%s)", sorted(outcome.shapes_to_remove), new_ref, kind)
        self._status(f"Merge: {len(outcome.shapes_to_remove)} → 1")
        return new_ref

    def _merge_edited(self, point: EditPoint, snap: SnapResult) -> Optional[MergeOutcome]:
        role = self._endpoint_role(point)
        target = self._merge_target(snap)
        if role is None or target is None or self._shape is None or self._shape.closed:
            return None
        start_target, end_target = (target, None) if role == "start" else (None, target)
        outcome = self._merge(self._shape, start_target, end_target)
        if outcome is None:
            return None
        if self._shape.id is not None:
            outcome.shapes_to_remove.add(self._shape.id)
        self._shape = None
        self.catalogue = []
        self._commit_merge(outcome)
        return outcome

    def _default_style(self) -> Style:
        return Style(self.drawing_style.stroke, self.drawing_style.stroke_width)

    def _commit_closed(self, draft: ShapeDraft) -> MergeOutcome:
        segments = [seg.copy() for seg in draft.segments] if draft.segments is not None else None
        outcome = MergeOutcome(list(draft.points), True, set(), self._default_style(), segments)
        ref = self.ctx.add_shape(draft.build_shape(outcome.style.copy()))
        self.ctx.notify_structural_change(ref)
        self.ctx.request_repaint()
        logger.info("closed %s (%d points)", ref, len(outcome.points))
        return outcome

    def complete_drawing(self, draft: ShapeDraft) -> Optional[MergeOutcome]:
        """Commit a finished draft, fusing it with snapped shapes when possible.

        A self-closed draft is added as-is and reported as a closed outcome
        that removes nothing. Returns None when an open draft was added
        unmerged.
        """
        if draft.closed:
            return self._commit_closed(draft)
        outcome = None
        if draft.has_targets:
            stroke = draft.build_shape(self._default_style())
            outcome = self._merge(stroke, self._merge_target(draft.start_snap), self._merge_target(draft.end_snap))
        if outcome is None:
            ref = self.ctx.add_shape(draft.build_shape(self._default_style()))
            self.ctx.notify_structural_change(ref)
            self.ctx.request_repaint()
            return None
        if self.selected in outcome.shapes_to_remove:
            self.deselect()
        self._commit_merge(outcome)
        return outcome


__all__ = ["EditCtx", "EditEngine", "NudgeDirection"]
