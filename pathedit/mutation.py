"""Point moves and deletions that keep the rest of the shape visually fixed.

Recomputing bounds re-anchors a shape's local origin on its bounding box, so
any edit that changes the box would drag the whole shape with it. Each edit
therefore records a *stable anchor* (the first anchor not being edited),
lets the bounds recompute, then shifts the shape's translation back by
however far that anchor moved.
"""
from __future__ import annotations

import logging
from typing import Collection, List, Optional, Sequence, Tuple

from .catalogue import EditPoint, build_catalogue, reproject
from .config import EngineSettings
from .geometry import Point
from .shapes import Shape, anchor_count, anchor_world, delete_anchor, recompute_bounds, write_point

logger = logging.getLogger(__name__)

SHIFT_EPS = 1e-12


def pick_stable_anchor(shape: Shape, exclude: Collection[int] = ()) -> Optional[int]:
    """First anchor index not in ``exclude``."""
    for index in range(anchor_count(shape)):
        if index not in exclude:
            return index
    return None


def _record(shape: Shape, exclude: Collection[int]) -> Optional[Tuple[int, Point]]:
    index = pick_stable_anchor(shape, exclude)
    if index is None:
        return None
    pos = anchor_world(shape, index)
    if pos is None:
        return None
    return index, pos


def compensate(shape: Shape, index: int, before: Point) -> None:
    """Translate the shape so anchor ``index`` sits at ``before`` again."""
    after = anchor_world(shape, index)
    if after is None:
        return
    dx = after[0] - before[0]
    dy = after[1] - before[1]
    if abs(dx) > SHIFT_EPS or abs(dy) > SHIFT_EPS:
        shape.matrix.translate_by(-dx, -dy)


def move_point(
    shape: Shape,
    edit_point: EditPoint,
    target: Sequence[float],
    catalogue: Optional[Sequence[EditPoint]] = None,
    settings: Optional[EngineSettings] = None,
) -> bool:
    """Move ``edit_point`` (and any anchors linked to it) to world ``target``."""
    settings = settings or EngineSettings()
    group = list(edit_point.linked_anchors) if edit_point.is_linked else [edit_point]
    moving = {ep.segment_index for ep in group if ep.is_anchor}
    stable = _record(shape, moving)

    written = False
    for ep in group:
        written |= write_point(shape, ep.segment_index, ep.slot, target, couple_handles=settings.couple_handles)
    if not written:
        return False

    recompute_bounds(shape)
    if stable is not None:
        compensate(shape, *stable)
    else:
        logger.debug("move_point: no stable anchor on %s", shape.id)
    if catalogue is not None:
        reproject(catalogue, shape)
    return True


def _removed_indices(shape: Shape, index: int) -> List[int]:
    if shape.kind == "path" and index == 0:
        # Segment 1 is rewritten into the new Move.
        return [0, 1]
    return [index]


def delete_point(
    shape: Shape,
    edit_point: EditPoint,
    settings: Optional[EngineSettings] = None,
) -> Optional[List[EditPoint]]:
    """Delete an anchor and return the rebuilt catalogue, or None if rejected."""
    if not edit_point.is_anchor:
        return None
    index = edit_point.segment_index
    stable = _record(shape, _removed_indices(shape, index))

    if not delete_anchor(shape, index):
        return None

    recompute_bounds(shape)
    if stable is not None:
        old_index, before = stable
        # Indices after the deleted anchor shift down by one.
        new_index = old_index - 1 if old_index > index else old_index
        compensate(shape, new_index, before)
    return build_catalogue(shape, settings)


__all__ = ["pick_stable_anchor", "compensate", "move_point", "delete_point"]
