"""Tests for the shape model: enumeration, writes, deletes and outlines."""

import numpy as np
import pytest

from pathedit.geometry import Affine
from pathedit.shapes import (
    Path,
    Polyline,
    Segment,
    anchor_count,
    anchors_and_controls,
    cubic_to,
    delete_anchor,
    endpoints,
    line_to,
    make_path,
    make_polyline,
    move_to,
    outline_to_segments,
    quad_to,
    recompute_bounds,
    reverse_outline,
    to_path_outline,
    world_points,
    write_point,
)


@pytest.fixture
def mixed_path():
    return make_path([
        move_to((0, 0)),
        cubic_to((1, 1), (2, 1), (3, 0)),
        quad_to((4, 1), (5, 0)),
        line_to((6, 0)),
    ])


@pytest.fixture
def s_curve():
    return make_path([
        move_to((0, 0)),
        cubic_to((0, 5), (10, 5), (10, 0)),
        cubic_to((10, -5), (20, -5), (20, 0)),
    ])


class TestConstruction:
    def test_polyline_needs_two_points(self):
        with pytest.raises(ValueError):
            Polyline(points=[(0, 0)])

    def test_path_must_start_with_move(self):
        with pytest.raises(ValueError):
            Path(segments=[line_to((0, 0)), line_to((1, 1))])

    def test_path_needs_two_anchors(self):
        with pytest.raises(ValueError):
            Path(segments=[move_to((0, 0))])

    def test_segment_point_count(self):
        with pytest.raises(ValueError):
            Segment("C", [(0, 0), (1, 1)])

    def test_unknown_command(self):
        with pytest.raises(ValueError):
            Segment("A", [(0, 0)])

    def test_make_polyline_local_equals_world(self):
        shape = make_polyline([(0, 0), (10, 0), (10, 10)])
        assert shape.offset == (5.0, 5.0)
        assert world_points(shape) == [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]
        assert shape.id is not None and shape.id.startswith("S")

    def test_copy_does_not_alias(self, s_curve):
        clone = s_curve.copy()
        clone.segments[1].points[0] = (99.0, 99.0)
        clone.matrix.translate_by(1, 1)
        assert s_curve.segments[1].points[0] == (0.0, 5.0)
        assert s_curve.matrix.e != clone.matrix.e


class TestEnumeration:
    def test_controls_precede_anchor(self, mixed_path):
        roles = [entry.role for entry in anchors_and_controls(mixed_path)]
        assert roles == ["anchor", "control", "control", "anchor", "control", "anchor", "anchor"]

    def test_slots(self, mixed_path):
        entries = anchors_and_controls(mixed_path)
        assert [(e.segment_index, e.slot) for e in entries] == [
            (0, 0), (1, 0), (1, 1), (1, 2), (2, 0), (2, 1), (3, 0)
        ]

    def test_transform_applied(self):
        shape = Polyline(points=[(0, 0), (10, 0)], matrix=Affine.translation(100, 50))
        assert world_points(shape) == [(100.0, 50.0), (110.0, 50.0)]

    def test_endpoints(self, mixed_path):
        assert endpoints(mixed_path) == ((0.0, 0.0), (6.0, 0.0))


class TestWritePoint:
    def test_polyline_write(self):
        shape = make_polyline([(0, 0), (10, 0)])
        assert write_point(shape, 1, 0, (20, 5))
        assert shape.points[1] == (20.0, 5.0)
        assert shape.dirty

    def test_anchor_drags_adjacent_handles(self, s_curve):
        write_point(s_curve, 1, 2, (12, 3))
        assert s_curve.segments[1].points == [(0.0, 5.0), (12.0, 8.0), (12.0, 3.0)]
        assert s_curve.segments[2].points[0] == (12.0, -2.0)
        assert s_curve.segments[2].points[1] == (20.0, -5.0)

    def test_handles_stay_when_uncoupled(self, s_curve):
        write_point(s_curve, 1, 2, (12, 3), couple_handles=False)
        assert s_curve.segments[1].points[1] == (10.0, 5.0)
        assert s_curve.segments[2].points[0] == (10.0, -5.0)

    def test_control_write_moves_only_control(self, s_curve):
        write_point(s_curve, 2, 0, (11, -8))
        assert s_curve.segments[2].points == [(11.0, -8.0), (20.0, -5.0), (20.0, 0.0)]
        assert s_curve.segments[1].anchor == (10.0, 0.0)

    def test_move_anchor_drags_first_handle(self, s_curve):
        write_point(s_curve, 0, 0, (1, 1))
        assert s_curve.segments[1].points[0] == (1.0, 6.0)

    def test_bad_slot_rejected(self, s_curve):
        assert not write_point(s_curve, 7, 0, (0, 0))
        assert not s_curve.dirty


class TestDeleteAnchor:
    def test_polyline_delete(self):
        shape = make_polyline([(0, 0), (5, 5), (10, 0)])
        assert delete_anchor(shape, 1)
        assert shape.points == [(0.0, 0.0), (10.0, 0.0)]

    def test_polyline_floor(self):
        shape = make_polyline([(0, 0), (10, 0)])
        assert not delete_anchor(shape, 0)
        assert anchor_count(shape) == 2

    def test_path_floor(self, s_curve):
        assert delete_anchor(s_curve, 2)
        assert not delete_anchor(s_curve, 1)
        assert anchor_count(s_curve) == 2

    def test_deleting_move_promotes_next_anchor(self):
        shape = make_path([move_to((0, 0)), cubic_to((1, 5), (9, 5), (10, 0)), line_to((20, 0))])
        assert delete_anchor(shape, 0)
        assert [seg.command for seg in shape.segments] == ["M", "L"]
        assert shape.segments[0].anchor == (10.0, 0.0)

    def test_deleting_middle_removes_segment(self, mixed_path):
        assert delete_anchor(mixed_path, 2)
        assert [seg.command for seg in mixed_path.segments] == ["M", "C", "L"]
        # The following segment keeps its own handles.
        assert mixed_path.segments[1].points == [(1.0, 1.0), (2.0, 1.0), (3.0, 0.0)]


class TestRecomputeBounds:
    def test_origin_moves_to_bbox_centre(self):
        shape = Polyline(points=[(0, 0), (10, 0)])
        recompute_bounds(shape)
        assert shape.offset == (5.0, 0.0)
        assert world_points(shape)[0] == (-5.0, 0.0)

    def test_controls_count_toward_bounds(self):
        shape = make_path([move_to((0, 0)), cubic_to((0, 20), (10, 20), (10, 0))])
        recompute_bounds(shape)
        assert shape.offset == (5.0, 10.0)


class TestOutline:
    def test_polyline_outline_is_lines(self):
        outline = to_path_outline(make_polyline([(0, 0), (1, 0), (1, 1)]))
        assert outline.start == (0.0, 0.0)
        assert all(seg.is_line for seg in outline.segments)
        assert outline.anchors() == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)]

    def test_quadratic_elevated(self):
        outline = to_path_outline(make_path([move_to((0, 0)), quad_to((3, 3), (6, 0))]))
        seg = outline.segments[0]
        np.testing.assert_allclose(seg.cp1, (2.0, 2.0))
        np.testing.assert_allclose(seg.cp2, (4.0, 2.0))

    def test_closed_path_gets_closing_edge(self):
        shape = make_path([move_to((0, 0)), line_to((10, 0)), line_to((10, 10))], closed=True)
        assert to_path_outline(shape).end == (0.0, 0.0)

    def test_reverse(self, s_curve):
        rev = reverse_outline(to_path_outline(s_curve))
        assert rev.anchors() == [(20.0, 0.0), (10.0, 0.0), (0.0, 0.0)]
        assert rev.segments[0].cp1 == (20.0, -5.0)
        assert rev.segments[0].cp2 == (10.0, -5.0)

    def test_reverse_keeps_lines(self):
        rev = reverse_outline(to_path_outline(make_polyline([(0, 0), (1, 0), (1, 1)])))
        segments = outline_to_segments(rev)
        assert [seg.command for seg in segments] == ["M", "L", "L"]
        assert [seg.anchor for seg in segments] == [(1.0, 1.0), (1.0, 0.0), (0.0, 0.0)]
