"""Tests for stroke merging."""

import numpy as np
import pytest

from pathedit.config import DrawingStyle
from pathedit.merge import MergeTarget, merge_path, merge_polyline, resolve_style
from pathedit.shapes import Style, cubic_to, make_path, make_polyline, move_to, to_path_outline, world_points


@pytest.fixture
def left():
    return make_polyline([(0, 0), (10, 0)], Style("#ff0000", 3.0))


@pytest.fixture
def right():
    return make_polyline([(30, 0), (40, 0)], Style("#0000ff", 1.0))


@pytest.fixture
def arch():
    return make_path([move_to((0, 0)), cubic_to((3, 5), (7, 5), (10, 0))])


class TestPolylineSplice:
    def test_bridge_between_two_shapes(self, left, right):
        line = [(10, 0), (15, 5), (25, 5), (30, 0)]
        outcome = merge_polyline(line, MergeTarget(left, "end"), MergeTarget(right, "start"))
        assert outcome is not None
        assert outcome.points == [(0, 0), (10, 0), (15, 5), (25, 5), (30, 0), (40, 0)]
        assert not outcome.closed
        assert outcome.shapes_to_remove == {left.id, right.id}

    def test_start_on_target_start_reverses_target(self, left):
        outcome = merge_polyline([(0, 0), (-5, 5), (-10, 0)], MergeTarget(left, "start"), None)
        assert outcome.points == [(10, 0), (0, 0), (-5, 5), (-10, 0)]
        assert outcome.shapes_to_remove == {left.id}

    def test_end_on_target_end_reverses_target(self, right):
        outcome = merge_polyline([(50, 5), (40, 0)], None, MergeTarget(right, "end"))
        assert outcome.points == [(50, 5), (40, 0), (30, 0)]

    def test_no_targets(self):
        assert merge_polyline([(0, 0), (1, 1)], None, None) is None

    def test_build_shape(self, left, right):
        line = [(10, 0), (20, 5), (30, 0)]
        outcome = merge_polyline(line, MergeTarget(left, "end"), MergeTarget(right, "start"))
        shape = outcome.build_shape()
        assert shape.kind == "polyline"
        np.testing.assert_allclose(world_points(shape), outcome.points)
        assert shape.id not in (left.id, right.id)


class TestPolylineClosure:
    @pytest.fixture
    def corner(self):
        return make_polyline([(0, 0), (10, 0), (10, 10)])

    def test_end_to_start(self, corner):
        line = [(10, 10), (0, 10), (0, 0)]
        outcome = merge_polyline(line, MergeTarget(corner, "end"), MergeTarget(corner, "start"))
        assert outcome.closed
        assert outcome.points == [(0, 0), (10, 0), (10, 10), (0, 10)]
        assert outcome.shapes_to_remove == {corner.id}

    def test_start_to_end(self, corner):
        line = [(0, 0), (0, 10), (10, 10)]
        outcome = merge_polyline(line, MergeTarget(corner, "start"), MergeTarget(corner, "end"))
        assert outcome.closed
        assert outcome.points == [(0, 0), (10, 0), (10, 10), (0, 10)]

    def test_no_duplicate_seam(self, corner):
        line = [(10, 10), (0, 10), (0, 0)]
        outcome = merge_polyline(line, MergeTarget(corner, "end"), MergeTarget(corner, "start"))
        assert outcome.points[0] != outcome.points[-1]


class TestStyle:
    def test_start_target_wins(self, left, right):
        style = resolve_style(MergeTarget(left, "end"), MergeTarget(right, "start"))
        assert (style.stroke, style.stroke_width) == ("#ff0000", 3.0)

    def test_end_target_when_no_start(self, right):
        style = resolve_style(None, MergeTarget(right, "start"))
        assert style.stroke == "#0000ff"

    def test_fallback_to_drawing_style(self):
        style = resolve_style(None, None, DrawingStyle(stroke="#00ff00", stroke_width=4.0))
        assert (style.stroke, style.stroke_width) == ("#00ff00", 4.0)

    def test_style_is_copied(self, left):
        style = resolve_style(MergeTarget(left, "end"), None)
        style.stroke = "#000000"
        assert left.style.stroke == "#ff0000"


class TestPathMerge:
    def test_append_line_to_curve(self, arch):
        stroke = to_path_outline(make_polyline([(10, 0), (20, 0)]))
        outcome = merge_path(stroke, MergeTarget(arch, "end"), None)
        assert outcome.is_path
        assert [seg.command for seg in outcome.segments] == ["M", "C", "L"]
        np.testing.assert_allclose(outcome.points, [(0, 0), (10, 0), (20, 0)], atol=1e-9)

    def test_reversed_head_swaps_handles(self, arch):
        stroke = to_path_outline(make_polyline([(0, 0), (-10, 0)]))
        outcome = merge_path(stroke, MergeTarget(arch, "start"), None)
        np.testing.assert_allclose(outcome.points, [(10, 0), (0, 0), (-10, 0)], atol=1e-9)
        np.testing.assert_allclose(outcome.segments[1].points, [(7, 5), (3, 5), (0, 0)], atol=1e-9)

    def test_closure(self, arch):
        stroke = to_path_outline(make_polyline([(10, 0), (5, -5), (0, 0)]))
        outcome = merge_path(stroke, MergeTarget(arch, "end"), MergeTarget(arch, "start"))
        assert outcome.closed
        assert outcome.shapes_to_remove == {arch.id}
        np.testing.assert_allclose(outcome.points, [(0, 0), (10, 0), (5, -5)], atol=1e-9)
        assert [seg.command for seg in outcome.segments] == ["M", "C", "L", "L"]
        assert outcome.build_shape().closed

    def test_bridge_into_polyline(self, arch, right):
        stroke = to_path_outline(make_polyline([(10, 0), (30, 0)]))
        outcome = merge_path(stroke, MergeTarget(arch, "end"), MergeTarget(right, "start"))
        assert [seg.command for seg in outcome.segments] == ["M", "C", "L", "L"]
        np.testing.assert_allclose(outcome.points, [(0, 0), (10, 0), (30, 0), (40, 0)], atol=1e-9)
        assert outcome.build_shape().kind == "path"

    def test_no_targets(self, arch):
        assert merge_path(to_path_outline(arch), None, None) is None
