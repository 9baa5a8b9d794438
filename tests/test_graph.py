"""
Unit tests for the live graph.

Tests verify:
1. Rolling window and axis range policy
2. Gridline placement and spacing
3. Screen mapping and draw primitives
"""

import numpy as np
import pytest
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sim.graph import (GraphSeries, GraphParams, GridlineConfig, compute_gridlines,
                       MAX_GRIDLINES)


class TestGraphRanges:
    """Tests for the rolling window and axis ranges."""

    def test_initial_ranges(self):
        """A new graph spans x in [0, 10] and y in [-1, 1]."""
        graph = GraphSeries()

        assert (graph.x_min, graph.x_max) == (0.0, 10.0)
        assert (graph.y_min, graph.y_max) == (-1.0, 1.0)
        assert graph.latest is None
        assert len(graph) == 0

    def test_rolling_window(self):
        """Only the newest max_points samples are kept; x snaps to them."""
        graph = GraphSeries(GraphParams(max_points=3))
        for x, y in [(0, 0), (1, 5), (2, 3), (3, 8), (4, 1)]:
            graph.add_point(x, y)

        np.testing.assert_array_equal(graph.points(), [[2, 3], [3, 8], [4, 1]])
        assert graph.x_min == 2.0
        assert graph.x_max == 4.0
        assert graph.latest == (4.0, 1.0)

    def test_y_never_shrinks(self):
        """The y range is monotonically non-shrinking."""
        graph = GraphSeries(GraphParams(max_points=20))
        rng = np.random.default_rng(1)
        y_mins, y_maxs = [], []

        for i in range(300):
            graph.add_point(i * 0.1, rng.normal(0.0, 5.0) * np.sin(i * 0.05))
            y_mins.append(graph.y_min)
            y_maxs.append(graph.y_max)

        assert np.all(np.diff(y_maxs) >= 0)
        assert np.all(np.diff(y_mins) <= 0)

    def test_expansion_threshold(self):
        """Data near an edge pushes it out by threshold · range."""
        graph = GraphSeries(GraphParams(expansion_threshold=0.1))
        graph.add_point(0.0, 0.95)

        # range 2 -> threshold 0.2; 0.95 > 1 - 0.2
        assert graph.y_max == pytest.approx(1.15)
        assert graph.y_min == -1.0

    def test_inside_margin_no_change(self):
        """Data well inside the range leaves it alone."""
        graph = GraphSeries()
        graph.add_point(0.0, 0.5)

        assert (graph.y_min, graph.y_max) == (-1.0, 1.0)

    def test_min_range(self):
        """The y range never falls below min_y_range."""
        graph = GraphSeries(GraphParams(expansion_threshold=0.0, min_y_range=5.0))
        graph.add_point(0.0, 0.0)

        assert graph.y_max - graph.y_min == pytest.approx(5.0)
        assert (graph.y_max + graph.y_min) / 2 == pytest.approx(0.0)

    @pytest.mark.parametrize("kwargs", [
        {'max_points': 0},
        {'size': (0.0, 100.0)},
        {'expansion_threshold': -0.1},
        {'min_y_range': 0.0},
    ])
    def test_invalid_params(self, kwargs):
        """Invalid options raise."""
        with pytest.raises(ValueError):
            GraphParams(**kwargs)


class TestGridlines:
    """Tests for gridline spacing and placement."""

    def test_fixed_spacing(self):
        """Fixed spacing ignores the axis range."""
        config = GridlineConfig.fixed(4.0)

        assert not config.is_dynamic
        assert config.spacing_for(1000.0) == 4.0

    @pytest.mark.parametrize("axis_range", [0.0, 0.3, 2.0, 17.5, 123.4, 1e6])
    def test_dynamic_spacing_is_multiple(self, axis_range):
        """Dynamic spacing is a positive multiple of the minimum."""
        config = GridlineConfig.dynamic(0.5, 4)
        spacing = config.spacing_for(axis_range)
        ratio = spacing / 0.5

        assert spacing > 0
        assert ratio >= 1
        assert ratio == pytest.approx(round(ratio))

    def test_dynamic_spacing_value(self):
        """spacing = ceil((range / n) / min_spacing) · min_spacing."""
        config = GridlineConfig.dynamic(20.0, 4)

        assert config.spacing_for(200.0) == 60.0
        assert config.spacing_for(40.0) == 20.0

    def test_gridlines_consecutive_spacing(self):
        """Returned lines are ascending and exactly one spacing apart."""
        lines = compute_gridlines(-3.7, 12.2, 2.5)

        assert lines == [-2.5, 0.0, 2.5, 5.0, 7.5, 10.0]
        np.testing.assert_array_almost_equal(np.diff(lines), np.full(5, 2.5))

    def test_gridlines_origin(self):
        """Lines are aligned to the origin, not to the axis minimum."""
        assert compute_gridlines(0.0, 5.0, 2.0, origin=1.0) == [1.0, 3.0, 5.0]

    def test_gridlines_stable_while_scrolling(self):
        """Scrolling the window keeps the same absolute line values."""
        a = compute_gridlines(0.3, 10.3, 2.0)
        b = compute_gridlines(1.3, 11.3, 2.0)

        assert set(a) & set(b) == {2.0, 4.0, 6.0, 8.0, 10.0}

    def test_gridlines_invalid_spacing(self):
        """Non-positive spacing raises."""
        with pytest.raises(ValueError):
            compute_gridlines(0.0, 1.0, 0.0)
        with pytest.raises(ValueError):
            GridlineConfig.fixed(-1.0)

    def test_gridlines_non_finite(self):
        """Non-finite bounds give no lines."""
        assert compute_gridlines(0.0, np.inf, 1.0) == []
        assert compute_gridlines(np.nan, 1.0, 1.0) == []

    def test_gridlines_huge_axis(self):
        """An axis needing too many lines gets none instead of looping."""
        assert compute_gridlines(0.0, 1e12, 1.0) == []
        assert len(compute_gridlines(0.0, MAX_GRIDLINES, 1.0)) == MAX_GRIDLINES + 1

    def test_diverging_graph(self):
        """A fixed-spacing graph fed huge values stays responsive."""
        graph = GraphSeries(GraphParams(y_gridlines=GridlineConfig.fixed(1.0)))
        graph.add_point(0.0, 0.0)
        graph.add_point(1.0, 1e15)

        assert graph.y_gridlines() == []
        assert graph.primitives().data_segments.shape == (1, 2, 2)

    def test_graph_gridlines_inside_axes(self):
        """Graph gridlines lie within the current ranges."""
        graph = GraphSeries(GraphParams(x_gridlines=GridlineConfig.fixed(1.0)))
        for i in range(50):
            graph.add_point(i * 0.1, 3.0 * np.sin(i * 0.2))

        for value, _ in graph.x_gridlines():
            assert graph.x_min <= value <= graph.x_max
        for value, _ in graph.y_gridlines():
            assert graph.y_min <= value <= graph.y_max


class TestScreenMapping:
    """Tests for screen coordinates and primitives."""

    def test_to_screen_corners(self):
        """y_max maps to the top edge and y_min to the bottom edge."""
        graph = GraphSeries(GraphParams(position=(20.0, 20.0), size=(300.0, 200.0)))

        assert graph.to_screen(0.0, -1.0) == pytest.approx((20.0, 220.0))
        assert graph.to_screen(10.0, 1.0) == pytest.approx((320.0, 20.0))

    def test_zero_range_fallback(self):
        """A zero-width x range maps to the middle."""
        graph = GraphSeries(GraphParams(position=(20.0, 20.0), size=(300.0, 200.0)))
        graph.add_point(3.0, 0.0)

        assert graph.x_min == graph.x_max == 3.0
        assert graph.to_screen(3.0, 0.0) == pytest.approx((170.0, 120.0))

    def test_current_text(self):
        """The latest value is shown with two decimals."""
        graph = GraphSeries()
        assert graph.current_text() == ""

        graph.add_point(1.0, 3.14159)
        assert graph.current_text() == "3.14"

        graph.params.show_current_x = True
        assert graph.current_text() == "(1.00, 3.14)"

    def test_primitives(self):
        """Primitives contain data segments, gridlines and labels."""
        graph = GraphSeries(GraphParams(label="Energy", max_points=50))
        for i in range(10):
            graph.add_point(i * 0.5, i * 1.0)
        prims = graph.primitives()

        assert prims.data_segments.shape == (9, 2, 2)
        assert prims.gridline_segments.shape == (
            len(prims.x_gridlines) + len(prims.y_gridlines), 2, 2)
        assert prims.labels[0].text == "Energy"
        assert prims.labels[0].anchor == 'top-left'
        assert prims.labels[1].text == "9.00"
        assert prims.latest == (4.5, 9.0)

        y_labels = [l.text for l in prims.labels[2:2 + len(prims.y_gridlines)]]
        assert y_labels == [f"{v:.1f}" for v, _ in prims.y_gridlines]

    def test_primitives_single_point(self):
        """One sample gives no data segments."""
        graph = GraphSeries()
        graph.add_point(0.0, 0.0)

        assert graph.primitives().data_segments.shape == (0, 2, 2)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
