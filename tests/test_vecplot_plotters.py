from __future__ import annotations

import math
import unittest

import numpy as np

from vecplot import Plot
from vecplot.draw.canvas import BoundedCanvas
from vecplot.errors import DomainError, InputRangeError, NaNValue, PlotDataError
from vecplot.palette import LinearColorMap
from vecplot.plotter import (
    BarChart,
    BoxPlot,
    BoxSummary,
    ColorBar,
    Contour,
    GlyphBoxes,
    GridXYZ,
    HeatMap,
    Histogram,
    HorizontalBoxPlot,
    Line,
    Scatter,
    Values,
    XYs,
    bin_points,
    conrec,
    contour_paths,
    median,
    xy_range,
)
from vecplot.vg import Recorder
from vecplot.vg.recorder import DrawImage, Fill, FillString, SetColor, Stroke


def _radial_grid(n: int = 80) -> GridXYZ:
    coords = np.arange(n, dtype=np.float64) - (n - 1) / 2
    return GridXYZ.from_function(lambda x, y: np.sqrt(x * x + y * y), coords, coords)


class DataTests(unittest.TestCase):
    def test_xys_validation(self) -> None:
        xys = XYs([(0, 1), (2, 3)])
        self.assertEqual(len(xys), 2)
        self.assertEqual(xys.xy(1), (2.0, 3.0))
        with self.assertRaises(NaNValue):
            XYs([(0, math.nan)])
        with self.assertRaises(PlotDataError):
            XYs([(0, 1, 2)])
        with self.assertRaises(PlotDataError):
            XYs.from_columns([1, 2], [1])

    def test_xys_copies_input(self) -> None:
        src = np.array([[0.0, 1.0]])
        xys = XYs(src)
        src[0, 0] = 9.0
        self.assertEqual(xys.xy(0), (0.0, 1.0))

    def test_xy_range(self) -> None:
        self.assertEqual(xy_range(XYs([(1, 5), (-2, 3)])), (-2.0, 1.0, 3.0, 5.0))
        lo, hi, _, _ = xy_range(XYs([]))
        self.assertTrue(math.isinf(lo) and lo > 0)
        self.assertTrue(math.isinf(hi) and hi < 0)


class HistogramTests(unittest.TestCase):
    def test_normalized_area_is_one(self) -> None:
        samples = np.random.default_rng(7).standard_normal(10000)
        h = Histogram.from_values(samples, 16)
        self.assertEqual(len(h.bins), 16)
        self.assertEqual(sum(b.weight for b in h.bins), 10000)
        h.normalize(1.0)
        self.assertAlmostEqual(sum(b.weight * b.width for b in h.bins), 1.0, delta=1e-12)

    def test_bins_cover_range_with_equal_width(self) -> None:
        bins = bin_points(XYs.from_columns([0.0, 1.0, 2.0, 3.0, 4.0], [1.0] * 5), 4)
        self.assertEqual(bins[0].min, 0.0)
        self.assertEqual(bins[-1].max, 4.0)
        for b in bins:
            self.assertAlmostEqual(b.width, 1.0)
        # The maximum lands in the last bin.
        self.assertEqual([b.weight for b in bins], [1.0, 1.0, 1.0, 2.0])

    def test_default_bin_count_is_square_root(self) -> None:
        h = Histogram.from_values(np.linspace(0.0, 1.0, 100))
        self.assertEqual(len(h.bins), 10)

    def test_weighted_points(self) -> None:
        bins = bin_points(XYs([(0.0, 2.5), (1.0, 0.5)]), 2)
        self.assertEqual([b.weight for b in bins], [2.5, 0.5])

    def test_single_value_gets_unit_bin(self) -> None:
        bins = bin_points(XYs.from_columns([3.0, 3.0], [1.0, 1.0]), 5)
        self.assertEqual(len(bins), 1)
        self.assertEqual((bins[0].min, bins[0].max, bins[0].weight), (2.5, 3.5, 2.0))

    def test_empty_input_is_rejected(self) -> None:
        with self.assertRaises(DomainError):
            Histogram.from_values([])

    def test_data_range_starts_at_zero(self) -> None:
        h = Histogram.from_values([1.0, 2.0, 2.0, 3.0], 2)
        xmin, xmax, ymin, ymax = h.data_range()
        self.assertEqual((xmin, xmax, ymin), (1.0, 3.0, 0.0))
        self.assertEqual(ymax, 3.0)


class BoxPlotTests(unittest.TestCase):
    def test_median(self) -> None:
        self.assertEqual(median([1.0]), 1.0)
        self.assertEqual(median([1.0, 2.0, 3.0]), 2.0)
        self.assertEqual(median([1.0, 2.0, 3.0, 4.0]), 2.5)

    def test_summary_with_outlier(self) -> None:
        s = BoxSummary.of(np.array([1, 2, 3, 4, 5, 6, 7, 8, 9, 100], dtype=np.float64))
        self.assertEqual((s.median, s.quartile1, s.quartile3), (5.5, 3.0, 8.0))
        self.assertEqual(s.outside, (9,))
        self.assertEqual((s.adj_low, s.adj_high), (1.0, 9.0))
        self.assertEqual((s.min, s.max), (1.0, 100.0))

    def test_odd_sample_quartiles(self) -> None:
        s = BoxSummary.of(np.array([5, 1, 4, 2, 3], dtype=np.float64))
        self.assertEqual((s.median, s.quartile1, s.quartile3), (3.0, 1.5, 4.5))
        self.assertEqual(s.outside, ())

    def test_data_range_and_glyph_boxes(self) -> None:
        box = BoxPlot(20.0, 1.0, [1, 2, 3, 4, 5, 6, 7, 8, 9, 100])
        self.assertEqual(box.cap_width, 15.0)
        self.assertEqual(box.data_range(), (1.0, 1.0, 1.0, 100.0))
        plt = Plot().add(box)
        # A single location leaves the x axis empty until it is sanitized.
        plt.x.sanitize()
        boxes = box.glyph_boxes(plt)
        # One outlier plus the median marker.
        self.assertEqual(len(boxes), 2)

    def test_empty_box_plot_draws_nothing(self) -> None:
        box = BoxPlot(20.0, 0.0, [])
        self.assertIsNone(box.summary)
        self.assertEqual(box.width, 0.0)
        self.assertEqual(box.glyph_boxes(Plot()), [])
        xmin, xmax, ymin, ymax = box.data_range()
        self.assertEqual((xmin, xmax), (0.0, 0.0))
        self.assertTrue(ymin > ymax)

    def test_horizontal_data_range(self) -> None:
        box = HorizontalBoxPlot(10.0, 2.0, [3.0, 4.0, 5.0])
        self.assertEqual(box.data_range(), (3.0, 5.0, 2.0, 2.0))

    def test_plots_strokes(self) -> None:
        rec = Recorder(300, 200)
        plt = Plot().add(BoxPlot(20.0, 0.0, [1, 2, 3, 4, 50]), BoxPlot(20.0, 1.0, [2, 3, 4]))
        plt.nominal_x("a", "b")
        plt.draw(rec)
        self.assertTrue(any(isinstance(a, Stroke) for a in rec.actions))
        labels = [a.text for a in rec.actions if isinstance(a, FillString)]
        self.assertIn("a", labels)
        self.assertIn("b", labels)


class ConrecTests(unittest.TestCase):
    def test_linear_field_gives_straight_segments(self) -> None:
        grid = GridXYZ(np.array([[0.0, 0.0], [2.0, 2.0]]), [0.0, 1.0], [0.0, 1.0])
        segments = []
        conrec(grid, [0.5], lambda i, j, p1, p2, z: segments.append((p1, p2, z)))
        self.assertEqual(len(segments), 3)
        for p1, p2, z in segments:
            self.assertEqual(z, 0.5)
            self.assertAlmostEqual(p1[1], 0.25)
            self.assertAlmostEqual(p2[1], 0.25)

        (path,) = contour_paths(grid, [0.5])[0.5]
        self.assertFalse(path.closed)
        xs = sorted(p[0] for p in path.points)
        self.assertEqual((xs[0], xs[-1]), (0.0, 1.0))
        self.assertEqual(len(path.points), 4)

    def test_nan_cells_are_skipped(self) -> None:
        z = np.array([[0.0, math.nan], [2.0, 2.0]])
        grid = GridXYZ(z, [0.0, 1.0], [0.0, 1.0])
        segments = []
        conrec(grid, [0.5], lambda *args: segments.append(args))
        self.assertEqual(segments, [])

    def test_grid_shape_is_checked(self) -> None:
        with self.assertRaises(PlotDataError):
            GridXYZ(np.zeros((2, 3)), [0.0, 1.0], [0.0, 1.0])


class ContourTests(unittest.TestCase):
    def test_radial_levels_close(self) -> None:
        paths = contour_paths(_radial_grid(), [7.0, 13.0, 19.0, 27.0])
        for z in (7.0, 13.0, 19.0, 27.0):
            self.assertEqual(len(paths[z]), 1, f"level {z}")
            path = paths[z][0]
            self.assertTrue(path.closed)
            pts = np.asarray(path.points)
            cx = (pts[:, 0].min() + pts[:, 0].max()) / 2
            cy = (pts[:, 1].min() + pts[:, 1].max()) / 2
            self.assertLess(abs(cx), 1.0)
            self.assertLess(abs(cy), 1.0)
            np.testing.assert_allclose(np.hypot(pts[:, 0], pts[:, 1]), z, atol=0.5)

    def test_level_on_grid_values_traces_each_edge_once(self) -> None:
        coords = np.linspace(-1.0, 1.0, 5)
        grid = GridXYZ.from_function(lambda x, y: x * y, coords, coords)
        paths = contour_paths(grid, [0.0])[0.0]
        self.assertEqual(len(paths), 2)
        segments = []
        for path in paths:
            self.assertFalse(path.closed)
            for p1, p2 in zip(path.points, path.points[1:]):
                self.assertTrue(p1[0] == p2[0] == 0.0 or p1[1] == p2[1] == 0.0, (p1, p2))
                segments.append(tuple(sorted((p1, p2))))
        self.assertEqual(len(segments), 8)
        self.assertEqual(len(set(segments)), 8)

    def test_levels_outside_grid_are_empty(self) -> None:
        paths = contour_paths(_radial_grid(10), [100.0])
        self.assertEqual(paths[100.0], [])

    def test_from_grid_range_and_level_cleanup(self) -> None:
        grid = _radial_grid(10)
        c = Contour.from_grid(grid, [5.0, math.nan, 2.0], [(0, 0, 0, 255)])
        self.assertEqual(c.levels, [2.0, 5.0])
        self.assertAlmostEqual(c.min, math.hypot(0.5, 0.5))
        self.assertAlmostEqual(c.max, math.hypot(4.5, 4.5))
        self.assertEqual(c.data_range(), (-4.5, 4.5, -4.5, 4.5))

    def test_bad_construction(self) -> None:
        grid = _radial_grid(4)
        with self.assertRaises(PlotDataError):
            Contour(grid, [1.0], [])
        with self.assertRaises(PlotDataError):
            Contour(grid, [math.nan], [(0, 0, 0, 255)])

    def test_plot_strokes_each_level(self) -> None:
        rec = Recorder(200, 200)
        c = Contour.from_grid(_radial_grid(20), [3.0, 6.0], [(255, 0, 0, 255), (0, 0, 255, 255)])
        plt = Plot().add(c)
        plt.hide_axes()
        c.plot(plt.data_canvas(rec), plt)
        strokes = [a for a in rec.actions if isinstance(a, Stroke)]
        self.assertEqual(len(strokes), 2)


def _bounds(path) -> tuple[float, float, float, float]:
    pts = [comp.pos for comp in path if hasattr(comp, "pos")]
    return min(p.x for p in pts), max(p.x for p in pts), min(p.y for p in pts), max(p.y for p in pts)


_GREYS = [(0, 0, 0, 255), (1, 1, 1, 255), (2, 2, 2, 255), (3, 3, 3, 255)]


class HeatMapTests(unittest.TestCase):
    def setUp(self) -> None:
        self.grid = GridXYZ(np.array([[0.0, 1.0], [2.0, 3.0]]), [0.0, 1.0], [0.0, 10.0])

    def _draw(self, hm: HeatMap) -> tuple[Recorder, BoundedCanvas]:
        rec = Recorder(100, 100)
        plt = Plot().add(hm)
        plt.hide_axes()
        dc = plt.data_canvas(rec)
        rec.reset()
        hm.plot(dc, plt)
        return rec, dc

    def test_range_and_cell_colors(self) -> None:
        hm = HeatMap.from_grid(self.grid, _GREYS)
        self.assertEqual((hm.min, hm.max), (0.0, 3.0))
        self.assertEqual(hm.data_range(), (-0.5, 1.5, -5.0, 15.0))

        rec, dc = self._draw(hm)
        colors = [a.color for a in rec.actions if isinstance(a, SetColor)]
        # Columns outer, rows inner.
        self.assertEqual(colors, [_GREYS[0], _GREYS[2], _GREYS[1], _GREYS[3]])
        fills = [a.path for a in rec.actions if isinstance(a, Fill)]
        self.assertEqual(len(fills), 4)
        xmin, xmax, ymin, ymax = _bounds(fills[0])
        self.assertAlmostEqual(xmin, dc.min.x)
        self.assertAlmostEqual(xmax, dc.min.x + dc.size().x / 2)
        self.assertAlmostEqual(ymin, dc.min.y)
        self.assertAlmostEqual(ymax, dc.min.y + dc.size().y / 2)

    def test_out_of_range_and_missing_cells(self) -> None:
        z = np.array([[0.0, 1.0], [math.nan, 3.0]])
        hm = HeatMap(GridXYZ(z, [0.0, 1.0], [0.0, 1.0]), _GREYS, min=0.5, max=2.0, overflow=(9, 9, 9, 255))
        rec, _ = self._draw(hm)
        colors = [a.color for a in rec.actions if isinstance(a, SetColor)]
        self.assertEqual(colors, [_GREYS[1], (9, 9, 9, 255)])

    def test_single_cell_and_flat_range(self) -> None:
        hm = HeatMap.from_grid(GridXYZ(np.array([[4.0]]), [2.0], [7.0]), _GREYS)
        self.assertEqual(hm.data_range(), (1.5, 2.5, 6.5, 7.5))
        self.assertEqual(hm.color(4.0), _GREYS[0])

    def test_empty_palette_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            HeatMap(self.grid, [])


class ColorBarTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cm = LinearColorMap([(0, 0, 0), (255, 255, 255)])
        self.cm.min, self.cm.max = 0.0, 1.0

    def test_image_runs_low_to_high(self) -> None:
        img = ColorBar(self.cm).image(3)
        self.assertEqual(img.shape, (1, 3, 4))
        np.testing.assert_array_equal(img[0, :, 0], [0, 128, 255])

        img = ColorBar(self.cm, vertical=True).image(3)
        self.assertEqual(img.shape, (3, 1, 4))
        np.testing.assert_array_equal(img[:, 0, 0], [255, 128, 0])

    def test_data_range(self) -> None:
        self.assertEqual(ColorBar(self.cm).data_range(), (0.0, 1.0, 0.0, 1.0))
        self.assertEqual(ColorBar(self.cm, vertical=True).data_range(), (0.0, 1.0, 0.0, 1.0))
        self.cm.min, self.cm.max = -2.0, 5.0
        self.assertEqual(ColorBar(self.cm, vertical=True).data_range(), (0.0, 1.0, -2.0, 5.0))

    def test_plot_draws_one_image_over_data_area(self) -> None:
        rec = Recorder(200, 40)
        bar = ColorBar(self.cm)
        plt = Plot().add(bar)
        plt.hide_axes()
        dc = plt.data_canvas(rec)
        bar.plot(dc, plt)
        (draw,) = [a for a in rec.actions if isinstance(a, DrawImage)]
        self.assertEqual(draw.image.shape, (1, int(dc.size().x), 4))
        self.assertAlmostEqual(draw.rect.min.x, dc.min.x)
        self.assertAlmostEqual(draw.rect.max.x, dc.max.x)
        self.assertAlmostEqual(draw.rect.max.y, dc.max.y)

    def test_unset_range_is_an_error(self) -> None:
        cm = LinearColorMap([(0, 0, 0), (255, 255, 255)])
        with self.assertRaises(InputRangeError):
            ColorBar(cm).data_range()


class BarChartTests(unittest.TestCase):
    def test_data_range_and_glyph_boxes(self) -> None:
        bars = BarChart(Values([1.0, 3.0, 2.0]), 10.0)
        self.assertEqual(bars.data_range(), (0.0, 2.0, 0.0, 3.0))
        plt = Plot().add(bars)
        boxes = bars.glyph_boxes(plt)
        self.assertEqual([b.x for b in boxes], [0.0, 0.5, 1.0])
        self.assertEqual(boxes[0].size().x, 10.0)

    def test_negative_values_are_rejected(self) -> None:
        with self.assertRaises(DomainError):
            BarChart([1.0, -0.5], 10.0)
        with self.assertRaises(ValueError):
            BarChart([1.0], 0.0)

    def test_bars_reach_their_heights(self) -> None:
        rec = Recorder(200, 200)
        bars = BarChart([1.0, 3.0, 2.0], 10.0, color=(255, 0, 0, 255))
        plt = Plot().add(bars)
        plt.hide_axes()
        dc = plt.data_canvas(rec)
        rec.reset()
        bars.plot(dc, plt)
        fills = [a.path for a in rec.actions if isinstance(a, Fill)]
        self.assertEqual(len(fills), 3)
        self.assertEqual(len([a for a in rec.actions if isinstance(a, Stroke)]), 3)
        xmin, xmax, ymin, ymax = _bounds(fills[1])
        self.assertAlmostEqual(xmax - xmin, 10.0)
        self.assertAlmostEqual((xmin + xmax) / 2, dc.center().x)
        self.assertAlmostEqual(ymin, dc.min.y)
        self.assertAlmostEqual(ymax, dc.max.y)
        # The padded data area leaves room for the outer bars.
        self.assertAlmostEqual(_bounds(fills[0])[0], dc.min.x - 5.0)

    def test_thumbnail_fills_the_canvas(self) -> None:
        rec = Recorder(20, 10)
        BarChart([1.0], 4.0).thumbnail(BoundedCanvas.of(rec))
        (fill,) = [a.path for a in rec.actions if isinstance(a, Fill)]
        self.assertEqual(_bounds(fill), (0.0, 20.0, 0.0, 10.0))


class LineScatterTests(unittest.TestCase):
    def test_line_plot_and_thumbnail(self) -> None:
        rec = Recorder(300, 200)
        line = Line(XYs([(0, 0), (1, 1), (2, 4)]))
        plt = Plot().add(line)
        self.assertEqual((plt.x.min, plt.x.max, plt.y.min, plt.y.max), (0.0, 2.0, 0.0, 4.0))
        plt.draw(rec)
        self.assertTrue(any(isinstance(a, Stroke) for a in rec.actions))

        thumb = Recorder(20, 10)
        line.thumbnail(BoundedCanvas.of(thumb))
        (stroke,) = [a for a in thumb.actions if isinstance(a, Stroke)]
        self.assertEqual(len(stroke.path), 2)

    def test_empty_line_draws_nothing(self) -> None:
        rec = Recorder(100, 100)
        Line(XYs([])).plot(BoundedCanvas.of(rec), Plot())
        self.assertEqual(rec.actions, [])

    def test_scatter_glyph_boxes(self) -> None:
        sc = Scatter(XYs([(0, 0), (1, 2)]))
        plt = Plot().add(sc)
        boxes = sc.glyph_boxes(plt)
        self.assertEqual([(b.x, b.y) for b in boxes], [(0.0, 0.0), (1.0, 1.0)])
        self.assertEqual(boxes[0].size().x, 5.0)

    def test_glyph_boxes_plotter_outlines_boxes(self) -> None:
        rec = Recorder(200, 200)
        plt = Plot().add(Scatter(XYs([(0, 0), (1, 2)])), GlyphBoxes())
        plt.draw(rec)
        red = [a for a in rec.actions if getattr(a, "color", None) == (255, 0, 0, 255)]
        self.assertTrue(red)

    def test_values(self) -> None:
        v = Values([3, 1, 2])
        self.assertEqual(len(v), 3)
        self.assertEqual(v[0], 3.0)
        with self.assertRaises(NaNValue):
            Values([1.0, math.inf])


if __name__ == "__main__":
    unittest.main()
