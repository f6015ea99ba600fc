from __future__ import annotations

import importlib.util
from pathlib import Path
import tempfile
import unittest

import numpy as np

from vecplot import (
    ConfigError,
    DomainError,
    Legend,
    LogScale,
    LogTicks,
    Plot,
    PlotConfig,
    PlotDataError,
    TalbotTicks,
    UnsupportedFormat,
    align,
    config_from_mapping,
    load_config,
)
from vecplot.adapters import grid_from, values_from, xys_from
from vecplot.draw.canvas import BoundedCanvas, Tiles
from vecplot.draw.styles import GlyphStyle
from vecplot.errors import NaNValue
from vecplot.plotter import Histogram, Line, Scatter, XYs
from vecplot.scales import InvertedScale
from vecplot.vg import Recorder, centimeters
from vecplot.vg.recorder import FillString, SetColor, Stroke


HAS_PANDAS = importlib.util.find_spec("pandas") is not None
HAS_TORCH = importlib.util.find_spec("torch") is not None


class _BrokenRange:
    def plot(self, c, plt) -> None:
        raise AssertionError("should not be drawn")

    def data_range(self):
        raise DomainError("no data")


def _line_plot(ymax: float) -> Plot:
    return Plot().add(Line(XYs([(0.0, 0.0), (1.0, ymax)])))


class PlotTests(unittest.TestCase):
    def test_add_widens_axes(self) -> None:
        plt = Plot().add(Line(XYs([(1, 2), (3, 4)])), Scatter(XYs([(-1, 10)])))
        self.assertEqual((plt.x.min, plt.x.max), (-1.0, 3.0))
        self.assertEqual((plt.y.min, plt.y.max), (2.0, 10.0))
        self.assertEqual(len(plt.plotters), 2)

    def test_first_error_is_kept_and_raised_on_save(self) -> None:
        plt = Plot().add(_BrokenRange())
        self.assertEqual(plt.plotters, [])
        self.assertIsInstance(plt.error, DomainError)
        plt.record_error(PlotDataError("later"))
        self.assertIsInstance(plt.error, DomainError)
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(DomainError):
                plt.save(100, 100, Path(tmp) / "out.png")
            self.assertFalse((Path(tmp) / "out.png").exists())

    def test_drawing_twice_records_identical_operations(self) -> None:
        plt = _line_plot(4.0)
        plt.title.text = "Title"
        plt.x.label.text = "x"
        plt.y.label.text = "y"
        plt.legend.add("line", plt.plotters[0])
        first, second = Recorder(300, 200), Recorder(300, 200)
        plt.draw(first)
        plt.draw(second)
        self.assertTrue(first.actions)
        self.assertEqual(first.actions, second.actions)

    def test_draw_paints_background_and_title(self) -> None:
        rec = Recorder(300, 200)
        plt = _line_plot(1.0)
        plt.title.text = "Heights"
        plt.draw(rec)
        self.assertEqual(rec.actions[0], SetColor((255, 255, 255, 255)))
        texts = [a.text for a in rec.actions if isinstance(a, FillString)]
        self.assertIn("Heights", texts)

    def test_no_background(self) -> None:
        rec = Recorder(300, 200)
        plt = _line_plot(1.0)
        plt.background = None
        plt.draw(rec)
        self.assertNotEqual(rec.actions[0], SetColor((255, 255, 255, 255)))

    def test_empty_plot_draws(self) -> None:
        rec = Recorder(200, 200)
        Plot().draw(rec)
        self.assertTrue(any(isinstance(a, Stroke) for a in rec.actions))

    def test_data_canvas_inside_frame(self) -> None:
        c = BoundedCanvas.of(Recorder(300, 200))
        data = _line_plot(1.0).data_canvas(c)
        self.assertGreater(data.min.x, c.min.x)
        self.assertGreater(data.min.y, c.min.y)
        self.assertLessEqual(data.max.x, c.max.x)
        self.assertLessEqual(data.max.y, c.max.y)

    def test_glyph_boxes_outside_axes_are_dropped(self) -> None:
        plt = Plot().add(Scatter(XYs([(0, 0), (1, 1)])))
        plt.x.max = 0.5
        self.assertEqual(len(plt.glyph_boxes()), 1)

    def test_padding_fits_glyphs_at_data_extremes(self) -> None:
        plt = Plot().add(Scatter(XYs([(0.0, 0.0), (10.0, 10.0)]), glyph_style=GlyphStyle(radius=4.0)))
        plt.hide_axes()
        padded = plt.pad_y(plt.pad_x(BoundedCanvas.of(Recorder(100, 100))))
        self.assertAlmostEqual(padded.min.x, 4.0)
        self.assertAlmostEqual(padded.max.x, 96.0)
        self.assertAlmostEqual(padded.min.y, 4.0)
        self.assertAlmostEqual(padded.max.y, 96.0)

    def test_nominal_x_labels_positions(self) -> None:
        plt = Plot().nominal_x("a", "b", "c")
        ticks = plt.x.tick.marker.ticks(0.0, 2.0)
        self.assertEqual([(t.value, t.label) for t in ticks], [(0.0, "a"), (1.0, "b"), (2.0, "c")])
        self.assertEqual(plt.x.tick.length, 0.0)
        self.assertEqual(plt.x.line.width, 0.0)

    def test_nominal_y_pads_the_x_axis(self) -> None:
        plt = Plot().nominal_y("low", "high")
        ticks = plt.y.tick.marker.ticks(0.0, 1.0)
        self.assertEqual([(t.value, t.label) for t in ticks], [(0.0, "low"), (1.0, "high")])
        self.assertEqual(plt.y.line.width, 0.0)
        self.assertAlmostEqual(plt.x.padding, plt.y.tick.label.height("low") / 2)

    def test_hide_one_axis(self) -> None:
        plt = Plot().hide_x()
        self.assertEqual(plt.x.tick.marker.ticks(0.0, 1.0), [])
        self.assertNotEqual(plt.y.tick.marker.ticks(0.0, 1.0), [])
        plt.hide_y()
        self.assertEqual(plt.y.line.width, 0.0)

    def test_transforms_map_data_onto_canvas(self) -> None:
        plt = Plot()
        plt.x.min, plt.x.max = 0.0, 10.0
        plt.y.min, plt.y.max = -1.0, 1.0
        tx, ty = plt.transforms(BoundedCanvas.of(Recorder(100, 50)))
        self.assertAlmostEqual(tx(5.0), 50.0)
        self.assertAlmostEqual(tx(10.0), 100.0)
        self.assertAlmostEqual(ty(0.0), 25.0)

    def test_hide_axes(self) -> None:
        plt = Plot().hide_axes()
        self.assertEqual(plt.x.tick.marker.ticks(0.0, 1.0), [])
        self.assertEqual(plt.y.tick.marker.ticks(0.0, 1.0), [])

    def test_save_formats(self) -> None:
        plt = Plot().add(Histogram.from_values([1.0, 2.0, 2.0, 3.0], 3))
        with tempfile.TemporaryDirectory() as tmp:
            svg = Path(tmp) / "hist.svg"
            plt.save(200, 150, svg)
            self.assertTrue(svg.read_bytes().startswith(b"<?xml"))

            png = Path(tmp) / "hist.PNG"
            plt.save(200, 150, png, dpi=72)
            self.assertTrue(png.read_bytes().startswith(b"\x89PNG"))

            with self.assertRaises(UnsupportedFormat):
                plt.save(200, 150, Path(tmp) / "hist.gif")


class AlignTests(unittest.TestCase):
    def test_shape_mismatch(self) -> None:
        c = Recorder(200, 200)
        with self.assertRaises(ValueError):
            align([[Plot()]], Tiles(rows=2, cols=1), c)
        with self.assertRaises(ValueError):
            align([[Plot()], [Plot(), Plot()]], Tiles(rows=2, cols=1), c)

    def test_empty_cells_stay_empty(self) -> None:
        out = align([[_line_plot(1.0), None]], Tiles(rows=1, cols=2), Recorder(400, 200))
        self.assertIsInstance(out[0][0], BoundedCanvas)
        self.assertIsNone(out[0][1])

    def test_column_data_areas_line_up(self) -> None:
        narrow, wide = _line_plot(1.0), _line_plot(100000.0)
        out = align([[narrow], [wide]], Tiles(rows=2, cols=1, pad_y=10), Recorder(400, 400))
        a = narrow.data_canvas(out[0][0])
        b = wide.data_canvas(out[1][0])
        self.assertAlmostEqual(a.min.x, b.min.x, places=6)
        self.assertAlmostEqual(a.max.x, b.max.x, places=6)
        self.assertGreater(a.min.y, b.max.y)

    def test_row_data_areas_share_y_extent(self) -> None:
        short, tall = _line_plot(1.0), _line_plot(100000.0)
        tall.x.label.text = "time"
        out = align([[short, tall]], Tiles(rows=1, cols=2, pad_x=10), Recorder(400, 200))
        a = short.data_canvas(out[0][0])
        b = tall.data_canvas(out[0][1])
        self.assertAlmostEqual(a.min.y, b.min.y, places=6)
        self.assertAlmostEqual(a.max.y, b.max.y, places=6)
        self.assertLess(a.max.x, b.min.x)


class LegendTests(unittest.TestCase):
    def test_entries_draw_thumbnails_and_text(self) -> None:
        rec = Recorder(200, 100)
        c = BoundedCanvas.of(rec)
        line = Line(XYs([(0, 0), (1, 1)]))
        legend = Legend().add("first", line).add("second", Scatter(XYs([(0, 0)])))
        self.assertGreater(legend.entry_height(), 0.0)
        legend.draw(c)
        texts = [a.text for a in rec.actions if isinstance(a, FillString)]
        self.assertEqual(texts, ["first", "second"])
        stroke = next(a for a in rec.actions if isinstance(a, Stroke))
        for comp in stroke.path:
            self.assertGreaterEqual(comp.pos.x, 200 - legend.thumbnail_width)
            self.assertLessEqual(comp.pos.x, 200)

    def test_left_legend_puts_thumbnail_at_left_edge(self) -> None:
        rec = Recorder(200, 100)
        legend = Legend(left=True).add("only", Line(XYs([(0, 0), (1, 1)])))
        legend.draw(BoundedCanvas.of(rec))
        stroke = next(a for a in rec.actions if isinstance(a, Stroke))
        xs = [comp.pos.x for comp in stroke.path]
        self.assertEqual((min(xs), max(xs)), (0.0, legend.thumbnail_width))

    def test_empty_legend_draws_nothing(self) -> None:
        rec = Recorder(100, 100)
        Legend().draw(BoundedCanvas.of(rec))
        self.assertEqual(rec.actions, [])


class ConfigTests(unittest.TestCase):
    def test_from_mapping(self) -> None:
        cfg = config_from_mapping(
            {
                "background_color": "#ff000080",
                "title": {"text": "Weights", "padding": "1cm"},
                "x": {"scale": "log", "marker": "log"},
                "y": {"scale": "inverted", "marker": "talbot", "padding": 2},
                "legend": {"top": True, "left": True, "thumbnail_width": "12pt"},
            }
        )
        self.assertEqual(cfg.background_color, (255, 0, 0, 128))
        self.assertEqual(cfg.title_text, "Weights")
        self.assertAlmostEqual(cfg.title_padding, centimeters(1))
        self.assertEqual(cfg.y.padding, 2.0)
        self.assertTrue(cfg.legend.top and cfg.legend.left)
        self.assertEqual(cfg.legend.thumbnail_width, 12.0)

        plt = Plot.from_config(cfg)
        self.assertEqual(plt.title.text, "Weights")
        self.assertEqual(plt.x.scale, LogScale())
        self.assertIsInstance(plt.x.tick.marker, LogTicks)
        self.assertIsInstance(plt.y.scale, InvertedScale)
        self.assertIsInstance(plt.y.tick.marker, TalbotTicks)
        self.assertTrue(plt.legend.left)

    def test_defaults(self) -> None:
        self.assertEqual(config_from_mapping({}), PlotConfig())

    def test_colors(self) -> None:
        self.assertIsNone(config_from_mapping({"background_color": "none"}).background_color)
        self.assertEqual(config_from_mapping({"background_color": [1, 2, 3]}).background_color, (1, 2, 3, 255))
        for bad in ("#12", "red", [1, 2], [1, 2, 300], 7):
            with self.assertRaises(ConfigError):
                config_from_mapping({"background_color": bad})

    def test_invalid_values(self) -> None:
        for raw in (
            {"x": {"scale": "sqrt"}},
            {"y": {"marker": "fancy"}},
            {"legend": {"top": "yes"}},
            {"title": "not a table"},
            {"title": {"padding": "3 parsecs"}},
            {"x": {"padding": True}},
        ):
            with self.assertRaises(ConfigError):
                config_from_mapping(raw)

    def test_load_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "plot.toml"
            path.write_text('background_color = "none"\n[title]\ntext = "From file"\n', encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.title_text, "From file")
            self.assertIsNone(cfg.background_color)

            broken = Path(tmp) / "broken.toml"
            broken.write_text("title = [\n", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(broken)

            with self.assertRaises(FileNotFoundError):
                load_config(Path(tmp) / "missing.toml")


class AdapterTests(unittest.TestCase):
    def test_xys_from_sequences(self) -> None:
        xys = xys_from([1.0, 4.0, 9.0])
        np.testing.assert_array_equal(xys.x, [0.0, 1.0, 2.0])
        np.testing.assert_array_equal(xys.y, [1.0, 4.0, 9.0])

        xys = xys_from(np.array([2, 3]), x=[10, 20])
        self.assertEqual(xys.xy(1), (20.0, 3.0))

    def test_xys_from_rejects_bad_input(self) -> None:
        with self.assertRaises(PlotDataError):
            xys_from(None)
        with self.assertRaises(PlotDataError):
            xys_from([1.0, 2.0], x=[1.0])
        with self.assertRaises(PlotDataError):
            xys_from(["a", "b"])
        with self.assertRaises(NaNValue):
            xys_from([1.0, None])

    def test_drop_nonfinite(self) -> None:
        xys = xys_from([1.0, float("nan"), 3.0], drop_nonfinite=True)
        np.testing.assert_array_equal(xys.x, [0.0, 2.0])
        vals = values_from([1.0, None, 2.0], drop_nonfinite=True)
        self.assertEqual(len(vals), 2)

    def test_grid_from_array(self) -> None:
        grid = grid_from(np.arange(6, dtype=np.float64).reshape(2, 3))
        self.assertEqual(grid.dims(), (3, 2))
        self.assertEqual(grid.z(2, 1), 5.0)
        self.assertEqual((grid.x(2), grid.y(1)), (2.0, 1.0))
        with self.assertRaises(PlotDataError):
            grid_from(np.zeros(3))

    @unittest.skipUnless(HAS_PANDAS, "pandas not installed")
    def test_pandas_inputs(self) -> None:
        import pandas as pd

        df = pd.DataFrame({"t": [0.0, 1.0, 2.0], "v": [5.0, 6.0, 7.0]})
        xys = xys_from("v", x="t", data=df)
        self.assertEqual(xys.xy(2), (2.0, 7.0))
        with self.assertRaises(PlotDataError):
            xys_from("missing", data=df)

        wide = pd.DataFrame([[1.0, 2.0], [3.0, 4.0]], index=[10.0, 20.0], columns=[0.5, 1.5])
        grid = grid_from(wide)
        self.assertEqual((grid.x(1), grid.y(1), grid.z(1, 1)), (1.5, 20.0, 4.0))

    @unittest.skipUnless(HAS_TORCH, "torch not installed")
    def test_torch_inputs(self) -> None:
        import torch

        xys = xys_from(torch.tensor([1.0, 2.0]), x=torch.tensor([3.0, 4.0]))
        self.assertEqual(xys.xy(0), (3.0, 1.0))
        grid = grid_from(torch.ones(2, 2))
        self.assertEqual(grid.z(1, 1), 1.0)


if __name__ == "__main__":
    unittest.main()
