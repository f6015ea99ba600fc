from __future__ import annotations

import io
import math
import os
import unittest
from unittest import mock

import numpy as np

from vecplot.draw.canvas import BoundedCanvas, Tiles
from vecplot.draw.clip import clip_lines_x, clip_lines_xy, clip_lines_y, clip_polygon_xy
from vecplot.draw.glyphs import GLYPH_SHAPES
from vecplot.draw.styles import GlyphStyle, LineStyle, TextStyle
from vecplot.errors import StackUnderflow, UnsupportedFormat
from vecplot.vg import (
    INCH,
    EpsCanvas,
    ImageCanvas,
    PdfCanvas,
    Recorder,
    StateCanvas,
    SvgCanvas,
    TexCanvas,
    centimeters,
    dots,
    from_dots,
    inches,
    new_canvas_for_format,
    parse_length,
    write_canvas,
)
from vecplot.vg.font import DEFAULT_FONT_FAMILY, FONT_ENV_VAR, Font
from vecplot.vg.geom import Point, Rectangle
from vecplot.vg.path import Path, flatten
from vecplot.vg.recorder import Fill, FillString, Pop, Push, Rotate, SetColor, Stroke


def _square(x0: float, y0: float, x1: float, y1: float) -> list[Point]:
    return [Point(x0, y0), Point(x1, y0), Point(x1, y1), Point(x0, y1)]


class LengthTests(unittest.TestCase):
    def test_unit_conversions(self) -> None:
        self.assertEqual(inches(1), INCH)
        self.assertAlmostEqual(centimeters(2.54), INCH)
        self.assertAlmostEqual(dots(inches(2), 96.0), 192.0)
        self.assertAlmostEqual(from_dots(192.0, 96.0), inches(2))

    def test_parse_length(self) -> None:
        self.assertEqual(parse_length("12"), 12.0)
        self.assertEqual(parse_length("12pt"), 12.0)
        self.assertEqual(parse_length(" 4in "), 4 * INCH)
        self.assertAlmostEqual(parse_length("25.4mm"), INCH)
        with self.assertRaises(ValueError):
            parse_length("12 furlongs")
        with self.assertRaises(ValueError):
            parse_length("wide")


class StateCanvasTests(unittest.TestCase):
    def test_pop_restores_pushed_state(self) -> None:
        c = StateCanvas(100, 100)
        c.set_line_width(2)
        c.push()
        c.set_line_width(5)
        c.translate(10, 0)
        c.pop()
        self.assertEqual(c.state.line_width, 2.0)
        self.assertEqual(c.transform_point(Point(1, 1)), Point(1, 1))

    def test_pop_without_push_underflows(self) -> None:
        c = StateCanvas(10, 10)
        with self.assertRaises(StackUnderflow):
            c.pop()

    def test_last_transform_applies_first(self) -> None:
        c = StateCanvas(100, 100)
        c.translate(10, 0)
        c.scale(2, 2)
        p = c.transform_point(Point(1, 1))
        self.assertAlmostEqual(p.x, 12.0)
        self.assertAlmostEqual(p.y, 2.0)
        self.assertAlmostEqual(c.transform_scale(), 2.0)

    def test_rotation_angle(self) -> None:
        c = StateCanvas(10, 10)
        c.rotate(math.pi / 2)
        p = c.transform_point(Point(1, 0))
        self.assertAlmostEqual(p.x, 0.0)
        self.assertAlmostEqual(p.y, 1.0)
        self.assertAlmostEqual(c.transform_angle(), math.pi / 2)

    def test_negative_size_rejected(self) -> None:
        with self.assertRaises(ValueError):
            StateCanvas(-1, 10)


class RecorderTests(unittest.TestCase):
    def test_records_and_replays_actions(self) -> None:
        rec = Recorder(50, 50)
        rec.push()
        rec.set_color((255, 0, 0, 255))
        rec.fill(Rectangle(Point(0, 0), Point(10, 10)).path())
        rec.pop()
        self.assertEqual(
            [type(a) for a in rec.actions],
            [Push, SetColor, Fill, Pop],
        )

        again = Recorder(50, 50)
        rec.replay_on(again)
        self.assertEqual(again.actions, rec.actions)

    def test_replay_onto_vector_canvas(self) -> None:
        rec = Recorder(20, 20)
        p = Path()
        p.move(Point(0, 0))
        p.line(Point(20, 20))
        rec.stroke(p)
        self.assertIsInstance(rec.actions[-1], Stroke)

        svg = SvgCanvas(20, 20)
        rec.replay_on(svg)
        self.assertEqual(len(svg.ops), 1)


class BackendTests(unittest.TestCase):
    def test_new_canvas_for_format(self) -> None:
        self.assertIsInstance(new_canvas_for_format("png", 72, 72), ImageCanvas)
        self.assertIsInstance(new_canvas_for_format(".SVG", 72, 72), SvgCanvas)
        self.assertIsInstance(new_canvas_for_format("eps", 72, 72), EpsCanvas)
        self.assertIsInstance(new_canvas_for_format("pdf", 72, 72), PdfCanvas)
        self.assertIsInstance(new_canvas_for_format("tex", 72, 72), TexCanvas)
        with self.assertRaises(UnsupportedFormat):
            new_canvas_for_format("bmp", 72, 72)

    def test_image_canvas_fill_uses_page_coordinates(self) -> None:
        c = ImageCanvas(72, 72, dpi=72)
        self.assertEqual(c.pixel_size, (72, 72))
        c.set_color((255, 0, 0, 255))
        c.fill(Rectangle(Point(10, 10), Point(20, 20)).path())
        # Origin is bottom-left, so y=15pt is pixel row 72-15.
        np.testing.assert_array_equal(c.buffer[57, 15], [255, 0, 0, 255])
        self.assertEqual(int(c.buffer[15, 15, 3]), 0)

    def test_image_canvas_writes_png(self) -> None:
        c = ImageCanvas(20, 20, dpi=72)
        sink = io.BytesIO()
        write_canvas(c, sink, "png")
        self.assertTrue(sink.getvalue().startswith(b"\x89PNG"))

    def test_svg_output(self) -> None:
        c = SvgCanvas(100, 50)
        c.set_color((0, 0, 255, 128))
        c.set_line_width(2)
        p = Path()
        p.move(Point(0, 0))
        p.line(Point(100, 50))
        c.stroke(p)
        sink = io.BytesIO()
        write_canvas(c, sink, "svg")
        text = sink.getvalue().decode("utf-8")
        self.assertIn('viewBox="0 0 100 50"', text)
        self.assertIn('<path d="M0,50 L100,0"', text)
        self.assertIn('stroke="rgb(0,0,255)"', text)
        self.assertIn("stroke-opacity", text)

    def test_pdf_and_eps_headers(self) -> None:
        for canvas, magic in ((PdfCanvas(30, 30), b"%PDF"), (EpsCanvas(30, 30), b"%!PS")):
            canvas.fill(Rectangle(Point(0, 0), Point(10, 10)).path())
            sink = io.BytesIO()
            canvas.write_to(sink)
            self.assertTrue(sink.getvalue().startswith(magic))

    def test_zero_width_stroke_draws_nothing(self) -> None:
        c = SvgCanvas(10, 10)
        c.set_line_width(0)
        p = Path()
        p.move(Point(0, 0))
        p.line(Point(5, 5))
        c.stroke(p)
        self.assertEqual(c.ops, [])


class PathTests(unittest.TestCase):
    def test_flatten_closes_subpaths(self) -> None:
        lines = flatten(Rectangle(Point(0, 0), Point(1, 1)).path())
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0][0], lines[0][-1])
        self.assertEqual(len(lines[0]), 5)

    def test_flatten_arc(self) -> None:
        p = Path()
        p.arc(Point(0, 0), 1.0, 0.0, math.pi)
        (line,) = flatten(p)
        self.assertAlmostEqual(line[0].x, 1.0)
        self.assertAlmostEqual(line[-1].x, -1.0)
        for q in line:
            self.assertAlmostEqual(math.hypot(q.x, q.y), 1.0)


class ClipTests(unittest.TestCase):
    rect = Rectangle(Point(0, 0), Point(10, 10))

    def test_inside_polyline_is_unchanged(self) -> None:
        line = [Point(1, 1), Point(5, 9), Point(9, 2)]
        self.assertEqual(clip_lines_xy(self.rect, line), [line])

    def test_inside_polygon_is_unchanged(self) -> None:
        poly = _square(1, 1, 9, 9)
        self.assertEqual(clip_polygon_xy(self.rect, poly), poly)

    def test_line_crossing_left_edge(self) -> None:
        out = clip_lines_x(self.rect, [Point(-5, 5), Point(5, 5)])
        self.assertEqual(out, [[Point(0, 5), Point(5, 5)]])

    def test_line_leaving_and_reentering_splits(self) -> None:
        out = clip_lines_y(self.rect, [Point(5, 5), Point(5, 15), Point(6, 5)])
        self.assertEqual(out, [[Point(5, 5), Point(5, 10)], [Point(5.5, 10), Point(6, 5)]])

    def test_polygon_is_cut_to_rectangle(self) -> None:
        out = clip_polygon_xy(self.rect, _square(-5, -5, 5, 5))
        self.assertTrue(out)
        for p in out:
            self.assertGreaterEqual(p.x, 0.0)
            self.assertGreaterEqual(p.y, 0.0)
            self.assertLessEqual(p.x, 5.0)
            self.assertLessEqual(p.y, 5.0)

    def test_outside_polygon_vanishes(self) -> None:
        self.assertEqual(clip_polygon_xy(self.rect, _square(20, 20, 30, 30)), [])


class BoundedCanvasTests(unittest.TestCase):
    def test_crop_and_normalized_positions(self) -> None:
        c = BoundedCanvas.of(Recorder(100, 50))
        inner = c.crop(10, -10, 5, -5)
        self.assertEqual(inner.rect, Rectangle(Point(10, 5), Point(90, 45)))
        self.assertEqual(inner.x(0.5), 50.0)
        self.assertEqual(inner.y(1.0), 45.0)
        self.assertEqual(inner.center(), Point(50, 25))
        self.assertTrue(inner.contains(Point(10, 45)))
        self.assertFalse(inner.contains_x(9.0))

    def test_delegates_canvas_calls(self) -> None:
        rec = Recorder(10, 10)
        c = BoundedCanvas.of(rec)
        c.push()
        c.pop()
        self.assertEqual([type(a) for a in rec.actions], [Push, Pop])

    def test_stroke_lines_skips_zero_width(self) -> None:
        svg = SvgCanvas(10, 10)
        c = BoundedCanvas.of(svg)
        c.stroke_lines(LineStyle(width=0.0), [Point(0, 0), Point(1, 1)])
        self.assertEqual(svg.ops, [])
        c.stroke_lines(LineStyle(width=1.0), [Point(0, 0), Point(1, 1)], [])
        self.assertEqual(len(svg.ops), 1)

    def test_tiles_row_zero_is_top(self) -> None:
        c = BoundedCanvas.of(Recorder(100, 100))
        tiles = Tiles(rows=2, cols=2, pad_x=10, pad_y=10)
        top_left = tiles.at(c, 0, 0)
        bottom_right = tiles.at(c, 1, 1)
        self.assertEqual(top_left.rect, Rectangle(Point(0, 55), Point(45, 100)))
        self.assertEqual(bottom_right.rect, Rectangle(Point(55, 0), Point(100, 45)))

    def test_tiles_need_positive_shape(self) -> None:
        with self.assertRaises(ValueError):
            Tiles(rows=0, cols=1)


class GlyphAndTextTests(unittest.TestCase):
    def test_every_shape_draws_inside_frame_only(self) -> None:
        for name, shape in GLYPH_SHAPES.items():
            rec = Recorder(20, 20)
            c = BoundedCanvas.of(rec)
            sty = GlyphStyle(radius=3.0, shape=shape)
            c.draw_glyph(sty, Point(10, 10))
            self.assertTrue(any(isinstance(a, (Stroke, Fill)) for a in rec.actions), name)

            rec.reset()
            c.draw_glyph(sty, Point(30, 10))
            self.assertEqual(rec.actions, [], name)

    def test_shapeless_glyph_draws_nothing(self) -> None:
        rec = Recorder(20, 20)
        BoundedCanvas.of(rec).draw_glyph_no_clip(GlyphStyle(shape=None), Point(5, 5))
        self.assertEqual(rec.actions, [])

    def test_font_family_from_environment(self) -> None:
        with mock.patch.dict(os.environ, {FONT_ENV_VAR: "Serif Test"}):
            self.assertEqual(Font(size=10.0).family, "Serif Test")
        with mock.patch.dict(os.environ, {FONT_ENV_VAR: ""}):
            self.assertEqual(Font(size=10.0).family, DEFAULT_FONT_FAMILY)
        self.assertEqual(Font(size=10.0, name="Mono").family, "Mono")

    def test_text_metrics_grow_with_lines(self) -> None:
        sty = TextStyle(font=Font(size=12.0))
        self.assertEqual(sty.width(""), 0.0)
        self.assertEqual(sty.height(""), 0.0)
        self.assertGreater(sty.width("wide text"), sty.width("w"))
        self.assertGreater(sty.height("a\nb"), sty.height("a"))

    def test_text_rectangle_follows_alignment_and_rotation(self) -> None:
        sty = TextStyle(font=Font(size=12.0), xalign=-0.5)
        w, h = sty.width("label"), sty.height("label")
        r = sty.rectangle("label")
        self.assertAlmostEqual(r.min.x, -w / 2)
        self.assertAlmostEqual(r.max.x, w / 2)
        self.assertAlmostEqual(r.min.y, 0.0)
        self.assertAlmostEqual(r.max.y, h)

        turned = TextStyle(font=Font(size=12.0), rotation=math.pi / 2).rectangle("label")
        self.assertAlmostEqual(turned.size().x, h)
        self.assertAlmostEqual(turned.size().y, w)

    def test_fill_text_aligns_lines(self) -> None:
        rec = Recorder(100, 100)
        c = BoundedCanvas.of(rec)
        sty = TextStyle(font=Font(size=10.0), xalign=-1.0)
        c.fill_text(sty, Point(50, 50), "one\ntwo")
        strings = [a for a in rec.actions if isinstance(a, FillString)]
        self.assertEqual([s.text for s in strings], ["one", "two"])
        # Right aligned: each line ends at the anchor, first line above the second.
        for s in strings:
            self.assertAlmostEqual(s.point.x + sty.font.width(s.text), 50.0)
        self.assertGreater(strings[0].point.y, strings[1].point.y)

    def test_rotated_text_is_pushed_and_popped(self) -> None:
        rec = Recorder(100, 100)
        c = BoundedCanvas.of(rec)
        c.fill_text(TextStyle(rotation=math.pi / 2), Point(10, 20), "up")
        kinds = [type(a) for a in rec.actions]
        self.assertEqual(kinds[1:3], [Push, Rotate])
        self.assertEqual(kinds[-1], Pop)
        self.assertEqual(rec.depth, 0)


if __name__ == "__main__":
    unittest.main()
