from __future__ import annotations

import base64
import io
import math
from xml.sax.saxutils import escape, quoteattr

from PIL import Image

from vecplot.vg.canvas import RGBA
from vecplot.vg.vector import FillOp, ImageOp, StrokeOp, TextOp, VectorCanvas, fmt_num


def _paint(color: RGBA, kind: str) -> str:
    r, g, b, a = color
    out = f'{kind}="rgb({r},{g},{b})"'
    if a != 255:
        out += f' {kind}-opacity="{fmt_num(a / 255.0)}"'
    return out


class SvgCanvas(VectorCanvas):
    extension = "svg"

    def _xy(self, p: tuple[float, float]) -> str:
        return f"{fmt_num(p[0])},{fmt_num(self._height - p[1])}"

    def render(self) -> bytes:
        w, h = fmt_num(self._width), fmt_num(self._height)
        out = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}pt" height="{h}pt" viewBox="0 0 {w} {h}">',
        ]
        for op in self.ops:
            if isinstance(op, StrokeOp):
                d = " ".join("M" + " L".join(self._xy(p) for p in line) for line in op.lines)
                attrs = f'fill="none" {_paint(op.color, "stroke")} stroke-width="{fmt_num(op.width)}"'
                if op.dashes:
                    attrs += f' stroke-dasharray="{",".join(fmt_num(x) for x in op.dashes)}"'
                    attrs += f' stroke-dashoffset="{fmt_num(op.dash_offset)}"'
                out.append(f'<path d="{d}" {attrs}/>')
            elif isinstance(op, FillOp):
                d = " ".join("M" + " L".join(self._xy(p) for p in poly) + " Z" for poly in op.polygons)
                out.append(f'<path d="{d}" {_paint(op.color, "fill")}/>')
            elif isinstance(op, TextOp):
                x, y = self._xy(op.origin).split(",")
                rot = fmt_num(-math.degrees(op.angle))
                out.append(
                    f'<text transform="translate({x},{y}) rotate({rot})" '
                    f'font-family={quoteattr(op.font.family)} font-size="{fmt_num(op.size)}" '
                    f'{_paint(op.color, "fill")} xml:space="preserve">{escape(op.text)}</text>'
                )
            elif isinstance(op, ImageOp):
                x0, y0, x1, y1 = op.box
                buf = io.BytesIO()
                Image.fromarray(op.image).save(buf, format="PNG")
                data = base64.b64encode(buf.getvalue()).decode("ascii")
                out.append(
                    f'<image x="{fmt_num(x0)}" y="{fmt_num(self._height - y1)}" '
                    f'width="{fmt_num(x1 - x0)}" height="{fmt_num(y1 - y0)}" preserveAspectRatio="none" '
                    f'href="data:image/png;base64,{data}"/>'
                )
        out.append("</svg>")
        return ("\n".join(out) + "\n").encode("utf-8")
