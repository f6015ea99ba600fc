from __future__ import annotations

import math

from vecplot.vg.vector import FillOp, ImageOp, StrokeOp, TextOp, VectorCanvas, fmt_num, rgb_image


def ps_string(text: str) -> str:
    """Escape text as a PostScript/PDF literal string body (Latin-1)."""
    raw = text.encode("latin-1", errors="replace").decode("latin-1")
    return raw.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def ps_color(color: tuple[int, int, int, int]) -> str:
    return " ".join(fmt_num(c / 255.0) for c in color[:3])


def ps_polyline(points: tuple[tuple[float, float], ...]) -> str:
    head, *rest = points
    parts = [f"{fmt_num(head[0])} {fmt_num(head[1])} moveto"]
    parts.extend(f"{fmt_num(x)} {fmt_num(y)} lineto" for x, y in rest)
    return " ".join(parts)


class EpsCanvas(VectorCanvas):
    extension = "eps"

    def render(self) -> bytes:
        out = [
            "%!PS-Adobe-3.0 EPSF-3.0",
            f"%%BoundingBox: 0 0 {int(math.ceil(self._width))} {int(math.ceil(self._height))}",
            "%%Creator: vecplot",
            "%%EndComments",
            "1 setlinecap 1 setlinejoin",
        ]
        for op in self.ops:
            if isinstance(op, StrokeOp):
                dash = " ".join(fmt_num(d) for d in op.dashes)
                out.append(
                    f"{ps_color(op.color)} setrgbcolor {fmt_num(op.width)} setlinewidth "
                    f"[{dash}] {fmt_num(op.dash_offset)} setdash"
                )
                for line in op.lines:
                    out.append(f"newpath {ps_polyline(line)} stroke")
            elif isinstance(op, FillOp):
                out.append(f"{ps_color(op.color)} setrgbcolor newpath")
                for poly in op.polygons:
                    out.append(f"{ps_polyline(poly)} closepath")
                out.append("fill")
            elif isinstance(op, TextOp):
                x, y = op.origin
                out.append(
                    f"gsave {ps_color(op.color)} setrgbcolor /Helvetica findfont {fmt_num(op.size)} scalefont setfont "
                    f"{fmt_num(x)} {fmt_num(y)} translate {fmt_num(math.degrees(op.angle))} rotate "
                    f"0 0 moveto ({ps_string(op.text)}) show grestore"
                )
            elif isinstance(op, ImageOp):
                x0, y0, x1, y1 = op.box
                rgb = rgb_image(op.image)
                h, w = rgb.shape[:2]
                out.append(
                    f"gsave {fmt_num(x0)} {fmt_num(y0)} translate {fmt_num(x1 - x0)} {fmt_num(y1 - y0)} scale "
                    f"{w} {h} 8 [{w} 0 0 -{h} 0 {h}] <{rgb.tobytes().hex()}> false 3 colorimage grestore"
                )
        out.append("showpage")
        out.append("%%EOF")
        return ("\n".join(out) + "\n").encode("latin-1")
