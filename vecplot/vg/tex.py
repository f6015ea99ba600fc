from __future__ import annotations

import logging
import math

from vecplot.vg.vector import FillOp, ImageOp, StrokeOp, TextOp, VectorCanvas, fmt_num


LOGGER = logging.getLogger(__name__)

_TEX_SPECIALS = {
    "\\": r"\textbackslash{}",
    "{": r"\{",
    "}": r"\}",
    "$": r"\$",
    "&": r"\&",
    "#": r"\#",
    "%": r"\%",
    "_": r"\_",
    "^": r"\^{}",
    "~": r"\~{}",
}


def tex_escape(text: str) -> str:
    return "".join(_TEX_SPECIALS.get(ch, ch) for ch in text)


def _pt(p: tuple[float, float]) -> str:
    return f"\\pgfpoint{{{fmt_num(p[0])}pt}}{{{fmt_num(p[1])}pt}}"


class TexCanvas(VectorCanvas):
    """Emits a pgfpicture; positions are in points."""

    extension = "tex"

    def render(self) -> bytes:
        out = [
            "\\begin{pgfpicture}",
            f"\\pgfpathrectangle{{{_pt((0.0, 0.0))}}}{{{_pt((self._width, self._height))}}}",
            "\\pgfusepath{use as bounding box}",
        ]
        for op in self.ops:
            if isinstance(op, StrokeOp):
                r, g, b, _ = op.color
                dash = ",".join(f"{{{fmt_num(d)}pt}}" for d in op.dashes)
                out.append("\\begin{pgfscope}")
                out.append(f"\\definecolor{{vgcolor}}{{RGB}}{{{r},{g},{b}}}\\pgfsetstrokecolor{{vgcolor}}")
                out.append(f"\\pgfsetlinewidth{{{fmt_num(op.width)}pt}}")
                out.append(f"\\pgfsetdash{{{dash}}}{{{fmt_num(op.dash_offset)}pt}}")
                for line in op.lines:
                    head, *rest = line
                    cmds = [f"\\pgfpathmoveto{{{_pt(head)}}}"] + [f"\\pgfpathlineto{{{_pt(p)}}}" for p in rest]
                    out.append("".join(cmds) + "\\pgfusepath{stroke}")
                out.append("\\end{pgfscope}")
            elif isinstance(op, FillOp):
                r, g, b, _ = op.color
                out.append("\\begin{pgfscope}")
                out.append(f"\\definecolor{{vgcolor}}{{RGB}}{{{r},{g},{b}}}\\pgfsetfillcolor{{vgcolor}}")
                for poly in op.polygons:
                    head, *rest = poly
                    cmds = [f"\\pgfpathmoveto{{{_pt(head)}}}"] + [f"\\pgfpathlineto{{{_pt(p)}}}" for p in rest]
                    out.append("".join(cmds) + "\\pgfpathclose")
                out.append("\\pgfusepath{fill}")
                out.append("\\end{pgfscope}")
            elif isinstance(op, TextOp):
                r, g, b, _ = op.color
                out.append(
                    f"\\definecolor{{vgcolor}}{{RGB}}{{{r},{g},{b}}}"
                    f"\\pgftext[left,base,at={{{_pt(op.origin)}}},rotate={fmt_num(math.degrees(op.angle))}]"
                    f"{{\\color{{vgcolor}}\\fontsize{{{fmt_num(op.size)}pt}}{{{fmt_num(op.size)}pt}}"
                    f"\\selectfont {tex_escape(op.text)}}}"
                )
            elif isinstance(op, ImageOp):
                LOGGER.warning("tex canvas does not embed images; skipped image at %s", op.box)
        out.append("\\end{pgfpicture}")
        return ("\n".join(out) + "\n").encode("utf-8")
