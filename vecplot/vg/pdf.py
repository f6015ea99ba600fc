from __future__ import annotations

import math
import zlib

from vecplot.vg.eps import ps_color, ps_string
from vecplot.vg.vector import FillOp, ImageOp, StrokeOp, TextOp, VectorCanvas, fmt_num, rgb_image


def _path(points: tuple[tuple[float, float], ...]) -> str:
    head, *rest = points
    parts = [f"{fmt_num(head[0])} {fmt_num(head[1])} m"]
    parts.extend(f"{fmt_num(x)} {fmt_num(y)} l" for x, y in rest)
    return " ".join(parts)


class PdfCanvas(VectorCanvas):
    """Single-page PDF writer using the base-14 Helvetica font."""

    extension = "pdf"

    def render(self) -> bytes:
        content: list[str] = ["1 J 1 j"]
        images: list[bytes] = []
        for op in self.ops:
            if isinstance(op, StrokeOp):
                dash = " ".join(fmt_num(d) for d in op.dashes)
                content.append(f"{ps_color(op.color)} RG {fmt_num(op.width)} w [{dash}] {fmt_num(op.dash_offset)} d")
                for line in op.lines:
                    content.append(f"{_path(line)} S")
            elif isinstance(op, FillOp):
                content.append(f"{ps_color(op.color)} rg")
                content.append(" ".join(_path(poly) + " h" for poly in op.polygons) + " f")
            elif isinstance(op, TextOp):
                c, s = math.cos(op.angle), math.sin(op.angle)
                x, y = op.origin
                content.append(
                    f"BT {ps_color(op.color)} rg /F1 {fmt_num(op.size)} Tf "
                    f"{fmt_num(c)} {fmt_num(s)} {fmt_num(-s)} {fmt_num(c)} {fmt_num(x)} {fmt_num(y)} Tm "
                    f"({ps_string(op.text)}) Tj ET"
                )
            elif isinstance(op, ImageOp):
                x0, y0, x1, y1 = op.box
                name = f"Im{len(images)}"
                rgb = rgb_image(op.image)
                h, w = rgb.shape[:2]
                data = zlib.compress(rgb.tobytes())
                images.append(
                    f"<< /Type /XObject /Subtype /Image /Width {w} /Height {h} /ColorSpace /DeviceRGB "
                    f"/BitsPerComponent 8 /Filter /FlateDecode /Length {len(data)} >>\nstream\n".encode("latin-1")
                    + data
                    + b"\nendstream"
                )
                content.append(f"q {fmt_num(x1 - x0)} 0 0 {fmt_num(y1 - y0)} {fmt_num(x0)} {fmt_num(y0)} cm /{name} Do Q")

        stream = zlib.compress("\n".join(content).encode("latin-1"))
        first_image = 6
        xobjects = " ".join(f"/Im{i} {first_image + i} 0 R" for i in range(len(images)))
        objects: list[bytes] = [
            b"<< /Type /Catalog /Pages 2 0 R >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {fmt_num(self._width)} {fmt_num(self._height)}] "
                f"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> /XObject << {xobjects} >> >> >>"
            ).encode("latin-1"),
            f"<< /Length {len(stream)} /Filter /FlateDecode >>\nstream\n".encode("latin-1") + stream + b"\nendstream",
            b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
            *images,
        ]

        out = bytearray(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n")
        offsets: list[int] = []
        for i, body in enumerate(objects, start=1):
            offsets.append(len(out))
            out += f"{i} 0 obj\n".encode("latin-1") + body + b"\nendobj\n"
        xref = len(out)
        out += f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n".encode("latin-1")
        for off in offsets:
            out += f"{off:010d} 00000 n \n".encode("latin-1")
        out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref}\n%%EOF\n".encode("latin-1")
        return bytes(out)
