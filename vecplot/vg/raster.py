from __future__ import annotations

import logging
import math
from typing import BinaryIO

import numpy as np
from PIL import Image, ImageDraw

from vecplot.vg.canvas import DEFAULT_DPI, RGBA, TRANSPARENT, StateCanvas
from vecplot.vg.font import Font, pillow_font
from vecplot.vg.geom import Length, Point, Rectangle, dots
from vecplot.vg.path import Path, flatten


LOGGER = logging.getLogger(__name__)

RASTER_FORMATS = {
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "tif": "TIFF",
    "tiff": "TIFF",
}


def new_buffer(width: int, height: int, color: RGBA = TRANSPARENT) -> np.ndarray:
    buf = np.zeros((height, width, 4), dtype=np.uint8)
    buf[:, :] = np.asarray(color, dtype=np.uint8)
    return buf


def dash_polyline(points: list[tuple[float, float]], dashes: tuple[float, ...], offset: float) -> list[list[tuple[float, float]]]:
    """Split a polyline into the "on" pieces of a dash pattern."""
    if not dashes or sum(dashes) <= 0 or len(points) < 2:
        return [points]
    period = sum(dashes)
    pos = offset % period
    idx = 0
    while pos >= dashes[idx]:
        pos -= dashes[idx]
        idx = (idx + 1) % len(dashes)
    remaining = dashes[idx] - pos
    on = idx % 2 == 0

    out: list[list[tuple[float, float]]] = []
    current: list[tuple[float, float]] = [points[0]] if on else []
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        seg = math.hypot(x1 - x0, y1 - y0)
        t = 0.0
        while seg - t > remaining:
            t += remaining
            p = (x0 + (x1 - x0) * t / seg, y0 + (y1 - y0) * t / seg)
            if on:
                current.append(p)
                out.append(current)
                current = []
            else:
                current = [p]
            on = not on
            idx = (idx + 1) % len(dashes)
            remaining = dashes[idx]
        remaining -= seg - t
        if on:
            current.append((x1, y1))
    if on and len(current) > 1:
        out.append(current)
    return out


class ImageCanvas(StateCanvas):
    """Raster canvas painting into an RGBA numpy buffer through Pillow masks."""

    def __init__(
        self,
        width: Length,
        height: Length,
        *,
        dpi: float = DEFAULT_DPI,
        background: RGBA = TRANSPARENT,
    ) -> None:
        super().__init__(width, height, dpi=dpi)
        self._px_w = max(1, int(math.ceil(dots(width, dpi))))
        self._px_h = max(1, int(math.ceil(dots(height, dpi))))
        self.buffer = new_buffer(self._px_w, self._px_h, background)

    @property
    def pixel_size(self) -> tuple[int, int]:
        return (self._px_w, self._px_h)

    def to_device(self, p: Point) -> tuple[float, float]:
        q = self.transform_point(p)
        return (dots(q.x, self._dpi), self._px_h - dots(q.y, self._dpi))

    def stroke(self, path: Path) -> None:
        st = self.state
        if st.line_width <= 0:
            return
        width_px = dots(st.line_width * self.transform_scale(), self._dpi)
        dashes = tuple(dots(d * self.transform_scale(), self._dpi) for d in st.dashes)
        offset = dots(st.dash_offset * self.transform_scale(), self._dpi)
        mask = Image.new("L", (self._px_w, self._px_h), 0)
        draw = ImageDraw.Draw(mask)
        for line in flatten(path):
            pts = [self.to_device(p) for p in line]
            for piece in dash_polyline(pts, dashes, offset):
                if len(piece) == 1:
                    continue
                draw.line(piece, fill=255, width=max(1, int(round(width_px))), joint="curve")
        _blend_mask(self.buffer, 0, 0, np.asarray(mask, dtype=np.uint8), st.color)

    def fill(self, path: Path) -> None:
        mask = Image.new("L", (self._px_w, self._px_h), 0)
        draw = ImageDraw.Draw(mask)
        for poly in flatten(path):
            pts = [self.to_device(p) for p in poly]
            if len(pts) >= 3:
                draw.polygon(pts, fill=255)
        _blend_mask(self.buffer, 0, 0, np.asarray(mask, dtype=np.uint8), self.state.color)

    def fill_string(self, font: Font, pt: Point, text: str) -> None:
        if not text:
            return
        size_px = dots(font.size * self.transform_scale(), self._dpi)
        pil_font = pillow_font(font.family, size_px)
        left, top, right, bottom = pil_font.getbbox(text, anchor="ls")
        radius = int(math.ceil(math.hypot(max(abs(left), abs(right)), max(abs(top), abs(bottom))))) + 2
        image = Image.new("L", (2 * radius, 2 * radius), 0)
        ImageDraw.Draw(image).text((radius, radius), text, fill=255, font=pil_font, anchor="ls")
        angle = math.degrees(self.transform_angle())
        if angle != 0:
            image = image.rotate(angle, resample=Image.BILINEAR)
        x, y = self.to_device(pt)
        _blend_mask(
            self.buffer,
            int(round(x)) - radius,
            int(round(y)) - radius,
            np.asarray(image, dtype=np.uint8),
            self.state.color,
        )

    def draw_image(self, rect: Rectangle, image: np.ndarray) -> None:
        corners = [
            self.to_device(rect.min),
            self.to_device(Point(rect.max.x, rect.min.y)),
            self.to_device(rect.max),
            self.to_device(Point(rect.min.x, rect.max.y)),
        ]
        x0 = int(round(min(c[0] for c in corners)))
        x1 = int(round(max(c[0] for c in corners)))
        y0 = int(round(min(c[1] for c in corners)))
        y1 = int(round(max(c[1] for c in corners)))
        if x1 <= x0 or y1 <= y0:
            return
        src = np.asarray(image, dtype=np.uint8)
        if src.ndim == 3 and src.shape[2] == 3:
            src = np.concatenate([src, np.full(src.shape[:2] + (1,), 255, dtype=np.uint8)], axis=2)
        resized = np.asarray(Image.fromarray(src, "RGBA").resize((x1 - x0, y1 - y0), Image.NEAREST), dtype=np.uint8)
        blit(self.buffer, resized, x0, y0)

    def image(self) -> Image.Image:
        return Image.fromarray(self.buffer, "RGBA")

    def write_to(self, sink: BinaryIO, fmt: str = "png") -> None:
        if self.depth:
            LOGGER.warning("writing raster canvas with %d unbalanced push calls", self.depth)
        pil_format = RASTER_FORMATS[fmt.lower()]
        img = self.image()
        if pil_format == "JPEG":
            flat = Image.new("RGB", img.size, (255, 255, 255))
            flat.paste(img, mask=img.getchannel("A"))
            img = flat
        img.save(sink, format=pil_format, dpi=(self._dpi, self._dpi))


def blit(dst: np.ndarray, src: np.ndarray, x0: int = 0, y0: int = 0) -> None:
    h, w, _ = src.shape
    sx0 = max(0, -x0)
    sy0 = max(0, -y0)
    x0c = max(0, x0)
    y0c = max(0, y0)
    y1 = min(dst.shape[0], y0 + h)
    x1 = min(dst.shape[1], x0 + w)
    if y0c >= y1 or x0c >= x1:
        return

    view = dst[y0c:y1, x0c:x1]
    patch = src[sy0 : sy0 + (y1 - y0c), sx0 : sx0 + (x1 - x0c)]
    alpha = patch[:, :, 3:4].astype(np.float32) / 255.0
    inv = 1.0 - alpha
    view[:, :, :3] = (patch[:, :, :3] * alpha + view[:, :, :3] * inv).astype(np.uint8)
    view[:, :, 3] = np.maximum(view[:, :, 3], patch[:, :, 3])


def _blend_mask(dst: np.ndarray, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
    h, w = mask.shape
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return

    sx0 = x0 - x
    sy0 = y0 - y
    cov = mask[sy0 : sy0 + (y1 - y0), sx0 : sx0 + (x1 - x0)].astype(np.float32) / 255.0
    src_alpha = (color[3] / 255.0) * cov
    if not np.any(src_alpha > 0):
        return

    patch = dst[y0:y1, x0:x1]
    dst_rgb = patch[:, :, :3].astype(np.float32)
    dst_alpha = patch[:, :, 3].astype(np.float32) / 255.0

    src_rgb = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
    out_rgb_num = src_rgb * src_alpha[:, :, None] + dst_rgb * dst_alpha[:, :, None] * (1.0 - src_alpha[:, :, None])
    safe_alpha = np.where(out_alpha > 1e-6, out_alpha, 1.0)
    out_rgb = out_rgb_num / safe_alpha[:, :, None]

    patch[:, :, :3] = np.clip(out_rgb, 0, 255).astype(np.uint8)
    patch[:, :, 3] = np.clip(out_alpha * 255.0, 0, 255).astype(np.uint8)
