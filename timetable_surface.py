"""Drawing surfaces the grid renderer draws on.

Coordinates are millimetres measured from the top-left corner of the page and
text ``y`` is the baseline. Font sizes are in points.
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass, field
from typing import Any, List, Protocol, Tuple

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

RGB = Tuple[int, int, int]


def font_name(family: str, style: str = "normal") -> str:
    """Map a family/style pair onto a base-14 font name, e.g. Helvetica-Bold."""
    if style == "bold":
        return f"{family}-Bold"
    return family


class DrawingSurface(Protocol):
    def page_size(self) -> Tuple[float, float]: ...

    def set_font(self, family: str, style: str = "normal", size: float | None = None) -> None: ...

    def set_font_size(self, size: float) -> None: ...

    def text(self, x: float, y: float, text: str, align: str = "left") -> None: ...

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def rect(self, x: float, y: float, w: float, h: float) -> None: ...

    def set_fill_color(self, rgb: RGB) -> None: ...

    def set_draw_color(self, rgb: RGB) -> None: ...

    def set_line_dash(self, enabled: bool) -> None: ...

    def text_width(self, text: str) -> float: ...

    def to_bytes(self) -> bytes: ...


class _FontState:
    family = "Helvetica"
    style = "normal"
    size = 10.0

    def set_font(self, family: str, style: str = "normal", size: float | None = None) -> None:
        self.family = family
        self.style = style
        if size is not None:
            self.size = size

    def set_font_size(self, size: float) -> None:
        self.size = size

    @property
    def font(self) -> str:
        return font_name(self.family, self.style)

    def text_width(self, text: str) -> float:
        return pdfmetrics.stringWidth(text, self.font, self.size) / mm


class PdfSurface(_FontState):
    """reportlab canvas writing into an in-memory buffer."""

    def __init__(self, pagesize: Tuple[float, float] = landscape(A4)) -> None:
        self._buffer = io.BytesIO()
        self._pagesize = pagesize
        self._canvas = canvas.Canvas(self._buffer, pagesize=pagesize, invariant=1)
        self._canvas.setLineWidth(0.2 * mm)
        self._apply_font()

    def page_size(self) -> Tuple[float, float]:
        width, height = self._pagesize
        return width / mm, height / mm

    def _y(self, y: float) -> float:
        # flip to reportlab's bottom-left origin
        return self._pagesize[1] - y * mm

    def _apply_font(self) -> None:
        self._canvas.setFont(self.font, self.size)

    def set_font(self, family: str, style: str = "normal", size: float | None = None) -> None:
        super().set_font(family, style, size)
        self._apply_font()

    def set_font_size(self, size: float) -> None:
        super().set_font_size(size)
        self._apply_font()

    def text(self, x: float, y: float, text: str, align: str = "left") -> None:
        if align == "right":
            self._canvas.drawRightString(x * mm, self._y(y), text)
        else:
            self._canvas.drawString(x * mm, self._y(y), text)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._canvas.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self._canvas.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=1, fill=1)

    def set_fill_color(self, rgb: RGB) -> None:
        self._canvas.setFillColorRGB(*(c / 255.0 for c in rgb))

    def set_draw_color(self, rgb: RGB) -> None:
        self._canvas.setStrokeColorRGB(*(c / 255.0 for c in rgb))

    def set_line_dash(self, enabled: bool) -> None:
        if enabled:
            self._canvas.setDash(1 * mm, 1 * mm)
        else:
            self._canvas.setDash()

    def to_bytes(self) -> bytes:
        self._canvas.showPage()
        self._canvas.save()
        return self._buffer.getvalue()


@dataclass(frozen=True)
class DrawCommand:
    op: str
    args: Tuple[Any, ...]
    font: str = ""
    size: float = 0.0
    fill: RGB = (0, 0, 0)
    stroke: RGB = (0, 0, 0)
    dashed: bool = False


@dataclass
class RecordingSurface(_FontState):
    """Keeps every drawing call in memory for geometry assertions."""

    width: float = 297.0
    height: float = 210.0
    commands: List[DrawCommand] = field(default_factory=list)
    _fill: RGB = (0, 0, 0)
    _stroke: RGB = (0, 0, 0)
    _dashed: bool = False

    def page_size(self) -> Tuple[float, float]:
        return self.width, self.height

    def _record(self, op: str, *args: Any) -> None:
        self.commands.append(
            DrawCommand(
                op=op,
                args=args,
                font=self.font,
                size=self.size,
                fill=self._fill,
                stroke=self._stroke,
                dashed=self._dashed,
            )
        )

    def text(self, x: float, y: float, text: str, align: str = "left") -> None:
        self._record("text", x, y, text, align)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._record("line", x1, y1, x2, y2)

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("rect", x, y, w, h)

    def set_fill_color(self, rgb: RGB) -> None:
        self._fill = tuple(rgb)

    def set_draw_color(self, rgb: RGB) -> None:
        self._stroke = tuple(rgb)

    def set_line_dash(self, enabled: bool) -> None:
        self._dashed = enabled

    def of(self, op: str) -> List[DrawCommand]:
        return [c for c in self.commands if c.op == op]

    def texts(self) -> List[str]:
        return [c.args[2] for c in self.of("text")]

    def to_bytes(self) -> bytes:
        payload = [
            {"op": c.op, "args": list(c.args), "font": c.font, "size": c.size, "fill": list(c.fill), "dashed": c.dashed}
            for c in self.commands
        ]
        return json.dumps(payload, sort_keys=True).encode("utf-8")
