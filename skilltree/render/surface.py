"""
Drawing Surfaces
Canvas-style 2D drawing API and its matplotlib implementation.
"""

from typing import Optional, List, Tuple, Union, Protocol
from dataclasses import dataclass
import math
import re

import numpy as np
from matplotlib.axes import Axes
from matplotlib.font_manager import FontProperties
from matplotlib.patches import PathPatch, Rectangle
from matplotlib.path import Path
from matplotlib.textpath import TextToPath


Color = Union[str, Tuple[float, float, float, float]]

_RGBA = re.compile(
    r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)"
)
_FONT = re.compile(r"^(?:(bold|normal|italic)\s+)?([\d.]+)px\s+(.+)$")

_TEXT_TO_PATH = TextToPath()


@dataclass(frozen=True)
class TextMetrics:
    """Result of measure_text"""
    width: float


class DrawingSurface(Protocol):
    """
    Minimal 2D canvas the renderer paints on.

    Coordinates are canvas units with y pointing down. Style attributes
    are plain mutable fields read at fill/stroke time.
    """
    fill_style: str
    stroke_style: str
    line_width: float
    font: str
    text_align: str
    text_baseline: str
    shadow_color: str
    shadow_blur: float

    def begin_path(self) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def arc(self, x: float, y: float, radius: float, start: float, end: float) -> None: ...

    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None: ...

    def fill(self) -> None: ...

    def stroke(self) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None: ...

    def measure_text(self, text: str) -> TextMetrics: ...

    def fill_text(self, text: str, x: float, y: float) -> None: ...


def parse_color(color: str) -> Color:
    """
    Convert a CSS colour to something matplotlib accepts.

    "rgba(15, 23, 42, 0.8)" -> (0.059, 0.090, 0.165, 0.8); hex and named
    colours pass through.
    """
    match = _RGBA.match(color.strip())
    if not match:
        return color
    r, g, b, a = match.groups()
    return (float(r) / 255, float(g) / 255, float(b) / 255, float(a) if a else 1.0)


def parse_font(font: str) -> Tuple[str, float, str]:
    """
    Split a CSS font shorthand.

    "bold 14px Arial" -> ("bold", 14.0, "Arial")
    """
    match = _FONT.match(font.strip())
    if not match:
        return ("normal", 10.0, "sans-serif")
    weight, size, family = match.groups()
    return (weight or "normal", float(size), family.strip())


class MatplotlibSurface:
    """
    DrawingSurface backed by a matplotlib Axes.

    The axes are set to canvas coordinates (origin top-left, y down) so one
    data unit is one canvas pixel.
    """

    def __init__(self, ax: Axes, width: float, height: float, background: Optional[str] = None):
        """
        Initialize surface.

        Args:
            ax: Axes to draw on
            width: Canvas width
            height: Canvas height
            background: Optional background colour
        """
        self.ax = ax
        self.width = width
        self.height = height

        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.set_aspect("equal")
        ax.axis("off")
        if background:
            ax.figure.set_facecolor(parse_color(background))
            ax.set_facecolor(parse_color(background))

        # Canvas state
        self.fill_style = "#000000"
        self.stroke_style = "#000000"
        self.line_width = 1.0
        self.font = "10px sans-serif"
        self.text_align = "start"
        self.text_baseline = "alphabetic"
        self.shadow_color = "#000000"
        self.shadow_blur = 0.0

        self._vertices: List[Tuple[float, float]] = []
        self._codes: List[int] = []
        self._z = 1

    # ==================== Path construction ====================

    def begin_path(self) -> None:
        self._vertices = []
        self._codes = []

    def move_to(self, x: float, y: float) -> None:
        self._vertices.append((x, y))
        self._codes.append(Path.MOVETO)

    def line_to(self, x: float, y: float) -> None:
        if not self._codes:
            self.move_to(x, y)
            return
        self._vertices.append((x, y))
        self._codes.append(Path.LINETO)

    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None:
        if not self._codes:
            self.move_to(cpx, cpy)
        self._vertices.extend([(cpx, cpy), (x, y)])
        self._codes.extend([Path.CURVE3, Path.CURVE3])

    def arc(self, x: float, y: float, radius: float, start: float, end: float) -> None:
        """Arc around (x, y), angles in radians"""
        if end - start >= 2 * math.pi:
            unit = Path.unit_circle()
        else:
            unit = Path.arc(math.degrees(start), math.degrees(end))

        vertices = unit.vertices * radius + np.array([x, y])
        codes = list(unit.codes)
        if self._codes and codes:
            codes[0] = Path.LINETO
        self._vertices.extend(map(tuple, vertices))
        self._codes.extend(codes)

    def _path(self) -> Optional[Path]:
        if not self._vertices:
            return None
        return Path(self._vertices, self._codes)

    def _next_z(self) -> int:
        self._z += 1
        return self._z

    # ==================== Painting ====================

    def fill(self) -> None:
        path = self._path()
        if path is None:
            return
        self.ax.add_patch(PathPatch(
            path,
            facecolor=parse_color(self.fill_style),
            edgecolor="none",
            zorder=self._next_z(),
        ))

    def stroke(self) -> None:
        path = self._path()
        if path is None:
            return
        if self.shadow_blur > 0:
            # Glow approximated by a wide translucent stroke underneath
            self.ax.add_patch(PathPatch(
                path,
                fill=False,
                edgecolor=parse_color(self.shadow_color),
                linewidth=self.line_width + self.shadow_blur,
                alpha=0.35,
                zorder=self._next_z(),
            ))
        self.ax.add_patch(PathPatch(
            path,
            fill=False,
            edgecolor=parse_color(self.stroke_style),
            linewidth=self.line_width,
            zorder=self._next_z(),
        ))

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        self.ax.add_patch(Rectangle(
            (x, y),
            width,
            height,
            facecolor=parse_color(self.fill_style),
            edgecolor="none",
            zorder=self._next_z(),
        ))

    # ==================== Text ====================

    def _font_properties(self) -> FontProperties:
        weight, size, family = parse_font(self.font)
        return FontProperties(family=family, weight=weight, size=size)

    def measure_text(self, text: str) -> TextMetrics:
        """Text width in canvas units"""
        if not text:
            return TextMetrics(width=0.0)
        width, _, _ = _TEXT_TO_PATH.get_text_width_height_descent(
            text, self._font_properties(), ismath=False
        )
        return TextMetrics(width=float(width))

    def _points_per_unit(self) -> float:
        bbox = self.ax.get_window_extent()
        return bbox.height / self.ax.figure.dpi * 72 / self.height

    def fill_text(self, text: str, x: float, y: float) -> None:
        props = self._font_properties()
        props.set_size(props.get_size_in_points() * self._points_per_unit())
        self.ax.text(
            x,
            y,
            text,
            color=parse_color(self.fill_style),
            fontproperties=props,
            ha={"center": "center", "right": "right", "end": "right"}.get(self.text_align, "left"),
            va={"middle": "center", "top": "top", "bottom": "bottom"}.get(self.text_baseline, "baseline"),
            zorder=self._next_z(),
        )
