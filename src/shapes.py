# Shapekit
# Copyright 2025 - Ricardo Quesada

"""Built-in shape kinds: box, ellipse, polygon, line and pencil."""

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Any

from coloraide import Color
from PySide6.QtCore import QPointF, QRectF

import geometry
from config import get_global_config
from shape_kind import ShapeKind, register_shape_kind
from shape_properties import Handle, ResizeInfo, ShapeProperties

logger = logging.getLogger(__name__)


def _normalize_color(value: str, fallback: str) -> str:
    """Returns the color as a lowercase sRGB hex string, e.g. "red" -> "#ff0000"."""
    try:
        return Color(value).convert("srgb").to_string(hex=True)
    except ValueError as e:
        logger.warning(f"Invalid color '{value}', using {fallback}: {e}")
        return fallback


def _validate_style(props: dict[str, Any]) -> dict[str, Any]:
    config = get_global_config()
    if "stroke" in props:
        props["stroke"] = _normalize_color(props["stroke"], config.default_stroke)
    if "fill" in props:
        props["fill"] = _normalize_color(props["fill"], config.default_fill)
    if "opacity" in props:
        props["opacity"] = geometry.clamp(float(props["opacity"]))
    return props


def _scale_points(
    points: list[tuple[float, float]], offset: QPointF, initial: QRectF, info: ResizeInfo
) -> list[tuple[float, float]]:
    """Maps points relative to `initial` into info.bounds, honoring flips.

    `offset` is the distance from the shape point to the initial bounds
    top-left, zero when the points are normalized.
    """
    scale_x, scale_y = info.scale
    width, height = info.bounds.width(), info.bounds.height()
    scaled = []
    for px, py in points:
        x = (px - offset.x()) / initial.width() * width if initial.width() else 0.0
        y = (py - offset.y()) / initial.height() * height if initial.height() else 0.0
        if scale_x < 0:
            x = width - x
        if scale_y < 0:
            y = height - y
        scaled.append((x, y))
    return scaled


#
# Box
#
@dataclass
class BoxProperties(ShapeProperties):
    size: tuple[float, float] = (100.0, 100.0)
    border_radius: float = 0.0
    stroke: str = "#000000"
    fill: str = "#ffffff"
    stroke_width: float = 2.0
    opacity: float = 1.0

    def normalize(self) -> None:
        super().normalize()
        self.size = (float(self.size[0]), float(self.size[1]))


@register_shape_kind
class BoxShape(ShapeKind):
    type = "box"
    props_class = BoxProperties
    default_props = {"point": (0.0, 0.0), "size": (100.0, 100.0)}
    can_bind = True

    def get_bounds(self, props: BoxProperties) -> QRectF:
        x, y = props.point
        w, h = props.size
        return QRectF(x, y, w, h)

    def validate_props(self, props: dict[str, Any]) -> dict[str, Any]:
        if "size" in props:
            min_size = get_global_config().min_shape_size
            props["size"] = (max(props["size"][0], min_size), max(props["size"][1], min_size))
        return _validate_style(props)

    def get_resize_props(self, initial_props: BoxProperties, info: ResizeInfo) -> dict[str, Any]:
        return {"size": (info.bounds.width(), info.bounds.height())}

    def get_shape_svg(self, props: BoxProperties, preview: bool = False) -> str:
        w, h = props.size
        r = props.border_radius
        return (
            f'<rect width="{w}" height="{h}" rx="{r}" ry="{r}" '
            f'fill="{props.fill}" stroke="{props.stroke}" '
            f'stroke-width="{props.stroke_width}" opacity="{props.opacity}"/>'
        )


#
# Ellipse
#
@register_shape_kind
class EllipseShape(BoxShape):
    type = "ellipse"

    def get_shape_svg(self, props: BoxProperties, preview: bool = False) -> str:
        w, h = props.size
        return (
            f'<ellipse cx="{w / 2}" cy="{h / 2}" rx="{w / 2}" ry="{h / 2}" '
            f'fill="{props.fill}" stroke="{props.stroke}" '
            f'stroke-width="{props.stroke_width}" opacity="{props.opacity}"/>'
        )


#
# Polygon
#
@dataclass
class PolygonProperties(BoxProperties):
    sides: int = 3
    is_flipped_y: bool = False

    def normalize(self) -> None:
        super().normalize()
        self.sides = int(self.sides)


@register_shape_kind
class PolygonShape(BoxShape):
    type = "polygon"
    props_class = PolygonProperties
    default_props = {"point": (0.0, 0.0), "size": (100.0, 100.0), "sides": 3}

    def validate_props(self, props: dict[str, Any]) -> dict[str, Any]:
        if "sides" in props and props["sides"] < 3:
            logger.warning(f"A polygon needs at least 3 sides, got {props['sides']}")
            props["sides"] = 3
        return super().validate_props(props)

    def get_resize_props(self, initial_props: PolygonProperties, info: ResizeInfo) -> dict[str, Any]:
        props = super().get_resize_props(initial_props, info)
        is_flipped_y = initial_props.is_flipped_y
        props["is_flipped_y"] = not is_flipped_y if info.scale[1] < 0 else is_flipped_y
        return props

    def get_vertices(self, props: PolygonProperties) -> list[tuple[float, float]]:
        """Vertices of the regular polygon inscribed in size, relative to point."""
        w, h = props.size
        vertices = []
        for i in range(props.sides):
            angle = -math.pi / 2 + 2 * math.pi * i / props.sides
            x = w / 2 + w / 2 * math.cos(angle)
            y = h / 2 + h / 2 * math.sin(angle)
            if props.is_flipped_y:
                y = h - y
            vertices.append((x, y))
        return vertices

    def get_shape_svg(self, props: PolygonProperties, preview: bool = False) -> str:
        points = " ".join(f"{x},{y}" for x, y in self.get_vertices(props))
        return (
            f'<polygon points="{points}" '
            f'fill="{props.fill}" stroke="{props.stroke}" '
            f'stroke-width="{props.stroke_width}" opacity="{props.opacity}"/>'
        )


#
# Line
#
@dataclass
class LineProperties(ShapeProperties):
    stroke: str = "#000000"
    stroke_width: float = 2.0
    opacity: float = 1.0


@register_shape_kind
class LineShape(ShapeKind):
    type = "line"
    props_class = LineProperties
    default_props = {
        "point": (0.0, 0.0),
        "handles": {
            "start": Handle("start", (0.0, 0.0), {"can_bind": True}),
            "end": Handle("end", (1.0, 1.0), {"can_bind": True}),
        },
    }
    hide_resize_handles = True
    hide_rotate_handle = True
    can_edit = True

    def get_bounds(self, props: LineProperties) -> QRectF:
        x, y = props.point
        if not props.handles:
            return QRectF(x, y, 0, 0)
        points = [geometry.as_point(h.point) for h in props.handles.values()]
        return geometry.bounds_from_points(points).translated(x, y)

    def validate_props(self, props: dict[str, Any]) -> dict[str, Any]:
        return _validate_style(props)

    def get_resize_props(self, initial_props: LineProperties, info: ResizeInfo) -> dict[str, Any]:
        if not initial_props.handles:
            return {}
        initial = self.get_bounds(initial_props)
        offset = initial.topLeft() - geometry.as_point(initial_props.point)
        handles = copy.deepcopy(initial_props.handles)
        points = _scale_points([h.point for h in handles.values()], offset, initial, info)
        for handle, point in zip(handles.values(), points):
            handle.point = point
        return {"handles": handles}

    def get_shape_svg(self, props: LineProperties, preview: bool = False) -> str:
        if not props.handles or "start" not in props.handles or "end" not in props.handles:
            return super().get_shape_svg(props, preview)
        start = props.handles["start"].point
        end = props.handles["end"].point
        return (
            f'<line x1="{start[0]}" y1="{start[1]}" x2="{end[0]}" y2="{end[1]}" '
            f'stroke="{props.stroke}" stroke-width="{props.stroke_width}" '
            f'opacity="{props.opacity}"/>'
        )


#
# Pencil
#
@dataclass
class PencilProperties(ShapeProperties):
    points: list[tuple[float, float]] = field(default_factory=list)
    stroke: str = "#000000"
    stroke_width: float = 2.0
    opacity: float = 1.0

    def normalize(self) -> None:
        super().normalize()
        self.points = [(float(p[0]), float(p[1])) for p in self.points]


@register_shape_kind
class PencilShape(ShapeKind):
    type = "pencil"
    props_class = PencilProperties
    default_props = {"point": (0.0, 0.0), "points": []}
    can_edit = False

    def get_bounds(self, props: PencilProperties) -> QRectF:
        x, y = props.point
        if not props.points:
            return QRectF(x, y, 0, 0)
        points = [geometry.as_point(p) for p in props.points]
        return geometry.bounds_from_points(points).translated(x, y)

    def validate_props(self, props: dict[str, Any]) -> dict[str, Any]:
        return _validate_style(props)

    def get_resize_props(self, initial_props: PencilProperties, info: ResizeInfo) -> dict[str, Any]:
        if not initial_props.points:
            return {}
        initial = self.get_bounds(initial_props)
        offset = initial.topLeft() - geometry.as_point(initial_props.point)
        return {"points": _scale_points(initial_props.points, offset, initial, info)}

    def get_shape_svg(self, props: PencilProperties, preview: bool = False) -> str:
        if not props.points:
            return ""
        d = "M " + " L ".join(f"{x} {y}" for x, y in props.points)
        return (
            f'<path d="{d}" fill="none" stroke="{props.stroke}" '
            f'stroke-width="{props.stroke_width}" opacity="{props.opacity}"/>'
        )
