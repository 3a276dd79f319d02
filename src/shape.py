# Shapekit
# Copyright 2025 - Ricardo Quesada

import copy
import dataclasses
import logging
from typing import Any, Self

from PySide6.QtCore import QPointF, QRectF

import geometry
import shapes  # noqa: F401 Registers the built-in shape kinds
from config import get_global_config
from shape_kind import ShapeKind, get_shape_kind
from shape_properties import (
    BindingPoint,
    HandleChangeInfo,
    ResetBoundsInfo,
    ResizeCorner,
    ResizeEdge,
    ResizeInfo,
    ResizeStartInfo,
    ShapeProperties,
)

logger = logging.getLogger(__name__)

# Keys that can be found in a serialized record but are not properties
_RECORD_KEYS = ("type", "revision")


class Shape:
    """A drawable shape: properties plus geometry, transform and serialization.

    The kind-specific behavior lives in a ShapeKind. The Shape owns the
    properties and a serialization cache. Bounds are never stored: they are
    computed from the current properties every time they are requested.

    The serialization cache works like this:
    - update() marks the shape dirty, unless it is deserializing.
    - serialized returns the last snapshot, refreshing it first if the shape
      is dirty. Each refresh increments the revision.
    - A draft shape (being created by a tool) has no serialized view.
    """

    def __init__(self, kind: ShapeKind | str, props: dict[str, Any] | None = None):
        if isinstance(kind, str):
            kind = get_shape_kind(kind)
        self._kind = kind

        # Deep copy so that the shape never shares containers with the caller
        props = copy.deepcopy(props) if props else {}
        record_type = props.get("type", kind.type)
        if record_type != kind.type:
            raise ValueError(f"Record of type '{record_type}' given to shape kind '{kind.type}'")
        revision = props.get("revision")

        merged = {"scale": (1.0, 1.0), **copy.deepcopy(kind.default_props), **props}
        self._props: ShapeProperties = kind.props_class(**self._filter_props(merged))

        self._revision = 0
        self._draft = False
        self._is_dirty = False
        self._last_serialized: dict[str, Any] | None = None
        self._resize_scale = self._props.scale

        self.aspect_ratio: float | None = None
        self.binding_distance = get_global_config().binding_distance

        if revision is not None:
            # Built from a record: it is already serialized at that revision
            self._revision = int(revision)
            self._last_serialized = self.get_serialized()

    def _filter_props(self, props: dict[str, Any]) -> dict[str, Any]:
        known = {f.name for f in dataclasses.fields(self._kind.props_class)}
        filtered = {}
        for key, value in props.items():
            if key in _RECORD_KEYS:
                continue
            if key not in known:
                logger.warning(f"Ignoring unknown property '{key}' for shape kind '{self._kind.type}'")
                continue
            filtered[key] = value
        return filtered

    #
    # Properties
    #
    @property
    def id(self) -> str:
        return self._props.id

    @property
    def type(self) -> str:
        return self._kind.type

    @property
    def kind(self) -> ShapeKind:
        return self._kind

    @property
    def props(self) -> ShapeProperties:
        return self._props

    @property
    def draft(self) -> bool:
        return self._draft

    def set_draft(self, draft: bool) -> None:
        self._draft = draft

    @property
    def is_dirty(self) -> bool:
        return self._is_dirty

    def set_is_dirty(self, is_dirty: bool) -> None:
        self._is_dirty = is_dirty

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def last_serialized(self) -> dict[str, Any] | None:
        return self._last_serialized

    @property
    def bounds(self) -> QRectF:
        return self.get_bounds()

    @property
    def rotated_bounds(self) -> QRectF:
        return self.get_rotated_bounds()

    @property
    def center(self) -> QPointF:
        return self.get_center()

    #
    # Geometry
    #
    def get_bounds(self) -> QRectF:
        return self._kind.get_bounds(self._props)

    def get_center(self) -> QPointF:
        return self.get_bounds().center()

    def get_rotated_bounds(self) -> QRectF:
        return geometry.rotated_bounds(self.get_bounds(), self._props.rotation)

    def get_expanded_bounds(self) -> QRectF:
        return geometry.expand_bounds(self.get_bounds(), self.binding_distance)

    def hit_test_point(self, point) -> bool:
        point = geometry.as_point(point)
        rotation = self._props.rotation
        if not rotation:
            return geometry.point_in_bounds(point, self.get_rotated_bounds())
        # Approximates the shape by its rotated bounds, rotated once more
        corners = geometry.rotated_corners(self.get_rotated_bounds(), rotation)
        return geometry.point_in_polygon(point, corners)

    def hit_test_line_segment(self, a, b) -> bool:
        a = geometry.as_point(a)
        b = geometry.as_point(b)
        box = geometry.bounds_from_points([a, b])
        rotated_bounds = self.get_rotated_bounds()
        if geometry.bounds_contain(rotated_bounds, box):
            return True
        rotation = self._props.rotation
        if rotation:
            corners = geometry.rotated_corners(self.get_bounds(), rotation)
            return len(geometry.intersect_segment_polyline(a, b, corners, closed=True)) > 0
        return len(geometry.intersect_segment_bounds(a, b, rotated_bounds)) > 0

    def hit_test_bounds(self, bounds: QRectF) -> bool:
        corners = geometry.rotated_corners(self.get_bounds(), self._props.rotation)
        return (
            geometry.bounds_contain(bounds, self.get_rotated_bounds())
            or len(geometry.intersect_polygon_bounds(corners, bounds)) > 0
        )

    def get_binding_point(
        self, point, origin, direction, bind_anywhere: bool
    ) -> BindingPoint | None:
        """Finds where a connector pointing at this shape should attach.

        Returns the anchor normalized to the expanded bounds, so that it can
        be resolved again when the bounds change, and the distance the
        connector should keep from the shape. Returns None when the
        connector should not bind.
        """
        point = geometry.as_point(point)
        origin = geometry.as_point(origin)
        direction = geometry.as_point(direction)

        bounds = self.get_bounds()
        expanded_bounds = self.get_expanded_bounds()

        # The point must be inside of the expanded bounding box
        if not geometry.point_in_bounds(point, expanded_bounds):
            return None

        intersections = geometry.intersect_ray_bounds(origin, direction, expanded_bounds)
        if not intersections:
            return None

        center = self.get_center()

        # Furthest intersection of the ray from origin with the expanded bounds
        intersection = max(intersections, key=lambda p: geometry.distance(p, origin))

        # The point between the handle and the intersection
        middle_point = geometry.median(point, intersection)

        if bind_anywhere:
            if geometry.distance(point, center) < self.binding_distance / 2:
                anchor = center
            else:
                anchor = point
            distance = 0.0
        else:
            if geometry.distance_to_segment(point, middle_point, center) < self.binding_distance / 2:
                # Passes near the center, snap to it
                anchor = center
            else:
                anchor = middle_point

            if geometry.point_in_bounds(point, bounds):
                distance = self.binding_distance
            else:
                nearest_side = min(
                    geometry.distance_to_segment(side.p1(), side.p2(), point)
                    for _, side in geometry.bounds_sides(bounds)
                )
                distance = max(self.binding_distance, nearest_side)

        width = expanded_bounds.width()
        height = expanded_bounds.height()
        x = (anchor.x() - expanded_bounds.left()) / width if width else 0.0
        y = (anchor.y() - expanded_bounds.top()) / height if height else 0.0
        return BindingPoint(point=(geometry.clamp(x), geometry.clamp(y)), distance=distance)

    #
    # Serialization
    #
    def get_serialized(self) -> dict[str, Any]:
        d = dataclasses.asdict(self._props)
        d["type"] = self.type
        d["revision"] = self._revision
        return d

    def get_cached_serialized(self) -> dict[str, Any]:
        if self._is_dirty or self._last_serialized is None:
            self._revision += 1
            self._is_dirty = False
            self._last_serialized = self.get_serialized()
            logger.debug(f"Shape {self.id} serialized at revision {self._revision}")
        if self._last_serialized is not None:
            return self._last_serialized
        raise AssertionError("Should not get here for get_cached_serialized")

    @property
    def serialized(self) -> dict[str, Any] | None:
        if self._draft:
            return None
        return self.get_cached_serialized()

    def update(self, props: dict[str, Any], is_deserializing: bool = False) -> Self:
        """Merges props into the current properties.

        Marks the shape dirty, unless the props come from a deserialization.
        """
        if not (is_deserializing or self._is_dirty):
            self._is_dirty = True
        props = self._kind.validate_props(dict(props))
        for key, value in self._filter_props(props).items():
            if key == "id" and value != self._props.id:
                logger.warning(f"Cannot change id of shape {self._props.id} to {value}")
                continue
            setattr(self._props, key, value)
        self._props.normalize()
        return self

    def clone(self) -> "Shape":
        # Draft shapes have no serialized view, use a fresh snapshot instead
        record = self.serialized if not self._draft else self.get_serialized()
        return Shape(self._kind, record)

    #
    # Transform
    #
    def _as_props(self, props: ShapeProperties | dict[str, Any]) -> ShapeProperties:
        if isinstance(props, ShapeProperties):
            return copy.deepcopy(props)
        return self._kind.props_class(**self._filter_props(copy.deepcopy(props)))

    def on_reset_bounds(self, info: ResetBoundsInfo | None = None) -> Self:
        return self._kind.on_reset_bounds(self, info or ResetBoundsInfo())

    def on_resize_start(self, info: ResizeStartInfo | None = None) -> Self:
        self._resize_scale = tuple(self._props.scale or (1.0, 1.0))
        return self

    def on_resize(self, initial_props: ShapeProperties | dict[str, Any], info: ResizeInfo) -> Self:
        initial_props = self._as_props(initial_props)
        scale_x, scale_y = info.scale
        bounds = info.bounds

        if self._props.is_size_locked:
            logger.debug(f"Shape {self.id} is size locked, only moving it")
            return self.update(
                {"point": (bounds.left(), bounds.top()), "rotation": info.rotation}
            )

        if self._props.is_aspect_ratio_locked:
            bounds = self._lock_aspect_ratio(initial_props, info)
            info = dataclasses.replace(info, bounds=bounds)

        # Flips are cumulative during the whole drag
        next_scale = list(self._resize_scale)
        if scale_x < 0:
            next_scale[0] *= -1
        if scale_y < 0:
            next_scale[1] *= -1

        props = {
            "point": (bounds.left(), bounds.top()),
            "scale": tuple(next_scale),
            "rotation": info.rotation,
        }
        props.update(self._kind.get_resize_props(initial_props, info))
        return self.update(props)

    def _lock_aspect_ratio(self, initial_props: ShapeProperties, info: ResizeInfo) -> QRectF:
        bounds = info.bounds
        aspect_ratio = self.aspect_ratio
        if aspect_ratio is None:
            initial_bounds = self._kind.get_bounds(initial_props)
            if initial_bounds.height() == 0:
                return QRectF(bounds)
            aspect_ratio = initial_bounds.width() / initial_bounds.height()
        if aspect_ratio == 0:
            return QRectF(bounds)

        if info.type in (ResizeEdge.TOP, ResizeEdge.BOTTOM):
            width, height = bounds.height() * aspect_ratio, bounds.height()
        else:
            width, height = bounds.width(), bounds.width() / aspect_ratio

        # The side opposite to the dragged handle stays in place
        left = bounds.left()
        if info.type in (ResizeCorner.TOP_LEFT, ResizeCorner.BOTTOM_LEFT, ResizeEdge.LEFT):
            left = bounds.right() - width
        top = bounds.top()
        if info.type in (ResizeCorner.TOP_LEFT, ResizeCorner.TOP_RIGHT, ResizeEdge.TOP):
            top = bounds.bottom() - height
        return QRectF(left, top, width, height)

    def on_handle_change(
        self, initial_shape: ShapeProperties | dict[str, Any], info: HandleChangeInfo
    ) -> Self:
        initial_shape = self._as_props(initial_shape)
        if initial_shape.handles is None:
            logger.debug(f"Shape {self.id} has no handles")
            return self
        if info.id not in initial_shape.handles:
            logger.warning(f"Shape {self.id} has no handle '{info.id}'")
            return self

        next_handles = initial_shape.handles
        handle = next_handles[info.id]
        handle.point = (handle.point[0] + info.delta[0], handle.point[1] + info.delta[1])

        top_left = geometry.common_top_left(geometry.as_point(h.point) for h in next_handles.values())
        for h in next_handles.values():
            h.point = (h.point[0] - top_left.x(), h.point[1] - top_left.y())

        return self.update(
            {
                "point": (initial_shape.point[0] + top_left.x(), initial_shape.point[1] + top_left.y()),
                "handles": next_handles,
            }
        )

    #
    # Rendering
    #
    def get_shape_svg(self, preview: bool = False) -> str:
        return self._kind.get_shape_svg(self._props, preview)

    def __repr__(self) -> str:
        return f"Shape(type={self.type!r}, id={self.id!r}, revision={self._revision})"


def create_shape(record: dict[str, Any]) -> Shape:
    """Creates a Shape from a record carrying its type, e.g. a serialized one."""
    if "type" not in record:
        raise ValueError(f"Record has no type: {record}")
    return Shape(get_shape_kind(record["type"]), record)
