# Shapekit
# Copyright 2025 - Ricardo Quesada

import logging
from abc import ABC, abstractmethod
from typing import Any

from PySide6.QtCore import QRectF

from shape_properties import ResetBoundsInfo, ResizeInfo, ShapeProperties

logger = logging.getLogger(__name__)


class ShapeKind(ABC):
    """Describes one kind of shape: its properties, bounds and hooks.

    A kind is stateless. Every Shape holds a reference to the kind
    registered for its type, and delegates the kind-specific parts (bounds,
    validation, resize, svg) to it.

    The capability flags are declarative: tools and UI code consult them, the
    Shape does not enforce them.
    """

    type: str = ""
    props_class = ShapeProperties
    default_props: dict[str, Any] = {}

    # There should be only one kind that is smart (created by double click canvas)
    smart = False

    # Display options
    hide_clone_handles = False
    hide_resize_handles = False
    hide_rotate_handle = False
    hide_context_bar = False
    hide_selection_detail = False
    hide_selection = False

    # Behavior options
    can_change_aspect_ratio = True
    can_unmount = True
    can_resize: tuple[bool, bool] = (True, True)
    can_scale = True
    can_flip = True
    can_edit = False
    can_bind = False
    can_activate = False

    @abstractmethod
    def get_bounds(self, props: ShapeProperties) -> QRectF:
        """Axis-aligned bounds in unrotated space. Must only depend on props."""
        raise NotImplementedError

    def validate_props(self, props: dict[str, Any]) -> dict[str, Any]:
        return props

    def get_resize_props(self, initial_props: ShapeProperties, info: ResizeInfo) -> dict[str, Any]:
        """Extra properties to set when the shape gets resized to info.bounds."""
        return {}

    def get_shape_svg(self, props: ShapeProperties, preview: bool = False) -> str:
        # Draw any shape as a box. The position is applied by the caller.
        bounds = self.get_bounds(props)
        return (
            f'<rect fill="currentColor" fill-opacity="0.2" '
            f'width="{bounds.width()}" height="{bounds.height()}"/>'
        )

    def on_reset_bounds(self, shape, info: ResetBoundsInfo):
        return shape


_shape_kinds: dict[str, ShapeKind] = {}


def register_shape_kind(cls: type[ShapeKind]) -> type[ShapeKind]:
    """Class decorator that registers a ShapeKind under its type."""
    if not cls.type:
        raise ValueError(f"Shape kind {cls.__name__} has no type")
    if cls.type in _shape_kinds:
        raise ValueError(f"Shape kind already registered: {cls.type}")
    _shape_kinds[cls.type] = cls()
    logger.debug(f"Registered shape kind '{cls.type}'")
    return cls


def unregister_shape_kind(type_name: str) -> None:
    _shape_kinds.pop(type_name, None)


def get_shape_kind(type_name: str) -> ShapeKind:
    if type_name not in _shape_kinds:
        raise ValueError(f"Invalid shape type: {type_name}")
    return _shape_kinds[type_name]


def get_shape_kinds() -> dict[str, ShapeKind]:
    return dict(_shape_kinds)
