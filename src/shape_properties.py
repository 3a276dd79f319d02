# Shapekit
# Copyright 2025 - Ricardo Quesada

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from PySide6.QtCore import QPointF, QRectF


def _to_pair(value) -> tuple[float, float]:
    return (float(value[0]), float(value[1]))


class ResizeEdge(Enum):
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


class ResizeCorner(Enum):
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_RIGHT = "bottom_right"
    BOTTOM_LEFT = "bottom_left"


@dataclass
class Handle:
    """A control point stored relative to its shape's point."""

    id: str
    point: tuple[float, float] = (0.0, 0.0)
    props: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.point = _to_pair(self.point)


@dataclass
class ShapeProperties:
    """Properties shared by every shape kind.

    Kinds with extra properties subclass it. Instances are owned by a single
    Shape and only mutated through Shape.update().
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    parent_id: str | None = None
    name: str | None = None
    point: tuple[float, float] = (0.0, 0.0)
    scale: tuple[float, float] = (1.0, 1.0)
    rotation: float = 0.0
    handles: dict[str, Handle] | None = None
    clipping: float | tuple[float, ...] | None = None
    asset_id: str | None = None
    children: list[str] | None = None
    is_ghost: bool = False
    is_hidden: bool = False
    is_locked: bool = False
    is_generated: bool = False
    is_size_locked: bool = False
    is_aspect_ratio_locked: bool = False

    def __post_init__(self):
        self.normalize()

    def normalize(self) -> None:
        # TOML and JSON give lists back. Convert them to tuples, needed for
        # comparisons with live properties.
        self.point = _to_pair(self.point)
        self.scale = _to_pair(self.scale if self.scale is not None else (1.0, 1.0))
        self.rotation = float(self.rotation or 0.0)
        if isinstance(self.clipping, list):
            self.clipping = tuple(self.clipping)
        if self.handles is not None:
            self.handles = {
                k: v if isinstance(v, Handle) else Handle(**{"id": k, **v})
                for k, v in self.handles.items()
            }


@dataclass
class ResizeStartInfo:
    is_single: bool = True


@dataclass
class ResizeInfo:
    bounds: QRectF
    center: QPointF | None = None
    rotation: float = 0.0
    type: ResizeEdge | ResizeCorner = ResizeCorner.BOTTOM_RIGHT
    clip: bool = False
    scale: tuple[float, float] = (1.0, 1.0)
    transform_origin: tuple[float, float] = (0.5, 0.5)


@dataclass
class ResetBoundsInfo:
    asset: Any = None


@dataclass
class HandleChangeInfo:
    id: str
    delta: tuple[float, float]


@dataclass
class BindingPoint:
    # Anchor normalized to the expanded bounds, each axis in [0, 1]
    point: tuple[float, float]
    distance: float
