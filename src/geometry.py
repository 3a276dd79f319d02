# Shapekit
# Copyright 2025 - Ricardo Quesada

"""Pure 2D geometry helpers used by shapes.

Points are QPointF and bounds are QRectF. Nothing in here keeps state: every
function is a deterministic function of its arguments.
"""

from collections.abc import Iterable, Sequence

from PySide6.QtCore import QLineF, QPointF, QRectF
from PySide6.QtGui import QTransform

EPSILON = 1e-9


def as_point(value) -> QPointF:
    """Accepts a QPointF or any (x, y) sequence and returns a new QPointF."""
    if isinstance(value, QPointF):
        return QPointF(value)
    return QPointF(float(value[0]), float(value[1]))


def as_tuple(point: QPointF) -> tuple[float, float]:
    return (point.x(), point.y())


def _cross(a: QPointF, b: QPointF) -> float:
    return a.x() * b.y() - a.y() * b.x()


def _dot(a: QPointF, b: QPointF) -> float:
    return a.x() * b.x() + a.y() * b.y()


def distance(a: QPointF, b: QPointF) -> float:
    return QLineF(a, b).length()


def median(a: QPointF, b: QPointF) -> QPointF:
    """Returns the point halfway between a and b."""
    return QPointF((a.x() + b.x()) / 2, (a.y() + b.y()) / 2)


def clamp(value: float, min_val: float = 0.0, max_val: float = 1.0) -> float:
    return max(min_val, min(max_val, value))


#
# Bounds
#
def bounds_from_points(points: Iterable[QPointF]) -> QRectF:
    points = list(points)
    if not points:
        return QRectF()
    xs = [p.x() for p in points]
    ys = [p.y() for p in points]
    return QRectF(QPointF(min(xs), min(ys)), QPointF(max(xs), max(ys)))


def expand_bounds(bounds: QRectF, delta: float) -> QRectF:
    return bounds.adjusted(-delta, -delta, delta, delta)


def common_top_left(points: Iterable[QPointF]) -> QPointF:
    points = list(points)
    return QPointF(min(p.x() for p in points), min(p.y() for p in points))


def bounds_corners(bounds: QRectF) -> list[QPointF]:
    """Corners in clockwise order, starting at the top-left one."""
    return [bounds.topLeft(), bounds.topRight(), bounds.bottomRight(), bounds.bottomLeft()]


def bounds_sides(bounds: QRectF) -> list[tuple[str, QLineF]]:
    tl, tr, br, bl = bounds_corners(bounds)
    return [
        ("top", QLineF(tl, tr)),
        ("right", QLineF(tr, br)),
        ("bottom", QLineF(br, bl)),
        ("left", QLineF(bl, tl)),
    ]


def rotation_transform(center: QPointF, rotation: float) -> QTransform:
    """Transform that rotates by `rotation` radians around `center`."""
    transform = QTransform()
    transform.translate(center.x(), center.y())
    transform.rotateRadians(rotation)
    transform.translate(-center.x(), -center.y())
    return transform


def rotated_corners(bounds: QRectF, rotation: float = 0.0) -> list[QPointF]:
    corners = bounds_corners(bounds)
    if not rotation:
        return corners
    transform = rotation_transform(bounds.center(), rotation)
    return [transform.map(corner) for corner in corners]


def rotated_bounds(bounds: QRectF, rotation: float = 0.0) -> QRectF:
    """Axis-aligned box that encloses `bounds` rotated around its center."""
    if not rotation:
        return QRectF(bounds)
    return bounds_from_points(rotated_corners(bounds, rotation))


def point_in_bounds(point: QPointF, bounds: QRectF) -> bool:
    # Inclusive on every edge. QRectF.contains() rejects zero-sized rects,
    # and lines have zero-sized bounds.
    return (
        bounds.left() <= point.x() <= bounds.right()
        and bounds.top() <= point.y() <= bounds.bottom()
    )


def bounds_contain(outer: QRectF, inner: QRectF) -> bool:
    """Strict containment: touching edges do not count."""
    return (
        outer.left() < inner.left()
        and outer.top() < inner.top()
        and outer.right() > inner.right()
        and outer.bottom() > inner.bottom()
    )


#
# Segments
#
def nearest_point_on_segment(a: QPointF, b: QPointF, point: QPointF) -> QPointF:
    ab = b - a
    length_sq = _dot(ab, ab)
    if length_sq == 0:
        return QPointF(a)
    t = clamp(_dot(point - a, ab) / length_sq)
    return a + ab * t


def distance_to_segment(a: QPointF, b: QPointF, point: QPointF) -> float:
    return distance(point, nearest_point_on_segment(a, b, point))


def point_in_polygon(point: QPointF, polygon: Sequence[QPointF]) -> bool:
    """Even-odd test. Points on an edge are inside."""
    count = len(polygon)
    if count == 0:
        return False
    for i in range(count):
        if distance_to_segment(polygon[i], polygon[(i + 1) % count], point) <= EPSILON:
            return True
    inside = False
    x, y = point.x(), point.y()
    j = count - 1
    for i in range(count):
        xi, yi = polygon[i].x(), polygon[i].y()
        xj, yj = polygon[j].x(), polygon[j].y()
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def intersect_segments(a1: QPointF, a2: QPointF, b1: QPointF, b2: QPointF) -> list[QPointF]:
    """Intersection of segments a1-a2 and b1-b2.

    Returns a list with the intersection point, or an empty list. Touching
    endpoints count as an intersection. For collinear overlapping segments
    the first overlapping point along a1-a2 is returned.
    """
    r = a2 - a1
    s = b2 - b1
    qp = b1 - a1
    denom = _cross(r, s)

    if abs(denom) <= EPSILON:
        if abs(_cross(qp, r)) > EPSILON:
            # Parallel, never meet
            return []
        r_len_sq = _dot(r, r)
        if r_len_sq == 0:
            if distance_to_segment(b1, b2, a1) <= EPSILON:
                return [QPointF(a1)]
            return []
        t0 = _dot(qp, r) / r_len_sq
        t1 = t0 + _dot(s, r) / r_len_sq
        lo, hi = min(t0, t1), max(t0, t1)
        if hi < 0 or lo > 1:
            return []
        return [a1 + r * max(lo, 0.0)]

    t = _cross(qp, s) / denom
    u = _cross(qp, r) / denom
    if -EPSILON <= t <= 1 + EPSILON and -EPSILON <= u <= 1 + EPSILON:
        return [a1 + r * t]
    return []


def intersect_segment_bounds(a1: QPointF, a2: QPointF, bounds: QRectF) -> list[QPointF]:
    points = []
    for _, side in bounds_sides(bounds):
        points += intersect_segments(a1, a2, side.p1(), side.p2())
    return points


def intersect_segment_polyline(
    a1: QPointF, a2: QPointF, points: Sequence[QPointF], closed: bool = False
) -> list[QPointF]:
    result = []
    count = len(points)
    last = count if closed else count - 1
    for i in range(last):
        result += intersect_segments(a1, a2, points[i], points[(i + 1) % count])
    return result


def intersect_polygon_bounds(polygon: Sequence[QPointF], bounds: QRectF) -> list[QPointF]:
    result = []
    for _, side in bounds_sides(bounds):
        result += intersect_segment_polyline(side.p1(), side.p2(), polygon, closed=True)
    return result


#
# Rays
#
def intersect_ray_segment(
    origin: QPointF, direction: QPointF, a1: QPointF, a2: QPointF
) -> list[QPointF]:
    x, y = origin.x(), origin.y()
    dx, dy = direction.x(), direction.y()
    x1, y1 = a1.x(), a1.y()
    x2, y2 = a2.x(), a2.y()

    d = dx * (y2 - y1) - dy * (x2 - x1)
    if d == 0:
        return []
    r = ((y - y1) * (x2 - x1) - (x - x1) * (y2 - y1)) / d
    s = ((y - y1) * dx - (x - x1) * dy) / d
    if r >= 0 and 0 <= s <= 1:
        return [QPointF(x + r * dx, y + r * dy)]
    return []


def intersect_ray_bounds(origin: QPointF, direction: QPointF, bounds: QRectF) -> list[QPointF]:
    points = []
    for _, side in bounds_sides(bounds):
        points += intersect_ray_segment(origin, direction, side.p1(), side.p2())
    return points
