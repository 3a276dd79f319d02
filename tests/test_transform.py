import copy
import os
import sys
import unittest

# Ensure src is in path
sys.path.append(os.path.join(os.path.dirname(__file__), "../src"))

from PySide6.QtCore import QRectF

from config import set_global_config
from shape import Shape
from shape_properties import (
    HandleChangeInfo,
    ResizeCorner,
    ResizeEdge,
    ResizeInfo,
    ResizeStartInfo,
)


class TestResize(unittest.TestCase):
    def setUp(self):
        set_global_config(None)
        self.shape = Shape("box", {"point": (10, 20), "size": (100, 50), "rotation": 0.25})

    def resize(self, bounds: QRectF, scale=(1, 1), rotation=0.25, type=None, initial=None):
        info = ResizeInfo(bounds=bounds, rotation=rotation, scale=scale)
        if type is not None:
            info.type = type
        if initial is None:
            initial = copy.deepcopy(self.shape.props)
        return self.shape.on_resize(initial, info)

    def test_identity_resize(self):
        self.shape.on_resize_start(ResizeStartInfo())
        self.resize(self.shape.bounds)
        self.assertEqual(self.shape.props.point, (10.0, 20.0))
        self.assertEqual(self.shape.props.rotation, 0.25)
        self.assertEqual(self.shape.props.size, (100.0, 50.0))
        self.assertEqual(self.shape.props.scale, (1.0, 1.0))

    def test_resize_moves_and_sizes(self):
        self.shape.on_resize_start()
        result = self.resize(QRectF(5, 6, 200, 80), rotation=1.0)
        self.assertIs(result, self.shape)
        self.assertEqual(self.shape.props.point, (5.0, 6.0))
        self.assertEqual(self.shape.props.size, (200.0, 80.0))
        self.assertEqual(self.shape.props.rotation, 1.0)
        self.assertTrue(self.shape.is_dirty)

    def test_resize_does_not_mutate_initial_props(self):
        initial = copy.deepcopy(self.shape.props)
        before = copy.deepcopy(initial)
        self.shape.on_resize_start()
        self.resize(QRectF(0, 0, 10, 10), scale=(-1, -1), initial=initial)
        self.assertEqual(initial, before)

    def test_resize_accepts_serialized_props(self):
        initial = self.shape.serialized
        self.shape.on_resize_start()
        self.resize(QRectF(0, 0, 30, 40), initial=initial)
        self.assertEqual(self.shape.props.size, (30.0, 40.0))
        self.assertEqual(initial["size"], (100.0, 50.0))

    def test_flip_persists_during_drag(self):
        self.shape.on_resize_start()
        self.resize(QRectF(0, 0, 50, 50), scale=(-0.5, 1))
        self.assertEqual(self.shape.props.scale, (-1.0, 1.0))
        # Still flipped compared to the scale at drag start, not flipped back
        self.resize(QRectF(0, 0, 60, 50), scale=(-0.6, 1))
        self.assertEqual(self.shape.props.scale, (-1.0, 1.0))
        self.resize(QRectF(0, 0, 60, 50), scale=(0.6, 1))
        self.assertEqual(self.shape.props.scale, (1.0, 1.0))

    def test_flip_is_cumulative_across_drags(self):
        self.shape.on_resize_start()
        self.resize(QRectF(0, 0, 50, 50), scale=(-1, -1))
        self.assertEqual(self.shape.props.scale, (-1.0, -1.0))

        self.shape.on_resize_start()
        self.resize(QRectF(0, 0, 50, 50), scale=(1, -1))
        self.assertEqual(self.shape.props.scale, (-1.0, 1.0))

    def test_size_locked(self):
        self.shape.update({"is_size_locked": True})
        self.shape.on_resize_start()
        self.resize(QRectF(30, 40, 500, 500), scale=(-5, 10))
        self.assertEqual(self.shape.props.point, (30.0, 40.0))
        self.assertEqual(self.shape.props.size, (100.0, 50.0))
        self.assertEqual(self.shape.props.scale, (1.0, 1.0))

    def test_aspect_ratio_locked(self):
        self.shape.update({"is_aspect_ratio_locked": True})
        self.shape.on_resize_start()
        self.resize(QRectF(0, 0, 200, 10))
        self.assertEqual(self.shape.props.size, (200.0, 100.0))

        self.resize(QRectF(0, 0, 10, 100), type=ResizeEdge.BOTTOM)
        self.assertEqual(self.shape.props.size, (200.0, 100.0))

    def test_aspect_ratio_locked_keeps_opposite_side(self):
        cases = [
            (ResizeCorner.TOP_LEFT, QRectF(-100, -10, 200, 60), QRectF(-100, -50, 200, 100)),
            (ResizeCorner.TOP_RIGHT, QRectF(0, -10, 200, 60), QRectF(0, -50, 200, 100)),
            (ResizeCorner.BOTTOM_LEFT, QRectF(-100, 0, 200, 60), QRectF(-100, 0, 200, 100)),
            (ResizeCorner.BOTTOM_RIGHT, QRectF(0, 0, 200, 60), QRectF(0, 0, 200, 100)),
            (ResizeEdge.LEFT, QRectF(-100, 0, 200, 50), QRectF(-100, 0, 200, 100)),
            (ResizeEdge.TOP, QRectF(0, -50, 100, 100), QRectF(0, -50, 200, 100)),
        ]
        for handle, bounds, expected in cases:
            with self.subTest(handle=handle):
                shape = Shape("box", {"size": (100, 50), "is_aspect_ratio_locked": True})
                initial = copy.deepcopy(shape.props)
                shape.on_resize_start()
                shape.on_resize(initial, ResizeInfo(bounds=bounds, type=handle))
                self.assertEqual(shape.bounds, expected)

    def test_aspect_ratio_override(self):
        self.shape.update({"is_aspect_ratio_locked": True})
        self.shape.aspect_ratio = 1.0
        self.shape.on_resize_start()
        self.resize(QRectF(0, 0, 40, 10))
        self.assertEqual(self.shape.props.size, (40.0, 40.0))

    def test_line_resize_scales_handles(self):
        line = Shape(
            "line", {"handles": {"start": {"point": (0, 0)}, "end": {"point": (100, 50)}}}
        )
        initial = copy.deepcopy(line.props)
        line.on_resize_start()
        line.on_resize(initial, ResizeInfo(bounds=QRectF(0, 0, 200, 100), scale=(2, 2)))
        self.assertEqual(line.props.handles["end"].point, (200.0, 100.0))
        self.assertEqual(line.bounds, QRectF(0, 0, 200, 100))

        line.on_resize(initial, ResizeInfo(bounds=QRectF(0, 0, 200, 100), scale=(-2, 2)))
        self.assertEqual(line.props.handles["start"].point, (200.0, 0.0))
        self.assertEqual(line.props.handles["end"].point, (0.0, 100.0))

    def test_pencil_resize_scales_points(self):
        pencil = Shape("pencil", {"point": (10, 10), "points": [(0, 0), (10, 20)]})
        initial = copy.deepcopy(pencil.props)
        pencil.on_resize_start()
        pencil.on_resize(initial, ResizeInfo(bounds=QRectF(0, 0, 5, 5), scale=(0.5, 0.25)))
        self.assertEqual(pencil.props.points, [(0.0, 0.0), (5.0, 5.0)])
        self.assertEqual(pencil.props.point, (0.0, 0.0))

    def test_polygon_flip_y(self):
        polygon = Shape("polygon", {"size": (10, 10)})
        initial = copy.deepcopy(polygon.props)
        polygon.on_resize_start()
        polygon.on_resize(initial, ResizeInfo(bounds=QRectF(0, 0, 10, 10), scale=(1, -1)))
        self.assertTrue(polygon.props.is_flipped_y)

    def test_reset_bounds(self):
        self.assertIs(self.shape.on_reset_bounds(), self.shape)


class TestHandleChange(unittest.TestCase):
    def setUp(self):
        set_global_config(None)
        self.line = Shape(
            "line",
            {
                "point": (10, 10),
                "handles": {"start": {"point": (0, 0)}, "end": {"point": (100, 100)}},
            },
        )

    def test_move_handle(self):
        initial = copy.deepcopy(self.line.props)
        result = self.line.on_handle_change(initial, HandleChangeInfo(id="start", delta=(-20, 30)))
        self.assertIs(result, self.line)

        handles = self.line.props.handles
        self.assertEqual(handles["start"].point, (0.0, 0.0))
        self.assertEqual(handles["end"].point, (120.0, 70.0))
        self.assertEqual(self.line.props.point, (-10.0, 40.0))
        # The line did not move on the canvas
        self.assertEqual(self.line.bounds, QRectF(-10, 40, 120, 70))

    def test_handles_stay_normalized(self):
        initial = copy.deepcopy(self.line.props)
        self.line.on_handle_change(initial, HandleChangeInfo(id="end", delta=(-150, -130)))
        points = [h.point for h in self.line.props.handles.values()]
        self.assertEqual(min(p[0] for p in points), 0.0)
        self.assertEqual(min(p[1] for p in points), 0.0)

    def test_uses_initial_shape(self):
        initial = copy.deepcopy(self.line.props)
        self.line.on_handle_change(initial, HandleChangeInfo(id="end", delta=(10, 0)))
        self.line.on_handle_change(initial, HandleChangeInfo(id="end", delta=(20, 0)))
        self.assertEqual(self.line.props.handles["end"].point, (120.0, 100.0))
        self.assertEqual(initial.handles["end"].point, (100.0, 100.0))

    def test_marks_dirty(self):
        revision = self.line.serialized["revision"]
        self.line.on_handle_change(
            self.line.serialized, HandleChangeInfo(id="end", delta=(1, 1))
        )
        self.assertTrue(self.line.is_dirty)
        self.assertEqual(self.line.serialized["revision"], revision + 1)

    def test_shape_without_handles(self):
        box = Shape("box")
        box.on_handle_change(copy.deepcopy(box.props), HandleChangeInfo(id="start", delta=(5, 5)))
        self.assertFalse(box.is_dirty)
        self.assertEqual(box.props.point, (0.0, 0.0))

    def test_unknown_handle(self):
        with self.assertLogs("shape", level="WARNING"):
            self.line.on_handle_change(
                copy.deepcopy(self.line.props), HandleChangeInfo(id="middle", delta=(5, 5))
            )
        self.assertFalse(self.line.is_dirty)


if __name__ == "__main__":
    unittest.main()
