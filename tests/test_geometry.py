import pytest

from vehicle_counter.data_types import BoundingBox
from vehicle_counter.geometry import box_with_center, intersection_area, iou


def test_iou_of_box_with_itself_is_one():
    box = BoundingBox(10, 10, 20, 20)
    assert iou(box, box) == pytest.approx(1.0)


def test_iou_is_symmetric():
    a = BoundingBox(0, 0, 100, 100)
    b = BoundingBox(40, 0, 100, 100)
    assert iou(a, b) == pytest.approx(iou(b, a))
    # overlap 60x100 = 6000, union 20000 - 6000
    assert iou(a, b) == pytest.approx(6000 / 14000)


def test_disjoint_and_touching_boxes_have_zero_iou():
    a = BoundingBox(0, 0, 10, 10)
    assert iou(a, BoundingBox(50, 50, 10, 10)) == 0.0
    assert iou(a, BoundingBox(10, 0, 10, 10)) == 0.0


def test_zero_area_boxes_return_zero_instead_of_nan():
    point = BoundingBox(5, 5, 0, 0)
    assert iou(point, point) == 0.0
    assert iou(point, BoundingBox(0, 0, 10, 10)) == 0.0


def test_intersection_area():
    a = BoundingBox(0, 0, 10, 10)
    b = BoundingBox(5, 5, 10, 10)
    assert intersection_area(a, b) == pytest.approx(25.0)


def test_box_with_center_clamps_to_non_negative():
    box = box_with_center(-10, 5, 20, 20)
    assert box.x == 0.0
    assert box.y == 0.0
    assert (box.width, box.height) == (20, 20)

    box = box_with_center(50, 60, 20, 10)
    assert (box.x, box.y) == (40, 55)


def test_bounding_box_derived_values():
    box = BoundingBox.from_xyxy(10, 20, 50, 100)
    assert (box.x, box.y, box.width, box.height) == (10, 20, 40, 80)
    assert box.x2 == 50 and box.y2 == 100
    assert box.center_x == 30 and box.center_y == 60
    assert box.area == 3200
