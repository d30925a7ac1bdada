# Rectangle arithmetic shared by tracks and the tracker

from vehicle_counter.data_types import BoundingBox

# unions smaller than this are treated as empty
UNION_EPSILON = 1e-6


def intersection_area(box_a: BoundingBox, box_b: BoundingBox) -> float:
    """
    Area of the overlap rectangle of two boxes (0 when they do not overlap).
    """
    x1 = max(box_a.x, box_b.x)
    y1 = max(box_a.y, box_b.y)
    x2 = min(box_a.x2, box_b.x2)
    y2 = min(box_a.y2, box_b.y2)

    inter_w = max(0.0, x2 - x1)
    inter_h = max(0.0, y2 - y1)
    return inter_w * inter_h


def iou(box_a: BoundingBox, box_b: BoundingBox) -> float:
    """
    Compute Intersection over Union of two boxes in (x, y, w, h) format.

    Returns a value in [0, 1]. Near-zero-area pairs return 0 instead of
    dividing by (almost) nothing.
    """
    inter_area = intersection_area(box_a, box_b)

    union = box_a.area + box_b.area - inter_area
    if union < UNION_EPSILON:
        return 0.0

    return float(inter_area / union)


def box_with_center(center_x: float, center_y: float, width: float, height: float) -> BoundingBox:
    """
    Build a box of the given size around a center, clamping the top-left
    corner so it never goes negative.
    """
    x = max(0.0, center_x - width / 2.0)
    y = max(0.0, center_y - height / 2.0)
    return BoundingBox(x=x, y=y, width=width, height=height)
