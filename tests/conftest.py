import pytest

from vehicle_counter.data_types import BoundingBox, Detection


@pytest.fixture
def make_det():
    """Factory for detections: make_det(x, y, w, h, class_name="car", confidence=0.9)."""

    def _make(x, y, w, h, class_name="car", confidence=0.9):
        return Detection(box=BoundingBox(x, y, w, h), class_name=class_name, confidence=confidence)

    return _make
