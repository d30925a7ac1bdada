import numpy as np
import pytest

from vehicle_counter.config import DetectionConfig, RoiConfig
from vehicle_counter.detector import DummyDetector, YoloDetector


class StubBox:
    def __init__(self, xyxy, conf, cls):
        self.xyxy = np.array([xyxy], dtype=np.float32)
        self.conf = np.array([conf], dtype=np.float32)
        self.cls = np.array([cls], dtype=np.float32)


class StubResults:
    def __init__(self, boxes):
        self.boxes = boxes


class StubModel:
    """Mimics the call interface of ultralytics.YOLO."""

    names = {0: "person", 2: "car", 7: "truck"}

    def __init__(self, boxes):
        self._boxes = boxes
        self.calls = []

    def __call__(self, image, **kwargs):
        self.calls.append((image, kwargs))
        return [StubResults(self._boxes)]


def test_yolo_detector_keeps_confident_vehicles_only():
    model = StubModel([
        StubBox([10, 20, 50, 60], 0.9, 2),    # car
        StubBox([0, 0, 10, 10], 0.95, 0),     # person
        StubBox([100, 100, 140, 160], 0.2, 7),  # truck below threshold
        StubBox([200, 100, 260, 180], 0.5, 7),  # truck
    ])
    detector = YoloDetector(DetectionConfig(), model=model)

    frame = np.zeros((300, 400, 3), dtype=np.uint8)
    out = detector.detect(frame, frame_id=3)

    assert out.frame_id == 3
    assert [d.class_name for d in out.detections] == ["car", "truck"]
    car = out.detections[0]
    assert car.class_id == 2
    assert car.confidence == pytest.approx(0.9)
    assert (car.box.x, car.box.y, car.box.width, car.box.height) == (10, 20, 40, 40)

    assert detector.last_raw_summary["person"] == (1, pytest.approx(0.95))
    assert detector.last_raw_summary["truck"][0] == 2

    image, kwargs = model.calls[0]
    assert image is frame
    assert kwargs["verbose"] is False


def test_yolo_detector_maps_roi_boxes_back():
    model = StubModel([StubBox([35, 35, 105, 105], 0.8, 2)])
    detector = YoloDetector(DetectionConfig(), roi=RoiConfig(), model=model)

    frame = np.zeros((100, 200, 3), dtype=np.uint8)
    out = detector.detect(frame, frame_id=1)

    image, _ = model.calls[0]
    assert image.shape == (210, 245, 3)

    box = out.detections[0].box
    assert box.x == pytest.approx(10)
    assert box.y == pytest.approx(25)
    assert box.width == pytest.approx(20)
    assert box.height == pytest.approx(20)


def test_yolo_detector_without_boxes():
    model = StubModel(None)
    detector = YoloDetector(DetectionConfig(), model=model)
    out = detector.detect(np.zeros((10, 10, 3), dtype=np.uint8), frame_id=1)
    assert out.detections == []


def test_dummy_detector_replays_script(make_det):
    script = [[make_det(0, 0, 10, 10)], []]
    detector = DummyDetector(script)
    frame = np.zeros((10, 10, 3), dtype=np.uint8)

    assert len(detector.detect(frame, 1).detections) == 1
    assert detector.detect(frame, 2).detections == []
    assert detector.detect(frame, 3).detections == []
