from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from pathlib import Path

import numpy as np
from loguru import logger

from ultralytics import YOLO

from vehicle_counter.data_types import Detection, FrameDetections, BoundingBox
from vehicle_counter.config import DetectionConfig, RoiConfig
from vehicle_counter.roi import crop_and_zoom, remap_box


class BaseDetector(ABC):
    """
    Abstract interface for all detectors.
    """

    # class_name -> (count, max confidence) of the last frame, before filtering.
    # Subclasses that skip super().__init__() still read an empty summary.
    last_raw_summary: Dict[str, Tuple[int, float]] = {}

    def __init__(self):
        self.last_raw_summary = {}

    @abstractmethod
    def detect(self, frame: np.ndarray, frame_id: int) -> FrameDetections:
        """
        Run detection on a single frame.
        Must return FrameDetections in original image coordinates.
        """
        raise NotImplementedError


class DummyDetector(BaseDetector):
    """
    Scripted detector.
    Returns the next list of detections from `script` on every call
    (no detections once the script runs out).
    Lets you build and test the pipeline without a model.
    """

    def __init__(self, script: Optional[Iterable[Sequence[Detection]]] = None):
        super().__init__()
        self._script = iter(script or [])

    def detect(self, frame: np.ndarray, frame_id: int) -> FrameDetections:
        detections = list(next(self._script, []))
        return FrameDetections(frame_id=frame_id, detections=detections)


class YoloDetector(BaseDetector):
    """
    YOLO-based vehicle detector using the ultralytics package.

    Behavior:
      - If a custom weights file exists at DetectionConfig.model_path, use it.
      - Otherwise, fall back to pretrained COCO weights, which already
        contain car / motorcycle / bus / truck.
      - Only configured vehicle classes above the confidence threshold
        are returned.
      - With an enabled RoiConfig, detection runs on the zoomed ROI and
        boxes are mapped back to full-image coordinates.
    """

    def __init__(self, config: DetectionConfig, roi: Optional[RoiConfig] = None, model=None):
        super().__init__()
        self.config = config
        self.roi = roi

        if model is None:
            model = self._load_model()
        self.model = model

        # YOLO model has a .names dict: class_id -> class_name
        self.class_names = self.model.names

    def _load_model(self):
        weights_path: Path = Path(self.config.model_path)

        if weights_path.is_file():
            logger.info(f"Loading detector weights from {weights_path}")
            return YOLO(str(weights_path))

        # This will download the fallback weights on first use.
        logger.warning(f"{weights_path} not found, using pretrained {self.config.fallback_model}")
        return YOLO(self.config.fallback_model)

    def detect(self, frame: np.ndarray, frame_id: int) -> FrameDetections:
        """
        Run YOLO detection on a single BGR frame.
        """
        window = None
        image = frame
        if self.roi is not None and self.roi.enabled:
            image, window = crop_and_zoom(frame, self.roi)

        results = self.model(
            image,
            conf=min(0.01, self.config.confidence_threshold),
            iou=self.config.iou_threshold,
            max_det=self.config.max_det,
            device=self.config.device,
            verbose=False,
        )[0]

        detections: List[Detection] = []
        self.last_raw_summary = {}

        if results.boxes is None:
            return FrameDetections(frame_id=frame_id, detections=detections)

        for box in results.boxes:
            score = float(box.conf[0].item())
            class_id = int(box.cls[0].item())
            # model.names may be dict or list; both support [] lookup
            class_name = str(self.class_names[class_id])

            count, best = self.last_raw_summary.get(class_name, (0, 0.0))
            self.last_raw_summary[class_name] = (count + 1, max(best, score))

            if class_name not in self.config.vehicle_classes:
                continue
            if score < self.config.confidence_threshold:
                continue

            x1, y1, x2, y2 = box.xyxy[0].tolist()
            bbox = BoundingBox.from_xyxy(float(x1), float(y1), float(x2), float(y2))
            if window is not None:
                bbox = remap_box(bbox, window)

            detections.append(
                Detection(box=bbox, class_name=class_name, confidence=score, class_id=class_id)
            )

        return FrameDetections(frame_id=frame_id, detections=detections)
