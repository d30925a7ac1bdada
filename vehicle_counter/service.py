# Request/response boundary: one encoded image in, one vehicle count out

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional

import cv2
import numpy as np
from loguru import logger

from vehicle_counter.config import ServiceConfig
from vehicle_counter.data_types import CountingState, Detection
from vehicle_counter.detector import BaseDetector
from vehicle_counter.track import Track
from vehicle_counter.tracker import VehicleTracker


@dataclass
class FrameResult:
    """
    Outcome of one processed frame.
    """
    frame_id: int
    detections: List[Detection]
    tracks: List[Track]
    counts: CountingState


def summarize_classes(class_names: Iterable[str]) -> str:
    """
    "3 (2 car, 1 truck)" style summary, or "0" when empty.
    """
    counts = Counter(class_names)
    total = sum(counts.values())
    if total == 0:
        return "0"
    parts = ", ".join(f"{n} {cls}" for cls, n in counts.items())
    return f"{total} ({parts})"


class VehicleCounterService:
    """
    Runs detector + tracker for every received frame.

    The tracker is a sequential state machine, so every frame goes
    through a single lock; concurrent callers are processed one at a time
    in arrival order.
    """

    def __init__(
        self,
        detector: BaseDetector,
        tracker: VehicleTracker,
        config: Optional[ServiceConfig] = None,
    ):
        self.detector = detector
        self.tracker = tracker
        self.config = config or ServiceConfig()

        self._lock = threading.Lock()
        self._frame_count: int = 0
        self._header_logged: bool = False

        logger.info(
            f"VehicleCounterService ready (detector={type(detector).__name__}, "
            f"mode={tracker.counting_mode.value})"
        )

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def receive_image(self, image_bytes: bytes) -> int:
        """
        Decode an encoded image (JPEG/PNG...), process it and return the
        number of active vehicles.

        If the image cannot be decoded or processing fails, the frame is
        skipped and the total count is returned instead.
        """
        frame = cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_COLOR)
        if frame is None:
            logger.error(f"Could not decode image ({len(image_bytes)} bytes)")
            return self._tracker_total()

        try:
            result = self.process_frame(frame)
        except Exception:
            logger.exception("Error while processing frame, frame skipped")
            return self._tracker_total()

        return len(result.tracks)

    def process_frame(self, frame: np.ndarray) -> FrameResult:
        """
        Detect and track one decoded BGR frame.
        """
        with self._lock:
            frame_id = self._frame_count + 1
            frame_detections = self.detector.detect(frame, frame_id)

            if frame_id <= self.config.debug_frames:
                self._log_frame_debug(frame, frame_id)

            self.tracker.update(frame_detections, frame_height=frame.shape[0])

            result = FrameResult(
                frame_id=frame_id,
                detections=list(frame_detections.detections),
                tracks=self.tracker.active_tracks(),
                counts=self.tracker.counting_state(),
            )
            # only count the frame once the tracker has consumed it
            self._frame_count = frame_id
            self._log_row(result)

        return result

    def _tracker_total(self) -> int:
        with self._lock:
            return self.tracker.total_count()

    def reset(self) -> None:
        with self._lock:
            self.tracker.reset()
            self._frame_count = 0
            self._header_logged = False
        logger.info("Service reset")

    def final_summary(self) -> CountingState:
        with self._lock:
            frames = self._frame_count
            counts = self.tracker.counting_state()

        logger.info("=" * 60)
        logger.info("FINAL SUMMARY")
        logger.info(f"Total frames processed: {frames}")
        logger.info(f"Total vehicles counted: {counts.total}")
        for cls, n in counts.by_class.items():
            logger.info(f"  {cls}: {n}")
        logger.info("=" * 60)
        return counts

    def close(self) -> None:
        logger.info("VehicleCounterService closed")

    def __enter__(self) -> "VehicleCounterService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _log_frame_debug(self, frame: np.ndarray, frame_id: int) -> None:
        h, w = frame.shape[:2]
        logger.debug(f"Frame {frame_id}: size {w}x{h}")

        raw = getattr(self.detector, "last_raw_summary", None) or {}
        if not raw:
            logger.debug("  no raw detections")
            return
        for cls, (n, max_conf) in sorted(raw.items()):
            logger.debug(f"  {cls:<12}: {n:2d} (max: {max_conf:.3f})")

    def _log_row(self, result: FrameResult) -> None:
        if not self._header_logged:
            logger.info(f"| {'Frame':<8} | {'Total':<8} | {'Current vehicles':<35} | {'Active vehicles':<35} |")
            self._header_logged = True

        current = summarize_classes(d.class_name for d in result.detections)
        active = summarize_classes(t.class_name for t in result.tracks)
        logger.info(f"| {result.frame_id:<8} | {result.counts.total:<8} | {current:<35} | {active:<35} |")
