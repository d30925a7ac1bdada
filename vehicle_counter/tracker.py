from typing import List, Optional, Sequence, Union

from loguru import logger

from vehicle_counter.config import TrackerConfig
from vehicle_counter.counter import BaseCounter, CountingMode, LineCrossingCounter, make_counter
from vehicle_counter.data_types import CountingState, Detection, FrameDetections
from vehicle_counter.geometry import iou
from vehicle_counter.track import Track


class VehicleTracker:
    """
    IOU-based multi-object tracker with constant-velocity coasting.

    Logic, once per frame:
      - Every active track gets one more missing frame.
      - Tracks are visited in creation order; each one greedily takes the
        unmatched detection with the highest IoU against its (predicted)
        box, if that IoU reaches the threshold. Coasting tracks use their
        predicted box and a relaxed threshold.
      - Unmatched detections become new tracks.
      - Tracks whose missing count exceeds max_missing_frames are removed.

    Counting is delegated to a policy (spawn-count or line-crossing),
    chosen by TrackerConfig.counting_mode.

    Not thread-safe: callers that receive frames concurrently must
    serialize calls to update().
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()

        self._tracks: List[Track] = []
        self._next_id: int = 1
        self._counter: BaseCounter = make_counter(
            self.config.counting_mode,
            line_y=self.config.counting_line_y,
            enabled=self.config.counting_line_enabled,
        )

        logger.info(
            f"Tracker initialized: mode={self.config.counting_mode.value}, "
            f"iou={self.config.iou_threshold}, missing_iou={self.config.missing_iou_threshold}, "
            f"max_missing_frames={self.config.max_missing_frames}"
        )

    @property
    def counting_mode(self) -> CountingMode:
        return self._counter.mode

    def update(
        self,
        detections: Union[Sequence[Detection], FrameDetections],
        frame_height: Optional[float] = None,
    ) -> None:
        """
        Advance the tracker by one frame.

        frame_height: if given (and > 0), the counting line moves to the
        middle of the frame (line-crossing mode).
        """
        if isinstance(detections, FrameDetections):
            detections = detections.detections
        dets = list(detections)

        if frame_height is not None and frame_height > 0 and self._line_counter is not None:
            self._line_counter.line_y = frame_height / 2.0

        # --- Age every track before matching ---
        for track in self._tracks:
            track.increment_missing_frames()

        # --- Greedy per-track association ---
        matched_dets = [False] * len(dets)

        for track in self._tracks:
            if track.is_coasting:
                track_box = track.predicted_box()
                threshold = self.config.missing_iou_threshold
            else:
                track_box = track.box
                threshold = self.config.iou_threshold

            best_iou = 0.0
            best_idx = None
            for idx, det in enumerate(dets):
                if matched_dets[idx]:
                    continue

                score = iou(track_box, det.box)
                if score > best_iou and score >= threshold:
                    best_iou = score
                    best_idx = idx

            if best_idx is None:
                continue

            was_coasting = track.missing_frames > 1
            old_center_y = track.center_y
            track.update(dets[best_idx])
            matched_dets[best_idx] = True
            self._counter.on_match(track, old_center_y)

            if was_coasting:
                logger.debug(f"Re-tracked after missing: {track}")

        # --- Unmatched detections -> new tracks ---
        for idx, det in enumerate(dets):
            if matched_dets[idx]:
                continue

            track = Track.from_detection(self._next_id, det)
            self._next_id += 1
            self._tracks.append(track)
            self._counter.on_spawn(track)
            logger.debug(f"New track: {track}")

        # --- Retire lost tracks ---
        kept: List[Track] = []
        for track in self._tracks:
            if track.is_lost(self.config.max_missing_frames):
                logger.debug(f"Track lost: {track}")
            else:
                kept.append(track)
        self._tracks = kept

    def active_tracks(self) -> List[Track]:
        """Copies of the active tracks, in creation order."""
        return [track.copy() for track in self._tracks]

    def moving_tracks(self) -> List[Track]:
        return [
            track.copy() for track in self._tracks
            if track.is_moving(self.config.moving_speed_threshold)
        ]

    def active_count(self) -> int:
        return len(self._tracks)

    def total_count(self) -> int:
        return self._counter.total

    def counting_state(self) -> CountingState:
        return self._counter.state()

    def is_counted(self, track_id: int) -> bool:
        return self._counter.is_counted(track_id)

    @property
    def counting_line_y(self) -> Optional[float]:
        if self._line_counter is None:
            return None
        return self._line_counter.line_y

    @property
    def counting_line_enabled(self) -> bool:
        return self._line_counter is not None and self._line_counter.enabled

    def set_counting_line_y(self, y: float) -> None:
        self._require_line_counter().line_y = y

    def set_counting_line_enabled(self, enabled: bool) -> None:
        self._require_line_counter().enabled = enabled

    def reset(self) -> None:
        """Drop all tracks and counts; ids restart at 1."""
        self._tracks.clear()
        self._counter.reset()
        self._next_id = 1
        logger.info("Tracker reset - all counts cleared")

    @property
    def _line_counter(self) -> Optional[LineCrossingCounter]:
        if isinstance(self._counter, LineCrossingCounter):
            return self._counter
        return None

    def _require_line_counter(self) -> LineCrossingCounter:
        line_counter = self._line_counter
        if line_counter is None:
            raise ValueError("counting line is only available in line-crossing mode")
        return line_counter
