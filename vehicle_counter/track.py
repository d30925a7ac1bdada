import copy
import math
from dataclasses import dataclass

from vehicle_counter.data_types import BoundingBox, Detection
from vehicle_counter.geometry import box_with_center

# speed (pixels / frame) above which a track counts as moving
DEFAULT_MOVING_SPEED = 1.0


@dataclass
class Track:
    """
    A tracked object across frames.

    States:
      - tracked:  missing_frames == 0, box is the last observed detection
      - coasting: missing_frames > 0, position is extrapolated from the
                  constant-velocity estimate (see predicted_box)
    A track is never "lost" by itself; the tracker removes it once
    is_lost() becomes true.
    """
    track_id: int
    box: BoundingBox
    class_name: str
    confidence: float
    age: int = 1                # frames in which this identity was observed
    missing_frames: int = 0     # frames since the last successful match
    last_center_x: float = 0.0
    last_center_y: float = 0.0
    velocity_x: float = 0.0     # pixels / frame
    velocity_y: float = 0.0

    @classmethod
    def from_detection(cls, track_id: int, detection: Detection) -> "Track":
        return cls(
            track_id=track_id,
            box=detection.box,
            class_name=detection.class_name,
            confidence=detection.confidence,
            last_center_x=detection.center_x,
            last_center_y=detection.center_y,
        )

    @property
    def center_x(self) -> float:
        return self.box.center_x

    @property
    def center_y(self) -> float:
        return self.box.center_y

    @property
    def is_coasting(self) -> bool:
        return self.missing_frames > 0

    @property
    def speed(self) -> float:
        return math.sqrt(self.velocity_x ** 2 + self.velocity_y ** 2)

    def increment_missing_frames(self) -> None:
        self.missing_frames += 1

    def update(self, detection: Detection) -> None:
        """
        Apply a matched detection.

        Velocity is the displacement since the last observation divided by
        the number of frames that actually elapsed, so a track that coasted
        for a while does not get an inflated velocity.
        """
        new_cx = detection.center_x
        new_cy = detection.center_y

        frames_passed = self.missing_frames + 1
        self.velocity_x = (new_cx - self.last_center_x) / frames_passed
        self.velocity_y = (new_cy - self.last_center_y) / frames_passed

        self.box = detection.box
        self.class_name = detection.class_name
        self.confidence = detection.confidence
        self.last_center_x = new_cx
        self.last_center_y = new_cy
        self.missing_frames = 0
        self.age += 1

    def predicted_box(self) -> BoundingBox:
        """
        Box used for matching.

        Unchanged while tracked; while coasting, the last observed box is
        moved along the velocity for every missed frame (clamped at 0).
        """
        if self.missing_frames == 0:
            return self.box

        predicted_cx = self.last_center_x + self.velocity_x * self.missing_frames
        predicted_cy = self.last_center_y + self.velocity_y * self.missing_frames
        return box_with_center(predicted_cx, predicted_cy, self.box.width, self.box.height)

    def is_lost(self, max_missing_frames: int) -> bool:
        return self.missing_frames > max_missing_frames

    def is_moving(self, threshold: float = DEFAULT_MOVING_SPEED) -> bool:
        return self.speed > threshold

    def copy(self) -> "Track":
        return copy.copy(self)

    def __str__(self) -> str:
        return (
            f"Track[id={self.track_id}, type={self.class_name}, age={self.age}, "
            f"missing={self.missing_frames}, vel=({self.velocity_x:.1f},{self.velocity_y:.1f})]"
        )
