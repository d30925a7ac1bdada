# Core data structures (boxes, detections, counts)

from dataclasses import dataclass, field
from typing import List, Dict

# box geometry
@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned bounding box in image pixel coordinates.
    (x, y) = top-left corner, width/height extend right and down.
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def area(self) -> float:
        return self.width * self.height

@dataclass(frozen=True)
class Detection:
    """
    Single detection handed to the tracker for one object.
    Already filtered by class and confidence.
    """
    box: BoundingBox
    class_name: str
    confidence: float
    class_id: int = -1

    @property
    def center_x(self) -> float:
        return self.box.center_x

    @property
    def center_y(self) -> float:
        return self.box.center_y

@dataclass
class FrameDetections:
    """
    All detections for a single frame.
    """
    frame_id: int
    detections: List[Detection]

@dataclass(frozen=True)
class CountingState:
    """
    Snapshot of the counting state.
    by_class maps class_name -> count at the moment each object was counted.
    """
    total: int = 0
    by_class: Dict[str, int] = field(default_factory=dict)
