# all configurations in one place

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from vehicle_counter.counter import CountingMode

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
MODELS_DIR = PROJECT_ROOT / "models"

VEHICLE_CLASSES = ("car", "motorcycle", "bus", "truck")

@dataclass
class VideoConfig:
    source: Union[int, str] = 0  # 0 for webcam, or path to video file
    frame_width: Optional[int] = None   # resize frames when both are set
    frame_height: Optional[int] = None

@dataclass
class DetectionConfig:
    model_path: Path = MODELS_DIR / "detector" / "yolo_vehicles.pt"
    fallback_model: str = "yolov5su.pt"  # pretrained COCO weights
    confidence_threshold: float = 0.35
    vehicle_classes: Tuple[str, ...] = VEHICLE_CLASSES
    iou_threshold: float = 0.45  # NMS inside the detector, not tracking
    max_det: int = 100
    device: Optional[str] = None  # None lets ultralytics choose

@dataclass
class RoiConfig:
    # region of the image the road occupies, relative to image size (0-1)
    enabled: bool = True
    x: float = 0.0
    y: float = 0.15
    width: float = 0.35
    height: float = 0.6
    scale_factor: float = 3.5  # zoom applied to the crop before detection

    def __post_init__(self):
        if self.scale_factor <= 0:
            raise ValueError("scale_factor must be positive")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("ROI width and height must be positive")
        if self.x < 0 or self.y < 0 or self.x + self.width > 1.0 or self.y + self.height > 1.0:
            raise ValueError("ROI must lie inside the image (relative 0-1 coordinates)")

@dataclass
class TrackerConfig:
    iou_threshold: float = 0.15
    max_missing_frames: int = 8       # frames a track may coast before removal
    missing_iou_multiplier: float = 2.5
    missing_iou_cap: float = 0.3
    moving_speed_threshold: float = 1.0  # pixels / frame
    counting_mode: CountingMode = CountingMode.LINE_CROSSING
    counting_line_y: float = 0.5      # replaced by frame_height / 2 once known
    counting_line_enabled: bool = True

    def __post_init__(self):
        self.counting_mode = CountingMode(self.counting_mode)
        # a match always needs a positive overlap
        if self.iou_threshold <= 0:
            raise ValueError("iou_threshold must be positive")
        if self.max_missing_frames < 0:
            raise ValueError("max_missing_frames must be >= 0")
        if self.missing_iou_multiplier <= 0:
            raise ValueError("missing_iou_multiplier must be positive")
        if self.missing_iou_cap <= 0:
            raise ValueError("missing_iou_cap must be positive")

    @property
    def missing_iou_threshold(self) -> float:
        """Relaxed threshold used for coasting tracks."""
        return min(self.iou_threshold * self.missing_iou_multiplier, self.missing_iou_cap)

@dataclass
class ServiceConfig:
    debug_frames: int = 5  # first N frames log the full detection breakdown

@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_path: Optional[Path] = DATA_DIR / "logs" / "vehicle_counter.log"

@dataclass
class PipelineConfig:
    video: VideoConfig = field(default_factory=VideoConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    roi: RoiConfig = field(default_factory=RoiConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
