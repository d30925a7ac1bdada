# Region-of-interest crop/zoom and mapping boxes back to image space

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from vehicle_counter.config import RoiConfig
from vehicle_counter.data_types import BoundingBox


@dataclass(frozen=True)
class RoiWindow:
    """
    Pixel window cut out of the original image, and the zoom applied to it.
    """
    x: int
    y: int
    width: int
    height: int
    scale_factor: float


def roi_window(image_width: int, image_height: int, roi: RoiConfig) -> RoiWindow:
    return RoiWindow(
        x=int(image_width * roi.x),
        y=int(image_height * roi.y),
        width=int(image_width * roi.width),
        height=int(image_height * roi.height),
        scale_factor=roi.scale_factor,
    )


def crop_and_zoom(frame: np.ndarray, roi: RoiConfig) -> Tuple[np.ndarray, RoiWindow]:
    """
    Cut the ROI out of a frame (H x W x C) and scale it up so small
    vehicles become large enough for the detector.
    """
    h, w = frame.shape[:2]
    window = roi_window(w, h, roi)
    if window.width <= 0 or window.height <= 0:
        raise ValueError(f"ROI is empty for a {w}x{h} frame")

    cropped = frame[window.y:window.y + window.height, window.x:window.x + window.width]

    scaled_w = int(window.width * window.scale_factor)
    scaled_h = int(window.height * window.scale_factor)
    zoomed = cv2.resize(cropped, (scaled_w, scaled_h), interpolation=cv2.INTER_LINEAR)

    return zoomed, window


def remap_box(box: BoundingBox, window: RoiWindow) -> BoundingBox:
    """
    Convert a box detected on the zoomed crop back to original image pixels.
    """
    s = window.scale_factor
    return BoundingBox(
        x=box.x / s + window.x,
        y=box.y / s + window.y,
        width=box.width / s,
        height=box.height / s,
    )
