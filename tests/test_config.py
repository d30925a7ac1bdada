import pytest

from vehicle_counter.config import PipelineConfig, RoiConfig, TrackerConfig
from vehicle_counter.counter import CountingMode


def test_tracker_defaults():
    cfg = TrackerConfig()
    assert cfg.iou_threshold == 0.15
    assert cfg.max_missing_frames == 8
    assert cfg.moving_speed_threshold == 1.0
    assert cfg.counting_mode is CountingMode.LINE_CROSSING
    # 0.15 * 2.5 = 0.375, capped
    assert cfg.missing_iou_threshold == pytest.approx(0.3)


def test_missing_iou_threshold_below_cap():
    assert TrackerConfig(iou_threshold=0.1).missing_iou_threshold == pytest.approx(0.25)
    assert TrackerConfig(
        iou_threshold=0.1, missing_iou_multiplier=2.0, missing_iou_cap=0.5
    ).missing_iou_threshold == pytest.approx(0.2)


def test_counting_mode_accepts_strings():
    assert TrackerConfig(counting_mode="spawn").counting_mode is CountingMode.SPAWN


@pytest.mark.parametrize(
    "kwargs",
    [
        {"iou_threshold": -0.1},
        {"iou_threshold": 0},
        {"max_missing_frames": -1},
        {"missing_iou_multiplier": 0},
        {"missing_iou_cap": -1},
        {"missing_iou_cap": 0},
        {"counting_mode": "zigzag"},
    ],
)
def test_invalid_tracker_config(kwargs):
    with pytest.raises(ValueError):
        TrackerConfig(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"scale_factor": 0},
        {"width": 0},
        {"x": 0.8, "width": 0.35},
        {"y": -0.1},
    ],
)
def test_invalid_roi_config(kwargs):
    with pytest.raises(ValueError):
        RoiConfig(**kwargs)


def test_pipeline_config_groups_sections():
    cfg = PipelineConfig()
    assert cfg.roi.enabled
    assert cfg.roi.scale_factor == 3.5
    assert cfg.detection.vehicle_classes == ("car", "motorcycle", "bus", "truck")
    assert cfg.detection.confidence_threshold == 0.35
    assert cfg.service.debug_frames == 5
