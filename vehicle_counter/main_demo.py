# End-to-end vehicle counting demo script

import argparse
import cv2

from vehicle_counter.config import PipelineConfig
from vehicle_counter.counter import CountingMode
from vehicle_counter.detector import YoloDetector
from vehicle_counter.log_utils import setup_logging
from vehicle_counter.overlay import draw_tracks_and_counts
from vehicle_counter.service import VehicleCounterService
from vehicle_counter.tracker import VehicleTracker


def build_service(config: PipelineConfig) -> VehicleCounterService:
    """
    Wire detector -> tracker -> service from one PipelineConfig.
    """
    detector = YoloDetector(config.detection, roi=config.roi)
    tracker = VehicleTracker(config.tracker)
    return VehicleCounterService(detector, tracker, config.service)


def run_demo(config: PipelineConfig, video_source=None, show: bool = True) -> None:
    """
    End-to-end demo:
      frame -> detector -> tracker -> counting -> overlay -> display
    """

    if video_source is None:
        video_source = config.video.source

    cap = cv2.VideoCapture(video_source)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open video source: {video_source}")

    with build_service(config) as service:
        try:
            while True:
                ret, frame = cap.read()
                if not ret:
                    break

                if config.video.frame_width and config.video.frame_height:
                    frame = cv2.resize(
                        frame,
                        (config.video.frame_width, config.video.frame_height),
                    )

                result = service.process_frame(frame)

                if not show:
                    continue

                draw_tracks_and_counts(
                    frame,
                    result.tracks,
                    result.counts,
                    line_y=service.tracker.counting_line_y,
                )

                cv2.imshow("Vehicle Counter", frame)
                key = cv2.waitKey(1) & 0xFF
                if key == 27 or key == ord("q"):  # ESC or q
                    break
        finally:
            cap.release()
            cv2.destroyAllWindows()
            service.final_summary()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Vehicle counting demo")
    parser.add_argument(
        "--video",
        type=str,
        default=None,
        help="Video file path or camera index (e.g. 0 for default webcam)",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in CountingMode],
        default=None,
        help="Counting policy: count every new track, or count line crossings",
    )
    parser.add_argument("--no-roi", action="store_true", help="Run detection on the full frame")
    parser.add_argument("--no-display", action="store_true", help="Do not open a window")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING ...")
    args = parser.parse_args()

    cfg = PipelineConfig()
    if args.mode is not None:
        cfg.tracker.counting_mode = CountingMode(args.mode)
    if args.no_roi:
        cfg.roi.enabled = False
    if args.log_level is not None:
        cfg.logging.level = args.log_level.upper()

    setup_logging(cfg.logging.level, cfg.logging.log_path)

    if args.video is None:
        video_source = cfg.video.source
    else:
        # If argument is a digit, treat it as camera index; else as path
        if args.video.isdigit():
            video_source = int(args.video)
        else:
            video_source = args.video

    run_demo(cfg, video_source=video_source, show=not args.no_display)
