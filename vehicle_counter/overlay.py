# Drawing bounding boxes, labels, counting line and counts on frames

import cv2

from vehicle_counter.data_types import CountingState
from vehicle_counter.track import Track
from typing import Optional, Sequence

TRACKED_COLOR = (0, 255, 0)
COASTING_COLOR = (0, 165, 255)
LINE_COLOR = (0, 0, 255)
TEXT_COLOR = (0, 255, 255)


def draw_tracks_and_counts(
    frame,
    tracks: Sequence[Track],
    counts: CountingState,
    line_y: Optional[float] = None,
):
    """
    Draw bounding boxes, track IDs, class labels, and counts on the frame.

    frame: numpy array (BGR), modified in place
    tracks: active track snapshots
    counts: CountingState from the tracker
    line_y: optional counting line position in pixels
    """

    h, w = frame.shape[:2]

    # ----- Draw tracks -----
    for track in tracks:
        # coasting tracks are drawn where the tracker expects them
        box = track.predicted_box()
        color = COASTING_COLOR if track.is_coasting else TRACKED_COLOR

        x1 = int(box.x)
        y1 = int(box.y)
        x2 = int(box.x2)
        y2 = int(box.y2)

        cv2.rectangle(frame, (x1, y1), (x2, y2), color, 2)

        label = f"{track.class_name}#{track.track_id}"
        cv2.putText(
            frame,
            label,
            (x1, max(0, y1 - 5)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            color,
            1,
            cv2.LINE_AA,
        )

    # ----- Draw counts -----
    lines = [f"Total: {counts.total}"]
    lines += [f"{cls}: {n}" for cls, n in counts.by_class.items()]

    y = 20
    for txt in lines:
        cv2.putText(
            frame,
            txt,
            (10, y),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            TEXT_COLOR,
            2,
            cv2.LINE_AA,
        )
        y += 25

    # ----- Draw horizontal counting line -----
    if line_y is not None:
        line_pixel = int(line_y)
        cv2.line(frame, (0, line_pixel), (w, line_pixel), LINE_COLOR, 2)

    return frame
