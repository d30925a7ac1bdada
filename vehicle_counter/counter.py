from enum import Enum
from typing import Dict, Set

from loguru import logger

from vehicle_counter.data_types import CountingState
from vehicle_counter.track import Track


class CountingMode(str, Enum):
    SPAWN = "spawn"
    LINE_CROSSING = "line_crossing"


class BaseCounter:
    """
    Counting policy plugged into the tracker.

    The tracker calls on_spawn() for every new track and on_match() for
    every track matched in the current frame. The policy decides whether
    that event adds to the monotonic total.
    """

    mode: CountingMode

    def __init__(self):
        self._total: int = 0
        self._by_class: Dict[str, int] = {}
        self._counted_ids: Set[int] = set()

    def on_spawn(self, track: Track) -> None:
        pass

    def on_match(self, track: Track, old_center_y: float) -> None:
        pass

    def is_counted(self, track_id: int) -> bool:
        return track_id in self._counted_ids

    @property
    def total(self) -> int:
        return self._total

    def state(self) -> CountingState:
        return CountingState(total=self._total, by_class=dict(self._by_class))

    def reset(self) -> None:
        self._total = 0
        self._by_class.clear()
        self._counted_ids.clear()

    def _count(self, track: Track) -> None:
        self._counted_ids.add(track.track_id)
        self._total += 1
        cls = track.class_name
        self._by_class[cls] = self._by_class.get(cls, 0) + 1


class SpawnCounter(BaseCounter):
    """
    Every new identity is a countable object: count at spawn time.
    """

    mode = CountingMode.SPAWN

    def on_spawn(self, track: Track) -> None:
        self._count(track)
        logger.info(f"Counted new track {track.track_id} ({track.class_name}), total={self._total}")


class LineCrossingCounter(BaseCounter):
    """
    Line-crossing counter for a HORIZONTAL counting line.

    Behavior:
      - A track is counted when its center Y moves from on/above the line
        to below it (old_y <= line_y < new_y). Upward crossings are never
        counted.
      - Each track id is counted at most once.
      - A track spawned already below the line is marked as counted
        WITHOUT incrementing the total: it is presumed to have crossed
        before it came into view, and can no longer be counted later.
    """

    mode = CountingMode.LINE_CROSSING

    def __init__(self, line_y: float = 0.5, enabled: bool = True):
        super().__init__()
        self.line_y = line_y
        self.enabled = enabled

    def on_spawn(self, track: Track) -> None:
        if not self.enabled:
            return

        if track.center_y > self.line_y:
            self._counted_ids.add(track.track_id)
            logger.debug(f"Track {track.track_id} spawned past the line, marked as counted")

    def on_match(self, track: Track, old_center_y: float) -> None:
        if not self.enabled or track.track_id in self._counted_ids:
            return

        new_center_y = track.center_y
        crossed = old_center_y <= self.line_y < new_center_y
        if crossed:
            self._count(track)
            logger.info(
                f"Track {track.track_id} ({track.class_name}) crossed line y={self.line_y:.1f}, "
                f"total={self._total}"
            )


def make_counter(mode: CountingMode, line_y: float = 0.5, enabled: bool = True) -> BaseCounter:
    mode = CountingMode(mode)
    if mode is CountingMode.SPAWN:
        return SpawnCounter()
    return LineCrossingCounter(line_y=line_y, enabled=enabled)
