from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

Point3 = Tuple[float, float, float]

# Joint names used by the gestures
HEAD = "head"
HAND_LEFT = "hand_left"
HAND_RIGHT = "hand_right"


class TrackingState(Enum):
    NOT_TRACKED = 0
    POSITION_ONLY = 1
    TRACKED = 2


class EngineState(Enum):
    NO_SIGNAL = "no_signal"    # neither color nor a usable cached color image
    NO_PERSON = "no_person"    # color present, nobody to paint with
    TRACKING = "tracking"


@dataclass
class Skeleton:
    tracking_id: int
    tracking_state: TrackingState = TrackingState.TRACKED
    # Root position in meters, sensor-relative, Y up
    position: Point3 = (0.0, 0.0, 0.0)
    joints: Dict[str, Point3] = field(default_factory=dict)
    # Value this body carries in the depth stream's player-index plane
    player_index: int = 1

    def joint(self, name: str) -> Optional[Point3]:
        return self.joints.get(name)


@dataclass
class ColorFrame:
    # Raw BGRA bytes (Kinect Bgr32 layout) or an already shaped ndarray
    pixels: object
    width: int
    height: int
    frame_number: int = -1


@dataclass
class DepthFrame:
    depth: np.ndarray                      # uint16 distance in mm
    player_index: Optional[np.ndarray]     # uint8, 0 = no player
    width: int
    height: int
    max_depth: int = 4000
    packed: bool = False                   # depth << 3 | player_index in one uint16 plane


@dataclass
class FusedFrame:
    """Per-frame output of the fuser. Any part may be None when its stream dropped."""
    color: Optional[np.ndarray] = None
    depth_mm: Optional[np.ndarray] = None
    player_index: Optional[np.ndarray] = None
    frame_number: int = -1

    @property
    def has_color(self):
        return self.color is not None

    @property
    def has_depth(self):
        return self.depth_mm is not None


@dataclass
class FrameResult:
    display: np.ndarray
    state: EngineState = EngineState.NO_SIGNAL
    skeleton: Optional[Skeleton] = None
    frame_number: int = -1

    # Debug material, only filled while tracking
    depth_mm: Optional[np.ndarray] = None
    brush_mask: Optional[np.ndarray] = None
    picker_mask: Optional[np.ndarray] = None
    picker_point: Optional[Tuple[int, int]] = None
    erased: bool = False
