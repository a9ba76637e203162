import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from kinectpaint.core.processor import depth_band

logger = logging.getLogger(__name__)


@dataclass
class PickResult:
    depth_point: Tuple[float, float]
    color_point: Tuple[int, int]
    sampled: Tuple[int, int, int]   # BGR under the hole
    color: Tuple[int, int, int]     # boosted BGR, the new brush color


def vivid(bgr, saturation_boost=2.0, value_boost=1.5):
    """Boosts saturation and value of a BGR color, keeping its hue. Both capped at 1.0."""
    px = np.array([[bgr]], dtype=np.float32) / 255.0
    hsv = cv2.cvtColor(px, cv2.COLOR_BGR2HSV)
    hsv[0, 0, 1] = min(hsv[0, 0, 1] * saturation_boost, 1.0)
    hsv[0, 0, 2] = min(hsv[0, 0, 2] * value_boost, 1.0)
    out = cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)[0, 0]
    return tuple(int(c) for c in np.clip(np.round(out * 255.0), 0, 255))


class ColorPicker:
    def __init__(self, mapper, depth_size=(320, 240), color_size=(640, 480),
                 picker_offset_mm=150.0, min_hole_area=75.0,
                 saturation_boost=2.0, value_boost=1.5):
        self.mapper = mapper
        self.depth_size = tuple(depth_size)
        self.color_size = tuple(color_size)
        self.picker_offset_mm = picker_offset_mm
        self.min_hole_area = min_hole_area
        self.saturation_boost = saturation_boost
        self.value_boost = value_boost
        self.kernel = np.ones((3, 3), np.uint8)

    def picker_mask(self, player_depth, body_mm):
        band = depth_band(player_depth, body_mm - self.picker_offset_mm)
        # Close speckle gaps in the hand before looking for the ring
        band = cv2.dilate(band, self.kernel, iterations=1)
        return cv2.erode(band, self.kernel, iterations=1)

    def find_hole(self, mask) -> Optional[Tuple[float, float]]:
        """Centroid of the first enclosed hole larger than min_hole_area, in discovery order."""
        contours, hierarchy = cv2.findContours(mask, cv2.RETR_CCOMP, cv2.CHAIN_APPROX_SIMPLE)
        if hierarchy is None:
            return None

        # hierarchy rows: [next, previous, first_child, parent]
        for i, (_, _, child, parent) in enumerate(hierarchy[0]):
            if parent != -1 or child == -1:
                continue
            hole = contours[child]
            if cv2.contourArea(hole) <= self.min_hole_area:
                continue
            m = cv2.moments(hole)
            if m["m00"] == 0:
                continue
            return m["m10"] / m["m00"], m["m01"] / m["m00"]
        return None

    def to_color_point(self, depth_point, depth_mm, body_mm):
        x, y = depth_point
        w, h = self.depth_size
        col = min(max(int(round(x)), 0), w - 1)
        row = min(max(int(round(y)), 0), h - 1)

        # Depth measured at the hole itself; body depth when the sensor has no reading there
        measured = float(depth_mm[row, col])
        if measured <= 0:
            measured = body_mm

        mapped = self.mapper.map_depth_point_to_color_point((x, y), measured)
        if mapped is None:
            return None
        scale = self.color_size[0] / float(w)
        cw, ch = self.color_size
        cx = min(max(int(round(mapped[0] * scale)), 0), cw - 1)
        cy = min(max(int(round(mapped[1] * scale)), 0), ch - 1)
        return cx, cy

    def pick(self, mask, depth_mm, body_mm, color) -> Optional[PickResult]:
        depth_point = self.find_hole(mask)
        if depth_point is None:
            return None

        color_point = self.to_color_point(depth_point, depth_mm, body_mm)
        if color_point is None:
            return None

        cx, cy = color_point
        sampled = tuple(int(c) for c in color[cy, cx])
        ink = vivid(sampled, self.saturation_boost, self.value_boost)
        logger.debug("Picked %s at %s -> brush %s", sampled, color_point, ink)
        return PickResult(depth_point=depth_point, color_point=color_point, sampled=sampled, color=ink)
