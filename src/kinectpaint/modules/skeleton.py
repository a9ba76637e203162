import logging

import numpy as np

from kinectpaint.core.frame_data import TrackingState

logger = logging.getLogger(__name__)


def distance(a, b):
    return float(np.linalg.norm(np.subtract(a, b, dtype=np.float64)))


def meters_to_mm(value):
    """The one place skeleton meters become depth-stream millimeters."""
    return float(value) * 1000.0


class SkeletonSelector:
    def __init__(self, sensor=None):
        # Anything with choose_tracked_skeleton(id); optional so tests can run bare
        self.sensor = sensor
        self.selected_id = None

    def select(self, skeletons):
        """Returns the trackable skeleton closest to the sensor origin, or None."""
        closest = None
        closest_distance = None
        for skeleton in skeletons or []:
            if skeleton.tracking_state == TrackingState.NOT_TRACKED:
                continue
            d = distance(skeleton.position, (0.0, 0.0, 0.0))
            # Strict comparison keeps the first of equally distant bodies
            if closest is None or d < closest_distance:
                closest, closest_distance = skeleton, d

        new_id = closest.tracking_id if closest is not None else None
        if new_id != self.selected_id:
            logger.info("Selected skeleton changed: %s -> %s", self.selected_id, new_id)
        self.selected_id = new_id

        if closest is not None and self.sensor is not None:
            self.sensor.choose_tracked_skeleton(closest.tracking_id)
        return closest
