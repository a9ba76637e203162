import logging

import numpy as np
import freenect

from kinectpaint.core.errors import SensorError
from kinectpaint.core.frame_data import ColorFrame, DepthFrame

logger = logging.getLogger(__name__)


class KinectV1:
    """
    libfreenect backed Kinect v1. Color and depth (mm) only: libfreenect has no
    skeleton tracker, so the player index plane is empty and no skeletons are reported.
    """

    def __init__(self, index=0, mirror=True, max_depth=4000):
        self.name = 'kinect_v1'
        self.depth_width = 640
        self.depth_height = 480
        self.color_width = 640
        self.color_height = 480
        self.max_depth = max_depth

        self.id = index
        self.mirror = mirror
        self.frame_number = 0
        self.connected = False

        ctx = freenect.init()
        try:
            device = freenect.open_device(ctx, self.id)
        except Exception as e:
            raise SensorError("Could not open Kinect %d: %s" % (self.id, e)) from e
        if device is None:
            raise SensorError("No Kinect found at index %d" % self.id)
        freenect.close_device(device)
        self.connected = True
        logger.info("Kinect v1 #%d opened", self.id)

    def get_color(self):
        data = freenect.sync_get_video(index=self.id)
        if data is None:
            return None
        color = data[0][:, :, ::-1]  # RGB -> BGR
        if self.mirror:
            color = np.fliplr(color)
        return np.ascontiguousarray(color)

    def get_frame(self):
        data = freenect.sync_get_depth(index=self.id, format=freenect.DEPTH_MM)
        if data is None:
            return None
        depth = data[0]
        if self.mirror:
            depth = np.fliplr(depth)
        return np.ascontiguousarray(depth)

    def try_get_color_frame(self):
        color = self.get_color()
        if color is None:
            return None
        self.frame_number += 1
        return ColorFrame(pixels=color, width=self.color_width, height=self.color_height,
                          frame_number=self.frame_number)

    def try_get_depth_frame(self):
        depth = self.get_frame()
        if depth is None:
            return None
        return DepthFrame(depth=depth, player_index=None, width=self.depth_width,
                          height=self.depth_height, max_depth=self.max_depth)

    def try_get_skeleton_frame(self):
        return []

    def choose_tracked_skeleton(self, tracking_id):
        pass

    def close(self):
        freenect.sync_stop()
        self.connected = False
