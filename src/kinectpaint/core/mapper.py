import numpy as np


class GeometricMapper:
    """
    Coordinate mapping between the sensor's depth, color and skeleton spaces.

    Color points are returned on the depth stream's pixel grid, which is how the
    sensor's mapping service reports them when both streams are opened at the
    depth resolution. Multiply by color_width / depth_width to land in color pixels.
    """

    def map_depth_point_to_color_point(self, depth_point, depth_mm):
        raise NotImplementedError

    def map_skeleton_point_to_depth_point(self, joint_position):
        raise NotImplementedError


class PinholeMapper(GeometricMapper):
    def __init__(self, depth_width=320, depth_height=240, baseline=0.025):
        # Kinect v1 typical values, rescaled from 640x480 to the depth grid
        scale = depth_width / 640.0
        self.fx, self.fy = 571.26 * scale, 571.26 * scale
        self.cx, self.cy = depth_width / 2.0, depth_height / 2.0
        self.depth_camera_matrix = np.array([
            [self.fx, 0, self.cx],
            [0, self.fy, self.cy],
            [0, 0, 1]
        ], dtype=np.float32)

        # RGB camera sits next to the IR camera and has a slightly wider lens
        self.color_fx, self.color_fy = 525.0 * scale, 525.0 * scale
        self.color_cx, self.color_cy = self.cx, self.cy
        self.baseline = baseline  # meters along X

    def map_depth_point_to_color_point(self, depth_point, depth_mm):
        """Converts a depth pixel + depth (mm) to a color pixel on the depth grid."""
        if depth_mm is None or depth_mm <= 0:
            return None

        u, v = depth_point
        # Depth pixel -> camera space (meters, Y down)
        z = float(depth_mm) / 1000.0
        x = (u - self.cx) * z / self.fx
        y = (v - self.cy) * z / self.fy

        x -= self.baseline

        cu = self.color_cx + self.color_fx * x / z
        cv = self.color_cy + self.color_fy * y / z
        return cu, cv

    def map_skeleton_point_to_depth_point(self, joint_position):
        x, y, z = joint_position
        if z <= 0:
            return None
        # Skeleton space is Y up, image rows grow downwards
        u = self.cx + self.fx * x / z
        v = self.cy - self.fy * y / z
        return u, v
