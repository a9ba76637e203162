import logging

import cv2
import numpy as np

from kinectpaint.core.errors import CalibrationError

logger = logging.getLogger(__name__)


class HomographyEstimator:
    def __init__(self, mapper, depth_size=(320, 240), color_size=(640, 480),
                 nominal_depth_mm=2000.0, margin=20, grid_dims=(4, 4)):
        self.mapper = mapper
        self.depth_size = depth_size
        self.color_size = color_size
        # Every sample is mapped at this depth, not the measured one. Registration
        # is needed before measured depth can be trusted, and the brush/picker
        # offsets were tuned against the resulting registration.
        self.nominal_depth_mm = nominal_depth_mm
        self.margin = margin
        self.grid_dims = grid_dims

    @property
    def scale(self):
        return self.color_size[0] / float(self.depth_size[0])

    def sample_grid(self):
        """Depth pixel coordinates of the calibration grid, inset from the border."""
        w, h = self.depth_size
        cols, rows = self.grid_dims
        xs = np.linspace(self.margin, w - 1 - self.margin, cols)
        ys = np.linspace(self.margin, h - 1 - self.margin, rows)
        grid_x, grid_y = np.meshgrid(xs, ys)
        return np.stack([grid_x.ravel(), grid_y.ravel()], axis=1).astype(np.float32)

    def collect_points(self):
        src = self.sample_grid()
        dst = []
        for x, y in src:
            mapped = self.mapper.map_depth_point_to_color_point((float(x), float(y)), self.nominal_depth_mm)
            if mapped is None:
                raise CalibrationError("Mapper returned no color point for depth pixel (%.1f, %.1f)" % (x, y))
            dst.append([mapped[0] * self.scale, mapped[1] * self.scale])
        return src, np.array(dst, dtype=np.float32)

    def compute_homography(self):
        """
        Solves the least-squares homography from the depth grid to its color counterparts.
        Raises CalibrationError when the result is degenerate.
        """
        src, dst = self.collect_points()

        # method=0: plain least squares over all points, no RANSAC
        try:
            homography, _ = cv2.findHomography(src, dst, 0)
        except cv2.error as e:
            raise CalibrationError("findHomography failed: %s" % e) from e
        if is_degenerate(homography):
            raise CalibrationError("Degenerate homography from %d samples" % len(src))

        logger.info("Depth->color homography:\n%s", homography)
        homography = homography.copy()
        homography.setflags(write=False)
        return homography


def is_degenerate(homography, eps=1e-9, max_condition=1e10):
    if homography is None:
        return True
    homography = np.asarray(homography, dtype=np.float64)
    if homography.shape != (3, 3) or not np.all(np.isfinite(homography)):
        return True
    if abs(np.linalg.det(homography)) < eps:
        return True
    # Near-singular fits from collinear or collapsed samples
    return np.linalg.cond(homography) > max_condition


def project_points(points, homography):
    """Applies a homography to an (N, 2) array of points."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 1, 2)
    return cv2.perspectiveTransform(pts, np.asarray(homography, dtype=np.float64)).reshape(-1, 2)


def warp_to_color(image, homography, color_size):
    """Registers a depth-space image into color space. Zero outside the source frame."""
    return cv2.warpPerspective(image, np.asarray(homography, dtype=np.float64), tuple(color_size),
                               flags=cv2.INTER_CUBIC,
                               borderMode=cv2.BORDER_CONSTANT, borderValue=0)
