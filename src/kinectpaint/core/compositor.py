import cv2
import numpy as np

from kinectpaint.core.frame_data import HAND_LEFT
from kinectpaint.modules.color_maps import ColorMapManager
from kinectpaint.modules.skeleton import meters_to_mm


class Compositor:
    def __init__(self, mapper, fuser, settings, cmap_manager=None):
        self.mapper = mapper
        self.fuser = fuser
        self.settings = settings
        self.cmap_manager = cmap_manager or ColorMapManager()

    def compose(self, result, debug=False):
        """Final RGB buffer for the host surface. result.display is never modified."""
        img = result.display
        if debug:
            img = img.copy()
            self.draw_debug(img, result)
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)

    def draw_debug(self, img, result):
        tracking_id = result.skeleton.tracking_id if result.skeleton is not None else 0
        cv2.putText(img, f"{result.frame_number} Sk: {tracking_id}", (10, 80),
                    cv2.FONT_HERSHEY_PLAIN, 1.0, (255, 255, 255), 1)

        if result.skeleton is not None:
            hand = result.skeleton.joint(HAND_LEFT)
            point = self.joint_to_color(hand) if hand is not None else None
            if point is not None:
                cv2.circle(img, point, 10, (255, 0, 0), -1)

    def joint_to_color(self, joint):
        depth_point = self.mapper.map_skeleton_point_to_depth_point(joint)
        if depth_point is None:
            return None
        mapped = self.mapper.map_depth_point_to_color_point(depth_point, meters_to_mm(joint[2]))
        if mapped is None:
            return None
        scale = self.settings.color_size[0] / float(self.settings.depth_size[0])
        return int(round(mapped[0] * scale)), int(round(mapped[1] * scale))

    def depth_view(self, result):
        """Colormapped depth of the current frame, RGB, or None when there is no depth."""
        if result.depth_mm is None:
            return None
        intensity = self.fuser.depth_intensity(result.depth_mm, self.settings.max_depth_mm)
        return cv2.cvtColor(self.cmap_manager.apply(intensity), cv2.COLOR_BGR2RGB)

    def picker_view(self, result):
        """Brush mask and picker mask side by side, RGB."""
        if result.brush_mask is None or result.picker_mask is None:
            return None
        pair = np.hstack([result.brush_mask, result.picker_mask])
        view = cv2.cvtColor(pair, cv2.COLOR_GRAY2RGB)
        if result.picker_point is not None:
            # picker_point is in color space; the masks are at depth resolution
            scale = self.settings.depth_size[0] / float(self.settings.color_size[0])
            w = result.picker_mask.shape[1]
            px = int(result.picker_point[0] * scale) + w
            py = int(result.picker_point[1] * scale)
            cv2.circle(view, (px, py), 4, (255, 0, 0), -1)
        return view

    def debug_view(self, result):
        """Depth view stacked over the mask view, for the secondary debug pane."""
        depth = self.depth_view(result)
        masks = self.picker_view(result)
        if depth is None or masks is None:
            return depth
        # depth is w wide, masks 2w; pad depth to match
        pad = np.zeros_like(depth)
        return np.vstack([np.hstack([depth, pad]), masks])
