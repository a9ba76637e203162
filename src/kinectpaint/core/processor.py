import cv2
import numpy as np
import scipy.ndimage

from kinectpaint.core.frame_data import FusedFrame

# Kinect v1 packs the player index into the 3 low bits of every depth sample
PLAYER_INDEX_BITS = 3
PLAYER_INDEX_MASK = (1 << PLAYER_INDEX_BITS) - 1


def unpack_depth(packed):
    """Splits packed depth samples into (distance_mm, player_index)."""
    packed = np.asarray(packed, dtype=np.uint16)
    return packed >> PLAYER_INDEX_BITS, (packed & PLAYER_INDEX_MASK).astype(np.uint8)


def player_mask(player_index, index):
    """255 where the depth pixel belongs to the given player, 0 elsewhere."""
    return np.where(player_index == index, 255, 0).astype(np.uint8)


class FrameFuser:
    def __init__(self, color_size=(640, 480), depth_size=(320, 240), depth_sigma=1.0):
        self.color_size = tuple(color_size)
        self.depth_size = tuple(depth_size)
        self.sigma_gauss = depth_sigma

    def fuse(self, raw_color, raw_depth):
        fused = FusedFrame()
        if raw_color is not None:
            fused.color = self.build_color(raw_color)
            fused.frame_number = raw_color.frame_number
        if raw_depth is not None:
            fused.depth_mm, fused.player_index = self.build_depth(raw_depth)
        return fused

    def build_color(self, raw_color):
        pixels = raw_color.pixels
        w, h = raw_color.width, raw_color.height
        if isinstance(pixels, np.ndarray):
            img = pixels.reshape(h, w, -1) if pixels.ndim != 3 else pixels
        else:
            buf = np.frombuffer(pixels, dtype=np.uint8)
            img = buf.reshape(h, w, buf.size // (w * h))

        # Bgr32 carries an unused 4th byte. Always copy, the sensor reuses its buffer.
        img = np.array(img[:, :, :3], dtype=np.uint8, copy=True)
        if (w, h) != self.color_size:
            img = cv2.resize(img, self.color_size, interpolation=cv2.INTER_LINEAR)
        return img

    def build_depth(self, raw_depth):
        raw, player_index = raw_depth.depth, raw_depth.player_index
        if raw_depth.packed:
            raw, player_index = unpack_depth(raw)
        depth = np.minimum(np.asarray(raw), raw_depth.max_depth).astype(np.uint16)
        depth = depth.reshape(raw_depth.height, raw_depth.width)
        if player_index is None:
            players = np.zeros_like(depth, dtype=np.uint8)
        else:
            players = np.asarray(player_index, dtype=np.uint8).reshape(depth.shape).copy()

        if (raw_depth.width, raw_depth.height) != self.depth_size:
            # Nearest keeps depth values and player ids intact
            depth = cv2.resize(depth, self.depth_size, interpolation=cv2.INTER_NEAREST)
            players = cv2.resize(players, self.depth_size, interpolation=cv2.INTER_NEAREST)
        return depth, players

    def depth_intensity(self, depth_mm, max_depth):
        """8-bit visualization of a depth field: near is dark, far is bright."""
        depth = depth_mm.astype(np.float32)
        if self.sigma_gauss > 0:
            depth = scipy.ndimage.gaussian_filter(depth, self.sigma_gauss)
        norm = np.clip(depth / float(max_depth) * 255, 0, 255)
        return norm.astype(np.uint8)


def restrict_to_player(depth_mm, mask):
    """Depth where the player mask is set, zero elsewhere."""
    return np.where(mask > 0, depth_mm, 0).astype(depth_mm.dtype)


def depth_band(player_depth, threshold_mm):
    """255 for player pixels nearer than threshold_mm. Zero depth means no reading."""
    band = (player_depth > 0) & (player_depth < threshold_mm)
    return np.where(band, 255, 0).astype(np.uint8)
