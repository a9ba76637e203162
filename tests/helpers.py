import cv2
import numpy as np

from kinectpaint.core.frame_data import (HAND_LEFT, HAND_RIGHT, HEAD, ColorFrame, DepthFrame,
                                         FusedFrame, Skeleton, TrackingState)

BACKGROUND_MM = 3500
SAMPLE_BGR = (30, 90, 60)

# Depth-space boxes (row0, row1, col0, col1)
BODY = (60, 220, 120, 200)
HAND = (80, 130, 130, 190)
HOLE = (95, 115, 150, 170)


def person_depth(body_mm=2000, hand_mm=None, hole=False, size=(320, 240)):
    w, h = size
    depth = np.full((h, w), BACKGROUND_MM, dtype=np.uint16)
    players = np.zeros((h, w), dtype=np.uint8)

    r0, r1, c0, c1 = BODY
    depth[r0:r1, c0:c1] = body_mm
    players[r0:r1, c0:c1] = 1

    if hand_mm is not None:
        r0, r1, c0, c1 = HAND
        depth[r0:r1, c0:c1] = hand_mm
        if hole:
            r0, r1, c0, c1 = HOLE
            depth[r0:r1, c0:c1] = BACKGROUND_MM
            players[r0:r1, c0:c1] = 0
    return depth, players


def make_skeleton(tracking_id=1, z=2.0, erase_pose=False, player_index=1,
                  state=TrackingState.TRACKED, position=None):
    if erase_pose:
        left, right = (-0.05, 0.8, z), (0.05, 0.8, z)
    else:
        left, right = (-0.3, -0.3, z), (0.3, -0.3, z)
    return Skeleton(
        tracking_id=tracking_id,
        tracking_state=state,
        position=position if position is not None else (0.0, 0.0, z),
        joints={HEAD: (0.0, 0.5, z), HAND_LEFT: left, HAND_RIGHT: right},
        player_index=player_index,
    )


def solid_color(bgr=SAMPLE_BGR, size=(640, 480)):
    w, h = size
    return np.full((h, w, 3), bgr, dtype=np.uint8)


def fused_frame(color=True, depth=True, **depth_kwargs):
    fused = FusedFrame(frame_number=7)
    if color:
        fused.color = solid_color()
    if depth:
        fused.depth_mm, fused.player_index = person_depth(**depth_kwargs)
    return fused


def raw_frames(color_bgr=SAMPLE_BGR, **depth_kwargs):
    color = solid_color(color_bgr)
    depth, players = person_depth(**depth_kwargs)
    return (ColorFrame(pixels=color, width=640, height=480, frame_number=1),
            DepthFrame(depth=depth, player_index=players, width=320, height=240))


def hue_sat_val(bgr):
    px = np.array([[bgr]], dtype=np.float32) / 255.0
    return tuple(float(c) for c in cv2.cvtColor(px, cv2.COLOR_BGR2HSV)[0, 0])


PATCH_BGR = (40, 160, 220)


def hole_color_point(mapper, depth_mm=BACKGROUND_MM, color_size=(640, 480), depth_width=320):
    """Color pixel under the center of HOLE, seen through it at depth_mm."""
    r0, r1, c0, c1 = HOLE
    center = ((c0 + c1 - 1) / 2.0, (r0 + r1 - 1) / 2.0)
    x, y = mapper.map_depth_point_to_color_point(center, depth_mm)
    scale = color_size[0] / float(depth_width)
    return int(round(x * scale)), int(round(y * scale))


def patched_color(center, bgr=PATCH_BGR, half=8, background=SAMPLE_BGR):
    """Background color everywhere except a square patch around center."""
    img = solid_color(background)
    x, y = center
    img[y - half:y + half + 1, x - half:x + half + 1] = bgr
    return img
