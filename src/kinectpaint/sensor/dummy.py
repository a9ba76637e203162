import math
from collections import deque

import cv2
import numpy as np

from kinectpaint.core.frame_data import (HAND_LEFT, HAND_RIGHT, HEAD, ColorFrame, DepthFrame,
                                         Skeleton, TrackingState)
from kinectpaint.core.mapper import PinholeMapper


class SyntheticScene:
    """One person standing 2 m away, right hand circling in front of the chest."""

    def __init__(self, mapper, depth_size=(320, 240), color_size=(640, 480),
                 body_depth=2.0, hand_reach=0.45, max_depth=4000):
        self.mapper = mapper
        self.depth_size = depth_size
        self.color_size = color_size
        self.body_depth = body_depth
        self.hand_reach = hand_reach
        self.max_depth = max_depth
        self.background = self._rainbow()

    def _rainbow(self):
        w, h = self.color_size
        hsv = np.zeros((h, w, 3), dtype=np.uint8)
        hsv[:, :, 0] = (np.arange(w) * 180 // w).astype(np.uint8)[None, :]
        hsv[:, :, 1] = 200
        hsv[:, :, 2] = 220
        return cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)

    def skeleton(self, tick):
        z = self.body_depth
        angle = tick * 0.1
        hand_z = z - self.hand_reach
        right = (0.25 + 0.15 * math.cos(angle), 0.1 + 0.15 * math.sin(angle), hand_z)
        return Skeleton(
            tracking_id=1,
            tracking_state=TrackingState.TRACKED,
            position=(0.0, 0.0, z),
            joints={
                HEAD: (0.0, 0.55, z),
                HAND_LEFT: (-0.3, -0.3, z),
                HAND_RIGHT: right,
            },
            player_index=1,
        )

    def depth(self, skeleton):
        w, h = self.depth_size
        depth = np.full((h, w), 3500, dtype=np.uint16)
        players = np.zeros((h, w), dtype=np.uint8)
        body_mm = int(skeleton.position[2] * 1000)

        def pixel(joint):
            u, v = self.mapper.map_skeleton_point_to_depth_point(joint)
            return int(round(u)), int(round(v))

        torso_top = pixel((-0.2, 0.4, skeleton.position[2]))
        torso_bottom = pixel((0.2, -0.6, skeleton.position[2]))
        cv2.rectangle(depth, torso_top, torso_bottom, body_mm, -1)
        cv2.rectangle(players, torso_top, torso_bottom, 1, -1)

        head = pixel(skeleton.joint(HEAD))
        cv2.circle(depth, head, 12, body_mm, -1)
        cv2.circle(players, head, 12, 1, -1)

        hand = skeleton.joint(HAND_RIGHT)
        hand_px = pixel(hand)
        cv2.circle(depth, hand_px, 9, int(hand[2] * 1000), -1)
        cv2.circle(players, hand_px, 9, 1, -1)
        return depth, players

    def frame(self, tick):
        skeleton = self.skeleton(tick)
        depth, players = self.depth(skeleton)
        w, h = self.color_size
        dw, dh = self.depth_size
        color = ColorFrame(pixels=self.background.copy(), width=w, height=h, frame_number=tick)
        # Same packed layout the Kinect SDK delivers
        packed = (depth.astype(np.uint16) << 3) | players.astype(np.uint16)
        depth_frame = DepthFrame(depth=packed, player_index=None, width=dw, height=dh,
                                 max_depth=self.max_depth, packed=True)
        return color, depth_frame, [skeleton]


class DummySensor:
    """
    Scriptable sensor. Frames pushed with push() come out one per try_get_* call,
    each stream independently; None entries simulate dropped frames. With
    synthetic=True an empty queue falls back to a SyntheticScene.
    """

    def __init__(self, depth_size=(320, 240), color_size=(640, 480), synthetic=False, max_depth=4000):
        self.name = 'dummy'
        self.depth_width, self.depth_height = depth_size
        self.color_width, self.color_height = color_size
        self.max_depth = max_depth
        self.connected = True
        self.chosen = []

        self.color_queue = deque()
        self.depth_queue = deque()
        self.skeleton_queue = deque()

        self.scene = None
        self.tick = 0
        if synthetic:
            mapper = PinholeMapper(self.depth_width, self.depth_height)
            self.scene = SyntheticScene(mapper, depth_size, color_size, max_depth=max_depth)

    def push(self, color=None, depth=None, skeletons=()):
        self.color_queue.append(color)
        self.depth_queue.append(depth)
        self.skeleton_queue.append(list(skeletons))

    def _synthetic(self):
        if self.scene is None:
            return None
        self.tick += 1
        color, depth, skeletons = self.scene.frame(self.tick)
        self.push(color, depth, skeletons)
        return True

    def try_get_color_frame(self):
        if not self.color_queue and self._synthetic() is None:
            return None
        return self.color_queue.popleft()

    def try_get_depth_frame(self):
        if not self.depth_queue:
            return None
        return self.depth_queue.popleft()

    def try_get_skeleton_frame(self):
        if not self.skeleton_queue:
            return []
        return self.skeleton_queue.popleft()

    def choose_tracked_skeleton(self, tracking_id):
        self.chosen.append(tracking_id)

    def close(self):
        self.connected = False
