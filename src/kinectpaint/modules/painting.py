import logging
import threading

import cv2
import numpy as np

from kinectpaint.core.calibration import HomographyEstimator, warp_to_color
from kinectpaint.core.errors import CalibrationError
from kinectpaint.core.frame_data import EngineState, FrameResult
from kinectpaint.core.processor import depth_band, player_mask, restrict_to_player
from kinectpaint.modules.color_picker import ColorPicker
from kinectpaint.modules.gestures import is_erase_gesture
from kinectpaint.modules.skeleton import meters_to_mm

logger = logging.getLogger(__name__)


class PaintSession:
    """
    Everything that outlives a single frame: the paint canvas, the brush color,
    the cached homography and the last images seen on each stream.

    Owned by the pipeline driver and only mutated from inside a frame step.
    UI code goes through request_erase / request_recalibration, which are
    applied at the start of the next step.
    """

    def __init__(self, settings):
        self.color_size = tuple(settings.color_size)
        self.canvas = None
        self.brush_color = tuple(settings.default_brush_color)
        self.homography = None

        self.last_color = None
        self.last_depth = None
        self.last_players = None

        self.erase_requested = False
        self.recalibrate_requested = False
        self._requests_lock = threading.Lock()

    def ensure_canvas(self):
        if self.canvas is None:
            w, h = self.color_size
            self.canvas = np.zeros((h, w, 3), dtype=np.uint8)
        return self.canvas

    def clear_canvas(self):
        if self.canvas is not None:
            self.canvas[:] = 0

    def invalidate_calibration(self):
        # Replaced, never written to: an in-flight warp keeps its own reference
        self.homography = None

    def request_erase(self):
        with self._requests_lock:
            self.erase_requested = True

    def request_recalibration(self):
        with self._requests_lock:
            self.recalibrate_requested = True

    def take_requests(self):
        """Returns (erase, recalibrate) and resets both, so a later click waits for the next step."""
        with self._requests_lock:
            pending = self.erase_requested, self.recalibrate_requested
            self.erase_requested = self.recalibrate_requested = False
        return pending


class PaintingEngine:
    def __init__(self, settings, mapper):
        self.settings = settings
        self.mapper = mapper
        self.estimator = HomographyEstimator(
            mapper,
            depth_size=settings.depth_size,
            color_size=settings.color_size,
            nominal_depth_mm=settings.nominal_depth_mm,
            margin=settings.calibration_margin,
        )
        self.picker = ColorPicker(
            mapper,
            depth_size=settings.depth_size,
            color_size=settings.color_size,
            picker_offset_mm=settings.picker_offset_mm,
            min_hole_area=settings.min_hole_area,
            saturation_boost=settings.saturation_boost,
            value_boost=settings.value_boost,
        )

    def fallback_display(self):
        w, h = self.settings.color_size
        return np.full((h, w, 3), self.settings.fallback_color, dtype=np.uint8)

    def process(self, session, fused, skeleton):
        self._apply_requests(session)

        color, depth, players = self._resolve_inputs(session, fused)
        if color is None:
            return FrameResult(display=self.fallback_display(), state=EngineState.NO_SIGNAL,
                               frame_number=fused.frame_number)

        session.ensure_canvas()
        if skeleton is None or depth is None:
            return self._no_person(color, fused.frame_number, skeleton)

        try:
            homography = self.ensure_homography(session)
        except CalibrationError as e:
            logger.warning("Calibration failed, retrying next frame: %s", e)
            return self._no_person(color, fused.frame_number, skeleton)

        return self.track(session, color, depth, players, skeleton, homography, fused.frame_number)

    def ensure_homography(self, session):
        if session.homography is None:
            session.homography = self.estimator.compute_homography()
        return session.homography

    def track(self, session, color, depth, players, skeleton, homography, frame_number=-1):
        s = self.settings
        color_size = tuple(s.color_size)

        # Player mask registered into color space, blended as a soft highlight
        mask = player_mask(players, skeleton.player_index)
        registered = warp_to_color(mask, homography, color_size)
        display = cv2.addWeighted(color, 0.7, cv2.cvtColor(registered, cv2.COLOR_GRAY2BGR), 0.3, 0)
        display = cv2.blur(display, (3, 3))

        # Anything of the player nearer than the body by the offset is the brush
        player_depth = restrict_to_player(depth, mask)
        body_mm = meters_to_mm(skeleton.position[2])
        brush = depth_band(player_depth, body_mm - s.brush_offset_mm)

        # Paint
        self.stamp(session, brush, homography)

        # Erase
        erased = is_erase_gesture(skeleton, self.mapper, s.erase_distance_m)
        if erased:
            logger.info("Erase gesture from skeleton %s", skeleton.tracking_id)
            session.clear_canvas()

        # Color pick
        picker_mask = self.picker.picker_mask(player_depth, body_mm)
        pick = self.picker.pick(picker_mask, depth, body_mm, color)
        if pick is not None:
            if pick.color != session.brush_color:
                logger.info("Brush color %s -> %s", session.brush_color, pick.color)
            session.brush_color = pick.color

        # Canvas over the scene
        display = cv2.addWeighted(display, 0.5, session.canvas, 0.5, 0)
        if pick is not None:
            cv2.circle(display, pick.color_point, 8, pick.color, -1)
            cv2.circle(display, pick.color_point, 8, (255, 255, 255), 1)

        return FrameResult(
            display=display,
            state=EngineState.TRACKING,
            skeleton=skeleton,
            frame_number=frame_number,
            depth_mm=depth,
            brush_mask=brush,
            picker_mask=picker_mask,
            picker_point=pick.color_point if pick is not None else None,
            erased=erased,
        )

    def stamp(self, session, brush, homography):
        """Adds a blurred, brush-colored silhouette of the brush mask to the canvas."""
        if not np.any(brush):
            return False

        canvas = session.ensure_canvas()
        h, w = canvas.shape[:2]
        registered = warp_to_color(brush, homography, (w, h))

        weight = registered.astype(np.float32)[:, :, None] / 255.0
        silhouette = (weight * np.array(session.brush_color, dtype=np.float32)).astype(np.uint8)
        silhouette = cv2.GaussianBlur(silhouette, (15, 15), 0)

        # uint8 arithmetic saturates at 255, so paint builds up but never overflows
        cv2.addWeighted(canvas, 1.0, silhouette, self.settings.stamp_weight, 0, dst=canvas)
        return True

    def _resolve_inputs(self, session, fused):
        color = fused.color
        if color is not None:
            session.last_color = color
        elif self.settings.allow_stale_frames:
            color = session.last_color

        depth, players = fused.depth_mm, fused.player_index
        if depth is not None:
            session.last_depth, session.last_players = depth, players
        elif self.settings.allow_stale_frames:
            depth, players = session.last_depth, session.last_players
        return color, depth, players

    def _apply_requests(self, session):
        erase, recalibrate = session.take_requests()
        if erase:
            session.clear_canvas()
        if recalibrate:
            session.invalidate_calibration()

    def _no_person(self, color, frame_number, skeleton=None):
        # A copy, so nothing done to later frames can reach an already delivered one
        return FrameResult(display=color.copy(), state=EngineState.NO_PERSON, skeleton=skeleton,
                           frame_number=frame_number)
