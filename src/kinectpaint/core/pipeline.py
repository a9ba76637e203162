import logging
import threading

from kinectpaint.core.compositor import Compositor
from kinectpaint.core.processor import FrameFuser
from kinectpaint.modules.painting import PaintingEngine, PaintSession
from kinectpaint.modules.skeleton import SkeletonSelector

logger = logging.getLogger(__name__)


class PaintPipeline:
    """
    Drives one frame at a time: poll the three streams, fuse, pick a skeleton,
    paint, compose. step() is single-flight; a call that arrives while another
    is still running is dropped rather than queued.
    """

    def __init__(self, sensor, settings):
        self.sensor = sensor
        self.settings = settings

        self.fuser = FrameFuser(settings.color_size, settings.depth_size, settings.depth_sigma)
        self.selector = SkeletonSelector(sensor)
        self.engine = PaintingEngine(settings, sensor.mapper)
        self.compositor = Compositor(sensor.mapper, self.fuser, settings)
        self.session = PaintSession(settings)

        self.show_debug = settings.show_debug
        self.last_result = None
        self.last_output = None
        self.last_debug = None
        self._was_connected = True
        self._lock = threading.Lock()

    @property
    def ready(self):
        return self.sensor.is_connected

    @property
    def status(self):
        if not self.ready:
            return "Kinect Not Ready"
        if self.last_result is None:
            return "Waiting for frames..."
        return f"{self.sensor.name}: {self.last_result.state.value}"

    def step(self):
        if not self._lock.acquire(blocking=False):
            logger.debug("Dropping frame, previous step still in flight")
            return None
        try:
            if not self.sensor.is_connected:
                if self._was_connected:
                    logger.warning("Sensor %s disconnected", self.sensor.name)
                    self._was_connected = False
                # Hold the last picture until the device comes back
                return self.last_output
            if not self._was_connected:
                logger.info("Sensor %s reconnected", self.sensor.name)
                self._was_connected = True

            raw_color = self.sensor.try_get_color_frame()
            raw_depth = self.sensor.try_get_depth_frame()
            skeletons = self.sensor.try_get_skeleton_frame()

            fused = self.fuser.fuse(raw_color, raw_depth)
            skeleton = self.selector.select(skeletons)
            result = self.engine.process(self.session, fused, skeleton)

            output = self.compositor.compose(result, debug=self.show_debug)
            self.last_result = result
            self.last_output = output
            self.last_debug = self.compositor.debug_view(result) if self.show_debug else None
            return output
        finally:
            self._lock.release()

    def erase(self):
        self.session.request_erase()

    def recalibrate(self):
        self.session.request_recalibration()

    def set_debug(self, enabled):
        self.show_debug = bool(enabled)
