import logging

from kinectpaint.core.errors import SensorError
from kinectpaint.core.mapper import PinholeMapper

logger = logging.getLogger(__name__)


class Sensor:
    """
    Wrapping API-class

    Gives the pipeline one surface over whichever device is plugged in. Every
    try_get_* call returns immediately with a frame or None (an empty list for
    skeletons); a dropped frame is never an error.
    """

    def __init__(self, name: str = 'dummy', depth_size=(320, 240), color_size=(640, 480),
                 mapper=None, device=None, **kwargs):
        self.name = name
        if device is not None:
            self.Sensor = device
        elif name == 'kinect_v1':
            try:
                from .kinectv1 import KinectV1
            except ImportError:
                raise ImportError('Kinect v1 dependencies are not installed')
            self.Sensor = KinectV1(**kwargs)
        elif name == 'dummy':
            from .dummy import DummySensor
            self.Sensor = DummySensor(depth_size=depth_size, color_size=color_size, **kwargs)
        else:
            raise SensorError('Unknown sensor %r' % name)

        # The fuser brings depth onto depth_size, so the mapper works on that grid
        self.mapper = mapper or PinholeMapper(*depth_size)
        logger.info("Sensor %s ready", self.Sensor.name)

    @property
    def is_connected(self):
        return bool(getattr(self.Sensor, 'connected', True))

    def try_get_color_frame(self):
        return self.Sensor.try_get_color_frame()

    def try_get_depth_frame(self):
        return self.Sensor.try_get_depth_frame()

    def try_get_skeleton_frame(self):
        return self.Sensor.try_get_skeleton_frame() or []

    def choose_tracked_skeleton(self, tracking_id):
        self.Sensor.choose_tracked_skeleton(tracking_id)

    def map_depth_point_to_color_point(self, depth_point, depth_mm):
        return self.mapper.map_depth_point_to_color_point(depth_point, depth_mm)

    def map_skeleton_point_to_depth_point(self, joint_position):
        return self.mapper.map_skeleton_point_to_depth_point(joint_position)

    def close(self):
        close = getattr(self.Sensor, 'close', None)
        if close is not None:
            close()
