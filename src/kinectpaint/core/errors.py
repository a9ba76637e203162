class KinectPaintError(Exception):
    pass


class CalibrationError(KinectPaintError):
    """The depth->color homography could not be solved (degenerate sample set)."""


class SensorError(KinectPaintError):
    """The sensor device could not be opened."""
