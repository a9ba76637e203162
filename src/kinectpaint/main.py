import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from kinectpaint.core.config import CONFIG_FILE, ConfigManager
from kinectpaint.core.errors import SensorError
from kinectpaint.core.pipeline import PaintPipeline
from kinectpaint.sensor.sensor_api import Sensor
from kinectpaint.ui.main_window import PaintMainWindow

logger = logging.getLogger("kinectpaint")


def open_sensor(name, settings):
    if name == 'kinect_v1':
        try:
            return Sensor('kinect_v1', depth_size=settings.depth_size, color_size=settings.color_size,
                          max_depth=settings.max_depth_mm)
        except (ImportError, SensorError) as e:
            logger.error("Kinect unavailable (%s), falling back to the synthetic scene", e)
    return Sensor('dummy', depth_size=settings.depth_size, color_size=settings.color_size,
                  synthetic=True, max_depth=settings.max_depth_mm)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Paint with your body in front of a Kinect")
    parser.add_argument("--sensor", choices=["kinect_v1", "dummy"], default="kinect_v1")
    parser.add_argument("--config", default=CONFIG_FILE)
    parser.add_argument("--debug", action="store_true", help="show depth and mask views")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    settings = ConfigManager(args.config).settings()
    if args.debug:
        settings.show_debug = True

    # 1. Initialize the Qt Application
    app = QApplication(sys.argv[:1])
    app.setStyle('Fusion')

    # 2. Sensor + pipeline; the window starts the worker thread
    pipeline = PaintPipeline(open_sensor(args.sensor, settings), settings)
    window = PaintMainWindow(pipeline)
    window.show()

    # 3. Execute the Application loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
