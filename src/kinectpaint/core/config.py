import json
import logging
import os
from dataclasses import asdict, dataclass, fields

logger = logging.getLogger(__name__)

CONFIG_FILE = "assets/config/painting.json"


@dataclass
class PaintSettings:
    # Authoritative resolutions (w, h). Every per-session buffer is sized from these.
    color_size: tuple = (640, 480)
    depth_size: tuple = (320, 240)
    max_depth_mm: int = 4000

    # Calibration
    nominal_depth_mm: float = 2000.0
    calibration_margin: int = 20

    # Gesture tuning. These moved around a lot between sessions, keep them here.
    brush_offset_mm: float = 300.0
    picker_offset_mm: float = 150.0
    min_hole_area: float = 75.0
    erase_distance_m: float = 0.3

    stamp_weight: float = 0.05
    saturation_boost: float = 2.0
    value_boost: float = 1.5

    # BGR
    default_brush_color: tuple = (0, 0, 255)
    fallback_color: tuple = (64, 0, 0)

    allow_stale_frames: bool = False
    show_debug: bool = False
    depth_sigma: float = 1.0

    @classmethod
    def from_dict(cls, d):
        known = {f.name for f in fields(cls)}
        values = {}
        for k, v in d.items():
            if k not in known:
                logger.warning("Ignoring unknown config key %r", k)
                continue
            # JSON has no tuples
            values[k] = tuple(v) if isinstance(v, list) else v
        return cls(**values)

    def to_dict(self):
        return {k: list(v) if isinstance(v, tuple) else v for k, v in asdict(self).items()}


class ConfigManager:
    def __init__(self, path=CONFIG_FILE):
        self.path = path
        self.default_config = PaintSettings().to_dict()
        self.data = self.load()

    def load(self):
        if not os.path.exists(self.path):
            return dict(self.default_config)
        try:
            with open(self.path, 'r') as f:
                d = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read %s (%s), using defaults", self.path, e)
            return dict(self.default_config)

        merged = dict(self.default_config)
        merged.update(d)
        return merged

    def settings(self) -> PaintSettings:
        return PaintSettings.from_dict(self.data)

    def save(self, settings: PaintSettings):
        self.data = settings.to_dict()
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self.data, f, indent=4)
        logger.info("Configuration saved to %s", self.path)
