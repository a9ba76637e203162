import cv2


class ColorMapManager:
    """Named OpenCV colormap used to colorize the depth debug view."""

    def __init__(self, default="Bone"):
        # Every COLORMAP_ constant this cv2 build ships, keyed by its short name
        self.available_maps = {
            name.replace("COLORMAP_", "").capitalize(): getattr(cv2, name)
            for name in dir(cv2) if name.startswith("COLORMAP_")
        }
        self.current_map_id = self.available_maps.get(default, cv2.COLORMAP_BONE)

    def apply(self, intensity_8bit):
        """Colorizes an 8-bit single-channel image into BGR."""
        return cv2.applyColorMap(intensity_8bit, self.current_map_id)
