import numpy as np
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (QHBoxLayout, QLabel, QMainWindow, QPushButton, QVBoxLayout,
                               QWidget)

from kinectpaint.core.kinect import PaintWorker


def to_qimage(rgb):
    h, w, ch = rgb.shape
    # copy() so the QImage owns its bytes once the array goes away
    return QImage(rgb.data, w, h, ch * w, QImage.Format_RGB888).copy()


class PaintMainWindow(QMainWindow):
    def __init__(self, pipeline):
        super().__init__()
        self.setWindowTitle("KinectPaint")
        self.resize(1200, 800)
        self.setStyleSheet("""
        QMainWindow { background-color: #000000; }
        QLabel { color: #eee; }
        QPushButton {
            background-color: #2c2c2c;
            border: 1px solid #444;
            color: #eee;
            padding: 8px;
        }
        QPushButton:checked {
            background-color: #0078d7; /* Active Blue */
            border-color: #00a4ef;
        }
    """)
        self.pipeline = pipeline

        # --- UI SETUP ---
        main_layout = QHBoxLayout()
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        sidebar = QWidget()
        sidebar.setFixedWidth(220)
        side_layout = QVBoxLayout(sidebar)
        side_layout.setContentsMargins(20, 30, 20, 30)

        self.status_label = QLabel("Initializing sensor...")
        self.status_label.setWordWrap(True)

        self.erase_btn = QPushButton("Erase Canvas")
        self.erase_btn.clicked.connect(self.pipeline.erase)

        self.calibrate_btn = QPushButton("Recalibrate")
        self.calibrate_btn.clicked.connect(self.pipeline.recalibrate)

        self.debug_btn = QPushButton("Debug View: OFF")
        self.debug_btn.setCheckable(True)
        self.debug_btn.setChecked(self.pipeline.show_debug)
        self.debug_btn.toggled.connect(self.toggle_debug)

        self.debug_label = QLabel()
        self.debug_label.setAlignment(Qt.AlignCenter)
        self.debug_label.setVisible(self.pipeline.show_debug)

        side_layout.addWidget(self.status_label)
        side_layout.addSpacing(20)
        side_layout.addWidget(self.erase_btn)
        side_layout.addWidget(self.calibrate_btn)
        side_layout.addWidget(self.debug_btn)
        side_layout.addWidget(self.debug_label)
        side_layout.addStretch()

        self.display_label = QLabel("Waiting for Kinect...")
        self.display_label.setAlignment(Qt.AlignCenter)
        self.display_label.setStyleSheet("background-color: #000;")

        main_layout.addWidget(sidebar)
        main_layout.addWidget(self.display_label, 1)

        container = QWidget()
        container.setLayout(main_layout)
        self.setCentralWidget(container)

        self.worker = PaintWorker(pipeline)
        self.worker.frame_ready.connect(self.update_frame)
        self.worker.debug_ready.connect(self.update_debug)
        self.worker.status_changed.connect(self.status_label.setText)
        self.worker.start()

    def toggle_debug(self, enabled):
        self.pipeline.set_debug(enabled)
        self.debug_btn.setText(f"Debug View: {'ON' if enabled else 'OFF'}")
        self.debug_label.setVisible(enabled)

    @Slot(np.ndarray)
    def update_frame(self, rgb):
        self.display_label.setPixmap(QPixmap.fromImage(to_qimage(rgb)).scaled(
            self.display_label.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation))

    @Slot(np.ndarray)
    def update_debug(self, rgb):
        self.debug_label.setPixmap(QPixmap.fromImage(to_qimage(rgb)).scaled(
            180, 400, Qt.KeepAspectRatio, Qt.SmoothTransformation))

    def closeEvent(self, event):
        self.worker.stop()
        self.pipeline.sensor.close()
        super().closeEvent(event)
