# stopmotion_capture.py
# Stop Motion Capture window with onion-skinned live preview
# Requirements: pip install opencv-python PyQt5 numpy Pillow

import logging
import sys

import cv2
from PyQt5 import QtCore, QtGui, QtWidgets

from stopmotion import codec
from stopmotion.capture import list_camera_indices
from stopmotion.config import (
    APP_NAME,
    DEFAULT_FPS,
    FLASH_MS,
    FPS_CHOICES,
    ONION_LAYER_COUNTS,
    PREVIEW_INTERVAL_MS,
    configure_logging,
)
from stopmotion.errors import CodecError, ValidationError
from stopmotion.onion import snap_opacity
from stopmotion.studio import Studio

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.tif *.tiff *.webp)"
SELECTED_BG = QtGui.QColor("#3b82f6")


class FiftySnapSlider(QtWidgets.QSlider):
    """A slider that snaps to 50% when double-clicked or dragged near it."""

    def mouseDoubleClickEvent(self, event):
        super().mouseDoubleClickEvent(event)
        middle = int((self.maximum() - self.minimum()) * 0.5 + self.minimum())
        self.setValue(middle)

    def snapped_value(self):
        return snap_opacity(self.value() / 100.0)


class StopMotionApp(QtWidgets.QWidget):
    def __init__(self, studio=None):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setMinimumSize(1000, 700)

        self.studio = studio or Studio()
        self.live_timer = QtCore.QTimer()
        self.live_timer.timeout.connect(self.grab_frame)
        self.mode_live_preview = True       # True => live view; False => reviewing frames

        self._build_ui()
        self._build_shortcuts()
        self._connect_engine()
        self.refresh_camera_list()
        self._refresh_project_combo()
        self.live_timer.start(PREVIEW_INTERVAL_MS)

    # ---------------- UI ----------------

    def _build_ui(self):
        main_layout = QtWidgets.QHBoxLayout(self)

        # Left preview
        preview_box = QtWidgets.QGroupBox("Preview")
        preview_layout = QtWidgets.QVBoxLayout()
        self.preview_label = QtWidgets.QLabel()
        self.preview_label.setAlignment(QtCore.Qt.AlignCenter)
        self.preview_label.setMinimumSize(640, 480)
        self.preview_label.setStyleSheet("background-color: #222;")
        preview_layout.addWidget(self.preview_label)

        self.flash = QtWidgets.QWidget(self.preview_label)
        self.flash.setStyleSheet("background-color: rgba(255, 255, 255, 204);")
        self.flash.hide()

        # Onion-skin controls
        overlay_row = QtWidgets.QHBoxLayout()
        self.overlay_checkbox = QtWidgets.QCheckBox("Onion skin")
        self.overlay_checkbox.setChecked(self.studio.onion.enabled)
        self.overlay_checkbox.stateChanged.connect(self.toggle_overlay)
        overlay_row.addWidget(self.overlay_checkbox)

        self.depth_combo = QtWidgets.QComboBox()
        self.depth_combo.addItems([f"{n}x" for n in ONION_LAYER_COUNTS])
        self.depth_combo.currentIndexChanged.connect(self.change_depth)
        overlay_row.addWidget(self.depth_combo)
        overlay_row.addStretch()
        overlay_row.addWidget(QtWidgets.QLabel("Opacity"))

        self.alpha_slider = FiftySnapSlider(QtCore.Qt.Horizontal)
        self.alpha_slider.setRange(0, 100)
        self.alpha_slider.setValue(int(self.studio.onion.opacity * 100))
        self.alpha_slider.setFixedWidth(150)
        self.alpha_slider.setTickPosition(QtWidgets.QSlider.TicksBelow)
        self.alpha_slider.setTickInterval(50)
        overlay_row.addWidget(self.alpha_slider)

        self.alpha_value_label = QtWidgets.QLabel(f"{self.alpha_slider.value()}%")
        self.alpha_value_label.setAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
        self.alpha_value_label.setMinimumWidth(40)
        overlay_row.addWidget(self.alpha_value_label)
        self.alpha_slider.valueChanged.connect(self.on_alpha_changed)

        preview_layout.addLayout(overlay_row)
        preview_box.setLayout(preview_layout)
        main_layout.addWidget(preview_box, 2)

        right_panel = QtWidgets.QVBoxLayout()

        # Camera selection
        cam_box = QtWidgets.QGroupBox("Camera Device")
        cam_layout = QtWidgets.QHBoxLayout()
        self.cam_combo = QtWidgets.QComboBox()
        self.cam_combo.currentIndexChanged.connect(self.change_camera_from_combo)
        cam_layout.addWidget(self.cam_combo)
        self.refresh_cam_btn = QtWidgets.QPushButton("Refresh")
        self.refresh_cam_btn.clicked.connect(self.refresh_camera_list)
        cam_layout.addWidget(self.refresh_cam_btn)
        cam_box.setLayout(cam_layout)
        right_panel.addWidget(cam_box)

        # Projects
        proj_box = QtWidgets.QGroupBox("Project")
        proj_layout = QtWidgets.QVBoxLayout()
        self.project_combo = QtWidgets.QComboBox()
        self.project_combo.activated.connect(self.on_project_selected)
        proj_layout.addWidget(self.project_combo)
        btns = QtWidgets.QHBoxLayout()
        for text, slot in (("New...", self.create_new_project),
                           ("Rename...", self.rename_project),
                           ("Delete", self.delete_project),
                           ("Close", self.close_project)):
            b = QtWidgets.QPushButton(text)
            b.clicked.connect(slot)
            btns.addWidget(b)
        proj_layout.addLayout(btns)
        self.project_info_label = QtWidgets.QLabel("No project open")
        self.project_info_label.setWordWrap(True)
        proj_layout.addWidget(self.project_info_label)
        proj_box.setLayout(proj_layout)
        right_panel.addWidget(proj_box)

        # Controls
        controls_box = QtWidgets.QGroupBox("Capture & Playback")
        c_layout = QtWidgets.QGridLayout()
        self.capture_btn = QtWidgets.QPushButton("Capture (Space)")
        self.capture_btn.clicked.connect(self.studio.pipeline.capture_frame)
        self.import_btn = QtWidgets.QPushButton("Import...")
        self.import_btn.clicked.connect(self.import_images)
        self.play_btn = QtWidgets.QPushButton("Play (P)")
        self.play_btn.clicked.connect(self.studio.scheduler.toggle)
        self.prev_btn = QtWidgets.QPushButton("Prev")
        self.prev_btn.clicked.connect(lambda: self.step(-1))
        self.next_btn = QtWidgets.QPushButton("Next")
        self.next_btn.clicked.connect(lambda: self.step(1))
        self.live_btn = QtWidgets.QPushButton("Live")
        self.live_btn.clicked.connect(self.enter_live_preview)
        self.delete_btn = QtWidgets.QPushButton("Delete")
        self.delete_btn.clicked.connect(self.delete_selected)
        self.duplicate_btn = QtWidgets.QPushButton("Duplicate")
        self.duplicate_btn.clicked.connect(self.studio.selection.duplicate_selected)
        for i, b in enumerate((self.capture_btn, self.import_btn, self.play_btn, self.live_btn,
                               self.prev_btn, self.next_btn, self.delete_btn, self.duplicate_btn)):
            b.setFocusPolicy(QtCore.Qt.NoFocus)
            c_layout.addWidget(b, i // 4, i % 4)

        fps_row = QtWidgets.QHBoxLayout()
        fps_row.addWidget(QtWidgets.QLabel("FPS:"))
        self.fps_combo = QtWidgets.QComboBox()
        self.fps_combo.addItems([str(f) for f in FPS_CHOICES])
        self.fps_combo.setCurrentText(str(DEFAULT_FPS))
        self.fps_combo.currentTextChanged.connect(self.change_play_fps)
        fps_row.addWidget(self.fps_combo)
        fps_row.addStretch()
        c_layout.addLayout(fps_row, 2, 0, 1, 4)
        controls_box.setLayout(c_layout)
        right_panel.addWidget(controls_box)

        # Frame list
        frames_box = QtWidgets.QGroupBox("Project Frames")
        f_layout = QtWidgets.QVBoxLayout()
        self.frames_list = QtWidgets.QListWidget()
        self.frames_list.setFocusPolicy(QtCore.Qt.NoFocus)
        self.frames_list.setIconSize(QtCore.QSize(64, 36))
        self.frames_list.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.frames_list.setDragDropMode(QtWidgets.QAbstractItemView.InternalMove)
        self.frames_list.model().rowsMoved.connect(self.on_rows_moved)
        self.frames_list.itemPressed.connect(self.on_frame_pressed)
        f_layout.addWidget(self.frames_list)
        frames_box.setLayout(f_layout)
        right_panel.addWidget(frames_box, 1)

        self.status_label = QtWidgets.QLabel("")
        self.status_label.setWordWrap(True)
        right_panel.addWidget(self.status_label)

        main_layout.addLayout(right_panel, 1)

    def _build_shortcuts(self):
        for key, char in ((QtCore.Qt.Key_Space, " "), (QtCore.Qt.Key_P, "p"), (QtCore.Qt.Key_O, "o")):
            sc = QtWidgets.QShortcut(QtGui.QKeySequence(key), self)
            sc.activated.connect(lambda c=char: self.on_key(c))

    def _connect_engine(self):
        studio = self.studio
        studio.session.store.frames_changed.connect(self._refresh_frames_list)
        studio.pipeline.acknowledged.connect(self.show_flash)
        studio.pipeline.status_changed.connect(self.status_label.setText)
        studio.scheduler.cursor_changed.connect(self.on_cursor_changed)
        studio.scheduler.playing_changed.connect(self.on_playing_changed)
        studio.manager.projects_changed.connect(self._refresh_project_combo)

    def on_key(self, char):
        if self.studio.handle_key(char):
            if char == "o":
                self.depth_combo.setCurrentIndex(self.studio.onion.depth)

    # ---------------- Camera ----------------

    def refresh_camera_list(self):
        self.cam_combo.blockSignals(True)
        self.cam_combo.clear()
        indices = list_camera_indices(8)
        if not indices:
            self.cam_combo.addItem("No camera devices found")
            self.studio.pipeline.release()
            self.status_label.setText("No camera found.")
            self.cam_combo.blockSignals(False)
            return
        for i in indices:
            self.cam_combo.addItem(f"Device {i}", i)
        self.cam_combo.blockSignals(False)
        if not self.studio.pipeline.source.is_open:
            self.set_camera(indices[0])

    def change_camera_from_combo(self, idx):
        data = self.cam_combo.itemData(idx)
        if data is not None:
            self.set_camera(int(data))

    def set_camera(self, index):
        if self.studio.pipeline.source.device_index == index:
            return
        if self.studio.pipeline.open_camera(index):
            size = self.studio.pipeline.source.resolution()
            self.status_label.setText(f"Opened device {index}" + (f" ({size[0]}x{size[1]})" if size else ""))

    # ---------------- Onion skin ----------------

    def toggle_overlay(self, state):
        self.studio.onion.enabled = bool(state)

    def change_depth(self, idx):
        self.studio.onion.set_depth(idx)

    def on_alpha_changed(self, val):
        snapped = self.studio.onion.set_opacity(self.alpha_slider.snapped_value())
        if int(round(snapped * 100)) != val:
            self.alpha_slider.blockSignals(True)
            self.alpha_slider.setValue(int(round(snapped * 100)))
            self.alpha_slider.blockSignals(False)
        self.alpha_value_label.setText(f"{int(round(snapped * 100))}%")

    # ---------------- Playback ----------------

    def change_play_fps(self, text):
        try:
            self.studio.manager.set_fps(int(text))
        except ValueError:
            return
        self._update_project_info()

    def on_playing_changed(self, playing):
        self.play_btn.setText("Stop (P)" if playing else "Play (P)")
        if playing:
            self.mode_live_preview = False
            self.show_frame(self.studio.session.cursor)

    def on_cursor_changed(self, index):
        if not self.mode_live_preview:
            self.show_frame(index)
        item = self.frames_list.item(index)
        if item is not None:
            self.frames_list.scrollToItem(item, QtWidgets.QAbstractItemView.PositionAtCenter)

    def step(self, delta):
        if len(self.studio.frames) == 0:
            return
        self.mode_live_preview = False
        self.studio.scheduler.step(delta)
        self.show_frame(self.studio.session.cursor)

    def enter_live_preview(self):
        self.studio.scheduler.stop()
        self.mode_live_preview = True

    # ---------------- Frame list & selection ----------------

    def _refresh_frames_list(self):
        self.frames_list.blockSignals(True)
        self.frames_list.clear()
        for i, frame in enumerate(self.studio.frames):
            label = f"{i + 1:04d}  {frame.captured_at}" + ("  (imported)" if frame.imported else "")
            item = QtWidgets.QListWidgetItem(label)
            try:
                item.setIcon(QtGui.QIcon(self._to_pixmap(codec.decode(frame.thumbnail))))
            except CodecError:
                logger.warning("Thumbnail for frame %s is unreadable", frame.id)
            if i in self.studio.session.selection:
                item.setBackground(SELECTED_BG)
            self.frames_list.addItem(item)
        self.frames_list.blockSignals(False)
        self.studio.onion.forget({f.id for f in self.studio.frames})
        self._update_project_info()

    def on_frame_pressed(self, item):
        row = self.frames_list.row(item)
        mods = QtWidgets.QApplication.keyboardModifiers()
        additive = bool(mods & (QtCore.Qt.ControlModifier | QtCore.Qt.MetaModifier))
        self.studio.selection.toggle(row, additive)
        for i in range(self.frames_list.count()):
            selected = i in self.studio.session.selection
            self.frames_list.item(i).setBackground(SELECTED_BG if selected else QtGui.QBrush())
        self.mode_live_preview = False
        self.studio.scheduler.stop()
        self.studio.scheduler.seek(row)
        self.show_frame(row)

    def on_rows_moved(self, parent, start, end, destination, row):
        # Qt reports the drop row before removal
        to_index = row - 1 if row > start else row
        # rebuild the list after Qt finishes its own drop handling
        QtCore.QTimer.singleShot(0, lambda: self._apply_reorder(start, to_index))

    def _apply_reorder(self, from_index, to_index):
        if not self.studio.selection.drag_reorder(from_index, to_index):
            self._refresh_frames_list()

    def delete_selected(self):
        selection = self.studio.selection
        if not selection.selected and len(self.studio.frames) and not self.mode_live_preview:
            self.studio.frames.delete_at(self.studio.session.cursor)
            return
        removed = selection.delete_selected()
        if removed:
            self.status_label.setText(f"Deleted {removed} frame(s)")

    def import_images(self):
        if not self.studio.session.is_open:
            self.status_label.setText("No project open")
            return
        paths, _ = QtWidgets.QFileDialog.getOpenFileNames(self, "Import images", "", IMAGE_FILTER)
        if not paths:
            return
        added = self.studio.pipeline.import_files(paths)
        self.status_label.setText(f"Imported {added} of {len(paths)} image(s)")

    # ---------------- Live preview / playback drawing ----------------

    def grab_frame(self):
        if not self.mode_live_preview:
            return
        bitmap = self.studio.pipeline.source.current_bitmap()
        if bitmap is None:
            return
        if self.studio.session.is_open:
            bitmap = self.studio.onion.composite(bitmap, self.studio.frames)
        self.show_preview_image(bitmap)

    def show_frame(self, index):
        if not 0 <= index < len(self.studio.frames):
            return
        try:
            self.show_preview_image(codec.decode(self.studio.frames[index].image))
        except CodecError:
            self.status_label.setText("Failed loading frame")

    def _to_pixmap(self, frame):
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        h, w, ch = rgb.shape
        qimg = QtGui.QImage(rgb.data, w, h, ch * w, QtGui.QImage.Format_RGB888)
        return QtGui.QPixmap.fromImage(qimg.copy())

    def show_preview_image(self, frame):
        pix = self._to_pixmap(frame)
        self.preview_label.setPixmap(
            pix.scaled(self.preview_label.size(), QtCore.Qt.KeepAspectRatio, QtCore.Qt.SmoothTransformation)
        )

    def show_flash(self):
        self.flash.setGeometry(self.preview_label.rect())
        self.flash.show()
        self.flash.raise_()
        QtCore.QTimer.singleShot(FLASH_MS, self.flash.hide)

    # ---------------- Project management ----------------

    def _refresh_project_combo(self):
        self.project_combo.clear()
        for p in self.studio.manager.projects:
            self.project_combo.addItem(p.name, p.id)
        active = self.studio.manager.active
        if active is not None:
            self.project_combo.setCurrentIndex(self.project_combo.findData(active.id))
        else:
            self.project_combo.setCurrentIndex(-1)

    def _update_project_info(self):
        project = self.studio.manager.active
        if project is None:
            self.project_info_label.setText("No project open")
            return
        self.project_info_label.setText(
            f"{project.name}: {len(project.frames)} frames, {project.duration:.1f}s at {project.fps} fps"
        )

    def on_project_selected(self, idx):
        project_id = self.project_combo.itemData(idx)
        if project_id is None:
            return
        project = self.studio.manager.open(project_id)
        self.fps_combo.blockSignals(True)
        if self.fps_combo.findText(str(project.fps)) < 0:
            self.fps_combo.addItem(str(project.fps))
        self.fps_combo.setCurrentText(str(project.fps))
        self.fps_combo.blockSignals(False)
        self.mode_live_preview = True
        self._refresh_frames_list()
        # closing the previous project releases the camera
        if not self.studio.pipeline.source.is_open:
            self.refresh_camera_list()

    def create_new_project(self):
        text, ok = QtWidgets.QInputDialog.getText(self, "New Project", "Project name:")
        if not ok:
            return
        try:
            project = self.studio.manager.create(text)
        except ValidationError as e:
            self.status_label.setText(str(e))
            return
        self.on_project_selected(self.project_combo.findData(project.id))

    def rename_project(self):
        project = self.studio.manager.active
        if project is None:
            return
        new_name, ok = QtWidgets.QInputDialog.getText(
            self, "Rename Project", "New name:", text=project.name
        )
        if not ok:
            return
        try:
            self.studio.manager.rename(project.id, new_name)
        except ValidationError as e:
            self.status_label.setText(str(e))
            return
        self._update_project_info()

    def delete_project(self):
        project = self.studio.manager.active
        if project is None:
            return
        reply = QtWidgets.QMessageBox.question(
            self, "Delete Project",
            f"Delete {project.name}?",
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No
        )
        if reply != QtWidgets.QMessageBox.Yes:
            return
        self.studio.manager.delete(project.id)
        self._refresh_frames_list()

    def close_project(self):
        self.studio.manager.close()
        self._refresh_project_combo()
        self._refresh_frames_list()

    # ---------------- Qt lifecycle ----------------

    def closeEvent(self, e):
        self.live_timer.stop()
        self.studio.shutdown()
        e.accept()


def main():
    configure_logging()
    app = QtWidgets.QApplication(sys.argv)
    win = StopMotionApp()
    win.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
