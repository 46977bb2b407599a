from PyQt5.QtCore import pyqtSignal
from PyQt5.QtWidgets import (
    QButtonGroup, QCheckBox, QComboBox, QFrame, QHBoxLayout, QLabel,
    QRadioButton, QSpinBox, QToolButton,
)

from pagemark.core.annotations import PEN_COLORS, StampKind
from pagemark.core.annotations.palette import color_rgb
from pagemark.core.session import AnnotationSession, ToolMode

TOOL_LABELS = [
    (ToolMode.POINT, "● Point"),
    (ToolMode.TEXT, "T Text"),
    (ToolMode.HIGHLIGHT, "Highlight"),
    (ToolMode.WHITEOUT, "Whiteout"),
    (ToolMode.STAMP, "Stamp"),
    (ToolMode.IMAGE, "Image"),
]

POINT_SIZES = [("S", 8), ("M", 12), ("L", 16)]

FONTS = ["Noto Sans JP", "Noto Serif JP", "Arial", "Times New Roman", "Courier New"]


class ToolToolbar(QFrame):
    """Tool picker with the style controls for the active tool."""

    tool_mode_changed = pyqtSignal(object)  # ToolMode
    color_changed = pyqtSignal(str)
    size_changed = pyqtSignal(int)
    font_changed = pyqtSignal(str)
    stamp_changed = pyqtSignal(object)  # StampKind
    graph_mode_toggled = pyqtSignal(bool)
    image_requested = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("ToolToolbar")
        self._syncing = False
        self.setup_ui()

    def setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(6)

        # Tool buttons
        self.tool_group = QButtonGroup(self)
        self.tool_group.setExclusive(True)
        self.tool_buttons = {}
        for mode, label in TOOL_LABELS:
            button = QToolButton(self)
            button.setText(label)
            button.setCheckable(True)
            button.clicked.connect(lambda _, m=mode: self._on_tool_clicked(m))
            self.tool_group.addButton(button)
            self.tool_buttons[mode] = button
            layout.addWidget(button)

        layout.addSpacing(12)

        # Pen colors
        self.color_buttons = {}
        for name in PEN_COLORS:
            button = QToolButton(self)
            button.setCheckable(True)
            button.setToolTip(name.capitalize())
            button.setFixedSize(22, 22)
            r, g, b = color_rgb(name)
            button.setStyleSheet(
                f"QToolButton {{ background-color: rgb({r}, {g}, {b}); border: 2px solid #cccccc; "
                f"border-radius: 11px; }} QToolButton:checked {{ border: 2px solid #111111; }}"
            )
            button.clicked.connect(lambda _, c=name: self._emit_unless_syncing(self.color_changed, c))
            layout.addWidget(button)
            self.color_buttons[name] = button

        # Point size (S/M/L)
        self.point_size_label = QLabel("Size:", self)
        layout.addWidget(self.point_size_label)
        self.point_size_group = QButtonGroup(self)
        self.point_size_buttons = {}
        for label, size in POINT_SIZES:
            radio = QRadioButton(label, self)
            radio.toggled.connect(
                lambda checked, s=size: checked and self._emit_unless_syncing(self.size_changed, s)
            )
            self.point_size_group.addButton(radio)
            self.point_size_buttons[size] = radio
            layout.addWidget(radio)

        # Text size and font
        self.text_size_spin = QSpinBox(self)
        self.text_size_spin.setRange(6, 96)
        self.text_size_spin.setSuffix(" px")
        self.text_size_spin.valueChanged.connect(
            lambda value: self._emit_unless_syncing(self.size_changed, value)
        )
        layout.addWidget(self.text_size_spin)

        self.font_combo = QComboBox(self)
        self.font_combo.addItems(FONTS)
        self.font_combo.currentTextChanged.connect(
            lambda name: self._emit_unless_syncing(self.font_changed, name)
        )
        layout.addWidget(self.font_combo)

        # Stamp kind
        self.stamp_combo = QComboBox(self)
        for kind in StampKind:
            self.stamp_combo.addItem(kind.label, kind)
        self.stamp_combo.currentIndexChanged.connect(self._on_stamp_changed)
        layout.addWidget(self.stamp_combo)

        # Image picker
        self.image_button = QToolButton(self)
        self.image_button.setText("Choose Image…")
        self.image_button.clicked.connect(self.image_requested)
        layout.addWidget(self.image_button)

        # Graph mode
        self.graph_checkbox = QCheckBox("Graph", self)
        self.graph_checkbox.setToolTip("Connect selected points of the same color")
        self.graph_checkbox.toggled.connect(
            lambda checked: self._emit_unless_syncing(self.graph_mode_toggled, checked)
        )
        layout.addWidget(self.graph_checkbox)

        layout.addStretch()

    def _on_tool_clicked(self, mode: ToolMode):
        self._emit_unless_syncing(self.tool_mode_changed, mode)

    def _on_stamp_changed(self, index: int):
        kind = self.stamp_combo.itemData(index)
        if kind is not None:
            self._emit_unless_syncing(self.stamp_changed, kind)

    def _emit_unless_syncing(self, signal, value):
        if not self._syncing:
            signal.emit(value)

    def sync(self, session: AnnotationSession):
        """Reflect the session's tool state without emitting signals."""
        self._syncing = True
        try:
            mode = session.tool_mode
            settings = session.settings
            self.tool_buttons[mode].setChecked(True)

            for name, button in self.color_buttons.items():
                button.setChecked(name == settings.color)

            is_point = mode is ToolMode.POINT
            is_text = mode is ToolMode.TEXT
            pen_tool = is_point or is_text
            for button in self.color_buttons.values():
                button.setVisible(pen_tool)
            self.point_size_label.setVisible(pen_tool)
            for size, radio in self.point_size_buttons.items():
                radio.setVisible(is_point)
                radio.setChecked(size == settings.size_px)
            self.text_size_spin.setVisible(is_text)
            self.text_size_spin.setValue(settings.size_px)
            self.font_combo.setVisible(is_text)
            self.font_combo.setCurrentText(settings.font_name)

            self.stamp_combo.setVisible(mode is ToolMode.STAMP)
            self.stamp_combo.setCurrentIndex(self.stamp_combo.findData(settings.stamp_kind))
            self.image_button.setVisible(mode is ToolMode.IMAGE)

            self.graph_checkbox.setEnabled(is_point)
            self.graph_checkbox.setChecked(session.graph_mode)
        finally:
            self._syncing = False
