"""
Keyboard routing for the main window.
"""
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QKeySequence

# Qt keys the annotation layer understands, by the names it expects
_KEY_NAMES = {
    Qt.Key_Delete: "Delete",
    Qt.Key_Backspace: "Backspace",
    Qt.Key_Escape: "Escape",
    Qt.Key_Z: "z",
    Qt.Key_Y: "y",
}


def key_name(key: int) -> str:
    """Name passed to the state machine for a Qt key code, or ''."""
    return _KEY_NAMES.get(key, "")


class UserInputHandler:
    """
    Handles keyboard input for the main window.
    """
    def __init__(self, main_window):
        """
        Initializes the handler with a reference to the main window.

        Args:
            main_window (MainWindow): A reference to the main application window.
        """
        self.main_window = main_window

    def handle_key_press(self, event):
        """
        Handles key press events for the main window.

        Window shortcuts are checked first; everything else goes to the
        annotation controller.
        """
        window = self.main_window
        if event.matches(QKeySequence.Open):
            window.open_file_dialog()
            event.accept()
            return
        if event.key() in (Qt.Key_PageDown, Qt.Key_Right) and not window.is_editing_text():
            window.document_controller.change_page(1)
            event.accept()
            return
        if event.key() in (Qt.Key_PageUp, Qt.Key_Left) and not window.is_editing_text():
            window.document_controller.change_page(-1)
            event.accept()
            return

        name = key_name(event.key())
        modifiers = event.modifiers()
        ctrl = bool(modifiers & (Qt.ControlModifier | Qt.MetaModifier))
        shift = bool(modifiers & Qt.ShiftModifier)
        if name and window.annotation_controller.key_press(name, ctrl, shift):
            event.accept()
        else:
            event.ignore()
