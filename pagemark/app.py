"""
Application entry point.
"""
import logging
import os
import sys

from PyQt5.QtWidgets import QApplication

from pagemark.ui.main_window import MainWindow
from pagemark.utils import load_config

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level_name=None):
    """Configure root logging from PAGEMARK_LOG_LEVEL (default INFO)."""
    level_name = (level_name or os.environ.get("PAGEMARK_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level


def main(argv=None):
    """
    Run the annotator. An optional first argument names a PDF to open.
    """
    argv = list(sys.argv if argv is None else argv)
    configure_logging()
    config = load_config()

    app = QApplication(argv)

    file_path = argv[1] if len(argv) > 1 else None
    window = MainWindow(config, file_path)
    window.showMaximized()
    log.debug("Main window shown")
    return app.exec_()
