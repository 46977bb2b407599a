from PyQt5.QtCore import QThread, pyqtSignal
import os
import shutil
import tempfile

from pagemark.core.export.pdf_exporter import PDFExporter


class ExportWorker(QThread):
    """Worker thread for exporting an annotated PDF without freezing the UI."""

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message
    page_progress = pyqtSignal(int, int)  # current, total pages

    def __init__(self, source_bytes, output_pdf, annotations, display_scale=1.0):
        super().__init__()
        self.source_bytes = source_bytes
        self.output_pdf = output_pdf
        self.annotations = list(annotations)
        self.display_scale = display_scale
        self.temp_path = None
        self.exporter = PDFExporter()

    def run(self):
        """Export to a temp file beside the target, then move it into place."""
        try:
            self.exporter.progress_signal.connect(self._on_page_progress)

            output_dir = os.path.dirname(os.path.abspath(self.output_pdf))
            temp_fd, self.temp_path = tempfile.mkstemp(suffix='.pdf', dir=output_dir)
            os.close(temp_fd)

            self.progress.emit("Exporting annotations...")
            success = self.exporter.export(
                self.source_bytes,
                self.temp_path,
                self.annotations,
                self.display_scale,
            )

            if success:
                self.progress.emit("Finalizing...")
                shutil.move(self.temp_path, self.output_pdf)
                self.finished.emit(True, "Annotated PDF saved successfully!")
            else:
                self._remove_temp_file()
                self.finished.emit(False, "Failed to export annotations to PDF.")

        except Exception as e:
            self._remove_temp_file()
            self.finished.emit(False, f"Error during export: {str(e)}")

    def _remove_temp_file(self):
        if self.temp_path and os.path.exists(self.temp_path):
            os.remove(self.temp_path)

    def _on_page_progress(self, current, total):
        """Handle page-level progress updates."""
        self.page_progress.emit(current, total)
