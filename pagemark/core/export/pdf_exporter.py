import logging
from collections import defaultdict
from typing import Dict, Iterable, List

import fitz  # PyMuPDF
from PyQt5.QtCore import QObject, pyqtSignal

from pagemark.core.annotations import Annotation, AnnotationKind
from pagemark.core.annotations.palette import HIGHLIGHT_OPACITY, STAMP_RGB, color_rgb

log = logging.getLogger(__name__)

STAMP_SIZE_PT = (48, 21)


def _unit(rgb):
    """PyMuPDF uses the 0-1 range."""
    return [c / 255.0 for c in rgb]


class PDFExporter(QObject):
    """Burns annotations into a copy of the document."""

    # Signal for progress updates
    progress_signal = pyqtSignal(int, int)  # current, total

    def __init__(self):
        super().__init__()

    def export(self, source_bytes: bytes, output_path: str,
               annotations: Iterable[Annotation], display_scale: float = 1.0) -> bool:
        """
        Export annotations to a PDF file with progress updates.

        Args:
            source_bytes: The original PDF
            output_path: Where the annotated PDF should be saved
            annotations: Annotations to draw
            display_scale: Scale the page was displayed at; pixel sizes
                (point diameter, font size) are divided by it

        Returns:
            True if successful, False otherwise
        """
        try:
            doc = fitz.open(stream=source_bytes, filetype="pdf")
        except Exception as e:
            log.error("Failed to open PDF for export: %s", e)
            return False

        try:
            by_page: Dict[int, List[Annotation]] = defaultdict(list)
            for ann in annotations:
                by_page[ann.page_number].append(ann)

            total_pages = len(by_page)
            for current, (page_number, page_annotations) in enumerate(sorted(by_page.items())):
                self.progress_signal.emit(current, total_pages)
                if not 1 <= page_number <= doc.page_count:
                    log.warning("Skipping annotations on missing page %d", page_number)
                    continue

                page = doc[page_number - 1]
                for ann in page_annotations:
                    self._add_annotation_to_page(page, ann, display_scale)

            self.progress_signal.emit(total_pages, total_pages)
            doc.save(output_path, garbage=4, deflate=True)
            log.info("Exported annotated PDF to %s", output_path)
            return True
        except Exception as e:
            log.error("Failed to export annotations to PDF: %s", e)
            return False
        finally:
            doc.close()

    def _add_annotation_to_page(self, page: fitz.Page, ann: Annotation, display_scale: float):
        """Draw a single annotation onto a PDF page."""
        width, height = page.rect.width, page.rect.height
        x, y = ann.x_frac * width, ann.y_frac * height
        scale = display_scale if display_scale > 0 else 1.0
        kind = ann.kind

        if kind is AnnotationKind.POINT:
            color = _unit(color_rgb(ann.color))
            shape = page.new_shape()
            shape.draw_circle(fitz.Point(x, y), ann.size_px / scale / 2)
            shape.finish(color=color, fill=color, width=0)
            shape.commit()

        elif kind is AnnotationKind.TEXT:
            fontsize = ann.size_px / scale
            fontname = "helv" if ann.text.isascii() else "japan"
            page.insert_text(
                fitz.Point(x, y + fontsize),
                ann.text,
                fontsize=fontsize,
                fontname=fontname,
                color=_unit(color_rgb(ann.color)),
            )

        elif kind in (AnnotationKind.HIGHLIGHT, AnnotationKind.WHITEOUT):
            rect = fitz.Rect(x, y, x + ann.w_frac * width, y + ann.h_frac * height)
            color = _unit(color_rgb(ann.color))
            shape = page.new_shape()
            shape.draw_rect(rect)
            if kind is AnnotationKind.HIGHLIGHT:
                shape.finish(color=None, fill=color, fill_opacity=HIGHLIGHT_OPACITY, width=0)
            else:
                shape.finish(color=color, fill=color, width=0)
            shape.commit()

        elif kind is AnnotationKind.STAMP:
            w, h = STAMP_SIZE_PT
            rect = fitz.Rect(x - w / 2, y - h / 2, x + w / 2, y + h / 2)
            color = _unit(STAMP_RGB.get(ann.stamp_kind.value, (220, 38, 38)))
            shape = page.new_shape()
            shape.draw_rect(rect)
            shape.finish(color=color, width=1.5)
            shape.commit()
            page.insert_textbox(rect, ann.stamp_kind.label, fontsize=10, fontname="hebo",
                                color=color, align=fitz.TEXT_ALIGN_CENTER)

        elif kind is AnnotationKind.IMAGE:
            rect = fitz.Rect(x, y, x + ann.w_frac * width, y + ann.h_frac * height)
            page.insert_image(rect, stream=ann.image_bytes, keep_proportion=True)

        else:
            raise TypeError(f"Unknown annotation kind: {kind!r}")
