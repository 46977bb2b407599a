"""
CSV export of the annotation collection.
"""
import csv
import io
import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pagemark.core.annotations import Annotation, AnnotationKind

log = logging.getLogger(__name__)

CSV_COLUMNS = [
    'id', 'type', 'pageNumber', 'xFrac', 'yFrac', 'widthFrac', 'heightFrac',
    'color', 'size', 'content', 'stampType', 'font',
]

# Excel needs the byte-order mark to detect UTF-8
CSV_ENCODING = 'utf-8-sig'


def _frac(value: float) -> str:
    return f"{value:.4f}"


def annotation_to_row(ann: Annotation) -> List[str]:
    """
    Flatten an annotation into CSV cells, in CSV_COLUMNS order.

    Width and height are empty for annotations without extent.
    """
    kind = ann.kind
    color = size = content = stamp_type = font = ""

    if kind is AnnotationKind.POINT:
        color, size = ann.color, str(ann.size_px)
    elif kind is AnnotationKind.TEXT:
        color, size, content, font = ann.color, str(ann.size_px), ann.text, ann.font_name
    elif kind in (AnnotationKind.HIGHLIGHT, AnnotationKind.WHITEOUT):
        color, content = ann.color, ann.comment
    elif kind is AnnotationKind.STAMP:
        content, stamp_type = ann.comment, ann.stamp_kind.value
    elif kind is AnnotationKind.IMAGE:
        pass
    else:
        raise TypeError(f"Unknown annotation kind: {kind!r}")

    return [
        ann.id,
        kind.value,
        str(ann.page_number),
        _frac(ann.x_frac),
        _frac(ann.y_frac),
        _frac(ann.w_frac) if ann.w_frac else "",
        _frac(ann.h_frac) if ann.h_frac else "",
        color,
        size,
        content,
        stamp_type,
        font,
    ]


def export_csv(annotations: Iterable[Annotation]) -> str:
    """
    Render annotations as CSV text: a header row, then one row per
    annotation. Every field is quoted and embedded quotes are doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(CSV_COLUMNS)
    for ann in annotations:
        writer.writerow(annotation_to_row(ann))
    return buffer.getvalue()


def default_csv_filename(now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"annotations_{now_ms}.csv"


def write_csv(annotations: Iterable[Annotation], directory: Union[str, Path],
              now_ms: Optional[int] = None) -> Path:
    """
    Write annotations to annotations_<epoch-millis>.csv.

    Args:
        annotations: Annotations to export
        directory: Target directory
        now_ms: Timestamp for the filename; defaults to the current time

    Returns:
        Path of the written file
    """
    file_path = Path(directory) / default_csv_filename(now_ms)
    content = export_csv(annotations)
    with open(file_path, 'w', encoding=CSV_ENCODING, newline='') as f:
        f.write(content)
    log.info("Exported annotations to %s", file_path)
    return file_path
