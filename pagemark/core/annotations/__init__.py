"""
Annotation data model, geometry normalization and history.
"""
from .geometry import Viewport, fit_scale, to_fraction, to_pixels
from .models import (
    ANNOTATION_TYPES,
    PEN_COLORS,
    Annotation,
    AnnotationDraft,
    AnnotationKind,
    BoxAnnotation,
    HighlightAnnotation,
    ImageAnnotation,
    PointAnnotation,
    ResizeHandle,
    StampAnnotation,
    StampKind,
    TextAnnotation,
    WhiteoutAnnotation,
)
from .store import AnnotationStore, SequentialIds
from .undo_redo import UndoRedoStack

__all__ = [
    'Annotation',
    'AnnotationDraft',
    'AnnotationKind',
    'ANNOTATION_TYPES',
    'BoxAnnotation',
    'PointAnnotation',
    'TextAnnotation',
    'HighlightAnnotation',
    'WhiteoutAnnotation',
    'StampAnnotation',
    'ImageAnnotation',
    'StampKind',
    'ResizeHandle',
    'PEN_COLORS',
    'AnnotationStore',
    'SequentialIds',
    'UndoRedoStack',
    'Viewport',
    'to_fraction',
    'to_pixels',
    'fit_scale',
]
