"""
Core logic for Pagemark: the annotation model, its history, the interaction
state machine and the render projection.
"""
from .annotations import Annotation, AnnotationKind, AnnotationStore
from .session import AnnotationSession, ToolMode

__all__ = ['Annotation', 'AnnotationKind', 'AnnotationStore', 'AnnotationSession', 'ToolMode']
