from .annotation_controller import AnnotationController
from .document_controller import DocumentController
from .input_handler import UserInputHandler

__all__ = [
    'AnnotationController',
    'DocumentController',
    'UserInputHandler',
]
