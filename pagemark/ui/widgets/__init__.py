"""
Custom widgets for page display and annotation input.
"""
from .page_canvas import PageCanvas

__all__ = ['PageCanvas']
