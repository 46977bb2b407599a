"""
Toolbar components for choosing and styling annotation tools.
"""
from .tool_toolbar import ToolToolbar

__all__ = ['ToolToolbar']
