"""
Read-only views of the annotation store: render plans, hit testing and the
sidebar list.
"""
from .hit_test import HANDLE_SIZE_PX, handle_rects, hit_test, item_bounds
from .models import EMPTY_PLAN, Polyline, RenderItem, RenderPlan, SidebarEntry
from .projector import LayerProjector, project
from .sidebar import sidebar_entries

__all__ = [
    'project',
    'LayerProjector',
    'RenderPlan',
    'RenderItem',
    'Polyline',
    'EMPTY_PLAN',
    'SidebarEntry',
    'sidebar_entries',
    'hit_test',
    'item_bounds',
    'handle_rects',
    'HANDLE_SIZE_PX',
]
