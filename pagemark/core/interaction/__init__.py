"""
Interaction state machine: tools, gestures, selection and text editing.
"""
from .state_machine import InteractionStateMachine
from .states import (
    IDLE,
    Dragging,
    EditingText,
    Idle,
    MarqueeSelecting,
    PointerEvent,
    Resizing,
)
from .text_editor import TextEditSession

__all__ = [
    'InteractionStateMachine',
    'PointerEvent',
    'TextEditSession',
    'IDLE',
    'Idle',
    'Dragging',
    'Resizing',
    'MarqueeSelecting',
    'EditingText',
]
