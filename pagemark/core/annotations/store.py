"""
The authoritative annotation collection with undo/redo support.
"""
import copy
import itertools
import logging
import time
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from typing import Callable, Dict, Iterator, List, Mapping, Optional

from pagemark.core.errors import InvalidGeometry

from .geometry import Viewport, is_finite, length_to_fraction, to_fraction
from .models import Annotation, AnnotationDraft, annotation_class
from .undo_redo import Snapshot, UndoRedoStack

log = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "kind", "page_number"})
_GEOMETRY_FIELDS = ("x_frac", "y_frac", "w_frac", "h_frac")


class SequentialIds:
    """Creation-ordered ids, unique for the lifetime of the process."""

    def __init__(self, prefix: Optional[str] = None):
        self._prefix = prefix if prefix is not None else str(int(time.time() * 1000))
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"


class AnnotationStore:
    """
    Insertion-ordered mapping of annotation id to annotation.

    Every mutating operation checkpoints the history before applying the
    change, so undo restores the pre-mutation state.
    """

    def __init__(self, history_limit: Optional[int] = None,
                 id_factory: Optional[Callable[[], str]] = None):
        self._annotations: Dict[str, Annotation] = {}
        self.history = UndoRedoStack(max_size=history_limit)
        self._id_factory = id_factory or SequentialIds()

    # --- Queries ---

    def get(self, annotation_id: Optional[str]) -> Optional[Annotation]:
        return self._annotations.get(annotation_id) if annotation_id else None

    def list(self, page_number: Optional[int] = None) -> List[Annotation]:
        """
        Annotations in insertion order.

        Args:
            page_number: Restrict to one page (1-based), or None for all

        Returns:
            A new list; mutating it does not affect the store
        """
        if page_number is None:
            return list(self._annotations.values())
        return [ann for ann in self._annotations.values() if ann.page_number == page_number]

    def __len__(self) -> int:
        return len(self._annotations)

    def __contains__(self, annotation_id) -> bool:
        return annotation_id in self._annotations

    def __iter__(self) -> Iterator[Annotation]:
        return iter(list(self._annotations.values()))

    # --- Mutations ---

    def add(self, draft: AnnotationDraft, viewport: Viewport) -> str:
        """
        Create an annotation from a pixel-space draft.

        Args:
            draft: Kind, page, pixel geometry and variant fields
            viewport: Displayed size of the annotation layer

        Returns:
            The id assigned to the new annotation

        Raises:
            GeometryUnavailable: The viewport has no usable size
            InvalidGeometry: A computed fraction is not finite, or a box
                annotation would have no area
        """
        if draft.page_number < 1:
            raise ValueError(f"Page numbers start at 1, got {draft.page_number}")

        cls = annotation_class(draft.kind)
        x_frac, y_frac = to_fraction(draft.x, draft.y, viewport.width, viewport.height)
        values = dict(draft.fields)

        if draft.kind.is_box:
            w_frac = length_to_fraction(draft.width, viewport.width)
            h_frac = length_to_fraction(draft.height, viewport.height)
            if not is_finite(w_frac, h_frac):
                raise InvalidGeometry(f"Non-finite size for {draft.kind.value}: {w_frac}, {h_frac}")
            if w_frac <= 0 or h_frac <= 0:
                raise InvalidGeometry(f"Empty {draft.kind.value} box: {w_frac} x {h_frac}")
            values["w_frac"] = w_frac
            values["h_frac"] = h_frac

        if not is_finite(x_frac, y_frac):
            raise InvalidGeometry(f"Non-finite position for {draft.kind.value}: {x_frac}, {y_frac}")

        annotation_id = self._id_factory()
        annotation = cls(
            id=annotation_id,
            page_number=draft.page_number,
            x_frac=x_frac,
            y_frac=y_frac,
            **values,
        )

        self.checkpoint()
        self._annotations[annotation_id] = annotation
        log.debug("Added %s annotation %s on page %d", draft.kind.value,
                  annotation_id, draft.page_number)
        return annotation_id

    def update(self, annotation_id: str, patch: Mapping[str, object],
               checkpoint: bool = True) -> bool:
        """
        Shallow-merge a patch into an annotation.

        Args:
            annotation_id: Annotation to update
            patch: Field values to replace
            checkpoint: Save history first. Live drag/resize frames pass
                False and checkpoint once when the gesture ends.

        Returns:
            True if the annotation exists and was updated
        """
        annotation = self._annotations.get(annotation_id)
        if annotation is None:
            return False

        forbidden = _IMMUTABLE_FIELDS.intersection(patch)
        if forbidden:
            raise ValueError(f"Cannot change {', '.join(sorted(forbidden))} of an annotation")

        known = {f.name for f in dataclass_fields(annotation)}
        unknown = set(patch) - known
        if unknown:
            raise ValueError(
                f"{annotation.kind.value} annotation has no field(s): {', '.join(sorted(unknown))}"
            )

        geometry = [patch[name] for name in _GEOMETRY_FIELDS if name in patch]
        if not is_finite(*geometry):
            raise InvalidGeometry(f"Non-finite geometry for {annotation_id}: {geometry}")

        updated = replace(annotation, **patch)
        if checkpoint:
            self.checkpoint()
        self._annotations[annotation_id] = updated
        return True

    def remove(self, annotation_id: str) -> bool:
        """
        Delete an annotation.

        Returns:
            True if annotation was found and removed
        """
        if annotation_id not in self._annotations:
            return False

        self.checkpoint()
        del self._annotations[annotation_id]
        log.debug("Removed annotation %s", annotation_id)
        return True

    def reset(self) -> None:
        """Drop all annotations and history, as on loading a new document."""
        self._annotations.clear()
        self.history.clear()

    # --- History ---

    def snapshot(self) -> Snapshot:
        """Deep copy of the current collection."""
        return copy.deepcopy(self._annotations)

    def checkpoint(self, snapshot: Optional[Snapshot] = None) -> None:
        """
        Record a history entry.

        Args:
            snapshot: A state captured earlier with snapshot(); defaults to
                the current state
        """
        self.history.push_state(self._annotations if snapshot is None else snapshot)

    def undo(self) -> bool:
        previous_state = self.history.undo(self._annotations)
        if previous_state is None:
            return False
        self._annotations = previous_state
        return True

    def redo(self) -> bool:
        next_state = self.history.redo(self._annotations)
        if next_state is None:
            return False
        self._annotations = next_state
        return True

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    @property
    def undo_depth(self) -> int:
        return len(self.history.undo_stack)

    @property
    def redo_depth(self) -> int:
        return len(self.history.redo_stack)
