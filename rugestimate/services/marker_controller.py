"""Pointer-driven marker editing for a single photo.

States::

    VIEWING        read-only; hovering a marker shows its label
    EDITING_IDLE   click adds a marker, pointer-down on a marker starts a drag
    DRAGGING       pointer-move repositions the dragged marker

Every mutation is reported through ``on_change(photo_index, annotations)``
before it is applied locally, so a sink that rejects the change (for
example while a save is in flight) leaves the controller untouched.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable

from rugestimate.models.annotation import Annotation, PointerEvent, Surface
from rugestimate.services import annotation_model
from rugestimate.services.annotation_model import clamp

logger = logging.getLogger(__name__)

AnnotationsChangeCallback = Callable[[int, list[Annotation]], None]


class MarkerState(enum.Enum):
    VIEWING = "viewing"
    EDITING_IDLE = "editing_idle"
    DRAGGING = "dragging"


def to_percent(surface: Surface, pointer_x: float, pointer_y: float) -> tuple[float, float]:
    """Convert client pixel coordinates to clamped image percentages."""
    x = (pointer_x - surface.left) / surface.width * 100
    y = (pointer_y - surface.top) / surface.height * 100
    return clamp(x), clamp(y)


class MarkerInteractionController:
    """State machine translating pointer events into annotation edits."""

    def __init__(
        self,
        photo_index: int,
        annotations: list[Annotation],
        on_change: AnnotationsChangeCallback,
        editing: bool = False,
    ) -> None:
        self.photo_index = photo_index
        self._annotations = list(annotations)
        self._on_change = on_change
        self._state = MarkerState.EDITING_IDLE if editing else MarkerState.VIEWING
        self._dragging_index: int | None = None
        self._label_edit_index: int | None = None
        self.label_draft = ""

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def annotations(self) -> list[Annotation]:
        return list(self._annotations)

    @property
    def state(self) -> MarkerState:
        return self._state

    @property
    def dragging_index(self) -> int | None:
        return self._dragging_index

    @property
    def label_edit_index(self) -> int | None:
        return self._label_edit_index

    @property
    def is_editing(self) -> bool:
        return self._state is not MarkerState.VIEWING

    def set_editing(self, editing: bool) -> None:
        """Enter or leave edit mode; leaving drops any drag or label draft."""
        if editing:
            if self._state is MarkerState.VIEWING:
                self._state = MarkerState.EDITING_IDLE
            return
        self._state = MarkerState.VIEWING
        self._dragging_index = None
        self.cancel_label_edit()

    def sync(self, annotations: list[Annotation]) -> None:
        """Replace the local list without emitting (e.g. after cancel)."""
        self._annotations = list(annotations)
        if self._dragging_index is not None and self._dragging_index >= len(annotations):
            self._end_drag()
        if self._label_edit_index is not None and self._label_edit_index >= len(annotations):
            self.cancel_label_edit()

    def _emit(self, annotations: list[Annotation]) -> None:
        self._on_change(self.photo_index, list(annotations))
        self._annotations = annotations

    # ------------------------------------------------------------------
    # Pointer transitions
    # ------------------------------------------------------------------

    def click(self, surface: Surface, pointer_x: float, pointer_y: float) -> bool:
        """Add a marker where an empty part of the image was clicked."""
        if self._state is not MarkerState.EDITING_IDLE:
            return False
        x, y = to_percent(surface, pointer_x, pointer_y)
        self._emit(annotation_model.add_annotation(self._annotations, x, y))
        return True

    def pointer_down(self, index: int) -> bool:
        """Start dragging the marker at *index*."""
        if self._state is not MarkerState.EDITING_IDLE:
            return False
        annotation_model.check_index(self._annotations, index)
        self._state = MarkerState.DRAGGING
        self._dragging_index = index
        logger.debug("Photo %d: dragging marker %d", self.photo_index, index)
        return True

    def pointer_move(self, surface: Surface, pointer_x: float, pointer_y: float) -> bool:
        if self._state is not MarkerState.DRAGGING or self._dragging_index is None:
            return False
        x, y = to_percent(surface, pointer_x, pointer_y)
        self._emit(
            annotation_model.move_annotation(self._annotations, self._dragging_index, x, y)
        )
        return True

    def pointer_up(self) -> bool:
        if self._state is not MarkerState.DRAGGING:
            return False
        self._end_drag()
        return True

    # Leaving the surface ends a drag exactly like releasing the pointer.
    pointer_leave = pointer_up

    def _end_drag(self) -> None:
        self._dragging_index = None
        if self._state is MarkerState.DRAGGING:
            self._state = MarkerState.EDITING_IDLE

    def handle(self, event: PointerEvent) -> bool:
        """Dispatch a :class:`PointerEvent`; return ``True`` if it changed anything."""
        if event.type == "pointer_up":
            return self.pointer_up()
        if event.type == "pointer_leave":
            return self.pointer_leave()
        if event.type == "pointer_down":
            if event.marker is None:
                return False
            return self.pointer_down(event.marker)
        if event.surface is None:
            raise ValueError(f"{event.type} event requires a surface")
        if event.type == "click":
            # Clicks on a marker badge never reach the image.
            if event.marker is not None:
                return False
            return self.click(event.surface, event.x, event.y)
        return self.pointer_move(event.surface, event.x, event.y)

    # ------------------------------------------------------------------
    # Marker controls
    # ------------------------------------------------------------------

    def delete(self, index: int) -> bool:
        """Remove the marker at *index* (edit mode, dragging or not)."""
        if self._state is MarkerState.VIEWING:
            return False
        self._emit(annotation_model.remove(self._annotations, index))
        if self._dragging_index is not None:
            if self._dragging_index == index:
                self._end_drag()
            elif self._dragging_index > index:
                self._dragging_index -= 1
        if self._label_edit_index is not None:
            if self._label_edit_index == index:
                self.cancel_label_edit()
            elif self._label_edit_index > index:
                self._label_edit_index -= 1
        return True

    def begin_label_edit(self, index: int) -> bool:
        if not self.is_editing:
            return False
        annotation_model.check_index(self._annotations, index)
        self._label_edit_index = index
        self.label_draft = self._annotations[index].label
        return True

    def commit_label_edit(self, label: str | None = None) -> bool:
        """Apply the label draft (or *label*) to the marker being relabelled."""
        if self._label_edit_index is None:
            return False
        if label is not None:
            self.label_draft = label
        self._emit(
            annotation_model.relabel(
                self._annotations, self._label_edit_index, self.label_draft
            )
        )
        self.cancel_label_edit()
        return True

    def cancel_label_edit(self) -> None:
        self._label_edit_index = None
        self.label_draft = ""

    def relabel(self, index: int, label: str) -> bool:
        """Relabel in one step (begin, set draft, commit)."""
        if not self.begin_label_edit(index):
            return False
        return self.commit_label_edit(label)

    def tooltip(self, index: int) -> str | None:
        """Hover text for a marker in view mode."""
        if self._state is not MarkerState.VIEWING:
            return None
        if not 0 <= index < len(self._annotations):
            return None
        return self._annotations[index].label
