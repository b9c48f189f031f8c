"""Edit-or-cancel staging buffer for a job's photo annotations.

The committed collection is only replaced on a successful save.  While
editing, per-photo :class:`MarkerInteractionController` instances write
into a deep copy (the staging buffer).  Cancel throws the copy away.
If the commit callback fails, the staging buffer is kept and edit mode
stays open so the user can retry or cancel.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable

from rugestimate.errors import CommitInProgressError
from rugestimate.models.annotation import Annotation, PhotoAnnotations
from rugestimate.services.annotation_model import annotations_for, with_photo
from rugestimate.services.marker_controller import MarkerInteractionController

logger = logging.getLogger(__name__)

CommitCallback = Callable[[list[PhotoAnnotations]], Awaitable[None] | None]


def _deep_copy(collection: list[PhotoAnnotations]) -> list[PhotoAnnotations]:
    return [entry.model_copy(deep=True) for entry in collection]


class AnnotationEditSession:
    """Committed annotations plus an optional staging copy being edited."""

    def __init__(
        self,
        committed: list[PhotoAnnotations] | None = None,
        on_commit: CommitCallback | None = None,
    ) -> None:
        self._committed = _deep_copy(committed or [])
        self._staging: list[PhotoAnnotations] | None = None
        self._on_commit = on_commit
        self._committing = False
        self._controllers: dict[int, MarkerInteractionController] = {}

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def committed(self) -> list[PhotoAnnotations]:
        return _deep_copy(self._committed)

    @property
    def staging(self) -> list[PhotoAnnotations] | None:
        if self._staging is None:
            return None
        return _deep_copy(self._staging)

    @property
    def is_editing(self) -> bool:
        return self._staging is not None

    @property
    def is_committing(self) -> bool:
        return self._committing

    def current(self) -> list[PhotoAnnotations]:
        """The collection the UI should render (staging while editing)."""
        return _deep_copy(self._staging if self._staging is not None else self._committed)

    def annotations_for(self, photo_index: int) -> list[Annotation]:
        return annotations_for(self.current(), photo_index)

    def controller(self, photo_index: int) -> MarkerInteractionController:
        """Return the interaction controller for *photo_index*, creating it lazily."""
        controller = self._controllers.get(photo_index)
        if controller is None:
            controller = MarkerInteractionController(
                photo_index,
                self.annotations_for(photo_index),
                on_change=self.apply,
                editing=self.is_editing,
            )
            self._controllers[photo_index] = controller
        return controller

    @property
    def controllers(self) -> dict[int, MarkerInteractionController]:
        return dict(self._controllers)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _check_not_committing(self) -> None:
        if self._committing:
            raise CommitInProgressError("Annotations are being saved")

    def _sync_controllers(self) -> None:
        for photo_index, controller in self._controllers.items():
            controller.sync(self.annotations_for(photo_index))
            controller.set_editing(self.is_editing)

    def begin_edit(self) -> None:
        """Snapshot the committed annotations into the staging buffer."""
        self._check_not_committing()
        if self._staging is not None:
            return
        self._staging = _deep_copy(self._committed)
        self._sync_controllers()

    def apply(self, photo_index: int, annotations: list[Annotation]) -> None:
        """Record a per-photo change into the staging buffer."""
        self._check_not_committing()
        if self._staging is None:
            raise RuntimeError("Annotations can only change in edit mode")
        self._staging = with_photo(self._staging, photo_index, annotations)

    def cancel(self) -> None:
        """Discard staged edits and return to viewing the committed value."""
        self._check_not_committing()
        self._staging = None
        self._sync_controllers()

    def _finish_commit(self, snapshot: list[PhotoAnnotations]) -> None:
        self._committed = snapshot
        self._staging = None
        self._sync_controllers()
        logger.debug("Committed annotations for %d photo(s)", len(snapshot))

    def save(self) -> list[PhotoAnnotations]:
        """Commit the staging buffer through a synchronous callback.

        Returns the new committed collection.  Outside edit mode this is a
        no-op that returns the current committed value.
        """
        self._check_not_committing()
        if self._staging is None:
            return self.committed
        snapshot = _deep_copy(self._staging)
        if self._on_commit is not None:
            self._committing = True
            try:
                result = self._on_commit(_deep_copy(snapshot))
                if inspect.isawaitable(result):
                    if inspect.iscoroutine(result):
                        result.close()
                    raise TypeError("Commit callback is asynchronous; use asave()")
            except Exception:
                logger.warning("Saving annotations failed; edits kept in staging")
                raise
            finally:
                self._committing = False
        self._finish_commit(snapshot)
        return self.committed

    async def asave(self) -> list[PhotoAnnotations]:
        """Like :meth:`save`, awaiting the callback if it returns an awaitable."""
        self._check_not_committing()
        if self._staging is None:
            return self.committed
        snapshot = _deep_copy(self._staging)
        if self._on_commit is not None:
            self._committing = True
            try:
                result = self._on_commit(_deep_copy(snapshot))
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.warning("Saving annotations failed; edits kept in staging")
                raise
            finally:
                self._committing = False
        self._finish_commit(snapshot)
        return self.committed
