"""Domain exceptions raised by the estimate, annotation and selection services.

Routers translate these into HTTP errors; the report parser and the
annotation seed normalizer never raise.
"""


class RugEstimateError(Exception):
    """Base class for all domain errors."""


class AnnotationIndexError(RugEstimateError, IndexError):
    """A marker index outside the current annotation list was mutated."""

    def __init__(self, index: int, length: int) -> None:
        super().__init__(
            f"Annotation index {index} out of range for {length} annotation(s)"
        )
        self.index = index
        self.length = length


class SessionNotFoundError(RugEstimateError, KeyError):
    """No live editing session with the given id (expired or never created)."""


class UnknownRugError(RugEstimateError, KeyError):
    """Rug id is not part of the selection."""


class UnknownServiceError(RugEstimateError, KeyError):
    """Service id does not belong to the given rug."""


class CommitInProgressError(RugEstimateError):
    """A mutation was attempted while a save is still in flight."""


class EmptyEstimateError(RugEstimateError):
    """An estimate with no services cannot be approved."""


class EstimateAlreadyApprovedError(RugEstimateError):
    """The estimate review has already been approved."""


class EmptySelectionError(RugEstimateError):
    """Checkout requested with no selected services."""
