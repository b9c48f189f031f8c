"""Pure operations on per-photo annotation lists.

Every function returns a new list and leaves its input untouched.
Coordinates are percentages of the rendered image size and are clamped
to [0, 100].  Mutating an index outside the list raises
:class:`~rugestimate.errors.AnnotationIndexError`.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from rugestimate.errors import AnnotationIndexError
from rugestimate.models.annotation import DEFAULT_LOCATION, Annotation, PhotoAnnotations

logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp *value* into ``[low, high]``; NaN collapses to *low*."""
    if math.isnan(value):
        return low
    return float(max(low, min(high, value)))


def issue_label(position: int) -> str:
    """Default label for the marker at 1-based *position*."""
    return f"Issue {position}"


def check_index(annotations: list[Annotation], index: int) -> None:
    if not 0 <= index < len(annotations):
        raise AnnotationIndexError(index, len(annotations))


def add_annotation(annotations: list[Annotation], x: float, y: float) -> list[Annotation]:
    """Append a marker labelled ``Issue {n}`` at the clamped position."""
    annotation = Annotation(
        label=issue_label(len(annotations) + 1),
        location=DEFAULT_LOCATION,
        x=clamp(x),
        y=clamp(y),
    )
    return [*annotations, annotation]


def move_annotation(
    annotations: list[Annotation], index: int, x: float, y: float
) -> list[Annotation]:
    """Reposition the marker at *index*; all other markers are unchanged."""
    check_index(annotations, index)
    moved = annotations[index].model_copy(update={"x": clamp(x), "y": clamp(y)})
    return [*annotations[:index], moved, *annotations[index + 1 :]]


def relabel(annotations: list[Annotation], index: int, label: str) -> list[Annotation]:
    check_index(annotations, index)
    renamed = annotations[index].model_copy(update={"label": label})
    return [*annotations[:index], renamed, *annotations[index + 1 :]]


def remove(annotations: list[Annotation], index: int) -> list[Annotation]:
    check_index(annotations, index)
    return [*annotations[:index], *annotations[index + 1 :]]


# ------------------------------------------------------------------
# Photo collections
# ------------------------------------------------------------------


def annotations_for(
    collection: Iterable[PhotoAnnotations], photo_index: int
) -> list[Annotation]:
    """Return the markers for *photo_index*, or ``[]`` if it has none."""
    for entry in collection:
        if entry.photo_index == photo_index:
            return list(entry.annotations)
    return []


def with_photo(
    collection: list[PhotoAnnotations],
    photo_index: int,
    annotations: list[Annotation],
) -> list[PhotoAnnotations]:
    """Return *collection* with the entry for *photo_index* replaced or added.

    Entries stay sorted by photo index.
    """
    updated = [entry for entry in collection if entry.photo_index != photo_index]
    updated.append(
        PhotoAnnotations(photo_index=photo_index, annotations=list(annotations))
    )
    updated.sort(key=lambda entry: entry.photo_index)
    return updated


def _coerce_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _coerce_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        index = value
    elif isinstance(value, float) and value.is_integer():
        index = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        index = int(value.strip())
    else:
        return None
    return index if index >= 0 else None


def _normalize_annotation(raw: Any, position: int) -> Annotation | None:
    if not isinstance(raw, Mapping):
        return None
    x = _coerce_float(raw.get("x"))
    y = _coerce_float(raw.get("y"))
    if x is None or y is None:
        return None
    label = raw.get("label")
    if not isinstance(label, str) or not label.strip():
        label = issue_label(position)
    location = raw.get("location")
    if not isinstance(location, str) or not location.strip():
        location = DEFAULT_LOCATION
    return Annotation(label=label.strip(), location=location, x=clamp(x), y=clamp(y))


def normalize_photo_annotations(raw: Any) -> list[PhotoAnnotations]:
    """Convert an untrusted ``PhotoAnnotations[]`` seed into validated records.

    Unusable entries are dropped rather than rejected; this never raises.
    """
    if not isinstance(raw, list):
        return []

    by_photo: dict[int, list[Annotation]] = {}
    dropped = 0
    for entry in raw:
        if not isinstance(entry, Mapping):
            dropped += 1
            continue
        photo_index = _coerce_index(entry.get("photoIndex", entry.get("photo_index")))
        items = entry.get("annotations")
        if photo_index is None or not isinstance(items, list):
            dropped += 1
            continue
        annotations = by_photo.setdefault(photo_index, [])
        for item in items:
            annotation = _normalize_annotation(item, len(annotations) + 1)
            if annotation is None:
                dropped += 1
                continue
            annotations.append(annotation)

    if dropped:
        logger.debug("Dropped %d malformed annotation seed entr(ies)", dropped)

    return [
        PhotoAnnotations(photo_index=index, annotations=annotations)
        for index, annotations in sorted(by_photo.items())
    ]
