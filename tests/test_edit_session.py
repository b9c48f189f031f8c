"""Tests for the annotation edit/cancel/save staging buffer."""

from __future__ import annotations

import asyncio

import pytest

from rugestimate.errors import CommitInProgressError
from rugestimate.models.annotation import PhotoAnnotations, Surface
from rugestimate.services.annotation_model import add_annotation
from rugestimate.services.edit_session import AnnotationEditSession
from rugestimate.services.marker_controller import MarkerState

SURFACE = Surface(width=100, height=100)


def _seed() -> list[PhotoAnnotations]:
    return [PhotoAnnotations(photo_index=0, annotations=add_annotation([], 10, 10))]


def test_edits_stay_in_staging_until_save() -> None:
    commits: list[list[PhotoAnnotations]] = []
    session = AnnotationEditSession(_seed(), on_commit=commits.append)
    session.begin_edit()
    session.controller(0).click(SURFACE, 50, 50)
    session.controller(3).click(SURFACE, 20, 30)

    assert len(session.committed[0].annotations) == 1
    assert [e.photo_index for e in session.staging] == [0, 3]

    committed = session.save()
    assert not session.is_editing
    assert [len(e.annotations) for e in committed] == [2, 1]
    assert commits == [committed]
    assert session.controller(0).state is MarkerState.VIEWING


def test_cancel_reverts_to_snapshot() -> None:
    session = AnnotationEditSession(_seed())
    session.begin_edit()
    controller = session.controller(0)
    controller.click(SURFACE, 50, 50)
    controller.relabel(0, "Stain")
    session.cancel()

    assert session.staging is None
    assert [a.label for a in session.annotations_for(0)] == ["Issue 1"]
    assert [a.label for a in controller.annotations] == ["Issue 1"]
    assert controller.state is MarkerState.VIEWING


def test_begin_edit_is_idempotent() -> None:
    session = AnnotationEditSession(_seed())
    session.begin_edit()
    session.controller(0).click(SURFACE, 1, 1)
    session.begin_edit()
    assert len(session.annotations_for(0)) == 2


def test_viewing_session_rejects_direct_apply() -> None:
    session = AnnotationEditSession(_seed())
    with pytest.raises(RuntimeError):
        session.apply(0, [])


def test_failed_commit_keeps_staging() -> None:
    attempts = []

    def flaky(collection: list[PhotoAnnotations]) -> None:
        attempts.append(collection)
        if len(attempts) == 1:
            raise ConnectionError("network down")

    session = AnnotationEditSession(_seed(), on_commit=flaky)
    session.begin_edit()
    session.controller(0).click(SURFACE, 90, 90)

    with pytest.raises(ConnectionError):
        session.save()
    assert session.is_editing
    assert len(session.staging[0].annotations) == 2
    assert len(session.committed[0].annotations) == 1
    assert session.controller(0).is_editing

    session.save()
    assert len(session.committed[0].annotations) == 2
    assert len(attempts) == 2


def test_save_outside_edit_mode_is_noop() -> None:
    commits = []
    session = AnnotationEditSession(_seed(), on_commit=commits.append)
    assert len(session.save()[0].annotations) == 1
    assert commits == []


def test_sync_save_rejects_async_callback() -> None:
    async def commit(collection: list[PhotoAnnotations]) -> None:
        return None

    session = AnnotationEditSession(_seed(), on_commit=commit)
    session.begin_edit()
    with pytest.raises(TypeError):
        session.save()
    assert session.is_editing


async def test_asave_blocks_mutations_while_in_flight() -> None:
    release = asyncio.Event()
    started = asyncio.Event()

    async def commit(collection: list[PhotoAnnotations]) -> None:
        started.set()
        await release.wait()

    session = AnnotationEditSession(_seed(), on_commit=commit)
    session.begin_edit()
    controller = session.controller(0)
    controller.click(SURFACE, 40, 40)

    task = asyncio.create_task(session.asave())
    await started.wait()
    assert session.is_committing
    with pytest.raises(CommitInProgressError):
        controller.click(SURFACE, 60, 60)
    with pytest.raises(CommitInProgressError):
        session.cancel()
    assert len(controller.annotations) == 2

    release.set()
    committed = await task
    assert len(committed[0].annotations) == 2
    assert not session.is_committing
    assert not session.is_editing


async def test_asave_failure_keeps_staging() -> None:
    async def commit(collection: list[PhotoAnnotations]) -> None:
        raise ConnectionError("network down")

    session = AnnotationEditSession(_seed(), on_commit=commit)
    session.begin_edit()
    session.controller(0).click(SURFACE, 40, 40)
    with pytest.raises(ConnectionError):
        await session.asave()
    assert session.is_editing
    assert not session.is_committing
    assert len(session.staging[0].annotations) == 2
