"""Tests for the editable estimate review list."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rugestimate.errors import (
    EmptyEstimateError,
    EstimateAlreadyApprovedError,
    UnknownServiceError,
)
from rugestimate.models.service import CatalogPrice
from rugestimate.services.estimate_review import EstimateReview


def test_from_report_with_catalog(sample_letter: str) -> None:
    review = EstimateReview.from_report(
        sample_letter + "\nRUG BREAKDOWN\nBlocking: $0\n",
        catalog=[CatalogPrice(name="Blocking", unit_price=55)],
    )
    names = [s.name for s in review.services]
    assert names[-1] == "Blocking"
    assert review.services[-1].unit_price == 55.0


def test_add_service_defaults() -> None:
    review = EstimateReview()
    added = review.add_service()
    assert (added.name, added.quantity, added.unit_price, added.priority) == (
        "New Service",
        1,
        0.0,
        "medium",
    )
    assert review.services[0].id == added.id


def test_update_service_coerces_inputs() -> None:
    review = EstimateReview()
    service_id = review.add_service().id
    updated = review.update_service(
        service_id, name="  Fringe repair ", quantity=0, unit_price=-4, priority="high"
    )
    assert (updated.name, updated.quantity, updated.unit_price, updated.priority) == (
        "Fringe repair",
        1,
        0.0,
        "high",
    )


def test_update_service_unparseable_numbers_fall_back() -> None:
    review = EstimateReview()
    service_id = review.add_service().id
    review.update_service(service_id, quantity=3, unit_price=80)
    updated = review.update_service(service_id, quantity="abc", unit_price="n/a")
    assert (updated.quantity, updated.unit_price) == (1, 0.0)
    updated = review.update_service(service_id, quantity="2.7", unit_price="19.5")
    assert (updated.quantity, updated.unit_price) == (2, 19.5)
    assert review.update_service(service_id, quantity=None, unit_price=float("nan")).unit_price == 0.0


def test_update_service_rejects_invalid_edits() -> None:
    review = EstimateReview()
    service_id = review.add_service().id
    with pytest.raises(ValidationError):
        review.update_service(service_id, name="   ")
    with pytest.raises(ValidationError):
        review.update_service(service_id, priority="urgent")
    with pytest.raises(TypeError):
        review.update_service(service_id, id="other")
    with pytest.raises(UnknownServiceError):
        review.update_service("missing", quantity=2)
    assert review.services[0].name == "New Service"


def test_remove_and_total() -> None:
    review = EstimateReview()
    first = review.add_service().id
    second = review.add_service().id
    review.update_service(first, quantity=3, unit_price=19.99)
    review.update_service(second, unit_price=10)
    assert review.total() == 69.97
    review.remove_service(second)
    assert review.total() == 59.97


def test_approve_invokes_callback_once() -> None:
    approvals = []
    review = EstimateReview(on_approve=lambda services, total: approvals.append((services, total)))
    service_id = review.add_service().id
    review.update_service(service_id, unit_price=120)

    services, total = review.approve()
    assert total == 120.0
    assert approvals == [(services, 120.0)]
    with pytest.raises(EstimateAlreadyApprovedError):
        review.approve()
    with pytest.raises(EstimateAlreadyApprovedError):
        review.add_service()


def test_approve_empty_list() -> None:
    approvals = []
    review = EstimateReview(on_approve=lambda services, total: approvals.append(total))
    with pytest.raises(EmptyEstimateError):
        review.approve()
    assert approvals == []
    assert not review.approved
