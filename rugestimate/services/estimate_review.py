"""Editable estimate list seeded from a parsed report."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from typing import Any

from rugestimate.errors import (
    EmptyEstimateError,
    EstimateAlreadyApprovedError,
    UnknownServiceError,
)
from rugestimate.models.service import DEFAULT_SERVICE_NAME, CatalogPrice, ServiceItem
from rugestimate.services.money import round_cents
from rugestimate.services.report_parser import ReportTextParser, apply_catalog_prices

logger = logging.getLogger(__name__)

ApproveCallback = Callable[[list[ServiceItem], float], None]

EDITABLE_FIELDS = frozenset({"name", "quantity", "unit_price", "priority"})


def _coerce_quantity(value: Any) -> int:
    """Whole quantity of at least one; unparseable input becomes one."""
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, quantity)


def _coerce_price(value: Any) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(price) or math.isinf(price):
        return 0.0
    return max(0.0, price)


class EstimateReview:
    """Working copy of a rug's service list until the estimate is approved.

    Inline edits are coerced the way the review form's inputs coerce
    them: a quantity below one or one that does not parse becomes one,
    and a negative or unparseable price becomes zero.
    """

    def __init__(
        self,
        services: Iterable[ServiceItem] = (),
        on_approve: ApproveCallback | None = None,
    ) -> None:
        self._services = [s.model_copy() for s in services]
        self._on_approve = on_approve
        self.approved = False

    @classmethod
    def from_report(
        cls,
        report: str,
        catalog: Iterable[CatalogPrice] = (),
        on_approve: ApproveCallback | None = None,
    ) -> EstimateReview:
        services = apply_catalog_prices(ReportTextParser().parse(report), catalog)
        return cls(services, on_approve=on_approve)

    @property
    def services(self) -> list[ServiceItem]:
        return [s.model_copy() for s in self._services]

    def _index(self, service_id: str) -> int:
        for index, service in enumerate(self._services):
            if service.id == service_id:
                return index
        raise UnknownServiceError(service_id)

    def _check_open(self) -> None:
        if self.approved:
            raise EstimateAlreadyApprovedError("Estimate has already been approved")

    def add_service(self) -> ServiceItem:
        """Append a blank "New Service" line and return it."""
        self._check_open()
        service = ServiceItem(name=DEFAULT_SERVICE_NAME)
        self._services.append(service)
        return service.model_copy()

    def update_service(self, service_id: str, **changes: Any) -> ServiceItem:
        self._check_open()
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")
        if "quantity" in changes:
            changes["quantity"] = _coerce_quantity(changes["quantity"])
        if "unit_price" in changes:
            changes["unit_price"] = _coerce_price(changes["unit_price"])

        index = self._index(service_id)
        # Validate the whole edit before applying any of it.
        updated = ServiceItem.model_validate(
            {**self._services[index].model_dump(), **changes}
        )
        self._services[index] = updated
        return updated.model_copy()

    def remove_service(self, service_id: str) -> None:
        self._check_open()
        del self._services[self._index(service_id)]

    def total(self) -> float:
        return round_cents(sum(s.quantity * s.unit_price for s in self._services))

    def approve(self) -> tuple[list[ServiceItem], float]:
        """Finalize the list and hand it to ``on_approve`` exactly once."""
        self._check_open()
        if not self._services:
            raise EmptyEstimateError("Please add at least one service")
        services = self.services
        total = self.total()
        if self._on_approve is not None:
            self._on_approve(services, total)
        self.approved = True
        logger.info("Approved estimate with %d service(s), total %.2f", len(services), total)
        return services, total
