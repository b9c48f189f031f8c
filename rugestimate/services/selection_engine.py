"""Client-side service selection with mandatory line items.

Each rug starts with every service selected.  Cleaning and washing
services (see :func:`~rugestimate.models.service.is_mandatory_name`) can
never be deselected: single toggles ignore them and "clear optional"
resets a rug to exactly its mandatory subset.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rugestimate.errors import EmptySelectionError, UnknownRugError, UnknownServiceError
from rugestimate.models.selection import (
    CheckoutPayload,
    CheckoutRug,
    RugSelectionSummary,
    RugServices,
)
from rugestimate.models.service import ServiceItem
from rugestimate.services.money import round_cents

logger = logging.getLogger(__name__)


class SelectionEngine:
    """Per-rug selected-service sets plus running totals."""

    def __init__(self, rugs: Iterable[RugServices]) -> None:
        self._rugs: dict[str, RugServices] = {}
        self._selected: dict[str, set[str]] = {}
        for rug in rugs:
            self._rugs[rug.id] = rug.model_copy(deep=True)
            self._selected[rug.id] = {service.id for service in rug.services}

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def rug_ids(self) -> list[str]:
        return list(self._rugs)

    def _rug(self, rug_id: str) -> RugServices:
        try:
            return self._rugs[rug_id]
        except KeyError:
            raise UnknownRugError(rug_id) from None

    def services(self, rug_id: str) -> list[ServiceItem]:
        return list(self._rug(rug_id).services)

    def mandatory_ids(self, rug_id: str) -> set[str]:
        return {s.id for s in self._rug(rug_id).services if s.is_mandatory}

    def selected_ids(self, rug_id: str) -> set[str]:
        self._rug(rug_id)
        return set(self._selected[rug_id])

    def is_selected(self, rug_id: str, service_id: str) -> bool:
        return service_id in self.selected_ids(rug_id)

    def selected_services(self, rug_id: str) -> list[ServiceItem]:
        """Selected services for *rug_id* in their original order."""
        selected = self.selected_ids(rug_id)
        return [s for s in self._rug(rug_id).services if s.id in selected]

    def is_all_selected(self, rug_id: str) -> bool:
        return len(self.selected_ids(rug_id)) == len(self._rug(rug_id).services)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def toggle(self, rug_id: str, service_id: str) -> bool:
        """Flip *service_id*; mandatory services are left selected.

        Returns whether the service is selected afterwards.
        """
        rug = self._rug(rug_id)
        service = next((s for s in rug.services if s.id == service_id), None)
        if service is None:
            raise UnknownServiceError(service_id)
        selected = self._selected[rug_id]
        if service.is_mandatory:
            return True
        if service_id in selected:
            selected.discard(service_id)
            return False
        selected.add(service_id)
        return True

    def toggle_all(self, rug_id: str, select_all: bool) -> None:
        """Select every service, or reset to exactly the mandatory subset."""
        rug = self._rug(rug_id)
        if select_all:
            self._selected[rug_id] = {s.id for s in rug.services}
        else:
            self._selected[rug_id] = self.mandatory_ids(rug_id)

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def total(self, rug_id: str) -> float:
        return round_cents(
            sum(s.quantity * s.unit_price for s in self.selected_services(rug_id))
        )

    def grand_total(self) -> float:
        return round_cents(sum(self.total(rug_id) for rug_id in self._rugs))

    def selected_count(self) -> int:
        return sum(len(selected) for selected in self._selected.values())

    def total_services(self) -> int:
        return sum(len(rug.services) for rug in self._rugs.values())

    def summary(self, rug_id: str) -> RugSelectionSummary:
        rug = self._rug(rug_id)
        selected = self.selected_ids(rug_id)
        return RugSelectionSummary(
            rug_id=rug.id,
            rug_number=rug.rug_number,
            selected_ids=[s.id for s in rug.services if s.id in selected],
            mandatory_ids=[s.id for s in rug.services if s.is_mandatory],
            all_selected=self.is_all_selected(rug_id),
            total=self.total(rug_id),
        )

    def checkout(self) -> CheckoutPayload:
        """Build the payment request body from the current selection."""
        if self.selected_count() == 0:
            raise EmptySelectionError("Please select at least one service")
        rugs = [
            CheckoutRug(
                rug_number=rug.rug_number,
                services=self.selected_services(rug_id),
            )
            for rug_id, rug in self._rugs.items()
            if self._selected[rug_id]
        ]
        payload = CheckoutPayload(selected_services=rugs, total_amount=self.grand_total())
        logger.info(
            "Checkout for %d service(s) across %d rug(s), total %.2f",
            self.selected_count(),
            len(rugs),
            payload.total_amount,
        )
        return payload
