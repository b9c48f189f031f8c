"""Heuristic extraction of priced service lines from an AI estimate letter.

The letter is semi-structured prose produced by a language model.  Each
line is first classified into one of a small set of kinds (section
boundary, rug header, subtotal, service line, other) and a two-state
machine (inside / outside the breakdown section) decides what to do
with it.  Classification order is the tie-break order: a line that
looks like both a boundary heading and a service line is a boundary.

If the breakdown section yields nothing, a fallback pass scans every
line of the letter for ``Name: $amount`` pairs.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from rugestimate.models.service import CatalogPrice, ServiceItem
from rugestimate.services.money import AMOUNT_PATTERN, parse_amount

logger = logging.getLogger(__name__)

SECTION_START_PHRASES: tuple[str, ...] = (
    "rug breakdown",
    "estimate of services",
    "services and costs",
    "itemized list",
)
SECTION_END_PHRASES: tuple[str, ...] = (
    "total estimate",
    "total investment",
    "next steps",
    "sincerely",
    "additional protection",
)
RUG_HEADER_PREFIXES: tuple[str, ...] = ("rug #", "rug:")
FALLBACK_EXCLUDED_WORDS: tuple[str, ...] = ("subtotal", "total", "rug #")
MIN_NAME_LENGTH = 3

# A '$' is required so dimension strings like "8x10" never match.
_SERVICE_LINE_RE = re.compile(
    rf"^[-*]?\s*(?P<name>[^:]+?)\s*:\s*\$\s*(?P<amount>{AMOUNT_PATTERN})"
    r"(?!\d)(?!,\d)(?!\.\d)"
)
_LIST_MARKER_RE = re.compile(r"^(?:[-*•]+|#+\s+|#\d+\b[.):]?|\d+[.)])\s*")
_EMPHASIS_RE = re.compile(r"\*\*|__")


class LineKind(enum.Enum):
    BLANK = "blank"
    SECTION_START = "section_start"
    SECTION_END = "section_end"
    RUG_HEADER = "rug_header"
    SUBTOTAL = "subtotal"
    SERVICE = "service"
    PROSE = "prose"


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    name: str = ""
    price: float = 0.0


def _clean_name(raw: str) -> str:
    name = _EMPHASIS_RE.sub("", raw).strip()
    name = _LIST_MARKER_RE.sub("", name)
    return name.strip(" \t*_")


def match_service_line(line: str) -> tuple[str, float] | None:
    """Return ``(name, price)`` if *line* reads ``Name: $amount``."""
    match = _SERVICE_LINE_RE.match(line.strip())
    if match is None:
        return None
    price = parse_amount(match.group("amount"))
    if price is None:
        return None
    name = _clean_name(match.group("name"))
    if len(name) < MIN_NAME_LENGTH:
        return None
    return name, price


def classify_line(line: str) -> ClassifiedLine:
    """Classify one letter line for the breakdown-section state machine."""
    stripped = line.strip()
    if not stripped:
        return ClassifiedLine(LineKind.BLANK)

    lowered = stripped.lower()
    if any(phrase in lowered for phrase in SECTION_START_PHRASES):
        return ClassifiedLine(LineKind.SECTION_START)
    if any(phrase in lowered for phrase in SECTION_END_PHRASES):
        return ClassifiedLine(LineKind.SECTION_END)

    unmarked = _clean_name(lowered)
    if unmarked.startswith(RUG_HEADER_PREFIXES):
        return ClassifiedLine(LineKind.RUG_HEADER)
    if "subtotal" in lowered:
        return ClassifiedLine(LineKind.SUBTOTAL)

    service = match_service_line(stripped)
    if service is None:
        return ClassifiedLine(LineKind.PROSE)
    return ClassifiedLine(LineKind.SERVICE, name=service[0], price=service[1])


class _ServiceAccumulator:
    """Ordered, case-insensitively de-duplicated service list."""

    def __init__(self, count_duplicates: bool) -> None:
        self.count_duplicates = count_duplicates
        self._by_key: dict[str, ServiceItem] = {}

    def add(self, name: str, price: float) -> None:
        key = name.lower()
        existing = self._by_key.get(key)
        if existing is None:
            self._by_key[key] = ServiceItem(name=name, quantity=1, unit_price=price)
            return
        if self.count_duplicates:
            existing.quantity += 1
        # First non-zero price wins; later duplicates never overwrite it.
        if existing.unit_price == 0 and price > 0:
            existing.unit_price = price

    def items(self) -> list[ServiceItem]:
        return list(self._by_key.values())


class ReportTextParser:
    """Turns a raw estimate letter into an ordered list of ServiceItems.

    ``parse`` never raises; an unrecognizable letter yields ``[]`` and
    the review UI falls back to manual entry.
    """

    def parse(self, text: str) -> list[ServiceItem]:
        if not isinstance(text, str) or not text.strip():
            return []

        lines = text.splitlines()
        items = self._parse_breakdown(lines)
        if items:
            logger.debug("Extracted %d service(s) from breakdown section", len(items))
            return items

        items = self._parse_fallback(lines)
        if items:
            logger.info(
                "No breakdown section found; fallback pass extracted %d service(s)",
                len(items),
            )
        else:
            logger.debug("No priced service lines found in report")
        return items

    def _parse_breakdown(self, lines: Iterable[str]) -> list[ServiceItem]:
        services = _ServiceAccumulator(count_duplicates=True)
        in_breakdown = False

        for line in lines:
            classified = classify_line(line)
            if classified.kind is LineKind.SECTION_START:
                in_breakdown = True
            elif classified.kind is LineKind.SECTION_END:
                in_breakdown = False
            elif in_breakdown and classified.kind is LineKind.SERVICE:
                services.add(classified.name, classified.price)

        return services.items()

    def _parse_fallback(self, lines: Iterable[str]) -> list[ServiceItem]:
        services = _ServiceAccumulator(count_duplicates=False)

        for line in lines:
            service = match_service_line(line)
            if service is None:
                continue
            name, price = service
            lowered = name.lower()
            if any(word in lowered for word in FALLBACK_EXCLUDED_WORDS):
                continue
            services.add(name, price)

        return services.items()


def parse_report(text: str) -> list[ServiceItem]:
    """Module-level shortcut for :meth:`ReportTextParser.parse`."""
    return ReportTextParser().parse(text)


def apply_catalog_prices(
    items: list[ServiceItem], catalog: Iterable[CatalogPrice]
) -> list[ServiceItem]:
    """Fill zero prices from the business price list.

    An item matches a catalog entry when either name contains the other
    (case-insensitive).  Items that already carry a price are returned
    unchanged.  Returns new ServiceItem objects; *items* is not mutated.
    """
    entries = [(entry.name.lower(), entry.unit_price) for entry in catalog]
    priced: list[ServiceItem] = []
    for item in items:
        if item.unit_price == 0:
            name = item.name.lower()
            for catalog_name, unit_price in entries:
                if catalog_name in name or name in catalog_name:
                    item = item.model_copy(update={"unit_price": unit_price})
                    break
        priced.append(item)
    return priced
