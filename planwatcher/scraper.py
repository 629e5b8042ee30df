"""HTML scraper for floor plan availability pages."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import requests
from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from .models import FloorPlan, Snapshot, UnitAvailability

logger = logging.getLogger(__name__)

USER_AGENT = "PlanWatcher/1.0"
NO_AVAILABILITY_MARKER = "No Plans Currently Available"
SQUARE_FOOTAGE_MARKER = "Sq"
BULLET_PATTERN = re.compile(r"[•·∙●▪‣◦|]")
TRAILING_NUMBER = re.compile(r"(\d[\d,.]*)\s*$")


class ParseError(ValueError):
    """Raised when a document cannot be loaded as markup at all."""


@dataclass(frozen=True)
class FloorPlanSelectors:
    """CSS selectors bound to the markup of the monitored site."""

    container: str = ".onebed:nth-child(2) .accordion-content .accordionsub-container"
    entry: str = "> a"
    heading: str = ".accordionsub-toggle"
    availability: str = ".accordionsub-content"
    row: str = ".avail-row"
    unit: str = ".avail-unit .right"
    available_on: str = ".avail-date .right"
    price: str = ".avail-price .right"


DEFAULT_SELECTORS = FloorPlanSelectors()


def fetch_document(
    url: str,
    timeout: int = 20,
    session: requests.Session | None = None,
) -> str:
    """Download the availability page and return its decoded text."""
    logger.debug("Fetching availability page %s", url)
    getter = session.get if session is not None else requests.get
    response = getter(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
    response.raise_for_status()

    if not response.encoding or response.encoding.lower() == "iso-8859-1":
        response.encoding = response.apparent_encoding or "utf-8"

    logger.debug("Fetched %d characters from %s", len(response.text), url)
    return response.text


def parse_floor_plans(
    raw_document: str | bytes,
    selectors: FloorPlanSelectors = DEFAULT_SELECTORS,
) -> Snapshot:
    """Extract the ordered floor plans advertised in the document."""
    if not isinstance(raw_document, (str, bytes)):
        raise ParseError(
            f"Expected markup text, got {type(raw_document).__name__}"
        )
    try:
        soup = BeautifulSoup(raw_document, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(f"Document could not be parsed as markup: {exc}") from exc

    entry_count = len(soup.select(f"{selectors.container} {selectors.entry}"))
    headings = soup.select(f"{selectors.container} {selectors.heading}")
    blocks = soup.select(f"{selectors.container} {selectors.availability}")
    logger.debug("Found %d floor plan entries", entry_count)

    floor_plans: Snapshot = []
    for index in range(entry_count):
        heading = headings[index].get_text() if index < len(headings) else ""
        block = blocks[index] if index < len(blocks) else None
        name, square_footage = parse_floor_plan_heading(heading)
        floor_plans.append(
            FloorPlan(
                name=name,
                square_footage=square_footage,
                availability=parse_availability(block, selectors),
            )
        )
        logger.debug("Parsed floor plan #%d: %s", index + 1, name)
    return floor_plans


def parse_floor_plan_heading(text: str) -> Tuple[str, str]:
    """Split a heading such as ``"Plan A1 • 1 Bed • 700 Sq. Ft."``."""
    trimmed = text.strip()
    name = " ".join(trimmed.split()[:2])
    last_segment = BULLET_PATTERN.split(trimmed)[-1]
    before_marker = last_segment.split(SQUARE_FOOTAGE_MARKER)[0]
    # Unrecognised separators leave the whole heading in the segment, so
    # only the number directly in front of the marker is kept.
    match = TRAILING_NUMBER.search(before_marker)
    if match:
        return name, match.group(1).rstrip(".,")
    return name, before_marker.strip()


def parse_availability(
    block: Optional[Tag],
    selectors: FloorPlanSelectors = DEFAULT_SELECTORS,
) -> Optional[Tuple[UnitAvailability, ...]]:
    if block is None:
        return None
    if NO_AVAILABILITY_MARKER in block.get_text():
        return None

    rows = block.select(selectors.row)
    # The first row is a template and never holds unit data.
    if len(rows) < 2:
        return None

    return tuple(
        UnitAvailability(
            unit=_select_text(row, selectors.unit),
            available_on=_select_text(row, selectors.available_on),
            price=_select_text(row, selectors.price),
        )
        for row in rows[1:]
    )


def scrape_floor_plans(
    url: str,
    timeout: int = 20,
    selectors: FloorPlanSelectors = DEFAULT_SELECTORS,
    session: requests.Session | None = None,
) -> Snapshot:
    """Fetch the availability page and parse it into a snapshot."""
    document = fetch_document(url, timeout=timeout, session=session)
    snapshot = parse_floor_plans(document, selectors)
    logger.info("Scraped %d floor plans from %s", len(snapshot), url)
    return snapshot


def _select_text(row: Tag, selector: str) -> str:
    parts: List[str] = [element.get_text() for element in row.select(selector)]
    return "".join(parts).strip()
