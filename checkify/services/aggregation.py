"""Folding per-page outcomes into the extraction result and its metadata."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from checkify.schemas.common import PaginationResult
from checkify.schemas.extraction import ExtractionLimits, ExtractionMetadata, PageCheckboxes
from checkify.schemas.notion import NotionPage
from checkify.schemas.tier import TierResolution


@dataclass
class ExtractionTally:
    """
    Running totals for one extraction, fed one batch at a time.

    Pages without checkboxes are dropped from the output but still count as
    processed. A page whose child fetch failed contributes its error and no
    checkboxes.
    """

    total_pages: int
    processed_pages: int = 0
    total_checkboxes: int = 0
    pages_with_checkboxes: int = 0
    errors: list[str] = field(default_factory=list)

    def add(self, outcomes: Iterable[PageCheckboxes]) -> list[PageCheckboxes]:
        """Account for a batch of outcomes; return the ones worth delivering."""
        kept: list[PageCheckboxes] = []
        for outcome in outcomes:
            self.processed_pages += 1
            self.total_checkboxes += len(outcome.checkboxes)
            if outcome.error:
                self.errors.append(outcome.error)
            if outcome.checkboxes:
                kept.append(outcome)
        self.pages_with_checkboxes += len(kept)
        return kept

    @property
    def percent_complete(self) -> int:
        if not self.total_pages:
            return 100
        # Round half up
        return math.floor(self.processed_pages / self.total_pages * 100 + 0.5)

    def metadata(
        self,
        page_result: PaginationResult[NotionPage],
        tier: TierResolution,
    ) -> ExtractionMetadata:
        """
        Final metadata for the extraction.

        extraction_complete only reflects page-level truncation and per-page
        errors; a page whose checkboxes hit the per-page cap still counts as
        complete.
        """
        limits = tier.limits
        return ExtractionMetadata(
            total_pages=self.total_pages,
            total_checkboxes=self.total_checkboxes,
            pages_with_checkboxes=self.pages_with_checkboxes,
            extraction_complete=not page_result.was_limited and not self.errors,
            errors=list(self.errors),
            limits=ExtractionLimits(
                tier=tier.tier,
                tier_source=tier.source,
                max_pages=limits.max_pages,
                max_checkboxes_per_page=limits.max_checkboxes_per_page,
                pages_limited=page_result.was_limited,
                reached_page_limit=(
                    page_result.was_limited and page_result.total_count >= limits.max_pages
                ),
            ),
        )


def aggregate(
    outcomes: Iterable[PageCheckboxes],
    page_result: PaginationResult[NotionPage],
    tier: TierResolution,
) -> tuple[list[PageCheckboxes], ExtractionMetadata]:
    """Filter outcomes down to pages with checkboxes and summarize the extraction."""
    tally = ExtractionTally(total_pages=page_result.total_count)
    kept = tally.add(outcomes)
    return kept, tally.metadata(page_result, tier)
