"""
Duplicate-safe keyword creation.

A search term is offered to an ad group as an [exact] and a "phrase" keyword.
Each variant is created only when its lowercased text is not already in the ad
group's inventory for that match type; the two checks are independent.
"""
from __future__ import annotations

from typing import List

from .errors import MutationRejected
from .ledger import RunContext
from .logging_config import setup_logging
from .models import (
    AdGroupCandidate,
    ExistingKeywords,
    KeywordMutationRequest,
    MatchType,
    SearchTerm,
)

logger = setup_logging(__name__)

MATCH_TYPES = (MatchType.EXACT, MatchType.PHRASE)


class KeywordMutator:

    def __init__(self, platform, default_bid: float):
        self.platform = platform
        self.default_bid = default_bid

    def inventory(self, ad_group: AdGroupCandidate) -> ExistingKeywords:
        """Existing keywords of the ad group, loaded from the platform on first use."""
        if ad_group.existing_keywords is None:
            ad_group.existing_keywords = self.platform.get_existing_keywords(ad_group.id)
        return ad_group.existing_keywords

    def add_keywords(self, ad_group: AdGroupCandidate, term: SearchTerm, context: RunContext) -> str:
        """
        Create the missing keyword variants for a term.

        Returns a comma-joined summary of the variants actually created ("" if none).
        """
        existing = self.inventory(ad_group)
        normalized = term.normalized_text
        added: List[str] = []

        for match_type in MATCH_TYPES:
            if normalized in existing.for_match_type(match_type):
                logger.debug(f"{match_type.value} '{normalized}' already in ad group {ad_group.id}")
                continue

            request = KeywordMutationRequest(
                ad_group_id=ad_group.id,
                text=term.text,
                match_type=match_type,
                bid=self.default_bid,
            )
            try:
                record = self.platform.create_keyword(request)
            except MutationRejected as e:
                context.ledger.error(f"Failed to add {match_type.label} keyword: {', '.join(e.reasons) or e}")
                continue

            context.created_keywords.append(record)
            existing.add(match_type, normalized)
            added.append(request.display_text)
            context.ledger.log(
                f"Added {match_type.label} keyword to Ad Group '{ad_group.name}': {request.display_text}"
            )

        return ", ".join(added)
