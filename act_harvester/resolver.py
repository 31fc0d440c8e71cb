"""
Candidate ad-group resolution.

Campaign names encode their language: a campaign is eligible for a language when
its name carries both the account-scope marker and that language's marker, and
eligible for 'other' when it carries the scope marker and no language marker.
"""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from .ledger import RunLedger
from .logging_config import setup_logging
from .models import AdGroupCandidate, Campaign, CandidateSet, Language

logger = setup_logging(__name__)


class NamingConvention:
    """Case-insensitive substring predicate on campaign names."""

    def __init__(self, scope_marker: str, language_markers: Optional[Mapping[str, str]] = None):
        self.scope_marker = scope_marker.lower()
        markers = language_markers or {}
        self.language_markers: Dict[Language, str] = {
            lang: str(markers.get(lang.value, lang.value)).lower() for lang in Language.specific()
        }

    def is_eligible(self, campaign_name: str, language: Language) -> bool:
        name = campaign_name.lower()
        if self.scope_marker not in name:
            return False
        if language is Language.OTHER:
            return not any(marker in name for marker in self.language_markers.values())
        return self.language_markers[language] in name


class CandidateResolver:
    """
    Resolves a language decision into a CandidateSet.

    Campaigns and ad groups are enumerated once per run. Ad-group candidates are
    cached by id so the keyword inventory loaded for one term (and updated as
    keywords are created) is the same object every later term sees.
    """

    def __init__(self, platform, convention: NamingConvention):
        self.platform = platform
        self.convention = convention
        self._campaigns: Optional[List[Campaign]] = None
        self._ad_groups: Dict[str, List[AdGroupCandidate]] = {}

    def _enabled_campaigns(self) -> List[Campaign]:
        if self._campaigns is None:
            self._campaigns = list(self.platform.list_campaigns(self.convention.scope_marker))
            logger.debug(f"Enumerated {len(self._campaigns)} in-scope campaigns")
        return self._campaigns

    def _enabled_ad_groups(self, campaign: Campaign) -> List[AdGroupCandidate]:
        if campaign.id not in self._ad_groups:
            self._ad_groups[campaign.id] = list(self.platform.list_ad_groups(campaign))
        return self._ad_groups[campaign.id]

    def eligible_campaigns(self, language: Language) -> List[Campaign]:
        return [c for c in self._enabled_campaigns() if self.convention.is_eligible(c.name, language)]

    def resolve_candidates(self, language: Language, ledger: Optional[RunLedger] = None) -> CandidateSet:
        candidates = CandidateSet()
        campaigns = self.eligible_campaigns(language)
        if not campaigns and ledger is not None:
            ledger.log(f"No enabled campaigns eligible for language: {language.value}")

        for campaign in campaigns:
            for ad_group in self._enabled_ad_groups(campaign):
                candidates.add(ad_group)

        if candidates.is_empty() and ledger is not None:
            ledger.log(f"No enabled ad groups found for language: {language.value}")
        return candidates
