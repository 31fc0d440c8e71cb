"""
Harvester Module: Converting Search Terms -> Keywords

Classifies each converting search term by language, picks the best matching
ad group with a semantic-matching oracle, adds the term as exact and phrase
keywords where missing, labels the new keywords and writes a run report.
"""

from .config import HarvesterConfig, load_harvester_config
from .engine import KeywordHarvester, RunSummary
from .ledger import RunContext, RunLedger
from .models import (
    AdGroupCandidate,
    CandidateSet,
    ExistingKeywords,
    KeywordRecord,
    Language,
    MatchType,
    SearchTerm,
)

__all__ = [
    'HarvesterConfig',
    'load_harvester_config',
    'KeywordHarvester',
    'RunSummary',
    'RunContext',
    'RunLedger',
    'AdGroupCandidate',
    'CandidateSet',
    'ExistingKeywords',
    'KeywordRecord',
    'Language',
    'MatchType',
    'SearchTerm',
]
