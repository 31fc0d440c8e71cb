"""
Harvester data models - search terms, vocabularies, ad-group candidates, keyword
records, and tagged oracle outcomes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, List, Optional, Set, TypeVar, Union

T = TypeVar("T")


class Language(str, Enum):
    """Closed set of language decisions."""
    FR = "fr"
    IT = "it"
    ES = "es"
    DE = "de"
    ZH = "zh"
    OTHER = "other"

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["Language"]:
        """Strict membership: returns None for anything outside the enumeration."""
        if text is None:
            return None
        value = text.strip().lower()
        for member in cls:
            if member.value == value:
                return member
        return None

    @classmethod
    def specific(cls) -> List["Language"]:
        return [m for m in cls if m is not cls.OTHER]


class MatchType(str, Enum):
    EXACT = "EXACT"
    PHRASE = "PHRASE"

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["MatchType"]:
        if text is None:
            return None
        value = text.strip().upper()
        for member in cls:
            if member.value == value:
                return member
        return None

    def wrap(self, text: str) -> str:
        """Keyword text in the platform's delimiter notation ([exact], "phrase")."""
        if self is MatchType.EXACT:
            return f"[{text}]"
        return f'"{text}"'

    @property
    def label(self) -> str:
        if self is MatchType.EXACT:
            return "[Exact Match]"
        return '"Phrase Match"'


@dataclass(frozen=True)
class SearchTerm:
    """A converting query that no keyword covers yet."""
    text: str
    campaign_id: Optional[str] = None
    conversions: float = 0.0

    @property
    def normalized_text(self) -> str:
        return self.text.lower()


@dataclass(frozen=True)
class Campaign:
    id: str
    name: str


@dataclass
class ExistingKeywords:
    """Lowercased, trimmed keyword texts already present in an ad group, per match type."""
    exact: Set[str] = field(default_factory=set)
    phrase: Set[str] = field(default_factory=set)

    def for_match_type(self, match_type: MatchType) -> Set[str]:
        if match_type is MatchType.EXACT:
            return self.exact
        return self.phrase

    def contains(self, match_type: MatchType, text: str) -> bool:
        return text.strip().lower() in self.for_match_type(match_type)

    def add(self, match_type: MatchType, text: str) -> None:
        self.for_match_type(match_type).add(text.strip().lower())


@dataclass
class AdGroupCandidate:
    """An enabled ad group that may receive a search term."""
    id: str
    name: str
    campaign_id: str
    campaign_name: str
    # None until first loaded from the platform
    existing_keywords: Optional[ExistingKeywords] = None

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)


@dataclass
class CandidateSet:
    """Ad groups grouped by normalized name, names kept in first-seen order."""
    by_name: Dict[str, List[AdGroupCandidate]] = field(default_factory=dict)
    ordered_names: List[str] = field(default_factory=list)

    def add(self, candidate: AdGroupCandidate) -> None:
        name = candidate.normalized_name
        if name not in self.by_name:
            self.by_name[name] = []
            self.ordered_names.append(name)
        self.by_name[name].append(candidate)

    def groups_for(self, name: str) -> List[AdGroupCandidate]:
        return self.by_name.get(name, [])

    def is_empty(self) -> bool:
        return not self.ordered_names


@dataclass(frozen=True)
class KeywordMutationRequest:
    ad_group_id: str
    text: str
    match_type: MatchType
    bid: float

    @property
    def display_text(self) -> str:
        return self.match_type.wrap(self.text)


@dataclass(frozen=True)
class KeywordRecord:
    """A keyword created during this run."""
    ad_group_id: str
    text: str
    match_type: MatchType
    resource_name: str = ""

    @property
    def display_text(self) -> str:
        return self.match_type.wrap(self.text)


@dataclass(frozen=True)
class Label:
    name: str
    resource_name: str
    description: str = ""


@dataclass(frozen=True)
class ReportRow:
    campaign_name: str
    ad_group_name: str
    keywords_added: str


# Tagged oracle outcomes. Each oracle result is inspected exactly once, where the
# fallback policy lives.

@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    raw_text: str


@dataclass(frozen=True)
class Unavailable:
    reason: str


OracleOutcome = Union[Success, Invalid, Unavailable]


def normalize_name(name: str) -> str:
    return name.strip().lower()
