"""Search-term cleanup: trim, drop empties, drop repeats."""
from __future__ import annotations

from typing import Iterable, List, Optional, Set

from .ledger import RunLedger
from .models import SearchTerm


def normalize_term(term: SearchTerm) -> Optional[SearchTerm]:
    """Trimmed copy of the term, or None if nothing is left."""
    text = (term.text or "").strip()
    if not text:
        return None
    if text == term.text:
        return term
    return SearchTerm(text=text, campaign_id=term.campaign_id, conversions=term.conversions)


def unique_terms(terms: Iterable[SearchTerm], ledger: RunLedger) -> List[SearchTerm]:
    """
    Normalized terms in feed order, first occurrence only.

    The search-term feed reports a query once per ad group, so the same text can
    arrive several times for one campaign. Comparison is on the lowercase text.
    """
    seen: Set[str] = set()
    out: List[SearchTerm] = []
    for raw in terms:
        term = normalize_term(raw)
        if term is None:
            ledger.log(f"Skipping empty search term: {raw.text!r}")
            continue
        if term.normalized_text in seen:
            ledger.log(f"Skipping repeated search term: \"{term.text}\"")
            continue
        seen.add(term.normalized_text)
        out.append(term)
    return out
