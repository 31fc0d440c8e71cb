"""
Semantic ad-group matching.

The oracle picks one ad group name for a search term. The answer is accepted if a
candidate name occurs inside it; the first such candidate in list order wins, so a
verbose answer that wraps the name in extra words still counts. Otherwise the
first candidate is used.
"""
from __future__ import annotations

from typing import Optional, Sequence

from .errors import OracleUnavailable
from .ledger import RunLedger
from .models import Invalid, OracleOutcome, SearchTerm, Success, Unavailable

SYSTEM_MESSAGE = (
    "You are a semantic matching assistant. Your task is to match a user's "
    "search term to the most relevant ad group from a provided list."
)


def build_prompt(term: SearchTerm, candidate_names: Sequence[str]) -> str:
    list_str = ", ".join(candidate_names)
    return (
        f"From the following list of ad group names: [{list_str}].\n"
        f"Which ad group name is the best semantic match for the search term: \"{term.text}\"?\n"
        "Please return only the best matching ad group name from the list, "
        "exactly as it appears in the list."
    )


def find_candidate_in_response(content: str, candidate_names: Sequence[str]) -> Optional[str]:
    """First candidate (in list order) contained in the lowercased response."""
    haystack = content.lower()
    for name in candidate_names:
        if name and name in haystack:
            return name
    return None


def ask_best_match(oracle, term: SearchTerm, candidate_names: Sequence[str]) -> OracleOutcome:
    try:
        content = oracle.complete(SYSTEM_MESSAGE, build_prompt(term, candidate_names))
    except OracleUnavailable as e:
        return Unavailable(e.reason)

    name = find_candidate_in_response(content, candidate_names)
    if name is None:
        return Invalid(content)
    return Success(name)


def select_best_match(
    oracle, term: SearchTerm, candidate_names: Sequence[str], ledger: RunLedger
) -> str:
    if not candidate_names:
        raise ValueError("select_best_match requires at least one candidate name")

    outcome = ask_best_match(oracle, term, candidate_names)

    if isinstance(outcome, Success):
        return outcome.value

    if isinstance(outcome, Invalid):
        ledger.warning(
            f"Matching oracle returned no listed ad group name ({outcome.raw_text!r}). "
            "Defaulting to first option."
        )
    elif isinstance(outcome, Unavailable):
        ledger.error(f"Matching oracle unavailable ({outcome.reason}). Defaulting to first option.")
    return candidate_names[0]
