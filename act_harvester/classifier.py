"""
Language classification of search terms.

The oracle must answer with one token from the closed vocabulary. Anything else,
or no answer at all, means Language.OTHER.
"""
from __future__ import annotations

from .errors import OracleUnavailable
from .ledger import RunLedger
from .models import Invalid, Language, OracleOutcome, SearchTerm, Success, Unavailable

SYSTEM_MESSAGE = (
    "You are a language detection assistant. "
    "You only return the language code for a given search term."
)


def build_prompt(term: SearchTerm) -> str:
    codes = ", ".join(lang.value for lang in Language.specific())
    return (
        "Please determine the language of the following search term. "
        f"Classify it as one of the following: {codes}, or {Language.OTHER.value}. "
        f"Return only the two-letter code or '{Language.OTHER.value}'.\n"
        f'Search Term: "{term.text}"'
    )


def ask_language(oracle, term: SearchTerm) -> OracleOutcome:
    try:
        content = oracle.complete(SYSTEM_MESSAGE, build_prompt(term))
    except OracleUnavailable as e:
        return Unavailable(e.reason)

    lang = Language.parse(content)
    if lang is None:
        return Invalid(content)
    return Success(lang)


def classify_language(oracle, term: SearchTerm, ledger: RunLedger) -> Language:
    outcome = ask_language(oracle, term)

    if isinstance(outcome, Success):
        lang = outcome.value
    elif isinstance(outcome, Invalid):
        ledger.warning(
            f"Language oracle returned an unexpected answer for \"{term.text}\": "
            f"{outcome.raw_text!r}. Defaulting to '{Language.OTHER.value}'."
        )
        lang = Language.OTHER
    else:
        ledger.error(
            f"Language oracle unavailable for \"{term.text}\": {outcome.reason}. "
            f"Defaulting to '{Language.OTHER.value}'."
        )
        lang = Language.OTHER

    ledger.log(f"Search term: \"{term.text}\" was identified as language: {lang.value}")
    return lang
