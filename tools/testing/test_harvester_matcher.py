"""
Ad-group matching tests.

Run: pytest tools/testing/test_harvester_matcher.py
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from act_harvester.errors import OracleUnavailable
from act_harvester.ledger import RunLedger
from act_harvester.matcher import build_prompt, find_candidate_in_response, select_best_match
from act_harvester.models import SearchTerm

from harvester_fakes import ScriptedOracle


def test_verbose_answer_selects_contained_candidate():
    names = ["chaussures homme", "chaussures femme"]
    oracle = ScriptedOracle(matches={"escarpins": "I'd recommend chaussures femme"})

    assert select_best_match(oracle, SearchTerm("escarpins"), names, RunLedger()) == "chaussures femme"


def test_no_listed_name_falls_back_to_first():
    names = ["shoes - red", "shoes - blue"]
    oracle = ScriptedOracle(matches={"green boots": "Boots - Green"})
    ledger = RunLedger()

    assert select_best_match(oracle, SearchTerm("green boots"), names, ledger) == "shoes - red"
    assert any("Defaulting to first option" in line for line in ledger.log_lines)


def test_unavailable_oracle_falls_back_to_first():
    names = ["shoes - red", "shoes - blue"]
    oracle = ScriptedOracle(matches={"red shoes": OracleUnavailable("connection reset")})
    ledger = RunLedger()

    assert select_best_match(oracle, SearchTerm("red shoes"), names, ledger) == "shoes - red"
    assert any("unavailable" in line for line in ledger.log_lines)


def test_answer_is_compared_lowercased():
    names = ["running shoes", "trail shoes"]
    assert find_candidate_in_response("Trail Shoes", names) == "trail shoes"


def test_candidate_order_breaks_ties_not_response_order():
    names = ["boots", "sandals"]
    # Both names appear; "sandals" comes first in the answer but "boots" first in the list
    assert find_candidate_in_response("sandals or maybe boots", names) == "boots"


def test_substring_candidate_shadows_longer_name():
    # Known ambiguity: "shoes" is contained in "shoes - red", and list order wins
    names = ["shoes", "shoes - red"]
    assert find_candidate_in_response("shoes - red", names) == "shoes"

    names = ["shoes - red", "shoes"]
    assert find_candidate_in_response("shoes - red", names) == "shoes - red"


def test_response_inside_candidate_does_not_match():
    # Only candidate-in-response counts, not response-in-candidate
    assert find_candidate_in_response("shoes", ["shoes - red"]) is None


def test_prompt_lists_names_in_order():
    prompt = build_prompt(SearchTerm("red shoes"), ["shoes - red", "shoes - blue"])
    assert "[shoes - red, shoes - blue]" in prompt
    assert '"red shoes"' in prompt


def test_empty_candidates_rejected():
    with pytest.raises(ValueError):
        select_best_match(ScriptedOracle(), SearchTerm("x"), [], RunLedger())
