"""Match-tier resolution tests."""

from catalog_search.catalog import CatalogItem
from catalog_search.tiers import (
    MatchTier,
    matches_fulltext,
    passes_stock_policy,
    resolve_tier,
    select_tier,
)
from catalog_search.tokenizer import expand_query, fulltext_expression

SINK = CatalogItem(id="1001", code="NQS_F4GM", ean="5901234123457")
SINK_WORDS = frozenset({"MODERN", "BATHROOM", "SINK", "AQUA"})


def test_tiers_are_ordered():
    assert MatchTier.EXACT > MatchTier.PARTIAL > MatchTier.FUZZY


def test_internal_code_split_by_whitespace_is_exact():
    terms = expand_query("nqs f4gm", "NQS F4GM")

    assert resolve_tier(SINK, terms, SINK_WORDS) is MatchTier.EXACT


def test_global_code_matches_raw_token():
    terms = expand_query("5901234123457", "5901234123457")

    assert resolve_tier(SINK, terms, frozenset()) is MatchTier.EXACT


def test_code_comparison_ignores_case():
    terms = expand_query("nqs_f4gm", "nqs_f4gm")

    assert resolve_tier(SINK, terms, frozenset()) is MatchTier.EXACT


def test_code_substring_is_partial():
    terms = expand_query("F4G", "F4G")

    assert resolve_tier(SINK, terms, frozenset()) is MatchTier.PARTIAL


def test_fulltext_prefix_match_is_partial():
    terms = expand_query("bathroom sink for modern", "BATHROOM SINK MODERN")

    assert resolve_tier(SINK, terms, SINK_WORDS) is MatchTier.PARTIAL


def test_no_match_is_fuzzy_candidate():
    terms = expand_query("kitchen tap", "KITCHEN TAP")

    assert resolve_tier(SINK, terms, SINK_WORDS) is MatchTier.FUZZY


def test_matches_fulltext_prefix_and_verbatim():
    assert matches_fulltext(fulltext_expression(["TAPS"]), frozenset({"TAP"}))
    assert matches_fulltext(fulltext_expression(["TAP"]), frozenset({"TAP"}))
    assert not matches_fulltext(fulltext_expression(["TA"]), frozenset({"TAP"}))
    assert not matches_fulltext(fulltext_expression([]), frozenset({"TAP"}))


def test_select_tier_picks_best_present():
    assert select_tier([]) is MatchTier.FUZZY
    assert select_tier([MatchTier.FUZZY, MatchTier.PARTIAL]) is MatchTier.PARTIAL
    assert select_tier([MatchTier.PARTIAL, MatchTier.EXACT, MatchTier.FUZZY]) is MatchTier.EXACT


def test_stock_policy_bypassed_only_for_exact():
    out_of_stock = CatalogItem(id="2", stock_eligible=False)

    assert passes_stock_policy(out_of_stock, MatchTier.EXACT)
    assert not passes_stock_policy(out_of_stock, MatchTier.PARTIAL)
    assert not passes_stock_policy(out_of_stock, MatchTier.FUZZY)
    assert passes_stock_policy(SINK, MatchTier.FUZZY)
