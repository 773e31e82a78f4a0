"""Tests for keyword categorization of key phrases"""
from services.categorization import categorize_key_phrases


def test_single_category_match():
    assert categorize_key_phrases(["my college graduation"]) == ["education"]


def test_matching_is_case_insensitive_substring():
    """Keywords match anywhere inside a phrase, regardless of case"""
    assert categorize_key_phrases(["Surprise BIRTHDAY dinner"]) == ["celebration"]
    assert categorize_key_phrases(["homework"]) == ["career"]  # contains "work"


def test_multiple_categories_keep_fixed_order():
    phrases = ["hospital visit", "family reunion", "business trip", "new job"]

    # Order follows the category table, not the phrase order
    assert categorize_key_phrases(phrases) == ["career", "travel", "family", "health"]


def test_each_category_reported_once():
    assert categorize_key_phrases(["wedding", "marriage", "engagement party"]) == [
        "celebration",
        "relationship",
    ]


def test_no_match_falls_back_to_general():
    assert categorize_key_phrases(["quiet afternoon", "coffee"]) == ["general"]


def test_empty_phrases_fall_back_to_general():
    assert categorize_key_phrases([]) == ["general"]
