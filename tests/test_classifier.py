"""Unit tests for the item type classifier."""
import pytest

# pylint: disable=import-error
from classifier import classify


@pytest.mark.parametrize("label, expected", [
    ("Warlock Helmet", "warlock"),
    ("Titan Mark", "titan"),
    ("Hunter Cloak", "hunter"),
    ("Exotic Boots", "none"),
    ("", "none"),
])
def test_classify_labels(label, expected):
    """Test classification of typical item type labels."""
    assert classify(label) == expected


def test_classify_is_case_insensitive():
    """Test that casing does not affect the result."""
    assert classify("WARLOCK Helmet") == classify("warlock helmet") == "warlock"
    assert classify("hUnTeR Gloves") == "hunter"


def test_classify_priority_order():
    """Test that the first class in warlock, titan, hunter order wins."""
    assert classify("Titan Hunter Hybrid") == "titan"
    assert classify("Hunter Titan Hybrid") == "titan"
    assert classify("hunter-warlock-titan") == "warlock"


def test_classify_none_label():
    """Test that a missing label is treated as unclassified."""
    assert classify(None) == "none"


def test_classify_non_string_label():
    """Test that labels of other JSON types are classified by their text form."""
    assert classify(42) == "none"
    assert classify(["Titan Mark"]) == "titan"
