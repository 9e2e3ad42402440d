"""
Character class classification for Destiny item type labels.
"""
from typing import Any

from constants import CLASS_TAGS, NO_CLASS


def classify(type_label: Any) -> str:
    """
    Determine which character class an item type label belongs to.

    The label is case-folded and tested for the substrings "warlock", "titan"
    and "hunter" in that order; the first match wins.

    Args:
        type_label (Any): Free-text type label, e.g. "Warlock Helmet". Non-string labels are compared by their str() form.

    Returns:
        str: One of "warlock", "titan", "hunter" or "none".
    """
    name = str(type_label or "").casefold()
    for tag in CLASS_TAGS:
        if tag in name:
            return tag
    return NO_CLASS
