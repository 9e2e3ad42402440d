"""
Helpers for deriving the owned item set from a Bungie Destiny profile response.

The profile document is the "Response" payload of
/Destiny2/{membershipType}/Profile/{membershipId}/ requested with the
profile inventory, character inventory and character equipment components.
"""
import logging
from typing import Iterator

from constants import CLASS_TYPE_MAP
from helpers import normalize_item_hash


def _component_items(component: dict | None) -> list[dict]:
    return ((component or {}).get("data") or {}).get("items") or []


def _iter_profile_items(profile: dict) -> Iterator[dict]:
    """Yield every raw item entry from the vault, character inventories and character equipment."""
    yield from _component_items(profile.get("profileInventory"))
    for container in ("characterInventories", "characterEquipment"):
        per_character = ((profile.get(container) or {}).get("data") or {})
        for char_data in per_character.values():
            yield from (char_data or {}).get("items") or []


def collect_items_from_profile(profile: dict | None) -> frozenset[str]:
    """
    Collect the hashes of every item the profile holds.

    Args:
        profile (dict): Bungie profile response payload.

    Returns:
        frozenset[str]: Unsigned item hash strings.
    """
    if not profile:
        return frozenset()
    hashes = frozenset(
        normalize_item_hash(item["itemHash"])
        for item in _iter_profile_items(profile)
        if item.get("itemHash") is not None
    )
    logging.info("Collected %d distinct item hashes from profile %s", len(hashes), profile_membership_id(profile))
    return hashes


def profile_membership_id(profile: dict) -> str | None:
    """Return the Destiny membership ID a profile belongs to."""
    membership = profile.get("membership") or {}
    if membership.get("membershipId"):
        return str(membership["membershipId"])
    user_info = (((profile.get("profile") or {}).get("data") or {}).get("userInfo") or {})
    membership_id = user_info.get("membershipId")
    return str(membership_id) if membership_id else None


def summarize_profile(profile: dict) -> dict:
    """
    Summarize a profile for profile selection.

    Returns:
        dict: membershipId, membershipType, displayName and the class tags of its characters.
    """
    membership = profile.get("membership") or {}
    user_info = (((profile.get("profile") or {}).get("data") or {}).get("userInfo") or {})
    characters = ((profile.get("characters") or {}).get("data") or {})
    return {
        "membershipId": profile_membership_id(profile),
        "membershipType": membership.get("membershipType", user_info.get("membershipType")),
        "displayName": membership.get("displayName") or user_info.get("displayName"),
        "characters": [
            CLASS_TYPE_MAP.get(char.get("classType"), str(char.get("classType")))
            for char in characters.values()
        ],
    }
