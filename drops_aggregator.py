# pylint: disable=line-too-long
"""
Drop aggregation for the Destiny raid drops tracker.

Combines a drop catalog document (activities, drop lists, items) with the set of item
hashes the current player owns and produces the normalized activity view:
- item resolution with character class and ownership annotation
- drop list and section resolution per activity
- activity display name overrides
- the display list, de-duplicated by effective activity name

All functions are pure: inputs are never mutated and outputs never share objects with them.
"""
import logging
from typing import Any, Iterable, List, Mapping, Optional

from constants import ACTIVITY_NAME_OVERRIDES, MISSING_ITEM_POLICIES, MISSING_ITEM_POLICY
from helpers import normalize_item_hash, normalize_owned_set
from models import DropItem, DropSection, NormalizedActivity, NormalizedResult


class DanglingReferenceError(LookupError):
    """
    Raised when a drop list references an item hash that is missing from the catalog.

    Attributes:
        item_hash: The unresolved item hash.
        context (str): Where the reference was found (activity / drop list / section).
    """

    def __init__(self, item_hash, context: str = ""):
        self.item_hash = item_hash
        self.context = context
        message = f"Item {item_hash} is not in the catalog"
        if context:
            message = f"{message} (referenced from {context})"
        super().__init__(message)


def catalog_items(catalog: Mapping) -> Mapping:
    """
    Return the item mapping of a catalog document.

    Older documents carry the mapping under "strikeItemHashes" instead of "items".
    """
    return catalog.get("items") or catalog.get("strikeItemHashes") or {}


def _lookup(mapping: Mapping, key) -> Optional[dict]:
    """Look a hash or id up in a decoded JSON mapping whose keys may be strings or ints."""
    if key is None:
        return None
    if key in mapping:
        return mapping[key]
    norm = normalize_item_hash(key)
    if norm in mapping:
        return mapping[norm]
    if str(key) in mapping:
        return mapping[str(key)]
    try:
        return mapping.get(int(norm))
    except ValueError:
        return None


def resolve_items(
    item_hashes: Optional[Iterable[int | str]],
    items: Mapping,
    owned: Optional[frozenset[str]] = None,
    missing_item_policy: str = MISSING_ITEM_POLICY,
    context: str = "",
) -> List[DropItem]:
    """
    Resolve an ordered sequence of item hashes into augmented DropItems.

    Args:
        item_hashes (iterable or None): Item hashes in drop order.
        items (Mapping): Catalog item mapping.
        owned (frozenset[str] | None): Normalized owned hashes, or None when no player is known.
        missing_item_policy (str): "raise" or "skip" for hashes absent from the catalog.
        context (str): Description of the referencing drop list, used in errors and logs.

    Returns:
        List[DropItem]: Resolved items in input order.

    Raises:
        DanglingReferenceError: If a hash is missing and the policy is "raise".
    """
    resolved = []
    for item_hash in item_hashes or []:
        item_def = _lookup(items, item_hash)
        if item_def is None:
            if missing_item_policy == "skip":
                logging.warning("Skipping unknown item %s referenced from %s", item_hash, context or "drop list")
                continue
            raise DanglingReferenceError(item_hash, context)
        resolved.append(DropItem.from_catalog(item_hash, item_def, owned))
    return resolved


def effective_activity_name(activity: Mapping) -> Any:
    """Return the override name for an activity hash if one exists, else the catalog name."""
    activity_hash = activity.get("activityHash")
    if activity_hash is not None:
        try:
            override = ACTIVITY_NAME_OVERRIDES.get(int(normalize_item_hash(activity_hash)))
        except ValueError:
            override = None
        if override:
            return override
    return activity.get("activityName")


def normalize_activity(
    activity: Mapping,
    catalog: Mapping,
    owned: Optional[frozenset[str]] = None,
    missing_item_policy: str = MISSING_ITEM_POLICY,
) -> NormalizedActivity:
    """
    Resolve one catalog activity into a NormalizedActivity.

    An activity whose drop list cannot be found keeps drops and sections unset.

    Args:
        activity (Mapping): Catalog activity.
        catalog (Mapping): Full catalog document.
        owned (frozenset[str] | None): Normalized owned hashes.
        missing_item_policy (str): Policy for unknown item hashes.

    Returns:
        NormalizedActivity: The resolved activity.
    """
    activity_name = effective_activity_name(activity)
    drop_list_id = activity.get("dropListID")
    drop_list = _lookup(catalog.get("dropLists") or {}, drop_list_id)
    if drop_list is None:
        return NormalizedActivity.from_catalog(activity, activity_name)

    items = catalog_items(catalog)
    context = f"activity {activity.get('activityHash')} drop list {drop_list_id}"
    drops = resolve_items(drop_list.get("items"), items, owned, missing_item_policy, context)
    sections = []
    for index, section in enumerate(drop_list.get("sections") or []):
        section_context = f"{context} section {section.get('name', index)}"
        section_items = resolve_items(section.get("items"), items, owned, missing_item_policy, section_context)
        sections.append(DropSection.from_catalog(section, section_items))
    return NormalizedActivity.from_catalog(activity, activity_name, drops=drops, sections=sections)


def build_display_list(activities: Iterable[NormalizedActivity]) -> List[NormalizedActivity]:
    """
    Select activities with a resolved drop list, keeping the first of each display name.

    Args:
        activities (iterable): Normalized activities in catalog order.

    Returns:
        List[NormalizedActivity]: De-duplicated activities in catalog order.
    """
    seen = set()
    display_list = []
    for activity in activities:
        if not activity.has_drops:
            continue
        if activity.activityName in seen:
            continue
        seen.add(activity.activityName)
        display_list.append(activity)
    return display_list


def normalize(
    catalog: Mapping,
    owned: Optional[Iterable[int | str]] = None,
    missing_item_policy: str = MISSING_ITEM_POLICY,
) -> NormalizedResult:
    """
    Build the normalized drop view for a catalog and an optional owned item set.

    Args:
        catalog (Mapping): Decoded catalog document with "activities", "dropLists" and "items".
        owned (iterable or None): Item hashes the player owns; None marks every item as not obtained.
        missing_item_policy (str): "raise" (default) aborts on a dangling item reference, "skip" drops it.

    Returns:
        NormalizedResult: Every activity keyed by catalog id plus the display list.

    Raises:
        ValueError: If missing_item_policy is not a known policy.
        DanglingReferenceError: If an item reference cannot be resolved under the "raise" policy.
    """
    if missing_item_policy not in MISSING_ITEM_POLICIES:
        raise ValueError(f"Unknown missing item policy: {missing_item_policy}")
    owned_set = normalize_owned_set(owned)
    activities = {
        activity_id: normalize_activity(activity, catalog, owned_set, missing_item_policy)
        for activity_id, activity in (catalog.get("activities") or {}).items()
    }
    display_list = build_display_list(activities.values())
    logging.debug(
        "Normalized %d activities (%d displayed), owned set %s",
        len(activities), len(display_list), "absent" if owned_set is None else f"of {len(owned_set)}")
    return NormalizedResult(activities=activities, display_list=display_list)


def filter_by_class(activities: Iterable[NormalizedActivity], visible: Mapping[str, bool]) -> List[NormalizedActivity]:
    """
    Hide drop items of character classes toggled off.

    Args:
        activities (iterable): Normalized activities.
        visible (Mapping[str, bool]): Class tag -> whether to show it. Unlisted classes stay visible.

    Returns:
        List[NormalizedActivity]: Copies of the activities with hidden items removed.
    """
    def keep(item: DropItem) -> bool:
        return visible.get(item.characterClass, True)

    filtered = []
    for activity in activities:
        if not activity.has_drops:
            filtered.append(activity.model_copy(deep=True))
            continue
        drops = [item.model_copy(deep=True) for item in activity.drops if keep(item)]
        sections = [
            section.model_copy(update={"items": [i.model_copy(deep=True) for i in section.items if keep(i)]}, deep=True)
            for section in activity.sections or []
        ]
        filtered.append(activity.model_copy(update={"drops": drops, "sections": sections}, deep=True))
    return filtered
