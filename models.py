# pylint: disable=line-too-long
"""
Models for the Destiny raid drops tracker.

This module defines Pydantic models for the normalized drop view.
Includes:
- DropItem: catalog item augmented with character class and ownership.
- DropSection: labelled group of drop items within a drop list.
- NormalizedActivity: activity with effective name and resolved drops.
- NormalizedResult: full activity mapping plus the de-duplicated display list.

Fields not declared on a model are passed through from the catalog unchanged.
"""
import copy
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from classifier import classify
from constants import NO_CLASS
from helpers import normalize_item_hash


def _passthrough(document: dict, declared: Iterable[str]) -> Dict[str, Any]:
    """Deep copy every key of a catalog document that is not a declared model field."""
    return {k: copy.deepcopy(v) for k, v in (document or {}).items() if k not in declared}


class DropItem(BaseModel):
    """
    Pydantic model for a catalog item as shown in a drop list.

    Attributes:
        itemHash (Any): Destiny item hash as the catalog gives it.
        itemTypeDisplayName (Any): Free-text type label (e.g. "Warlock Helmet").
        characterClass (str): Class tag derived from the type label.
        obtained (bool): Whether the current player owns the item.
    """
    model_config = ConfigDict(extra="allow")

    itemHash: Any
    itemTypeDisplayName: Any = None
    characterClass: str = NO_CLASS
    obtained: bool = False

    @classmethod
    def from_catalog(
        cls,
        item_hash: int | str,
        item_def: dict,
        owned: Optional[frozenset[str]] = None,
    ) -> "DropItem":
        """
        Build a DropItem from a catalog item definition without mutating it.

        Args:
            item_hash (int | str): Hash the drop list referenced the item by.
            item_def (dict): Catalog item definition.
            owned (frozenset[str] | None): Normalized owned item hashes, or None when no player is known.
        """
        type_name = item_def.get("itemTypeDisplayName")
        raw_hash = item_def.get("itemHash", item_hash)
        norm_hash = normalize_item_hash(raw_hash)
        extras = _passthrough(item_def, cls.model_fields)
        return cls(
            itemHash=raw_hash,
            itemTypeDisplayName=type_name,
            characterClass=classify(type_name),
            obtained=owned is not None and norm_hash in owned,
            **extras,
        )


class DropSection(BaseModel):
    """
    Pydantic model for a labelled section of a drop list.

    Attributes:
        items (List[DropItem]): Items in the section, in catalog order.
    """
    model_config = ConfigDict(extra="allow")

    items: List[DropItem] = list()

    @classmethod
    def from_catalog(cls, section: dict, items: List[DropItem]) -> "DropSection":
        """Build a DropSection from a catalog section and its resolved items."""
        return cls(items=items, **_passthrough(section, cls.model_fields))


class NormalizedActivity(BaseModel):
    """
    Pydantic model for an activity with its drops resolved.

    Attributes:
        activityHash (Any): Destiny activity hash.
        activityName (Any): Effective display name (after overrides).
        dropListID (Any): Drop list reference from the catalog.
        drops (Optional[List[DropItem]]): Top-level drops; None when no drop list resolved.
        sections (Optional[List[DropSection]]): Drop sections; None when no drop list resolved.
    """
    model_config = ConfigDict(extra="allow")

    activityHash: Any = None
    activityName: Any = None
    dropListID: Any = None
    drops: Optional[List[DropItem]] = None
    sections: Optional[List[DropSection]] = None

    @classmethod
    def from_catalog(
        cls,
        activity: dict,
        activity_name: Any,
        drops: Optional[List[DropItem]] = None,
        sections: Optional[List[DropSection]] = None,
    ) -> "NormalizedActivity":
        """Build a NormalizedActivity from a catalog activity and its resolved drop data."""
        return cls(
            activityHash=activity.get("activityHash"),
            activityName=activity_name,
            dropListID=activity.get("dropListID"),
            drops=drops,
            sections=sections,
            **_passthrough(activity, cls.model_fields),
        )

    @property
    def has_drops(self) -> bool:
        """True when a drop list resolved for this activity, even if it holds no items."""
        return self.drops is not None

    def iter_items(self):
        """Yield every resolved item, top-level drops first, then section items."""
        for item in self.drops or []:
            yield item
        for section in self.sections or []:
            yield from section.items

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dict, omitting drops/sections when undetermined."""
        data = self.model_dump()
        if self.drops is None:
            data.pop("drops", None)
        if self.sections is None:
            data.pop("sections", None)
        return data


class NormalizedResult(BaseModel):
    """
    Pydantic model for the output of one normalization pass.

    Attributes:
        activities (Dict[int | str, NormalizedActivity]): Every catalog activity keyed by its catalog id, in catalog order.
        display_list (List[NormalizedActivity]): Activities with drops, de-duplicated by display name.
    """
    activities: Dict[int | str, NormalizedActivity] = dict()
    display_list: List[NormalizedActivity] = list()

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dict."""
        return {
            "activities": {k: a.to_dict() for k, a in self.activities.items()},
            "displayList": [a.to_dict() for a in self.display_list],
        }
