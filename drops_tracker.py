# pylint: disable=line-too-long
"""
DropsTracker: holds the current drop catalog and owned item set and keeps the normalized view up to date.

Responsibilities:
- Accept catalog replacements (per variation) and owned item set replacements (per profile)
- Recompute the normalized view when either input changes, reusing it when neither did
- Handle profile selection when the user has more than one Destiny profile
- Report whether the view is still loading, failed or ready
"""
import logging
import threading
from typing import Iterable, Optional

from constants import HEADER_TEXT, MISSING_ITEM_POLICY
from drops_aggregator import filter_by_class, normalize
from helpers import normalize_owned_set
from models import NormalizedResult
from profile_inventory import (collect_items_from_profile,
                               profile_membership_id, summarize_profile)

STATUS_LOADING = "loading"
STATUS_ERROR = "error"
STATUS_READY = "ready"


class DropsTracker:
    """
    Stateful holder for one variation's drop view.

    Inputs are replaced wholesale and never mutated. The normalized view is recomputed
    in one pass whenever an input changes; a failed recomputation leaves the previous
    view in place and records the error.
    """

    def __init__(self, variation: str = "raid", missing_item_policy: str = MISSING_ITEM_POLICY):
        """
        Initialize DropsTracker.

        Args:
            variation (str): Page variation, e.g. "raid".
            missing_item_policy (str): Policy passed to the aggregator for unknown item hashes.
        """
        self.variation = variation
        self.missing_item_policy = missing_item_policy
        self._lock = threading.RLock()
        self._catalog = None
        self._owned = None
        self._profiles = []
        self._profile = None
        self._result = None
        self._error = None
        self._memo_key = None

    @property
    def title(self) -> str | None:
        return HEADER_TEXT.get(self.variation)

    @property
    def status(self) -> str:
        """Status of the view: loading until a catalog is set, error if the last recomputation failed, else ready."""
        with self._lock:
            if self._error is not None:
                return STATUS_ERROR
            if self._result is None:
                return STATUS_LOADING
            return STATUS_READY

    @property
    def error(self) -> Exception | None:
        return self._error

    @property
    def result(self) -> NormalizedResult | None:
        """Last successfully computed view, or None."""
        return self._result

    @property
    def owned(self) -> frozenset[str] | None:
        return self._owned

    @property
    def profile(self) -> dict | None:
        return self._profile

    @property
    def needs_profile_selection(self) -> bool:
        """True when several profiles are available and none has been selected yet."""
        return len(self._profiles) > 1 and self._profile is None

    def set_variation(self, variation: str, catalog: dict) -> NormalizedResult | None:
        """Switch to another variation and its catalog."""
        with self._lock:
            self.variation = variation
            return self.set_catalog(catalog)

    def set_catalog(self, catalog: dict) -> NormalizedResult | None:
        """
        Replace the drop catalog and recompute.

        Args:
            catalog (dict): Decoded catalog document.

        Returns:
            NormalizedResult or None: The current view.
        """
        with self._lock:
            self._catalog = catalog
            return self._update()

    def set_owned(self, owned: Optional[Iterable[int | str]]) -> NormalizedResult | None:
        """Replace the owned item set directly (None when no player is signed in) and recompute."""
        with self._lock:
            self._owned = normalize_owned_set(owned)
            return self._update()

    def set_profiles(self, profiles: list[dict]) -> NormalizedResult | None:
        """
        Record the profiles of the signed-in user.

        A single profile is selected immediately; with several the caller must pick one via
        select_profile.
        """
        with self._lock:
            self._profiles = list(profiles or [])
            self._profile = None
            logging.info("Received %d Destiny profiles", len(self._profiles))
            if len(self._profiles) == 1:
                return self.switch_profile(self._profiles[0])
            return self._result

    def profile_choices(self) -> list[dict]:
        """Summaries of the available profiles for selection."""
        return [summarize_profile(p) for p in self._profiles]

    def select_profile(self, membership_id: str) -> NormalizedResult | None:
        """
        Select one of the recorded profiles by membership ID.

        Raises:
            KeyError: If no recorded profile has that membership ID.
        """
        with self._lock:
            for profile in self._profiles:
                if profile_membership_id(profile) == str(membership_id):
                    return self.switch_profile(profile)
        raise KeyError(f"No profile with membership ID {membership_id}")

    def switch_profile(self, profile: dict) -> NormalizedResult | None:
        """Use a profile's items as the owned item set and recompute."""
        with self._lock:
            logging.info("Switching to profile %s", profile_membership_id(profile))
            self._profile = profile
            self._owned = collect_items_from_profile(profile)
            return self._update()

    def sign_out(self) -> NormalizedResult | None:
        """Forget profiles and the owned item set."""
        with self._lock:
            self._profiles = []
            self._profile = None
            self._owned = None
            return self._update()

    def _update(self) -> NormalizedResult | None:
        if self._catalog is None:
            return None
        key = (id(self._catalog), id(self._owned), self.missing_item_policy)
        if key == self._memo_key and self._error is None:
            return self._result
        try:
            result = normalize(self._catalog, self._owned, self.missing_item_policy)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logging.error("Drop aggregation failed for %s: %s", self.variation, e)
            self._error = e
            self._memo_key = None
            return self._result
        self._result = result
        self._error = None
        self._memo_key = key
        return result

    def snapshot(self, visible_classes: dict | None = None) -> dict:
        """
        JSON-ready view of the tracker state.

        Args:
            visible_classes (dict): Optional class tag -> bool filter for the display list.

        Returns:
            dict: title, status, error, activities, displayList and profile selection info.
        """
        with self._lock:
            result = self._result
            display_list = result.display_list if result else []
            if visible_classes:
                display_list = filter_by_class(display_list, visible_classes)
            return {
                "variation": self.variation,
                "title": self.title,
                "status": self.status,
                "error": str(self._error) if self._error is not None else None,
                "signedIn": self._owned is not None,
                "selectProfile": self.needs_profile_selection,
                "profiles": self.profile_choices() if self.needs_profile_selection else [],
                "activities": {k: a.to_dict() for k, a in result.activities.items()} if result else {},
                "displayList": [a.to_dict() for a in display_list],
            }
