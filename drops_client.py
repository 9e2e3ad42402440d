# pylint: disable=line-too-long
"""
Network collaborators for the Destiny raid drops tracker.

DropsClient downloads drop catalog documents and lists the Destiny profiles of the
user an access token belongs to. It performs no aggregation; results are handed to
DropsTracker (or drops_aggregator.normalize) unchanged.
"""
import logging

import requests

from constants import (API_KEY, BUNGIE_API_BASE, CATALOG_URLS,
                       PROFILE_COMPONENTS, REQUEST_TIMEOUT)
from helpers import RequestFailedError, retry_request


class DropsClient:
    """
    Fetches drop catalogs and Bungie profiles.

    Catalog documents are public; profile requests need an OAuth access token obtained elsewhere.
    """

    def __init__(
        self,
        api_key: str = API_KEY,
        api_base: str = BUNGIE_API_BASE,
        catalog_urls: dict = None,
        timeout: int = REQUEST_TIMEOUT
    ):
        """
        Initialize DropsClient with configuration.

        Args:
            api_key (str): Bungie API key.
            api_base (str): Bungie API base URL.
            catalog_urls (dict): Catalog document URL per variation.
            timeout (int): Request timeout in seconds.
        """
        self.api_key = api_key
        self.api_base = api_base
        self.catalog_urls = catalog_urls if catalog_urls is not None else CATALOG_URLS
        self.timeout = timeout

    def fetch_catalog(self, variation: str) -> dict:
        """
        Download the drop catalog for a variation.

        Args:
            variation (str): Page variation, e.g. "raid".

        Returns:
            dict: Decoded catalog document.

        Raises:
            ValueError: If the variation has no catalog URL.
            RuntimeError: If the download fails after retries.
        """
        url = self.catalog_urls.get(variation)
        if not url:
            raise ValueError(f"No drop catalog configured for variation '{variation}'")
        logging.info("Fetching %s drop catalog from %s", variation, url)
        response = retry_request(requests.get, url, timeout=self.timeout)
        catalog = response.json()
        logging.info("Fetched %s drop catalog: %d activities, %d drop lists",
                     variation, len(catalog.get("activities") or {}), len(catalog.get("dropLists") or {}))
        return catalog

    def _auth_headers(self, access_token: str) -> dict:
        return {
            "Authorization": f"Bearer {access_token}",
            "X-API-Key": self.api_key
        }

    def get_memberships(self, access_token: str) -> tuple[list | None, int]:
        """
        List the Destiny memberships linked to the access token's Bungie.net account.

        Args:
            access_token (str): OAuth access token for Bungie API.

        Returns:
            tuple: (list of destinyMemberships, status_code)
        """
        url = f"{self.api_base}/User/GetMembershipsForCurrentUser/"
        try:
            resp = retry_request(requests.get, url, headers=self._auth_headers(access_token), timeout=self.timeout)
        except RequestFailedError as e:
            logging.error("Failed to get memberships: status %s", e.status_code)
            return None, e.status_code or 502
        memberships = resp.json().get("Response", {}).get("destinyMemberships") or []
        return memberships, 200

    def get_profile(self, access_token: str, membership_type: int | str, membership_id: str) -> tuple[dict | None, int]:
        """
        Fetch one Destiny profile with the components needed to collect owned items.

        Args:
            access_token (str): OAuth access token for Bungie API.
            membership_type (int | str): Destiny membership type.
            membership_id (str): Destiny membership ID.

        Returns:
            tuple: (profile response dict, status_code)
        """
        url = f"{self.api_base}/Destiny2/{membership_type}/Profile/{membership_id}/?components={PROFILE_COMPONENTS}"
        try:
            resp = retry_request(requests.get, url, headers=self._auth_headers(access_token), timeout=self.timeout)
        except RequestFailedError as e:
            logging.error("Failed to get profile %s: status %s", membership_id, e.status_code)
            return None, e.status_code or 502
        return resp.json().get("Response", {}), 200

    def get_current_profiles(self, access_token: str) -> tuple[list | None, int]:
        """
        Fetch every Destiny profile of the current user.

        Each profile is annotated with the membership it was fetched for under "membership".
        Memberships whose profile cannot be fetched are skipped.

        Args:
            access_token (str): OAuth access token for Bungie API.

        Returns:
            tuple: (list of profile dicts, status_code)
        """
        memberships, status = self.get_memberships(access_token)
        if memberships is None:
            return None, status
        profiles = []
        for membership in memberships:
            membership_id = membership.get("membershipId")
            membership_type = membership.get("membershipType")
            if not membership_id or membership_type is None:
                continue
            profile, profile_status = self.get_profile(access_token, membership_type, membership_id)
            if profile is None:
                logging.warning("Skipping membership %s (status %d)", membership_id, profile_status)
                continue
            profiles.append({**profile, "membership": membership})
        logging.info("Fetched %d Destiny profiles", len(profiles))
        return profiles, 200
