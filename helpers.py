# pylint: disable=broad-except, line-too-long
"""
Utility functions shared by the drops tracker.

This module provides:
    - API request retry logic
    - Item hash normalization for catalog and inventory lookups
"""
import time
import logging
import ctypes
from typing import Iterable, Optional

import requests

class RequestFailedError(RuntimeError):
    """
    Raised by retry_request when every attempt fails.

    Attributes:
        url (str): The requested URL.
        status_code (int | None): Status of the last response, or None if no response was received.
    """

    def __init__(self, url: str, tries: int, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Request failed after {tries} attempts: {url}")

def retry_request(method: callable, url: str, **kwargs) -> requests.Response:
    """
    Perform an API request with exponential backoff retry logic.

    Args:
        method (callable): The requests method (e.g., requests.get).
        url (str): The URL to request.
        **kwargs: Additional arguments for the request, plus 'tries' and 'delay'.

    Returns:
        requests.Response: The response object if successful.

    Raises:
        RequestFailedError: If all retry attempts fail (a RuntimeError carrying the last status code).
    """
    tries = kwargs.pop("tries", 3)
    delay = kwargs.pop("delay", 1)
    status_code = None
    for attempt in range(tries):
        try:
            response = method(url, **kwargs)
            if response.ok:
                return response
            status_code = response.status_code
            logging.warning("Request failed (status %d): %s",
                            response.status_code, url)
        except requests.RequestException as exc:
            logging.warning("Request error on attempt %d: %s",
                            attempt + 1, exc)
        if attempt < tries - 1:
            logging.info(
                "Retrying request in %d seconds (attempt %d/%d)", delay, attempt + 2, tries)
            time.sleep(delay)
            delay *= 2
    logging.error("Max retries exceeded for request: %s", url)
    raise RequestFailedError(url, tries, status_code)

def normalize_item_hash(item_hash: int | str) -> str:
    """
    Convert a Destiny item hash to an unsigned 32-bit integer string.

    Catalog documents key items by unsigned decimal strings while Bungie profile
    data may carry signed integers; both normalize to the same key.

    Args:
        item_hash (int or str): The item hash to normalize.

    Returns:
        str: Unsigned 32-bit integer string representation of the item hash.
    """
    try:
        # Accept int or str
        h = int(item_hash)
        h = ctypes.c_uint32(h).value
        return str(h)
    except Exception:
        return str(item_hash)

def normalize_owned_set(owned: Optional[Iterable[int | str]]) -> Optional[frozenset[str]]:
    """
    Normalize an owned item collection into a frozenset of unsigned hash strings.

    Args:
        owned (iterable or None): Item hashes the player owns, or None when no player is known.

    Returns:
        frozenset or None: Normalized hashes, or None if owned is None.
    """
    if owned is None:
        return None
    return frozenset(normalize_item_hash(h) for h in owned)
