"""Unit tests for helper functions."""
from unittest.mock import MagicMock, patch

import pytest
import requests

# pylint: disable=import-error
from helpers import (RequestFailedError, normalize_item_hash,
                     normalize_owned_set, retry_request)


def test_normalize_item_hash():
    """Test signed, unsigned and string hashes normalize to unsigned strings."""
    assert normalize_item_hash(-1) == "4294967295"
    assert normalize_item_hash("4294967295") == "4294967295"
    assert normalize_item_hash(55) == "55"
    assert normalize_item_hash("not-a-hash") == "not-a-hash"


def test_normalize_owned_set():
    """Test owned set normalization keeps None distinct from empty."""
    assert normalize_owned_set(None) is None
    assert normalize_owned_set([]) == frozenset()
    assert normalize_owned_set([55, "55", -1]) == frozenset({"55", "4294967295"})


def test_retry_request_success():
    """Test that a successful response is returned immediately."""
    response = MagicMock(ok=True)
    method = MagicMock(return_value=response)
    assert retry_request(method, "https://example.test", timeout=5) is response
    method.assert_called_once_with("https://example.test", timeout=5)


def test_retry_request_retries_then_succeeds():
    """Test that failures are retried with backoff."""
    ok = MagicMock(ok=True)
    method = MagicMock(side_effect=[requests.ConnectionError("boom"), MagicMock(ok=False, status_code=503), ok])
    with patch("helpers.time.sleep") as mock_sleep:
        assert retry_request(method, "https://example.test", tries=3, delay=1) is ok
    assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]


def test_retry_request_gives_up():
    """Test that RequestFailedError carrying the last status is raised after the last attempt."""
    method = MagicMock(return_value=MagicMock(ok=False, status_code=500))
    with patch("helpers.time.sleep"):
        with pytest.raises(RequestFailedError) as exc_info:
            retry_request(method, "https://example.test", tries=2)
    assert method.call_count == 2
    assert exc_info.value.status_code == 500
    assert isinstance(exc_info.value, RuntimeError)
