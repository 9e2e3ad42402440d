"""Unit tests for the drops route and request parsing helpers of the Function App."""
import json
from unittest.mock import MagicMock, patch

import azure.functions as func

# pylint: disable=import-error
import function_app
from function_app import _bearer_token, _drops_response, _get_catalog, _parse_class_filter
from helpers import RequestFailedError


def get_catalog():
    """
    Returns a one activity raid catalog.
    """
    return {
        "activities": {"100": {"activityHash": 100, "activityName": "Vault", "dropListID": "v1"}},
        "dropLists": {"v1": {"items": [55]}},
        "items": {"55": {"itemHash": 55, "itemTypeDisplayName": "Hunter Cloak"}},
    }


def get_profile(membership_id, item_hashes):
    """
    Returns a profile owning the given item hashes.
    """
    return {
        "membership": {"membershipId": membership_id, "membershipType": 3},
        "profileInventory": {"data": {"items": [{"itemHash": h} for h in item_hashes]}},
    }


def make_request(variation="raid", params=None, headers=None):
    """
    Returns a GET request for the drops route.
    """
    return func.HttpRequest(
        method="GET",
        url=f"/api/drops/{variation}",
        route_params={"variation": variation},
        params=params or {},
        headers=headers or {},
        body=b"",
    )


def call_drops(req, catalog=None):
    """
    Invokes the drops route with the catalog cache preloaded, returning (status_code, body).
    """
    cached = {"raid": catalog} if catalog is not None else {}
    with patch.dict(function_app._catalogs, cached, clear=True):
        resp = _drops_response(req)
    return resp.status_code, json.loads(resp.get_body())


def test_parse_class_filter():
    """Test that listed classes are shown and every other class hidden."""
    assert _parse_class_filter("Hunter, titan") == {
        "warlock": False, "titan": True, "hunter": True, "none": False,
    }
    assert _parse_class_filter("") is None
    assert _parse_class_filter(None) is None


def test_bearer_token():
    """Test extraction of the access token from the Authorization header."""
    assert _bearer_token(MagicMock(headers={"Authorization": "Bearer abc123"})) == "abc123"
    assert _bearer_token(MagicMock(headers={"Authorization": "Basic xyz"})) is None
    assert _bearer_token(MagicMock(headers={})) is None


def test_drops_unknown_variation():
    """Test that a variation without a catalog returns 404."""
    status, body = call_drops(make_request("crucible"))
    assert status == 404
    assert "crucible" in body["error"]


def test_drops_catalog_fetch_failure():
    """Test that a failed catalog download returns 502 and caches nothing."""
    error = RequestFailedError("https://example.test/raid.json", 3, 503)
    with patch.object(function_app.client, "fetch_catalog", side_effect=error):
        status, body = call_drops(make_request())
        assert function_app._catalogs == {}
    assert status == 502
    assert body["error"] == "Failed to fetch drop catalog."


def test_drops_anonymous_view():
    """Test the anonymous drop view."""
    status, body = call_drops(make_request(), get_catalog())
    assert status == 200
    assert body["title"] == "Raids"
    assert body["status"] == "ready"
    assert body["signedIn"] is False
    assert body["displayList"][0]["drops"][0]["obtained"] is False


def test_drops_dangling_reference_returns_error_status():
    """Test that an unresolvable catalog returns 500 with the error view."""
    catalog = get_catalog()
    catalog["dropLists"]["v1"]["items"].append(99)
    status, body = call_drops(make_request(), catalog)
    assert status == 500
    assert body["status"] == "error"
    assert "99" in body["error"]


def test_drops_with_profile():
    """Test that a bearer token marks owned items and class filters apply."""
    req = make_request(params={"classes": "titan"}, headers={"Authorization": "Bearer token"})
    with patch.object(function_app.client, "get_current_profiles", return_value=([get_profile("1", [55])], 200)) as mock_profiles:
        status, body = call_drops(req, get_catalog())
    mock_profiles.assert_called_once_with("token")
    assert status == 200
    assert body["signedIn"] is True
    assert body["activities"]["100"]["drops"][0]["obtained"] is True
    assert body["displayList"][0]["drops"] == []


def test_drops_unknown_membership_id():
    """Test that selecting a profile the user does not have returns 400."""
    req = make_request(params={"membershipId": "9"}, headers={"Authorization": "Bearer token"})
    profiles = [get_profile("1", [55]), get_profile("2", [])]
    with patch.object(function_app.client, "get_current_profiles", return_value=(profiles, 200)):
        status, body = call_drops(req, get_catalog())
    assert status == 400
    assert body["error"] == "Unknown membershipId: 9"


def test_drops_profile_selection_required():
    """Test that several profiles without a membershipId ask for a selection."""
    req = make_request(headers={"Authorization": "Bearer token"})
    profiles = [get_profile("1", [55]), get_profile("2", [])]
    with patch.object(function_app.client, "get_current_profiles", return_value=(profiles, 200)):
        status, body = call_drops(req, get_catalog())
    assert status == 200
    assert body["selectProfile"] is True
    assert len(body["profiles"]) == 2


def test_drops_profile_status_passed_through():
    """Test that a rejected access token returns the Bungie status."""
    req = make_request(headers={"Authorization": "Bearer expired"})
    with patch.object(function_app.client, "get_current_profiles", return_value=(None, 401)):
        status, body = call_drops(req, get_catalog())
    assert status == 401
    assert body["error"] == "Failed to get Destiny profiles."


def test_get_catalog_fetches_once():
    """Test that a variation's catalog is downloaded once and then served from the cache."""
    catalog = get_catalog()
    with patch.dict(function_app._catalogs, {}, clear=True), \
            patch.object(function_app.client, "fetch_catalog", return_value=catalog) as mock_fetch:
        assert _get_catalog("raid") is catalog
        assert _get_catalog("raid") is catalog
    mock_fetch.assert_called_once_with("raid")
