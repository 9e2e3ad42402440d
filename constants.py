"""
Module containing constants for the Destiny raid drops tracker.
"""

import os

# API and request configuration constants
BUNGIE_API_BASE = "https://www.bungie.net/Platform"
API_KEY = os.getenv("BUNGIE_API_KEY")
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "10"))  # seconds

# How the aggregator treats a drop list entry whose item hash is missing from the catalog:
# "raise" aborts the whole normalization, "skip" drops the entry and logs a warning.
MISSING_ITEM_POLICY = os.getenv("DROPS_MISSING_ITEM_POLICY", "raise").lower()
MISSING_ITEM_POLICIES = ("raise", "skip")

# Drop catalog documents per page variation
CATALOG_URLS = {
    "raid": os.getenv("DROPS_CATALOG_URL_RAID", "https://destiny.plumbing/en/collections/combinedRaidDrops.json"),
}
if os.getenv("DROPS_CATALOG_URL_STRIKE"):
    CATALOG_URLS["strike"] = os.getenv("DROPS_CATALOG_URL_STRIKE")

# Page titles per variation
HEADER_TEXT = {
    "strike": "All Activities",
    "raid": "Raids",
}

# Effective display names keyed by activity hash. Normal/hard variants share an
# activity name in the catalog and need distinct labels.
ACTIVITY_NAME_OVERRIDES = {
    260765522: "Wrath of the Machine (Normal)",
    1387993552: "Wrath of the Machine (Hard)",
}

# Character class tags, in classification priority order
CLASS_TAGS = ("warlock", "titan", "hunter")
NO_CLASS = "none"

# Maps classType integer values to class tags
CLASS_TYPE_MAP = {
    0: "titan",
    1: "hunter",
    2: "warlock"
}

# Profile components needed to collect owned items:
# 100 profiles, 102 profile inventories, 200 characters, 201 character inventories, 205 character equipment
PROFILE_COMPONENTS = "100,102,200,201,205"
