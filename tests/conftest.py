import copy

import pytest
from unittest.mock import patch

from planhaus.db import configure_engine, init_db

COMPLETE_INTAKE = {
    "step1": {
        "couple": {"firstName": ["Alex", "Sam"], "lastName": ["Rivera", "Chen"]},
        "emails": ["alex@example.com", "sam@example.com"],
        "phones": ["+14155550123"],
        "pronouns": "they/them",
        "preferredLanguage": "en",
        "communicationPreferences": "email",
        "decisionMakers": ["Partner A", "Partner B"],
    },
    "step2": {
        "workingTitle": "Alex & Sam's Wedding",
        "date": "2025-06-15",
        "isDateFlexible": False,
        "location": {"city": "Austin", "state": "TX", "country": "USA"},
        "venues": {"ceremonyVenueName": "Laguna Gloria", "receptionVenueName": "", "bothSameVenue": True},
        "settings": {"indoorOutdoor": ["outdoor"]},
        "guests": {"estimatedGuestCount": 120, "adultsOnly": False},
        "vips": [{"name": "Grandma June", "role": "Grandmother"}],
        "style": {
            "styleVibes": ["garden", "modern"],
            "colorPalette": [{"name": "Sage", "hex": "#9CAF88"}],
            "priorities": ["food", "photos"],
        },
    },
    "step3": {
        "totalBudget": 50000,
        "currency": "USD",
        "presetSplit": "classic",
        "categories": [
            {"name": "venue", "percent": 45},
            {"name": "catering", "percent": 30},
            {"name": "photography", "percent": 10},
            {"name": "florals", "percent": 8, "hardCap": 3500},
            {"name": "music", "percent": 7},
        ],
        "mustHaves": ["live band"],
        "niceToHaves": ["photo booth"],
    },
    "step4": {
        "ceremony": {"type": "symbolic", "officiantNeeded": True},
        "timeline": {"sunsetCeremony": True},
        "dining": {"mealStyle": "family-style", "barPreference": "limited"},
        "seating": {"style": "long-tables", "danceFloorRequired": False},
        "specialMoments": ["first-look"],
        "timing": {},
    },
    "step5": {
        "requiredVendors": ["photographer", "florist", "stationery"],
        "photographer": {"style": "documentary"},
        "music": {"bandOrDJ": "band"},
        "florals": {},
        "catering": {},
        "search": {"radiusMiles": 30, "preferredZip": "78701"},
    },
    "step6": {
        "travel": {"hotelBlocksNeeded": 2},
        "guests": {"kidsPolicy": "family-only"},
        "website": {"needed": True, "copyTone": "playful"},
    },
    "step7": {"consent": True},
}


@pytest.fixture
def complete_intake():
    """A fresh copy of a valid, submittable intake."""
    return copy.deepcopy(COMPLETE_INTAKE)


@pytest.fixture(autouse=True)
def no_redis_cache():
    with patch("cache.redis_client", None):
        yield


@pytest.fixture
def database(tmp_path):
    configure_engine(f"sqlite:///{tmp_path / 'planhaus-test.db'}")
    init_db()
    yield
