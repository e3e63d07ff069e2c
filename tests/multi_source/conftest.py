"""Pytest configuration and fixtures for multi-source tests."""

import pytest

from search_proxy.models import Operation, SchemaFamily
from search_proxy.multi_source import Tier
from search_proxy.normalizer import ResponseNormalizer

INV1_URL = "https://inv1.test/api/v1/search?q=lofi&page=1"
INV2_URL = "https://inv2.test/api/v1/search?q=lofi&page=1"


@pytest.fixture
def invidious_tier() -> Tier:
    """Create an Invidious search tier with two candidates."""
    return Tier(name="invidious", schema=SchemaFamily.INVIDIOUS, urls=[INV1_URL, INV2_URL])


@pytest.fixture
def search_transform():
    """Create the Invidious search transform."""
    return ResponseNormalizer().for_tier(SchemaFamily.INVIDIOUS, Operation.SEARCH)
