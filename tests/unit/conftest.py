"""
Unit test fixtures: factory-built report payloads.
"""

import pytest

from tests.factories.report_factories import make_report_properties


@pytest.fixture
def report_properties():
    """Return a randomized valid property bag."""
    return make_report_properties()
