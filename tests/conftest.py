import pytest
from infrastructure.logging_service import disable_all_logging

# Before any engine module creates its logger
disable_all_logging()

from domain.pricing import PricingEngine  # noqa: E402
from tests.builders import make_catalog, make_cockpit  # noqa: E402


@pytest.fixture
def catalog():
    return make_catalog()


@pytest.fixture
def cockpit():
    return make_cockpit()


@pytest.fixture
def engine():
    return PricingEngine()
