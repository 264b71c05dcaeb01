import logging

import pytest

from discovery.core.observability import Observability


@pytest.fixture
def observability() -> Observability:
    """Fresh observability context with its own metrics registry."""
    return Observability(logging.getLogger("discovery.tests"))
