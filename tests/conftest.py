from __future__ import annotations

from datetime import tzinfo

import pytest
from dateutil import tz

MADRID = tz.gettz("Europe/Madrid")


@pytest.fixture
def local_tz() -> tzinfo:
    assert MADRID is not None
    return MADRID
