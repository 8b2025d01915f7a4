"""Shared pytest fixtures."""
from __future__ import annotations

from typing import List

import pytest

from pulse_metrics.models import User


@pytest.fixture()
def company_users() -> List[User]:
    """Company 4: user 1 manages 2, 3 and 4; user 5 is in company 7 but also reports to 1."""
    return [
        User(id=1, company_id=4, manager_id=None),
        User(id=2, company_id=4, manager_id=1),
        User(id=3, company_id=4, manager_id=1),
        User(id=4, company_id=4, manager_id=1),
        User(id=5, company_id=7, manager_id=1),
    ]
