from __future__ import annotations

import os
from datetime import time

import pytest

os.environ["APP_ENV"] = "testing"

from src.course_periods.course_periods.terms.model import Term
from tests.fakes import InMemoryConditions, InMemoryPeriods, InMemoryRules, InMemoryTerms, make_period


@pytest.fixture
def terms_repo():
    return InMemoryTerms(
        [
            Term(1, "2024-2025-1", "HK1 2024-2025", "2024-09-01", "2025-01-19", True),
            Term(2, "2024-2025-2", "HK2 2024-2025", "2025-02-10", "2025-06-30", False),
        ]
    )


@pytest.fixture
def periods_repo():
    return InMemoryPeriods(
        [
            make_period(1, period_no=1, start=time(8, 0), end=time(8, 45)),
            make_period(2, period_no=2, start=time(8, 55), end=time(9, 40)),
        ]
    )


@pytest.fixture
def rules_repo(conditions_repo):
    return InMemoryRules(conditions=conditions_repo)


@pytest.fixture
def conditions_repo():
    return InMemoryConditions()
