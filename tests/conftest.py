"""Pytest fixtures and configuration for todokit tests."""

from datetime import date

import pytest

from todokit.models.task import Task


FAMILY_LINES = [
    "call mother +family @parents",
    "x (C) 2018-10-05 2018-10-01 call to car service and schedule repair +car @repair",
    "(B) 2018-10-15 repair family car +Car @repair due:2018-12-01 t:2019-01-02",
    "(A) Kid's art school lesson +Family @Kids due:2018-11-10 rec:1w",
    "take kid to hockey game +Family @kids due:2018-11-18",
    "xmas vacations +FamilyHoliday due:2018-12-24",
]

PROJECT_LINES = [
    "call mother +Family @parents",
    "call @Parents @father +family",
    "+car from service @car",
    "@CAR from service +CAR",
    "my +bday @me rec:2y",
    "rec:1m my wife +bday @wife +family",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep TODOKIT_* variables from the developer's shell out of the tests."""
    for name in (
        "TODOKIT_SOON_DAYS",
        "TODOKIT_COMPLETION_MODE",
        "TODOKIT_COMPLETION_DATE_MODE",
        "TODOKIT_AUTO_CREATE_DATE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def today():
    """A fixed date after every date in the sample lists."""
    return date(2020, 2, 2)


@pytest.fixture
def family_tasks(today):
    """Six tasks with priorities, projects, contexts, due dates and a recurrence."""
    return [Task.parse(line, today) for line in FAMILY_LINES]


@pytest.fixture
def project_tasks(today):
    """Tasks whose projects and contexts differ only by case."""
    return [Task.parse(line, today) for line in PROJECT_LINES]
