"""
Shared fixtures.

Tests pin the calendar to Friday 2024-01-12 and use a fake millisecond
clock so ids and receipt names are predictable.
"""

import itertools
from datetime import date
from io import BytesIO

import pytest
from PIL import Image

from meal_tracker.config import AppSettings
from meal_tracker.orchestrator import create_app_components
from meal_tracker.services.storage import InMemoryBackend


TODAY = date(2024, 1, 12)  # Friday
START_MILLIS = 1704700800000


def make_png(size=(8, 8), color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(_env_file=None, base_dir=tmp_path)


@pytest.fixture
def clock():
    counter = itertools.count(START_MILLIS)
    return lambda: next(counter)


@pytest.fixture
def expense_backend() -> InMemoryBackend:
    return InMemoryBackend({"expenses": []})


@pytest.fixture
def holiday_backend() -> InMemoryBackend:
    return InMemoryBackend({"holidays": []})


@pytest.fixture
def components(settings, expense_backend, holiday_backend, clock):
    return create_app_components(
        settings=settings,
        expense_backend=expense_backend,
        holiday_backend=holiday_backend,
        clock=clock,
        today=lambda: TODAY,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()
