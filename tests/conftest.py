import pytest

from kinectpaint.core.config import PaintSettings
from kinectpaint.core.mapper import PinholeMapper


@pytest.fixture
def settings():
    return PaintSettings()


@pytest.fixture
def mapper():
    return PinholeMapper(320, 240)
