"""Shared pytest fixtures for vixlib tests."""

import logging

import pytest

from tests.fake_surface import VM_HANDLE, FakeSurface
from vixlib import VirtualMachine, VixConfig
from vixlib.config import Timeouts

logger = logging.getLogger(__name__)

# Short enough to keep the suite fast, long enough for timer threads on
# loaded CI runners.
TEST_TIMEOUT_SECONDS = 5


@pytest.fixture
def surface() -> FakeSurface:
    """A fake surface whose jobs complete almost immediately."""
    return FakeSurface()


@pytest.fixture
def slow_surface() -> FakeSurface:
    """A fake surface whose jobs take 50ms, enough to observe overlap."""
    return FakeSurface(delay=0.05)


@pytest.fixture
def config() -> VixConfig:
    return VixConfig(locale="de-DE", timeouts=Timeouts.uniform(TEST_TIMEOUT_SECONDS))


@pytest.fixture
def vm(surface: FakeSurface, config: VixConfig) -> VirtualMachine:
    return VirtualMachine(surface, VM_HANDLE, config)
