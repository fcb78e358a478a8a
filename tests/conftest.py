"""
Global pytest configuration and fixtures for interval alarm tests

Provides:
- Virtual clock
- Captured console output
- Fake sound and notification collaborators
"""

import io
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from lib.alarm.clock import ManualClock
from lib.alarm.collaborators import Notifier, SoundPlayer
from lib.alarm.console import Console


T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# ============================================================================
# Clock and Console
# ============================================================================

@pytest.fixture
def t0():
    """Start instant of the virtual clock"""
    return T0


@pytest.fixture
def clock():
    """Virtual clock starting at T0"""
    return ManualClock(start=T0)


@pytest.fixture
def output():
    """Captured console stream"""
    return io.StringIO()


@pytest.fixture
def console(output):
    """Console writing to the captured stream"""
    return Console(output)


# ============================================================================
# Fake Collaborators
# ============================================================================

@pytest.fixture
def sound_player():
    """SoundPlayer whose play() succeeds immediately"""
    player = MagicMock(spec=SoundPlayer)
    player.play = AsyncMock(return_value=None)
    return player


@pytest.fixture
def notifier():
    """Notifier whose notify() succeeds immediately"""
    fake = MagicMock(spec=Notifier)
    fake.notify = AsyncMock(return_value=None)
    return fake
