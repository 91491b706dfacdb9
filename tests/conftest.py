from __future__ import annotations

import pytest
from _fakes import FakeLinkFactory

from fsplink.config import FspConfig


@pytest.fixture
def fast_config() -> FspConfig:
    return FspConfig(
        url="ws://fake",
        reconnect_interval=0.05,
        liveness_timeout=0.15,
        liveness_check_interval=0.02,
        open_timeout=1.0,
    )


@pytest.fixture
def link_factory() -> FakeLinkFactory:
    return FakeLinkFactory()
