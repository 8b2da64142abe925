from __future__ import annotations

import pytest
from fakes import FakeTransport

from pymax.socket import MaxSocket
from pymax.socket_config import SocketConfig


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sock(transport: FakeTransport) -> MaxSocket:
    return MaxSocket(config=SocketConfig(device_id="dev-1"), transport=transport)
