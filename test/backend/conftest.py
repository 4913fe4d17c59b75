import os

import pytest

from heinzclient.protocol import Connection
from heinzclient.types import CommsError
from heinzclient.util import DEFAULT_FITTING_PORT, DEFAULT_HOST_ADDR, DEFAULT_SOLVER_PORT


def _address(prefix: str, default_port: int) -> tuple[str, int]:
    host = os.environ.get(f"{prefix}_HOST", DEFAULT_HOST_ADDR)
    port = int(os.environ.get(f"{prefix}_PORT", default_port))
    return host, port


def _reachable(host: str, port: int) -> bool:
    try:
        with Connection(host, port, timeout=2) as conn:
            conn.open()
    except CommsError:
        return False
    return True


@pytest.fixture(scope="session")
def fitter_address():
    """Address of a running BUM fitting backend (BUM_HOST/BUM_PORT)."""
    address = _address("BUM", DEFAULT_FITTING_PORT)
    if not _reachable(*address):
        pytest.skip(f"No fitting backend at {address[0]}:{address[1]}")
    return address


@pytest.fixture(scope="session")
def solver_address():
    """Address of a running Heinz backend (HEINZ_HOST/HEINZ_PORT)."""
    address = _address("HEINZ", DEFAULT_SOLVER_PORT)
    if not _reachable(*address):
        pytest.skip(f"No Heinz backend at {address[0]}:{address[1]}")
    return address
