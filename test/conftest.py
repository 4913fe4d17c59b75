import pytest

from heinzclient.backend import MockBackend


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks test as slow running test")
    config.addinivalue_line(
        "markers", "backend: marks test that require a real fitting/Heinz backend"
    )


@pytest.fixture()
def backend():
    """A mock backend that acknowledges everything and has no outputs."""
    with MockBackend() as mock:
        yield mock
