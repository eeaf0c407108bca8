import pytest

from poolbench.tests.fakes import QueuePool


@pytest.fixture
def pool() -> QueuePool:
    return QueuePool(size=2)
