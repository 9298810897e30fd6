from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Callable

import pytest

from agents.factura.repository import Repository
from agents.factura.service import InvoicingService
from agents.factura.storage import MemoryStore


BASE_NOW = datetime(2025, 3, 14, 15, 30, 0, tzinfo=timezone.utc)


def make_clock(start: datetime = BASE_NOW) -> Callable[[], datetime]:
    """Clock that advances one second per call."""
    tick = count()

    def _next() -> datetime:
        return start + timedelta(seconds=next(tick))

    return _next


def make_id_factory(prefix: str = "id") -> Callable[[], str]:
    seq = count(1)

    def _next() -> str:
        return f"{prefix}-{next(seq):04d}"

    return _next


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return make_clock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def repository(store: MemoryStore) -> Repository:
    return Repository(store)


@pytest.fixture
def service(repository: Repository, clock) -> InvoicingService:
    return InvoicingService(repository, clock=clock, id_factory=make_id_factory())


@pytest.fixture
def seeded_service(service: InvoicingService) -> InvoicingService:
    service.init_seed_data()
    return service
