"""Shared test fixtures for taskman."""

from collections.abc import Sequence

import pytest

from taskman.errors import SnapshotError, TerminationError
from taskman.models import ProcessRecord, RawProcess
from taskman.table import ProcessTable, TerminationMediator

MB = 1_048_576


def make_raw(pid: int, name: str = "proc", mem: int = 0, cpu: float = 0.0) -> RawProcess:
    """Create a RawProcess for testing."""
    return RawProcess(pid=pid, name=name, memory_bytes=mem, cpu_percent=cpu)


def make_record(pid: int, name: str = "proc", mem_mb: int = 0, cpu: float = 0.0) -> ProcessRecord:
    """Create a ProcessRecord for testing."""
    return ProcessRecord(pid=pid, name=name, memory_mb=mem_mb, cpu_percent=cpu)


class FakeProvider:
    """Snapshot provider returning scripted snapshots and counting calls."""

    def __init__(self, snapshot: Sequence[RawProcess] = ()) -> None:
        self.snapshot = list(snapshot)
        self.calls = 0
        self.fail = False

    def list_processes(self) -> list[RawProcess]:
        self.calls += 1
        if self.fail:
            raise SnapshotError("provider unavailable")
        return list(self.snapshot)


class FakeController:
    """Process controller that records terminate calls.

    A pid listed in ``live`` is terminated (and removed from ``provider``'s
    snapshot when one is attached); a pid in ``refuse`` raises
    TerminationError; anything else is reported as not found.
    """

    def __init__(self, provider: FakeProvider | None = None) -> None:
        self.provider = provider
        self.live: set[int] = set()
        self.refuse: set[int] = set()
        self.terminated: list[int] = []
        self.calls: list[int] = []

    def terminate(self, pid: int) -> bool:
        self.calls.append(pid)
        if pid in self.refuse:
            raise TerminationError(pid, "access denied")
        if pid not in self.live:
            return False
        self.live.discard(pid)
        self.terminated.append(pid)
        if self.provider is not None:
            self.provider.snapshot = [p for p in self.provider.snapshot if p.pid != pid]
        return True


@pytest.fixture
def scenario_snapshot() -> list[RawProcess]:
    """Two processes: pid 10 uses 3 MB, pid 20 uses 1 MB."""
    return [
        make_raw(10, "a", mem=3 * MB, cpu=1.0),
        make_raw(20, "b", mem=1 * MB, cpu=9.5),
    ]


@pytest.fixture
def provider(scenario_snapshot) -> FakeProvider:
    return FakeProvider(scenario_snapshot)


@pytest.fixture
def table(provider) -> ProcessTable:
    return ProcessTable(provider)


@pytest.fixture
def controller(provider) -> FakeController:
    controller = FakeController(provider)
    controller.live = {p.pid for p in provider.snapshot}
    return controller


@pytest.fixture
def mediator(table, controller) -> TerminationMediator:
    return TerminationMediator(table, controller)
