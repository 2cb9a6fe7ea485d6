"""Verification Test: Chaos Monkey - process churn while refreshing and killing.

Processes are spawned and terminated while the table keeps refreshing
against the real system. Refreshes must never raise NoSuchProcess,
AccessDenied or ZombieProcess, and kills of processes that are already
gone must reconcile quietly.
"""

import multiprocessing
import random
import time

import pytest

from taskman.models import SortColumn
from taskman.monitor import PsutilProcessController, PsutilSnapshotProvider
from taskman.table import ProcessTable, TerminationMediator


def dummy_worker(duration: float = 60.0) -> None:
    """A dummy worker process that sleeps for a given duration."""
    try:
        time.sleep(duration)
    except (KeyboardInterrupt, SystemExit):
        pass


def spawn(count: int, duration: float = 60.0) -> list[multiprocessing.Process]:
    processes = []
    for _ in range(count):
        p = multiprocessing.Process(target=dummy_worker, args=(duration,))
        p.start()
        processes.append(p)
    return processes


def cleanup(processes: list[multiprocessing.Process]) -> None:
    for p in processes:
        if p.is_alive():
            p.terminate()
    for p in processes:
        p.join(timeout=1.0)


@pytest.fixture
def live_table() -> ProcessTable:
    return ProcessTable(PsutilSnapshotProvider())


class TestChaosMonkey:
    """Chaos Monkey verification suite tests."""

    def test_refresh_survives_process_termination(self, live_table):
        """Refreshing while processes die mid-enumeration never raises."""
        processes = spawn(30)

        try:
            live_table.refresh()
            spawned = {p.pid for p in processes}
            assert spawned <= {r.pid for r in live_table.records}

            for p in random.sample(processes, 15):
                p.terminate()
                live_table.refresh()
                time.sleep(0.02)

            for p in processes:
                if not p.is_alive():
                    p.join(timeout=1.0)
            live_table.refresh()

            listed = {r.pid for r in live_table.records}
            for p in processes:
                if p.exitcode is not None:
                    assert p.pid not in listed
        finally:
            cleanup(processes)

    def test_kill_reconciles_table(self, live_table):
        """A killed child disappears from the next generation once reaped."""
        processes = spawn(5)
        mediator = TerminationMediator(live_table, PsutilProcessController())

        try:
            live_table.refresh()
            victim = processes[0]
            generation = live_table.generation

            mediator.kill(victim.pid)
            assert live_table.generation == generation + 1

            victim.join(timeout=5.0)
            assert not victim.is_alive()
            live_table.refresh()
            assert live_table.find(victim.pid) is None
            assert live_table.find(processes[1].pid) is not None
        finally:
            cleanup(processes)

    def test_kill_already_exited_process(self, live_table):
        """Killing a stale pid is quiet and still refreshes."""
        (p,) = spawn(1, duration=0.1)
        p.join(timeout=5.0)
        mediator = TerminationMediator(live_table, PsutilProcessController())

        mediator.kill(p.pid)

        assert live_table.generation == 1
        assert live_table.find(p.pid) is None

    def test_rapid_churn_with_sorting(self, live_table):
        """Interleaved refreshes and re-sorts stay consistent during churn."""
        processes = []
        columns = list(SortColumn)

        try:
            start_time = time.time()
            while time.time() - start_time < 3.0:
                processes.extend(spawn(3, duration=10.0))

                alive = [p for p in processes if p.is_alive()]
                if len(alive) > 10:
                    for p in random.sample(alive, 3):
                        p.terminate()

                records = live_table.refresh()
                before = set(records)
                resorted = live_table.select_column(random.choice(columns))
                assert set(resorted) == before
                time.sleep(0.1)

            assert len(live_table) > 0
        finally:
            cleanup(processes)

    def test_zombie_process_handling(self, live_table):
        """An exited but unreaped child does not break a refresh."""
        (p,) = spawn(1, duration=0.1)
        try:
            time.sleep(0.3)
            for _ in range(3):
                assert isinstance(live_table.refresh(), tuple)
        finally:
            p.join(timeout=1.0)
