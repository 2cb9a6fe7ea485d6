"""Process table and termination mediator."""

from collections.abc import Iterator

from taskman.errors import SnapshotError, TerminationError
from taskman.logging import get_logger
from taskman.models import (
    ProcessController,
    ProcessRecord,
    RankingState,
    SnapshotProvider,
    SortColumn,
    TableState,
    build_record,
)
from taskman.ranking import RankingEngine

log = get_logger(__name__)


class ProcessTable:
    """
    Authoritative, ordered collection of the most recent process records.

    Holds exactly one generation of records at a time. ``refresh`` is the only
    way a new generation comes in; ``select_column`` only re-orders the
    current one. Callers must serialize access (one call at a time).
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        ranking: RankingEngine | None = None,
    ) -> None:
        """
        Initialize the ProcessTable.

        Args:
            provider: Source of process snapshots.
            ranking: Ranking engine holding the sort state. Defaults to PID ascending.
        """
        self._provider = provider
        self._ranking = ranking or RankingEngine()
        # Snapshot order of the current generation; re-sorts always start here
        self._snapshot: tuple[ProcessRecord, ...] = ()
        self._records: tuple[ProcessRecord, ...] = ()
        self._generation = 0

    @property
    def records(self) -> tuple[ProcessRecord, ...]:
        """Get the ordered records of the current generation."""
        return self._records

    @property
    def state(self) -> TableState:
        """Get the table lifecycle state."""
        return TableState.POPULATED if self._generation else TableState.EMPTY

    @property
    def generation(self) -> int:
        """Get the number of generations swapped in so far."""
        return self._generation

    @property
    def ranking_state(self) -> RankingState:
        """Get the active sort column and direction."""
        return self._ranking.state

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ProcessRecord]:
        return iter(self._records)

    def find(self, pid: int) -> ProcessRecord | None:
        """Return the record for ``pid`` in the current generation, if any."""
        for record in self._records:
            if record.pid == pid:
                return record
        return None

    def refresh(self) -> tuple[ProcessRecord, ...]:
        """
        Replace the table with a fresh, ordered snapshot.

        If the provider fails, this cycle is skipped and the previous
        generation stays visible.
        """
        try:
            raw_processes = self._provider.list_processes()
        except SnapshotError as e:
            log.warning("snapshot_failed", error=str(e), generation=self._generation)
            return self._records

        snapshot = tuple(build_record(raw) for raw in raw_processes)
        ordered = tuple(self._ranking.order(snapshot))

        self._snapshot = snapshot
        self._records = ordered
        self._generation += 1
        log.debug("table_refreshed", count=len(ordered), generation=self._generation)
        return self._records

    def select_column(self, column: SortColumn) -> tuple[ProcessRecord, ...]:
        """Change the sort column (or flip direction) and re-order without a new snapshot."""
        self._ranking.select_column(column)
        self._records = tuple(self._ranking.order(self._snapshot))
        return self._records


class TerminationMediator:
    """
    Fire-and-reconcile process termination.

    A kill request is forwarded to the controller and always followed by a
    table refresh. Whether the request succeeded is never reported to the
    caller; the next generation shows whether the process is gone.
    """

    def __init__(self, table: ProcessTable, controller: ProcessController) -> None:
        self._table = table
        self._controller = controller

    def kill(self, pid: int) -> None:
        """Request termination of ``pid`` and reconcile the table."""
        log.info("kill_requested", pid=pid)
        try:
            if self._controller.terminate(pid):
                log.info("kill_delivered", pid=pid)
            else:
                log.info("kill_stale_pid", pid=pid)
        except TerminationError as e:
            log.warning("kill_failed", pid=pid, reason=e.reason)
        finally:
            self._table.refresh()
