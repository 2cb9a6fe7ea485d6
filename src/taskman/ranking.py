"""Ranking engine: sort state and ordering of process records."""

from collections.abc import Callable, Iterable
from functools import cmp_to_key
from typing import Any

from taskman.logging import get_logger
from taskman.models import ProcessRecord, RankingState, SortColumn, SortDirection

log = get_logger(__name__)


def _compare_cpu(a: ProcessRecord, b: ProcessRecord) -> int:
    """Compare CPU usage; incomparable values (NaN) are treated as equal."""
    if a.cpu_percent < b.cpu_percent:
        return -1
    if a.cpu_percent > b.cpu_percent:
        return 1
    return 0


_SORT_KEYS: dict[SortColumn, Callable[[ProcessRecord], Any]] = {
    SortColumn.PID: lambda r: r.pid,
    SortColumn.NAME: lambda r: r.name,
    SortColumn.MEMORY: lambda r: r.memory_mb,
    SortColumn.CPU: cmp_to_key(_compare_cpu),
}


def order(records: Iterable[ProcessRecord], state: RankingState) -> list[ProcessRecord]:
    """Order records by the state's column and direction.

    The sort is always a stable ascending sort; a descending state reverses
    the whole result afterwards. Ties therefore keep their input order when
    ascending and appear in inverted input order when descending.
    """
    ordered = sorted(records, key=_SORT_KEYS[state.column])
    if state.direction is SortDirection.DESCENDING:
        ordered.reverse()
    return ordered


class RankingEngine:
    """
    Owns the ranking state and the "click header to sort, click again to
    reverse" toggle.
    """

    def __init__(self, state: RankingState | None = None) -> None:
        """
        Initialize the RankingEngine.

        Args:
            state: Starting state. Defaults to PID ascending.
        """
        self._state = state or RankingState()

    @property
    def state(self) -> RankingState:
        """Get the current ranking state."""
        return self._state

    def select_column(self, requested: SortColumn) -> RankingState:
        """Select a sort column and return the new state.

        Reselecting the active column flips the direction; any other column
        becomes active in ascending order.
        """
        if requested is self._state.column:
            self._state = RankingState(requested, self._state.direction.flipped())
        else:
            self._state = RankingState(requested, SortDirection.ASCENDING)
        log.info(
            "sort_changed",
            column=self._state.column.value,
            direction=self._state.direction.value,
        )
        return self._state

    def order(self, records: Iterable[ProcessRecord]) -> list[ProcessRecord]:
        """Order records using the held state."""
        return order(records, self._state)
