"""Data models for taskman."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

MEBIBYTE = 1_048_576


class SortColumn(Enum):
    """Columns the process table can be ordered by."""

    PID = "pid"
    NAME = "name"
    MEMORY = "memory"
    CPU = "cpu"


class SortDirection(Enum):
    """Direction of the active sort."""

    ASCENDING = "ascending"
    DESCENDING = "descending"

    def flipped(self) -> "SortDirection":
        """Return the opposite direction."""
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


class TableState(Enum):
    """Lifecycle of the process table."""

    EMPTY = "empty"
    POPULATED = "populated"


@dataclass(slots=True, frozen=True)
class RankingState:
    """Active sort column and direction."""

    column: SortColumn = SortColumn.PID
    direction: SortDirection = SortDirection.ASCENDING


@dataclass(slots=True, frozen=True)
class RawProcess:
    """One entry of a system snapshot, as reported by the provider."""

    pid: int
    name: str
    memory_bytes: int  # Resident set size
    cpu_percent: float  # 0.0 - 100.0 * core_count


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable row of the process table."""

    pid: int
    name: str
    memory_mb: int  # Whole mebibytes, truncated
    cpu_percent: float


def build_record(raw: RawProcess) -> ProcessRecord:
    """Normalize a snapshot entry into a table record.

    Memory is floor-divided into whole mebibytes; CPU is passed through
    unchanged, including values above 100 on multi-core machines.
    """
    return ProcessRecord(
        pid=raw.pid,
        name=raw.name,
        memory_mb=raw.memory_bytes // MEBIBYTE,
        cpu_percent=raw.cpu_percent,
    )


class SnapshotProvider(Protocol):
    """Source of point-in-time process snapshots."""

    def list_processes(self) -> Sequence[RawProcess]:
        """Return every visible process. Order is irrelevant.

        Raises:
            SnapshotError: If the enumeration itself fails.
        """
        ...


class ProcessController(Protocol):
    """Delivers termination requests to live processes."""

    def terminate(self, pid: int) -> bool:
        """Request termination of ``pid``.

        Returns:
            True if a request was delivered, False if no live process has
            that pid.

        Raises:
            TerminationError: If the platform refuses the request.
        """
        ...
