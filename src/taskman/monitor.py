"""psutil-backed snapshot provider and process controller."""

import psutil

from taskman.errors import SnapshotError, TerminationError
from taskman.logging import get_logger
from taskman.models import RawProcess

log = get_logger(__name__)

# Attributes fetched per process in one pass
_ATTRS = ["pid", "name", "memory_info", "cpu_percent"]


class PsutilSnapshotProvider:
    """
    Snapshot provider that enumerates processes with psutil.

    Processes that exit mid-enumeration, or that the current user may not
    inspect, are skipped rather than reported.
    """

    def __init__(self) -> None:
        """Initialize the provider and prime per-process CPU counters."""
        # The first cpu_percent() call per process always returns 0.0
        self.list_processes()

    def list_processes(self) -> list[RawProcess]:
        """
        Collect one entry per visible process.

        Raises:
            SnapshotError: If the process list itself cannot be read.
        """
        processes: list[RawProcess] = []
        try:
            for proc in psutil.process_iter(attrs=_ATTRS):
                try:
                    with proc.oneshot():
                        info = proc.info

                        mem_info = info.get("memory_info")
                        memory_bytes = mem_info.rss if mem_info else 0

                        processes.append(
                            RawProcess(
                                pid=info.get("pid", proc.pid),
                                name=info.get("name") or "",
                                memory_bytes=memory_bytes,
                                cpu_percent=info.get("cpu_percent") or 0.0,
                            )
                        )
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    continue
        except (psutil.Error, OSError) as e:
            raise SnapshotError(f"Failed to enumerate processes: {e}") from e

        return processes


class PsutilProcessController:
    """Process controller that delivers a hard kill through psutil."""

    def terminate(self, pid: int) -> bool:
        """
        Kill ``pid``.

        Returns:
            True if the kill was delivered, False if no such process exists.

        Raises:
            TerminationError: If the kill was refused or the process vanished mid-call.
        """
        if pid < 0:
            # Negative pids address process groups on POSIX
            return False
        try:
            proc = psutil.Process(pid)
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied as e:
            raise TerminationError(pid, "access denied") from e

        try:
            proc.kill()
        except psutil.AccessDenied as e:
            raise TerminationError(pid, "access denied") from e
        except psutil.ZombieProcess as e:
            raise TerminationError(pid, "process is a zombie") from e
        except psutil.NoSuchProcess as e:
            raise TerminationError(pid, "process exited") from e
        log.debug("kill_sent", pid=pid)
        return True
