"""Exceptions raised by taskman."""


class TaskmanError(Exception):
    """Base class for taskman errors."""


class SnapshotError(TaskmanError):
    """The snapshot provider could not enumerate processes."""


class TerminationError(TaskmanError):
    """The platform refused to terminate a process."""

    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"Cannot terminate PID {pid}: {reason}")
        self.pid = pid
        self.reason = reason


class ConfigError(TaskmanError, ValueError):
    """The configuration file is malformed or holds an invalid value."""
