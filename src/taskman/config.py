"""Configuration system for taskman."""

from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit

from taskman.errors import ConfigError
from taskman.models import RankingState, SortColumn, SortDirection

_LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass
class TableConfig:
    """Process table configuration."""

    refresh_interval: float = 5.0  # Seconds between refreshes, driven by the host
    sort_column: str = "pid"  # One of: pid, name, memory, cpu
    sort_direction: str = "ascending"  # "ascending" or "descending"


@dataclass
class LoggingConfig:
    """Log file configuration."""

    level: str = "info"
    max_bytes: int = 1024 * 1024  # Max log file size (1MB)
    backup_count: int = 3  # Number of rotated files to keep


@dataclass
class TUIConfig:
    """TUI-specific configuration."""

    title: str = "Task Manager"
    dark: bool = True


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


def _load_section(cls: type, data: object, section: str):
    """Build a section dataclass from TOML data, using defaults for missing keys."""
    if not isinstance(data, dict):
        raise ConfigError(f"[{section}] must be a table")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown keys in [{section}]: {', '.join(sorted(unknown))}")
    return cls(**data)


@dataclass
class Config:
    """Main configuration container."""

    table: TableConfig = field(default_factory=TableConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    tui: TUIConfig = field(default_factory=TUIConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "taskman"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs."""
        return Path.home() / ".local" / "state" / "taskman"

    @property
    def log_path(self) -> Path:
        """Log file path."""
        return self.state_dir / "taskman.log"

    def initial_ranking(self) -> RankingState:
        """Return the ranking state the table starts with."""
        return RankingState(
            column=SortColumn(self.table.sort_column),
            direction=SortDirection(self.table.sort_direction),
        )

    def validate(self) -> None:
        """Check every value, raising ConfigError on the first invalid one."""
        interval = self.table.refresh_interval
        if not isinstance(interval, (int, float)) or isinstance(interval, bool) or interval <= 0:
            raise ConfigError(
                f"refresh_interval must be a positive number, got {interval!r}"
            )
        valid_columns = [c.value for c in SortColumn]
        if self.table.sort_column not in valid_columns:
            raise ConfigError(
                f"Unknown sort_column: {self.table.sort_column!r}. Valid columns: {valid_columns}"
            )
        valid_directions = [d.value for d in SortDirection]
        if self.table.sort_direction not in valid_directions:
            raise ConfigError(
                f"Unknown sort_direction: {self.table.sort_direction!r}. "
                f"Valid directions: {valid_directions}"
            )
        if self.logging.level not in _LOG_LEVELS:
            raise ConfigError(
                f"Unknown log level: {self.logging.level!r}. Valid levels: {list(_LOG_LEVELS)}"
            )
        for name in ("max_bytes", "backup_count"):
            value = getattr(self.logging, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
        if not isinstance(self.tui.dark, bool):
            raise ConfigError(f"dark must be true or false, got {self.tui.dark!r}")
        if not isinstance(self.tui.title, str):
            raise ConfigError(f"title must be a string, got {self.tui.title!r}")

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("table", "logging", "tui"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        Raises:
            ConfigError: If the file cannot be parsed or holds an invalid value.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f).unwrap()
        except tomlkit.exceptions.TOMLKitError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e

        config = cls(
            table=_load_section(TableConfig, data.get("table", {}), "table"),
            logging=_load_section(LoggingConfig, data.get("logging", {}), "logging"),
            tui=_load_section(TUIConfig, data.get("tui", {}), "tui"),
        )
        config.validate()
        return config
