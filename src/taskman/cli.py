"""CLI commands for taskman."""

from pathlib import Path

import click

from taskman.config import Config
from taskman.errors import ConfigError
from taskman.models import RankingState, SortColumn, SortDirection

SORT_CHOICES = [c.value for c in SortColumn]


def _load_config(path: Path | None) -> Config:
    """Load config, reporting errors as click errors."""
    try:
        return Config.load(path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config file",
)
@click.version_option(package_name="taskman")
@click.pass_context
def main(ctx, config_path: Path | None) -> None:
    """View running processes, sort them, and kill them."""
    ctx.obj = config_path
    if ctx.invoked_subcommand is None:
        ctx.invoke(tui)


@main.command()
@click.option("--interval", type=float, default=None, help="Seconds between refreshes")
@click.pass_obj
def tui(config_path: Path | None, interval: float | None) -> None:
    """Launch the interactive process table."""
    from taskman.app import run_tui
    from taskman.logging import configure

    config = _load_config(config_path)
    if interval is not None:
        config.table.refresh_interval = interval
        try:
            config.validate()
        except ConfigError as e:
            raise click.BadParameter(str(e), param_hint="--interval") from e
    configure(config)
    run_tui(config)


@main.command(name="list")
@click.option(
    "--sort", "column", type=click.Choice(SORT_CHOICES), default=None, help="Sort column"
)
@click.option("--desc", is_flag=True, help="Sort in descending order")
@click.option("--limit", "-n", type=int, default=None, help="Number of processes to show")
@click.pass_obj
def list_processes(
    config_path: Path | None, column: str | None, desc: bool, limit: int | None
) -> None:
    """Print one ordered snapshot of the process table."""
    from taskman.logging import configure
    from taskman.monitor import PsutilSnapshotProvider
    from taskman.ranking import RankingEngine
    from taskman.table import ProcessTable

    config = _load_config(config_path)
    configure(config)
    ranking = config.initial_ranking()
    if column is not None or desc:
        ranking = RankingState(
            column=SortColumn(column) if column else ranking.column,
            direction=SortDirection.DESCENDING if desc else SortDirection.ASCENDING,
        )

    table = ProcessTable(PsutilSnapshotProvider(), RankingEngine(ranking))
    records = table.refresh()
    if limit is not None:
        records = records[:limit]

    click.echo(f"{'PID':>8}  {'NAME':<32}  {'MEM(MB)':>8}  {'CPU%':>6}")
    for record in records:
        click.echo(
            f"{record.pid:>8}  {record.name[:32]:<32}  "
            f"{record.memory_mb:>8}  {record.cpu_percent:>6.1f}"
        )


@main.command()
@click.argument("pid", type=click.IntRange(min=0))
@click.pass_obj
def kill(config_path: Path | None, pid: int) -> None:
    """Kill a process, then report whether it is still listed."""
    from taskman.logging import configure
    from taskman.monitor import PsutilProcessController, PsutilSnapshotProvider
    from taskman.table import ProcessTable, TerminationMediator

    configure(_load_config(config_path))
    table = ProcessTable(PsutilSnapshotProvider())
    TerminationMediator(table, PsutilProcessController()).kill(pid)

    if table.find(pid) is None:
        click.echo(f"PID {pid} is not running.")
    else:
        click.echo(f"PID {pid} is still running.")


@main.command(name="config")
@click.option(
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the file (default: ~/.config/taskman/config.toml)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def write_config(path: Path | None, force: bool) -> None:
    """Write the default config file."""
    config = Config()
    path = path or config.config_path
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")
    config.save(path)
    click.echo(f"Created config at {path}")


if __name__ == "__main__":
    main()
