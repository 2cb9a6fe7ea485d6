"""taskman - Main Textual application."""

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Header, Static

from taskman.config import Config
from taskman.models import ProcessRecord, RankingState, SortColumn, SortDirection
from taskman.monitor import PsutilProcessController, PsutilSnapshotProvider
from taskman.ranking import RankingEngine
from taskman.table import ProcessTable, TerminationMediator

COLUMN_LABELS = {
    SortColumn.PID: "PID",
    SortColumn.NAME: "Name",
    SortColumn.MEMORY: "Memory (MB)",
    SortColumn.CPU: "CPU (%)",
}

COLUMN_WIDTHS = {
    SortColumn.PID: 10,
    SortColumn.NAME: 32,
    SortColumn.MEMORY: 14,
    SortColumn.CPU: 10,
}


def sort_arrow(direction: SortDirection) -> str:
    """Arrow shown next to the active column header."""
    return "▲" if direction is SortDirection.ASCENDING else "▼"


def format_row(record: ProcessRecord) -> tuple[str, str, str, str]:
    """Format a record as table cells."""
    return (
        str(record.pid),
        record.name,
        str(record.memory_mb),
        f"{record.cpu_percent:.1f}",
    )


def summary_text(count: int, ranking: RankingState) -> str:
    """Summary line: process count and active sort."""
    label = COLUMN_LABELS[ranking.column]
    return f"Processes: {count}   Sort: {label} {sort_arrow(ranking.direction)}"


class SummaryBar(Static):
    """One-line summary: process count and active sort."""

    DEFAULT_CSS = """
    SummaryBar {
        height: 1;
        padding: 0 1;
        background: $surface;
    }
    """

    def show(self, count: int, ranking: RankingState) -> None:
        """Update the summary text."""
        self.update(Text(summary_text(count, ranking)))


class ProcessView(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessView {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._ranking: RankingState | None = None

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True

    @property
    def selected_pid(self) -> int | None:
        """PID of the row under the cursor, if any."""
        table = self.query_one("#process-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return int(row_key.value)

    def show(self, records: tuple[ProcessRecord, ...], ranking: RankingState) -> None:
        """
        Redraw the table in the given order.

        Columns are rebuilt only when the sort state changes. When the row
        order is unchanged the cells are updated in place, otherwise the rows
        are replaced and the scroll position kept. The cursor follows the
        selected PID if it is still present.
        """
        table = self.query_one("#process-table", DataTable)
        selected = self.selected_pid

        if ranking != self._ranking:
            table.clear(columns=True)
            for column in SortColumn:
                label = COLUMN_LABELS[column]
                if column is ranking.column:
                    label = f"{label} {sort_arrow(ranking.direction)}"
                table.add_column(Text(label), key=column.value, width=COLUMN_WIDTHS[column])
            self._ranking = ranking

        keys = [str(record.pid) for record in records]
        if keys == [row_key.value for row_key in table.rows]:
            for record in records:
                for column, value in zip(SortColumn, format_row(record)):
                    table.update_cell(str(record.pid), column.value, value)
        else:
            scroll_y = table.scroll_y
            table.clear()
            for record in records:
                table.add_row(*format_row(record), key=str(record.pid))
            table.scroll_to(y=scroll_y, animate=False)

        if selected is not None and str(selected) in table.rows:
            table.move_cursor(row=table.get_row_index(str(selected)))


class TaskManagerApp(App):
    """Main taskman application."""

    TITLE = "Task Manager"
    SUB_TITLE = "Processes"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("k", "kill", "Kill"),
        ("p", "sort('pid')", "PID"),
        ("n", "sort('name')", "Name"),
        ("m", "sort('memory')", "Memory"),
        ("c", "sort('cpu')", "CPU"),
    ]

    def __init__(
        self,
        config: Config | None = None,
        table: ProcessTable | None = None,
        mediator: TerminationMediator | None = None,
    ) -> None:
        """
        Initialize the TaskManagerApp.

        Args:
            config: Application config. Defaults to built-in defaults.
            table: Process table to display. Defaults to a psutil-backed table.
            mediator: Kill mediator. Defaults to a psutil-backed controller.
        """
        super().__init__()
        self._config = config or Config()
        if table is None:
            table = ProcessTable(
                PsutilSnapshotProvider(),
                RankingEngine(self._config.initial_ranking()),
            )
        self._table = table
        self._mediator = mediator or TerminationMediator(table, PsutilProcessController())
        self.title = self._config.tui.title

    @property
    def process_table(self) -> ProcessTable:
        """The process table backing the view."""
        return self._table

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Header()
        yield SummaryBar(id="summary")
        yield ProcessView()
        yield Footer()

    def on_mount(self) -> None:
        """Populate the table and schedule periodic refreshes."""
        self.theme = "textual-dark" if self._config.tui.dark else "textual-light"
        self.action_refresh()
        self.set_interval(self._config.table.refresh_interval, self.action_refresh)

    def _show(self, records: tuple[ProcessRecord, ...]) -> None:
        """Push records and sort state to the widgets."""
        ranking = self._table.ranking_state
        self.query_one(SummaryBar).show(len(records), ranking)
        self.query_one(ProcessView).show(records, ranking)

    def _sort(self, column: SortColumn) -> None:
        """Select a sort column and redraw from the existing records."""
        self._show(self._table.select_column(column))
        ranking = self._table.ranking_state
        self.notify(f"Sort: {COLUMN_LABELS[column]} {ranking.direction.value}")

    def action_refresh(self) -> None:
        """Take a new snapshot and redraw."""
        self._show(self._table.refresh())

    def action_sort(self, column: str) -> None:
        """Handle sort bindings."""
        self._sort(SortColumn(column))

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        """Clicking a header sorts by it; clicking again reverses."""
        self._sort(SortColumn(event.column_key.value))

    def action_kill(self) -> None:
        """Kill the selected process and reconcile the table."""
        pid = self.query_one(ProcessView).selected_pid
        if pid is None:
            return
        self._mediator.kill(pid)
        self._show(self._table.records)
        self.notify(f"Kill requested: PID {pid}")


def run_tui(config: Config) -> None:
    """Run the TUI application."""
    app = TaskManagerApp(config)
    app.run()
