"""syspeek - live Textual view of the host report."""

from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.widgets import Footer, Static

from syspeek.config import Settings
from syspeek.monitor import SystemMonitor
from syspeek.power import PowerStatusNormalizer
from syspeek.report import Report

PLACEHOLDER = "Collecting first snapshot..."


class ReportPanel(Static):
    """Panel showing the latest report lines."""

    DEFAULT_CSS = """
    ReportPanel {
        height: auto;
        padding: 1 2;
        border: solid $primary;
        background: $surface;
    }
    """

    def __init__(self, **kwargs) -> None:
        """Initialize ReportPanel."""
        super().__init__(PLACEHOLDER, markup=False, **kwargs)
        self._text = PLACEHOLDER
        self._count = 0

    @property
    def text(self) -> str:
        """The text currently shown."""
        return self._text

    @property
    def count(self) -> int:
        """Number of reports shown so far."""
        return self._count

    def update_report(self, report: Report) -> None:
        """Show a new report."""
        self._count += 1
        self._text = report.render()
        self.border_title = f"Snapshot {self._count}"
        self.update(self._text)


class SysPeekApp(App):
    """Live syspeek view."""

    TITLE = "syspeek"
    SUB_TITLE = "Host metrics"

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, settings: Settings, power: PowerStatusNormalizer) -> None:
        """Initialize the SysPeekApp."""
        super().__init__()
        self._update_queue: Queue[Report] = Queue()
        self._monitor = SystemMonitor(
            self._update_queue,
            power,
            poll_rate=settings.interval,
            settle_interval=settings.settle_interval,
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield ReportPanel(id="report")
        yield Footer()

    def on_mount(self) -> None:
        """Start the monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def on_unmount(self) -> None:
        self._monitor.stop()

    def _check_for_updates(self) -> None:
        """Show the most recent report waiting in the queue, if any."""
        report = None
        while True:
            try:
                report = self._update_queue.get_nowait()
            except Empty:
                break

        if report is not None:
            self.show_report(report)

    def show_report(self, report: Report) -> None:
        try:
            self.query_one("#report", ReportPanel).update_report(report)
        except NoMatches:
            pass  # Not mounted yet

    def action_quit(self) -> None:
        """Stop the monitor and exit."""
        self._monitor.stop()
        self.exit()
