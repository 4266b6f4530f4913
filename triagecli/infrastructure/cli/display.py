import json
import logging
from typing import Any, Optional

from rich.console import Console
from rich.table import Table

from triagecli.domain.interfaces.user_interface import UserInterface
from triagecli.domain.models.patient import AlertLists

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    @console.setter
    def console(self, value: Console) -> None:
        self._console = value

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {error_message}")
        payload = kwargs.get("payload")
        if payload is not None:
            self._print_payload(payload)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        self.console.print(f"[yellow]Warning:[/yellow] {warning_message}")

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self.console.print(f"[blue]Info:[/blue] {info_message}")

    def display_alert_summary(self, alerts: AlertLists) -> None:
        """Prints a count table followed by the identifiers of each list."""
        table = Table(title="Assessment summary")
        table.add_column("List", style="bold")
        table.add_column("Patients", justify="right")
        for name, count in alerts.counts().items():
            table.add_row(name, str(count))
        self.console.print(table)

        self.console.print(f"High-risk IDs: {list(alerts.high_risk)}")
        self.console.print(f"Fever IDs:     {list(alerts.fever)}")
        self.console.print(f"Bad-data IDs:  {list(alerts.data_quality)}")

    def display_submission_response(self, response: Any) -> None:
        """Prints the response body verbatim between banner lines."""
        self.console.print("\n===== API RESPONSE =====")
        self._print_payload(response)
        self.console.print("===== END RESPONSE =====\n")

    def _print_payload(self, payload: Any) -> None:
        if isinstance(payload, str):
            self.console.print(payload, markup=False, highlight=False)
            return
        try:
            self.console.print_json(json.dumps(payload))
        except (TypeError, ValueError) as e:
            logger.debug(f"Payload is not JSON serializable ({e}); printing repr")
            self.console.print(repr(payload), markup=False, highlight=False)
