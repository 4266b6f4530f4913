"""Interface for interacting with the user (output only).

Defines the contract for displaying information, errors, warnings and the
assessment results, allowing different UI implementations.
"""

import abc
from typing import Any

from triagecli.domain.models.patient import AlertLists


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting (e.g. payload).
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_alert_summary(self, alerts: AlertLists) -> None:
        """Displays per-list counts and the identifiers in each list."""
        pass

    @abc.abstractmethod
    def display_submission_response(self, response: Any) -> None:
        """Displays the raw submission response verbatim."""
        pass
