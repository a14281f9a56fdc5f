"""Interface for presenting results to the user.

Defines the contract for displaying data, errors, warnings and
information, allowing different UI implementations (e.g., console).
"""

import abc
from typing import Any, Dict, List


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_json(self, data: Any, **kwargs: Any) -> None:
        """Displays a JSON-serializable payload to the user.

        Args:
            data: The payload to render.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    def display_table(self, title: str, columns: List[str], rows: List[List[str]]) -> None:
        """Displays tabular data. Optional for implementations."""
        pass

    def display_mapping(self, title: str, values: Dict[str, Any]) -> None:
        """Displays key/value pairs. Optional for implementations."""
        pass
