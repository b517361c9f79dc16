"""Interface for interacting with the user (input/output).

Defines the contract for displaying information, errors, warnings,
and getting input from the user, allowing different UI implementations
(e.g., console, a test double collecting diagnostics).
"""

import abc
from typing import Any, Sequence

from ytcomments.domain.models.common import TaskOutcome


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The string to display.
            **kwargs: Additional arguments for formatting (e.g., color, style).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user.

        Args:
            warning_message: The warning message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user.

        Args:
            info_message: The informational message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def get_prompt(self, prompt_message: str = "Input: ") -> str:
        """Gets input from the user synchronously.

        Note: For async contexts, the caller should wrap this in asyncio.to_thread.

        Args:
            prompt_message: The message to display before the input prompt.

        Returns:
            The user's input.
        """
        pass

    def display_outcomes(self, outcomes: Sequence[TaskOutcome]) -> None:
        """Displays a summary of finished fetch tasks.

        Args:
            outcomes: One entry per requested locator.
        """
        pass

    def ask_yes_no_question(self, question: str) -> bool:
        """Asks a yes/no question and returns the answer.

        Args:
            question: The question to ask

        Returns:
            True if the answer is yes, False otherwise
        """
        pass
