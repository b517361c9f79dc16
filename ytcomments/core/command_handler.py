"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the FetchOrchestrator. Owns the blocking bridge between the
synchronous CLI and the async pipeline, including the SIGINT ->
cancellation wiring, and the interactive prompt loop.
"""

import asyncio
import logging
import signal
from typing import List, Optional, Sequence

from ytcomments.core.services.fetch_orchestrator import FetchOrchestrator
from ytcomments.domain.exceptions import InputError
from ytcomments.domain.interfaces.user_interface import UserInterface
from ytcomments.domain.models.common import ApiKey, TaskOutcome

logger = logging.getLogger(__name__)

INVALID_COUNT_MSG = "Invalid input. Please enter a positive integer."


class CommandHandler:
    """Handles incoming commands and delegates to the orchestrator."""

    def __init__(self, orchestrator: FetchOrchestrator, ui: UserInterface):
        self.orchestrator = orchestrator
        self.ui = ui

    async def handle_fetch(
        self,
        locators: Sequence[str],
        max_results: int,
        api_key: ApiKey,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[TaskOutcome]:
        """Handles the 'fetch' command. Never raises for bad input or task failures."""
        logger.info(f"Handling 'fetch' command for {len(locators)} locator(s), max_results={max_results}")
        if not locators:
            self.ui.display_error("No video URLs given.")
            return []
        try:
            outcomes = await self.orchestrator.run(locators, max_results, api_key, cancel_event)
        except InputError as e:
            self.ui.display_error(str(e))
            return []
        except Exception as e:
            logger.error(f"Fetch command failed: {e}", exc_info=True)
            self.ui.display_error(f"Fetch command failed: {e}")
            return []

        self.ui.display_outcomes(outcomes)
        return outcomes

    def fetch(self, locators: Sequence[str], max_results: int, api_key: ApiKey) -> List[TaskOutcome]:
        """Blocking entry point: runs one fetch batch on a fresh event loop."""
        return asyncio.run(self._fetch_until_interrupted(locators, max_results, api_key))

    async def _fetch_until_interrupted(
        self,
        locators: Sequence[str],
        max_results: int,
        api_key: ApiKey,
    ) -> List[TaskOutcome]:
        cancel_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, cancel_event.set)
            handler_installed = True
        except (NotImplementedError, RuntimeError, ValueError):
            # Windows loops and non-main threads have no signal handlers
            handler_installed = False
            logger.debug("SIGINT handler not installed; Ctrl+C will not cancel gracefully.")
        try:
            return await self.handle_fetch(locators, max_results, api_key, cancel_event)
        finally:
            if handler_installed:
                loop.remove_signal_handler(signal.SIGINT)

    def ask_number_of_comments(self) -> int:
        """Prompts until the user enters a non-negative integer."""
        while True:
            raw = self.ui.get_prompt("Enter the number of comments to retrieve: ").strip()
            try:
                value = int(raw)
            except ValueError:
                self.ui.display_error(INVALID_COUNT_MSG)
                continue
            if value < 0:
                self.ui.display_error(INVALID_COUNT_MSG)
                continue
            return value

    def run_interactive(self, api_key: ApiKey) -> None:
        """Prompt loop: count, URL, fetch, then ask whether to continue."""
        logger.info("Starting interactive session.")
        while True:
            max_comments = self.ask_number_of_comments()
            video_url = self.ui.get_prompt("Enter the YouTube video URL: ").strip()
            self.fetch([video_url], max_comments, api_key)
            if not self.ui.ask_yes_no_question("Do you want to continue?"):
                logger.info("Interactive session ended by user.")
                return
