"""Main entry point for the ytcomments application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import typer
import logging

from pathlib import Path
from typing import Any, Dict, List, Optional
from typing_extensions import Annotated

# --- Core Layer ---
from ytcomments.core.command_handler import CommandHandler
from ytcomments.core.services.fetch_orchestrator import FetchOrchestrator

# --- Domain Layer ---
from ytcomments.domain.exceptions import InputError
from ytcomments.domain.models.common import ApiKey

# --- Infrastructure Layer ---
from ytcomments.infrastructure.config.settings import (
    DEFAULT_CONFIG_FILE, fail_fast_on_input_error, get_backoff_policy,
    get_developer_key, get_output_dir, get_rate_limit_settings, load_configuration,
    save_developer_key,
)
from ytcomments.infrastructure.cli.display import ConsoleDisplay
from ytcomments.infrastructure.filesystem.comment_sink import CommentSink
from ytcomments.infrastructure.monitoring.logger_setup import resolve_log_level, setup_logging
from ytcomments.infrastructure.resilience.api_retry import ApiRetryService
from ytcomments.infrastructure.resilience.rate_limiter import RateLimiter
from ytcomments.infrastructure.youtube.youtube_client import YouTubeCommentSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_COMMENTS = 20  # commentThreads.list default page size


# --- Dependency Injection Container (Manual) ---

def create_dependencies(output_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one CLI invocation.

    This acts as the Composition Root. A fresh RateLimiter is built per
    invocation and shared by every fetch task of that run.
    """
    logger.debug("Initializing application dependencies...")
    dependencies: Dict[str, Any] = {}

    dependencies['ui'] = ConsoleDisplay()
    dependencies['rate_limiter'] = RateLimiter(**get_rate_limit_settings())
    dependencies['api_retry_service'] = ApiRetryService(
        policy=get_backoff_policy(),
        non_retryable=(InputError,) if fail_fast_on_input_error() else (),
    )
    dependencies['sink'] = CommentSink(output_dir=output_dir or get_output_dir())
    dependencies['orchestrator'] = FetchOrchestrator(
        rate_limiter=dependencies['rate_limiter'],
        retry_service=dependencies['api_retry_service'],
        sink=dependencies['sink'],
        source_factory=lambda key: YouTubeCommentSource(api_key=key),
        ui=dependencies['ui'],
    )
    dependencies['command_handler'] = CommandHandler(
        orchestrator=dependencies['orchestrator'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="ytcomments",
    help="Fetch YouTube comments for many videos concurrently, within the API rate limit.",
    add_completion=False,
)

ApiKeyOption = Annotated[
    Optional[str],
    typer.Option("--api-key", "-k", help="YouTube developer key. Defaults to YOUTUBE_API_KEY or config.yaml."),
]


@app.callback()
def main_callback(
    config: Annotated[Path, typer.Option("--config", "-c", help="Path to the YAML configuration file.")] = DEFAULT_CONFIG_FILE,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Shortcut for --log-level DEBUG.")] = False,
):
    """Loads configuration and configures logging before any command runs."""
    load_configuration(config_file=config, force=True)
    if verbose:
        setup_logging(log_level=logging.DEBUG)
    else:
        setup_logging(log_level=resolve_log_level(log_level) if log_level else None)


@app.command()
def fetch(
    urls: Annotated[List[str], typer.Argument(help="One or more YouTube video URLs.")],
    max_comments: Annotated[int, typer.Option("--max-comments", "-n", min=0, help="Maximum comments per video.")] = DEFAULT_MAX_COMMENTS,
    api_key: ApiKeyOption = None,
    output_dir: Annotated[Optional[Path], typer.Option("--output-dir", "-o", file_okay=False, help="Directory for comments_<id>.txt files.")] = None,
):
    """Fetch comments for every URL concurrently and append them to per-video files."""
    deps = create_dependencies(output_dir)
    key = api_key or get_developer_key()
    if not key:
        deps['ui'].display_error(
            "No developer key configured. Pass --api-key, set YOUTUBE_API_KEY, or run 'ytcomments set-key'."
        )
        raise typer.Exit(code=2)

    handler: CommandHandler = deps['command_handler']
    outcomes = handler.fetch(urls, max_comments, ApiKey(key))
    if not outcomes or not all(outcome.succeeded for outcome in outcomes):
        raise typer.Exit(code=1)


@app.command()
def interactive(
    api_key: ApiKeyOption = None,
    output_dir: Annotated[Optional[Path], typer.Option("--output-dir", "-o", file_okay=False)] = None,
):
    """Prompt for a comment count and a URL, fetch, and repeat until told to stop."""
    deps = create_dependencies(output_dir)
    ui: ConsoleDisplay = deps['ui']
    key = api_key or get_developer_key()
    if not key:
        ui.display_info("Configuration file not found. Creating.")
        key = ui.get_prompt("Enter your developer key: ").strip()
        if not key:
            ui.display_error("A developer key is required.")
            raise typer.Exit(code=2)
        try:
            save_developer_key(key)
        except OSError as e:
            logger.error(f"Error writing configuration file: {e}", exc_info=True)
            ui.display_error(f"Error writing configuration file: {e}")

    handler: CommandHandler = deps['command_handler']
    handler.run_interactive(ApiKey(key))


@app.command(name="set-key")
def set_key(
    developer_key: Annotated[str, typer.Argument(help="YouTube Data API v3 developer key.")],
):
    """Store the developer key in the configuration file."""
    ui = ConsoleDisplay()
    try:
        path = save_developer_key(developer_key)
    except OSError as e:
        ui.display_error(f"Error writing configuration file: {e}")
        raise typer.Exit(code=1)
    ui.display_info(f"Developer key saved to {path}")


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
