import io

import pytest
from unittest.mock import MagicMock

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ytcomments.infrastructure.cli.display import ConsoleDisplay
from ytcomments.domain.models.common import TaskOutcome, TaskState, VideoId, VideoLocator


@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()


@pytest.fixture
def console_display(mock_console: MagicMock):
    """Fixture to create a ConsoleDisplay instance with a mocked console."""
    display = ConsoleDisplay()
    display._console = mock_console  # Inject the mock
    return display


def printed_panel(mock_console: MagicMock) -> Panel:
    mock_console.print.assert_called_once()
    args, _ = mock_console.print.call_args
    assert isinstance(args[0], Panel)
    return args[0]


def test_display_output(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_output("Comment from Alice: hi")
    mock_console.print.assert_called_once_with("Comment from Alice: hi")


def test_display_error(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_error("Something went wrong")
    panel = printed_panel(mock_console)
    assert "Error" in panel.title
    assert panel.renderable.plain == "Something went wrong"


def test_display_info(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_info("Process completed")
    panel = printed_panel(mock_console)
    assert "Info" in panel.title
    assert panel.renderable.plain == "Process completed"


def test_display_warning(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_warning("Cancelled")
    panel = printed_panel(mock_console)
    assert "Warning" in panel.title


def test_get_prompt(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Test that get_prompt calls console.input and returns the result."""
    mock_console.input.return_value = "user input"

    assert console_display.get_prompt("> ") == "user input"
    mock_console.input.assert_called_once_with("[cyan]> [/cyan]")


@pytest.mark.parametrize("answers, expected", [(["Y"], True), (["yes"], True), (["n"], False), (["maybe", "No"], False)])
def test_ask_yes_no_question(console_display: ConsoleDisplay, mock_console: MagicMock, answers, expected):
    mock_console.input.side_effect = answers

    assert console_display.ask_yes_no_question("Do you want to continue?") is expected
    assert mock_console.input.call_count == len(answers)


def test_display_outcomes_renders_one_row_per_task(console_display: ConsoleDisplay, mock_console: MagicMock):
    outcomes = [
        TaskOutcome(VideoLocator("u1"), TaskState.SUCCEEDED, 1, 2, VideoId("abc"), "comments_abc.txt"),
        TaskOutcome(VideoLocator("u2"), TaskState.EXHAUSTED, 4, 0, None, None, "quotaExceeded"),
    ]

    console_display.display_outcomes(outcomes)

    args, _ = mock_console.print.call_args
    assert isinstance(args[0], Table)
    assert args[0].row_count == 2


def test_display_outcomes_with_nothing_prints_nothing(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_outcomes([])
    mock_console.print.assert_not_called()


def test_display_outcomes_prints_bracketed_text_literally():
    display = ConsoleDisplay()
    buffer = io.StringIO()
    display._console = Console(file=buffer, width=200, color_system=None)
    outcomes = [
        TaskOutcome(
            VideoLocator("https://www.youtube.com/watch?v=[/bold]"), TaskState.EXHAUSTED, 1, 0,
            None, None, "Invalid YouTube URL: malformed video id '[/bold]'",
        ),
    ]

    display.display_outcomes(outcomes)

    rendered = buffer.getvalue()
    assert "watch?v=[/bold]" in rendered
    assert "malformed video id '[/bold]'" in rendered
