# This file is part of the Course Compass project for logging and console management.
# Date: 2026-10-19
# Version: 0.3.0

import logging
from typing import Iterable, Union
from rich.logging import RichHandler
from rich.console import Console
from rich.panel import Panel
from rich.theme import Theme

# Custom level between INFO and WARNING for completed milestones (plan built, PDF written)
SUCCESS_LEVEL_NUM = 25

logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

def success_log(self, message, *args, **kwargs):
    if self.isEnabledFor(SUCCESS_LEVEL_NUM):
        self._log(SUCCESS_LEVEL_NUM, message, args, **kwargs)

if not hasattr(logging.Logger, 'success'):
    setattr(logging.Logger, 'success', success_log)


def resolve_level(level: Union[str, int]) -> int:
    """Accepts a level name in any case (including SUCCESS) or a numeric level."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


class ConsoleManager:
    """
    Console output for the advisor backend. Tool rounds are drawn as rules and
    failed tool calls as panels, so one chat exchange reads as a block in the
    log; everything else goes through the named logger at the configured level.
    """
    def __init__(self, name: str = "Course-Compass", level: Union[str, int] = "INFO"):
        custom_theme = Theme({
            "logging.level.success": "bold green",
            "compass.tool": "bold cyan",
        })
        self._console = Console(theme=custom_theme, stderr=True)
        self._logger = self._setup_logger(name)
        self.set_level(level)

    def _setup_logger(self, name: str) -> logging.Logger:
        logger = logging.getLogger(name)
        if logger.hasHandlers():
            return logger

        handler = RichHandler(
            console=self._console,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            keywords=["SUCCESS", "Tool round", "session"],
            show_path=False
        )
        handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False
        return logger

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def set_level(self, level: Union[str, int]):
        self._logger.setLevel(resolve_level(level))

    def debug(self, message: str):
        self._logger.debug(message)

    def info(self, message: str):
        self._logger.info(message)

    def success(self, message: str):
        self._logger.success(message)

    def warning(self, message: str):
        self._logger.warning(message)

    def error(self, message: str):
        self._logger.error(message)

    def exception(self, message: str):
        self._logger.exception(message)

    def rule(self, title: str, style: str = "cyan"):
        if self._logger.isEnabledFor(logging.INFO):
            self._console.rule(f"[bold {style}]{title}[/bold {style}]", style=style)

    def tool_round(self, depth: int, tool_names: Iterable[str]):
        self.rule(f"Tool round {depth}: {', '.join(tool_names)}")

    def tool_failure(self, tool_name: str, error_message: str):
        """Shows a failed tool call as a panel; the message is also logged for non-terminal sinks."""
        self._logger.error(f"Tool '{tool_name}' failed: {error_message}")
        if self._console.is_terminal:
            panel = Panel(error_message, title=f"[bold red]Error handling function call {tool_name}[/bold red]",
                          border_style="red")
            self._console.print(panel)

# Create a singleton instance for global use
console = ConsoleManager()
