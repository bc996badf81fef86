"""Logger setup for the inspector.

Everything logs under the ``inspector`` logger. Handlers write to stderr so
that stdout stays free for the JSON report.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "inspector"
DEFAULT_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
DETAILED_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s (%(filename)s:%(lineno)d): %(message)s"


class ColoredFormatter(logging.Formatter):
	COLORS = {
		"DEBUG": "\033[36m",
		"INFO": "\033[32m",
		"WARNING": "\033[33m",
		"ERROR": "\033[31m",
		"CRITICAL": "\033[35m",
	}
	RESET = "\033[0m"

	def __init__(self, fmt=None, datefmt=None, use_colors: bool = True) -> None:
		super().__init__(fmt, datefmt)
		self.use_colors = use_colors and sys.stderr.isatty()

	def format(self, record: logging.LogRecord) -> str:
		message = super().format(record)
		if self.use_colors:
			color = self.COLORS.get(record.levelname, "")
			return f"{color}{message}{self.RESET}"
		return message


_configured = False


def setup_logging(
	level: str = "WARNING",
	log_file: Optional[Union[str, Path]] = None,
	use_colors: bool = True,
) -> logging.Logger:
	global _configured
	root = logging.getLogger(ROOT_LOGGER)
	root.setLevel(getattr(logging, level.upper(), logging.WARNING))
	if _configured:
		return root

	detailed = level.upper() == "DEBUG"
	console = logging.StreamHandler(sys.stderr)
	console.setFormatter(ColoredFormatter(DETAILED_FORMAT if detailed else DEFAULT_FORMAT, use_colors=use_colors))
	root.addHandler(console)

	if log_file:
		path = Path(log_file)
		path.parent.mkdir(parents=True, exist_ok=True)
		file_handler = logging.FileHandler(path, encoding="utf-8")
		file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
		root.addHandler(file_handler)

	_configured = True
	return root


def get_logger(name: str) -> logging.Logger:
	if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
		name = f"{ROOT_LOGGER}.{name}"
	return logging.getLogger(name)
