"""Inspector package for summarizing the functions of compiled Move bytecode modules.

Modules:
- file_format.py: In-memory module tables, signature tokens and instructions.
- deserializer.py: Binary module reader.
- resolver.py: Struct and function handle resolution.
- signature.py: Signature token formatting.
- scanner.py: Global reads/writes and calls of one function body.
- canonical.py: Sorted, duplicate-free sets.
- summarize.py: Per-function summaries and the module driver.
- model.py: Output records.
- loader.py, config.py, errors.py, logging.py: Loading and ambient support.
"""

from .errors import ConfigError, DeserializationError, InputError, InspectionError, InspectorError, InvalidHandleError
from .model import FunctionSummary, ModuleReport, Resource
from .summarize import inspect_function, summarize_module, summarize_module_report

__all__ = [
	"ConfigError",
	"DeserializationError",
	"FunctionSummary",
	"InputError",
	"InspectionError",
	"InspectorError",
	"InvalidHandleError",
	"ModuleReport",
	"Resource",
	"inspect_function",
	"summarize_module",
	"summarize_module_report",
]
