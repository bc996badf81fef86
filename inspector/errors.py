"""Exception hierarchy for the inspector.

Two tiers: ``InputError`` and ``DeserializationError`` are fatal for a whole
module, ``InspectionError`` only drops the function it was raised for.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class InspectorError(Exception):
	def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
		super().__init__(message)
		self.message = message
		self.details = details or {}

	def __str__(self) -> str:
		if self.details:
			return f"{self.message} | Details: {self.details}"
		return self.message


class InputError(InspectorError):
	"""The module file is missing or unreadable."""

	def __init__(self, message: str, path: Optional[str] = None, **kwargs: Any) -> None:
		super().__init__(message, kwargs)
		self.path = path


class DeserializationError(InspectorError):
	"""The bytes do not form a module this reader understands."""

	def __init__(self, message: str, offset: Optional[int] = None, **kwargs: Any) -> None:
		super().__init__(message, kwargs)
		self.offset = offset

	def __str__(self) -> str:
		base = super().__str__()
		if self.offset is not None:
			return f"{base} (at byte offset {self.offset})"
		return base


class InspectionError(InspectorError):
	"""A single function could not be summarized."""

	def __init__(self, message: str, function_index: Optional[int] = None, **kwargs: Any) -> None:
		super().__init__(message, kwargs)
		self.function_index = function_index


class InvalidHandleError(InspectionError):
	def __init__(self, table: str, index: int, size: int) -> None:
		super().__init__(f"{table} index {index} out of range (table has {size} entries)")
		self.table = table
		self.index = index
		self.size = size


class ConfigError(InspectorError):
	"""A configuration value from the environment or a flag is invalid."""

	def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any) -> None:
		super().__init__(message, kwargs)
		self.field = field
