from __future__ import annotations

from typing import List, Optional

from .errors import InspectionError, InspectorError
from .file_format import CompiledModule, FunctionDefinition
from .logging import get_logger
from .model import FunctionSummary, ModuleReport, SkippedFunction
from .resolver import HandleResolver
from .scanner import scan_function
from .signature import format_signature

logger = get_logger(__name__)


def inspect_function(module: CompiledModule, definition: FunctionDefinition) -> FunctionSummary:
	resolver = HandleResolver(module)
	try:
		handle = resolver.function_handle(definition.function)
		name = resolver.identifier(handle.name)
		params = format_signature(resolver.signature(handle.parameters))
		returns = format_signature(resolver.signature(handle.return_))
		scan = scan_function(module, definition)
	except (AttributeError, IndexError, TypeError) as e:
		# Malformed signature trees and operand-less instructions end up here.
		raise InspectionError(f"malformed function definition: {e}") from e

	# Generic type parameters are not resolved.
	return FunctionSummary(
		name=name,
		visibility=definition.visibility.tag,
		is_entry=definition.is_entry,
		generic_type_params=[],
		params=params,
		returns=returns,
		read_resources=scan.reads,
		write_resources=scan.writes,
		called_functions=scan.calls,
	)


def _function_name(module: CompiledModule, definition: FunctionDefinition) -> Optional[str]:
	try:
		return HandleResolver(module).function_name(definition.function)
	except InspectorError:
		return None


def summarize_module_report(module: CompiledModule) -> ModuleReport:
	functions: List[FunctionSummary] = []
	skipped: List[SkippedFunction] = []
	for index, definition in enumerate(module.function_defs):
		try:
			functions.append(inspect_function(module, definition))
		except InspectionError as e:
			e.function_index = index
			name = _function_name(module, definition)
			logger.warning("Skipping function #%d (%s): %s", index, name or "?", e)
			skipped.append(SkippedFunction(index=index, name=name, reason=str(e)))
	logger.debug("Inspected %d functions, skipped %d", len(functions), len(skipped))
	return ModuleReport(functions=functions, skipped=skipped)


def summarize_module(module: CompiledModule) -> List[FunctionSummary]:
	return summarize_module_report(module).functions
