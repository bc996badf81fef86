from __future__ import annotations

from typing import List, NamedTuple, Optional, Tuple

from .canonical import canonicalize
from .errors import InspectionError
from .file_format import BRANCH_OPCODES, CompiledModule, FunctionDefinition, Instruction, Opcode
from .model import Resource
from .resolver import HandleResolver


class ScanResult(NamedTuple):
	reads: List[Resource]
	writes: List[Resource]
	calls: List[str]


READS = "reads"
WRITES = "writes"
CALLS = "calls"


def classify(resolver: HandleResolver, instr: Instruction) -> Optional[Tuple[str, object]]:
	"""Map one instruction to ``(stream, candidate)``, or None for anything else."""
	if instr.opcode == Opcode.IMM_BORROW_GLOBAL:
		return READS, resolver.resolve_struct(instr.operand)
	if instr.opcode == Opcode.MUT_BORROW_GLOBAL:
		return WRITES, resolver.resolve_struct(instr.operand)
	if instr.opcode == Opcode.CALL:
		return CALLS, resolver.resolve_function(instr.operand)
	return None


def scan_function(module: CompiledModule, definition: FunctionDefinition) -> ScanResult:
	if definition.code is None:
		return ScanResult(reads=[], writes=[], calls=[])

	resolver = HandleResolver(module)
	code = definition.code.code
	streams = {READS: [], WRITES: [], CALLS: []}
	for offset, instr in enumerate(code):
		if instr.opcode in BRANCH_OPCODES and instr.operand >= len(code):
			raise InspectionError(
				f"inconsistent bytecode offset: {instr.opcode.name} at {offset} targets {instr.operand}",
				offset=offset,
			)
		hit = classify(resolver, instr)
		if hit is not None:
			stream, candidate = hit
			streams[stream].append(candidate)

	return ScanResult(
		reads=canonicalize(streams[READS]),
		writes=canonicalize(streams[WRITES]),
		calls=canonicalize(streams[CALLS]),
	)
