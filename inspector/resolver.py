from __future__ import annotations

from typing import Sequence, Tuple, TypeVar

from .errors import InvalidHandleError
from .file_format import CompiledModule, FunctionHandle, ModuleHandle, SignatureToken
from .model import Resource

T = TypeVar("T")


def _at(table: Sequence[T], index: int, name: str) -> T:
	if index < 0 or index >= len(table):
		raise InvalidHandleError(name, index, len(table))
	return table[index]


def format_address(address: bytes) -> str:
	return "0x" + address.hex()


class HandleResolver:
	"""Turns table indices of a module into qualified identities."""

	def __init__(self, module: CompiledModule):
		self.module = module

	def identifier(self, index: int) -> str:
		return _at(self.module.identifiers, index, "identifier")

	def address(self, index: int) -> bytes:
		return _at(self.module.address_identifiers, index, "address identifier")

	def module_id(self, index: int) -> Tuple[str, str]:
		"""Return ``(address, name)`` of the module handle at ``index``."""
		handle: ModuleHandle = _at(self.module.module_handles, index, "module handle")
		return format_address(self.address(handle.address)), self.identifier(handle.name)

	def resolve_struct_handle(self, index: int) -> Resource:
		handle = _at(self.module.struct_handles, index, "struct handle")
		module_addr, module_name = self.module_id(handle.module)
		return Resource(
			module_addr=module_addr,
			module_name=module_name,
			resource_name=self.identifier(handle.name),
		)

	def resolve_struct(self, index: int) -> Resource:
		"""Resolve the struct definition named by a global borrow operand."""
		definition = _at(self.module.struct_defs, index, "struct definition")
		return self.resolve_struct_handle(definition.struct_handle)

	def function_handle(self, index: int) -> FunctionHandle:
		return _at(self.module.function_handles, index, "function handle")

	def resolve_function(self, index: int) -> str:
		handle = self.function_handle(index)
		module_addr, _ = self.module_id(handle.module)
		return f"{module_addr}::{self.identifier(handle.name)}"

	def function_name(self, index: int) -> str:
		return self.identifier(self.function_handle(index).name)

	def signature(self, index: int) -> Tuple[SignatureToken, ...]:
		return _at(self.module.signatures, index, "signature")
