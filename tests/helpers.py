"""Module builders and binary encoders shared by the tests."""

from inspector.file_format import (
	ADDRESS,
	BOOL,
	U8,
	U64,
	CodeUnit,
	CompiledModule,
	FunctionHandle,
	Instruction,
	ModuleHandle,
	SignatureToken,
	StructDefinition,
	StructHandle,
)

ADDR_ABC = bytes(30) + b"\x0a\xbc"
ADDR_ABC_HEX = "0x" + "00" * 30 + "0abc"
ADDR_ONE = bytes(31) + b"\x01"
ADDR_ONE_HEX = "0x" + "00" * 31 + "01"


def uleb(n):
	out = bytearray()
	while True:
		byte = n & 0x7F
		n >>= 7
		if n:
			out.append(byte | 0x80)
		else:
			out.append(byte)
			return bytes(out)


def ident(s):
	raw = s.encode("utf-8")
	return uleb(len(raw)) + raw


def encode(tables, version=6, self_idx=0):
	"""Lay out ``[(kind, body), ...]`` as a binary module."""
	header = b"\xa1\x1c\xeb\x0b" + version.to_bytes(4, "little") + uleb(len(tables))
	content = b""
	for kind, body in tables:
		header += bytes([kind]) + uleb(len(content)) + uleb(len(body))
		content += body
	out = header + content
	if version >= 5:
		out += uleb(self_idx)
	return out


def code(*instrs):
	return CodeUnit(locals=0, code=tuple(Instruction(op, tuple(args)) for op, *args in instrs))


def make_module(function_defs, function_handles=None):
	"""A module ``0x...0abc::coin`` declaring ``Balance`` and using ``0x1::other::Info``.

	Function handles: 0 transfer(U64, Address), 1 peek(): Bool, 2 hash(vector<vector<u8>>),
	3 0x1::other::log().
	"""
	if function_handles is None:
		function_handles = (
			FunctionHandle(module=0, name=2, parameters=1, return_=0),
			FunctionHandle(module=0, name=3, parameters=0, return_=2),
			FunctionHandle(module=0, name=4, parameters=3, return_=3),
			FunctionHandle(module=1, name=7, parameters=0, return_=0),
		)
	return CompiledModule(
		identifiers=("coin", "Balance", "transfer", "peek", "hash", "other", "Info", "log"),
		address_identifiers=(ADDR_ABC, ADDR_ONE),
		module_handles=(ModuleHandle(address=0, name=0), ModuleHandle(address=1, name=5)),
		struct_handles=(StructHandle(module=0, name=1, abilities=0x8), StructHandle(module=1, name=6, abilities=0x8)),
		struct_defs=(StructDefinition(struct_handle=0), StructDefinition(struct_handle=1)),
		signatures=(
			(),
			(U64, ADDRESS),
			(BOOL,),
			(SignatureToken.vector(SignatureToken.vector(U8)),),
		),
		function_handles=tuple(function_handles),
		function_defs=tuple(function_defs),
	)


