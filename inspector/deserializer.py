"""Binary Move module reader.

Layout: magic, little-endian u32 version, ULEB128 table count, one
``(kind, offset, length)`` header per table, the table contents, and from
version 5 on the ULEB128 index of the module's own handle. Only the shape of
the binary is checked; cross-table references are left unvalidated.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from .errors import DeserializationError
from .file_format import (
	ADDRESS,
	BOOL,
	SIGNER,
	U8,
	U16,
	U32,
	U64,
	U128,
	U256,
	CodeUnit,
	CompiledModule,
	Constant,
	FieldDefinition,
	FieldHandle,
	FieldInstantiation,
	FunctionDefinition,
	FunctionHandle,
	FunctionInstantiation,
	Instruction,
	Metadata,
	ModuleHandle,
	Opcode,
	SignatureToken,
	StructDefInstantiation,
	StructDefinition,
	StructHandle,
	StructTypeParameter,
	Visibility,
)
from .logging import get_logger

logger = get_logger(__name__)

MAGIC = b"\xa1\x1c\xeb\x0b"
MIN_VERSION = 1
MAX_VERSION = 6
# The high byte carries a flavor marker on some chains.
VERSION_MASK = 0x00FF_FFFF
DEFAULT_ADDRESS_LENGTH = 32
SIGNATURE_TOKEN_DEPTH_MAX = 256


class TableType:
	MODULE_HANDLES = 0x1
	STRUCT_HANDLES = 0x2
	FUNCTION_HANDLES = 0x3
	FUNCTION_INST = 0x4
	SIGNATURES = 0x5
	CONSTANT_POOL = 0x6
	IDENTIFIERS = 0x7
	ADDRESS_IDENTIFIERS = 0x8
	STRUCT_DEFS = 0xA
	STRUCT_DEF_INST = 0xB
	FUNCTION_DEFS = 0xC
	FIELD_HANDLE = 0xD
	FIELD_INST = 0xE
	FRIEND_DECLS = 0xF
	METADATA = 0x10


class SerializedType:
	BOOL = 0x1
	U8 = 0x2
	U64 = 0x3
	U128 = 0x4
	ADDRESS = 0x5
	REFERENCE = 0x6
	MUTABLE_REFERENCE = 0x7
	STRUCT = 0x8
	TYPE_PARAMETER = 0x9
	VECTOR = 0xA
	STRUCT_INST = 0xB
	SIGNER = 0xC
	U16 = 0xD
	U32 = 0xE
	U256 = 0xF


PRIMITIVE_TYPES = {
	SerializedType.BOOL: BOOL,
	SerializedType.U8: U8,
	SerializedType.U16: U16,
	SerializedType.U32: U32,
	SerializedType.U64: U64,
	SerializedType.U128: U128,
	SerializedType.U256: U256,
	SerializedType.ADDRESS: ADDRESS,
	SerializedType.SIGNER: SIGNER,
}

# Function definition flag bits.
DEPRECATED_PUBLIC_BIT = 0x1
NATIVE = 0x2
ENTRY = 0x4

# Struct field information tags.
FIELD_NATIVE = 0x1
FIELD_DECLARED = 0x2

# Operand widths per opcode; 0 stands for a ULEB128 index.
OPERANDS: Dict[Opcode, Tuple[int, ...]] = {
	Opcode.BR_TRUE: (0,),
	Opcode.BR_FALSE: (0,),
	Opcode.BRANCH: (0,),
	Opcode.LD_U8: (1,),
	Opcode.LD_U16: (2,),
	Opcode.LD_U32: (4,),
	Opcode.LD_U64: (8,),
	Opcode.LD_U128: (16,),
	Opcode.LD_U256: (32,),
	Opcode.LD_CONST: (0,),
	Opcode.COPY_LOC: (1,),
	Opcode.MOVE_LOC: (1,),
	Opcode.ST_LOC: (1,),
	Opcode.MUT_BORROW_LOC: (1,),
	Opcode.IMM_BORROW_LOC: (1,),
	Opcode.MUT_BORROW_FIELD: (0,),
	Opcode.IMM_BORROW_FIELD: (0,),
	Opcode.MUT_BORROW_FIELD_GENERIC: (0,),
	Opcode.IMM_BORROW_FIELD_GENERIC: (0,),
	Opcode.CALL: (0,),
	Opcode.CALL_GENERIC: (0,),
	Opcode.PACK: (0,),
	Opcode.PACK_GENERIC: (0,),
	Opcode.UNPACK: (0,),
	Opcode.UNPACK_GENERIC: (0,),
	Opcode.EXISTS: (0,),
	Opcode.EXISTS_GENERIC: (0,),
	Opcode.MUT_BORROW_GLOBAL: (0,),
	Opcode.MUT_BORROW_GLOBAL_GENERIC: (0,),
	Opcode.IMM_BORROW_GLOBAL: (0,),
	Opcode.IMM_BORROW_GLOBAL_GENERIC: (0,),
	Opcode.MOVE_FROM: (0,),
	Opcode.MOVE_FROM_GENERIC: (0,),
	Opcode.MOVE_TO: (0,),
	Opcode.MOVE_TO_GENERIC: (0,),
	Opcode.VEC_PACK: (0, 8),
	Opcode.VEC_UNPACK: (0, 8),
	Opcode.VEC_LEN: (0,),
	Opcode.VEC_IMM_BORROW: (0,),
	Opcode.VEC_MUT_BORROW: (0,),
	Opcode.VEC_PUSH_BACK: (0,),
	Opcode.VEC_POP_BACK: (0,),
	Opcode.VEC_SWAP: (0,),
}


class Reader:
	def __init__(self, data: bytes, start: int = 0, end: Optional[int] = None, version: int = MAX_VERSION):
		self.data = data
		self.pos = start
		self.end = len(data) if end is None else end
		self.version = version

	def at_end(self) -> bool:
		return self.pos >= self.end

	def error(self, message: str) -> DeserializationError:
		return DeserializationError(message, offset=self.pos)

	def read_bytes(self, n: int) -> bytes:
		if n < 0 or self.pos + n > self.end:
			raise self.error(f"unexpected end of input reading {n} bytes")
		chunk = self.data[self.pos:self.pos + n]
		self.pos += n
		return chunk

	def read_u8(self) -> int:
		return self.read_bytes(1)[0]

	def read_fixed(self, width: int) -> int:
		return int.from_bytes(self.read_bytes(width), "little")

	def read_uleb128(self) -> int:
		value = 0
		shift = 0
		while True:
			byte = self.read_u8()
			if shift == 63 and byte > 1:
				raise self.error("ULEB128 value overflows u64")
			value |= (byte & 0x7F) << shift
			if not byte & 0x80:
				return value
			shift += 7

	def read_vector(self, item: Callable[[], object]) -> list:
		return [item() for _ in range(self.read_uleb128())]

	def read_identifier(self) -> str:
		raw = self.read_bytes(self.read_uleb128())
		try:
			return raw.decode("utf-8")
		except UnicodeDecodeError as e:
			raise self.error(f"identifier is not valid UTF-8: {e}") from e


def read_signature_token(r: Reader, depth: int = 0) -> SignatureToken:
	if depth > SIGNATURE_TOKEN_DEPTH_MAX:
		raise r.error("signature token nested too deeply")
	tag = r.read_u8()
	if tag in PRIMITIVE_TYPES:
		return PRIMITIVE_TYPES[tag]
	if tag == SerializedType.VECTOR:
		return SignatureToken.vector(read_signature_token(r, depth + 1))
	if tag == SerializedType.REFERENCE:
		return SignatureToken.reference(read_signature_token(r, depth + 1))
	if tag == SerializedType.MUTABLE_REFERENCE:
		return SignatureToken.mutable_reference(read_signature_token(r, depth + 1))
	if tag == SerializedType.STRUCT:
		return SignatureToken.struct(r.read_uleb128())
	if tag == SerializedType.TYPE_PARAMETER:
		return SignatureToken.type_parameter(r.read_uleb128())
	if tag == SerializedType.STRUCT_INST:
		index = r.read_uleb128()
		arity = r.read_uleb128()
		args = [read_signature_token(r, depth + 1) for _ in range(arity)]
		return SignatureToken.struct_instantiation(index, args)
	raise DeserializationError(f"unknown serialized type 0x{tag:02x}", offset=r.pos - 1)


def read_instruction(r: Reader) -> Instruction:
	byte = r.read_u8()
	try:
		opcode = Opcode(byte)
	except ValueError:
		raise DeserializationError(f"unknown opcode 0x{byte:02x}", offset=r.pos - 1) from None
	operands = tuple(r.read_uleb128() if width == 0 else r.read_fixed(width) for width in OPERANDS.get(opcode, ()))
	return Instruction(opcode, operands)


def read_module_handle(r: Reader) -> ModuleHandle:
	return ModuleHandle(address=r.read_uleb128(), name=r.read_uleb128())


def read_struct_handle(r: Reader) -> StructHandle:
	module = r.read_uleb128()
	name = r.read_uleb128()
	abilities = r.read_u8()
	if r.version < 3:
		params = r.read_vector(lambda: StructTypeParameter(constraints=r.read_u8()))
	else:
		params = r.read_vector(lambda: StructTypeParameter(constraints=r.read_u8(), is_phantom=r.read_u8() != 0))
	return StructHandle(module=module, name=name, abilities=abilities, type_parameters=tuple(params))


def read_function_handle(r: Reader) -> FunctionHandle:
	return FunctionHandle(
		module=r.read_uleb128(),
		name=r.read_uleb128(),
		parameters=r.read_uleb128(),
		return_=r.read_uleb128(),
		type_parameters=tuple(r.read_vector(r.read_u8)),
	)


def read_function_instantiation(r: Reader) -> FunctionInstantiation:
	return FunctionInstantiation(handle=r.read_uleb128(), type_parameters=r.read_uleb128())


def read_signature(r: Reader) -> Tuple[SignatureToken, ...]:
	return tuple(r.read_vector(lambda: read_signature_token(r)))


def read_constant(r: Reader) -> Constant:
	type_ = read_signature_token(r)
	return Constant(type_=type_, data=r.read_bytes(r.read_uleb128()))


def read_struct_definition(r: Reader) -> StructDefinition:
	handle = r.read_uleb128()
	tag = r.read_u8()
	if tag == FIELD_NATIVE:
		return StructDefinition(struct_handle=handle)
	if tag != FIELD_DECLARED:
		raise DeserializationError(f"unknown field information tag 0x{tag:02x}", offset=r.pos - 1)
	fields = r.read_vector(lambda: FieldDefinition(name=r.read_uleb128(), signature=read_signature_token(r)))
	return StructDefinition(struct_handle=handle, fields=tuple(fields))


def read_struct_def_instantiation(r: Reader) -> StructDefInstantiation:
	return StructDefInstantiation(definition=r.read_uleb128(), type_parameters=r.read_uleb128())


def _read_visibility(r: Reader) -> Visibility:
	byte = r.read_u8()
	try:
		return Visibility(byte)
	except ValueError:
		raise DeserializationError(f"unknown visibility 0x{byte:02x}", offset=r.pos - 1) from None


def read_function_definition(r: Reader) -> FunctionDefinition:
	function = r.read_uleb128()
	if r.version == 1:
		flags = r.read_u8()
		visibility = Visibility.PUBLIC if flags & DEPRECATED_PUBLIC_BIT else Visibility.PRIVATE
		is_entry = False
	elif r.version < 5:
		visibility = _read_visibility(r)
		flags = r.read_u8()
		is_entry = visibility == Visibility.SCRIPT
		if is_entry:
			visibility = Visibility.PUBLIC
	else:
		visibility = _read_visibility(r)
		if visibility == Visibility.SCRIPT:
			raise DeserializationError("script visibility is not allowed from version 5", offset=r.pos - 1)
		flags = r.read_u8()
		is_entry = bool(flags & ENTRY)

	acquires = tuple(r.read_vector(r.read_uleb128))
	code = None
	if not flags & NATIVE:
		locals_ = r.read_uleb128()
		code = CodeUnit(locals=locals_, code=tuple(r.read_vector(lambda: read_instruction(r))))
	return FunctionDefinition(
		function=function,
		visibility=visibility,
		is_entry=is_entry,
		acquires_global_resources=acquires,
		code=code,
	)


def read_field_handle(r: Reader) -> FieldHandle:
	return FieldHandle(owner=r.read_uleb128(), field=r.read_uleb128())


def read_field_instantiation(r: Reader) -> FieldInstantiation:
	return FieldInstantiation(handle=r.read_uleb128(), type_parameters=r.read_uleb128())


def read_metadata(r: Reader) -> Metadata:
	key = r.read_bytes(r.read_uleb128())
	return Metadata(key=key, value=r.read_bytes(r.read_uleb128()))


TABLES: Dict[int, Tuple[str, Callable[[Reader], object]]] = {
	TableType.MODULE_HANDLES: ("module_handles", read_module_handle),
	TableType.STRUCT_HANDLES: ("struct_handles", read_struct_handle),
	TableType.FUNCTION_HANDLES: ("function_handles", read_function_handle),
	TableType.FUNCTION_INST: ("function_instantiations", read_function_instantiation),
	TableType.SIGNATURES: ("signatures", read_signature),
	TableType.CONSTANT_POOL: ("constant_pool", read_constant),
	TableType.IDENTIFIERS: ("identifiers", Reader.read_identifier),
	TableType.STRUCT_DEFS: ("struct_defs", read_struct_definition),
	TableType.STRUCT_DEF_INST: ("struct_def_instantiations", read_struct_def_instantiation),
	TableType.FUNCTION_DEFS: ("function_defs", read_function_definition),
	TableType.FIELD_HANDLE: ("field_handles", read_field_handle),
	TableType.FIELD_INST: ("field_instantiations", read_field_instantiation),
	TableType.FRIEND_DECLS: ("friend_decls", read_module_handle),
	TableType.METADATA: ("metadata", read_metadata),
}


def _read_table(r: Reader, item: Callable[[Reader], object]) -> list:
	entries = []
	while not r.at_end():
		entries.append(item(r))
	return entries


def deserialize_module(data: bytes, address_length: int = DEFAULT_ADDRESS_LENGTH) -> CompiledModule:
	if address_length <= 0:
		raise ValueError(f"address_length must be positive, got {address_length}")

	head = Reader(data)
	if head.read_bytes(len(MAGIC)) != MAGIC:
		raise DeserializationError("bad magic: not a Move bytecode module", offset=0)
	version = head.read_fixed(4) & VERSION_MASK
	if not MIN_VERSION <= version <= MAX_VERSION:
		raise DeserializationError(f"unsupported bytecode version {version}", offset=len(MAGIC))
	head.version = version

	headers: List[Tuple[int, int, int]] = []
	seen = set()
	for _ in range(head.read_uleb128()):
		kind = head.read_u8()
		if kind in seen:
			raise head.error(f"duplicate table 0x{kind:02x}")
		seen.add(kind)
		headers.append((kind, head.read_uleb128(), head.read_uleb128()))

	content_start = head.pos
	content_end = content_start + max((offset + length for _, offset, length in headers), default=0)
	if content_end > len(data):
		raise DeserializationError("table contents run past the end of input", offset=len(data))

	tables: Dict[str, list] = {}
	for kind, offset, length in headers:
		r = Reader(data, content_start + offset, content_start + offset + length, version)
		if kind == TableType.ADDRESS_IDENTIFIERS:
			if length % address_length:
				raise r.error(f"address table length {length} is not a multiple of {address_length}")
			tables["address_identifiers"] = [r.read_bytes(address_length) for _ in range(length // address_length)]
		elif kind in TABLES:
			name, item = TABLES[kind]
			tables[name] = _read_table(r, item)
		else:
			logger.debug("Skipping unknown table 0x%02x (%d bytes)", kind, length)

	self_idx = 0
	if version >= 5:
		tail = Reader(data, content_end, len(data), version)
		self_idx = tail.read_uleb128()

	module = CompiledModule(
		version=version,
		self_module_handle_idx=self_idx,
		**{name: tuple(entries) for name, entries in tables.items()},
	)
	logger.debug(
		"Deserialized module v%d: %d function definitions, %d struct definitions",
		version,
		len(module.function_defs),
		len(module.struct_defs),
	)
	return module
