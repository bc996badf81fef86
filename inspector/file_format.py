from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Tuple


class Opcode(IntEnum):
	POP = 0x01
	RET = 0x02
	BR_TRUE = 0x03
	BR_FALSE = 0x04
	BRANCH = 0x05
	LD_U64 = 0x06
	LD_CONST = 0x07
	LD_TRUE = 0x08
	LD_FALSE = 0x09
	COPY_LOC = 0x0A
	MOVE_LOC = 0x0B
	ST_LOC = 0x0C
	MUT_BORROW_LOC = 0x0D
	IMM_BORROW_LOC = 0x0E
	MUT_BORROW_FIELD = 0x0F
	IMM_BORROW_FIELD = 0x10
	CALL = 0x11
	PACK = 0x12
	UNPACK = 0x13
	READ_REF = 0x14
	WRITE_REF = 0x15
	ADD = 0x16
	SUB = 0x17
	MUL = 0x18
	MOD = 0x19
	DIV = 0x1A
	BIT_OR = 0x1B
	BIT_AND = 0x1C
	XOR = 0x1D
	OR = 0x1E
	AND = 0x1F
	NOT = 0x20
	EQ = 0x21
	NEQ = 0x22
	LT = 0x23
	GT = 0x24
	LE = 0x25
	GE = 0x26
	ABORT = 0x27
	NOP = 0x28
	EXISTS = 0x29
	MUT_BORROW_GLOBAL = 0x2A
	IMM_BORROW_GLOBAL = 0x2B
	MOVE_FROM = 0x2C
	MOVE_TO = 0x2D
	FREEZE_REF = 0x2E
	SHL = 0x2F
	SHR = 0x30
	LD_U8 = 0x31
	LD_U128 = 0x32
	CAST_U8 = 0x33
	CAST_U64 = 0x34
	CAST_U128 = 0x35
	MUT_BORROW_FIELD_GENERIC = 0x36
	IMM_BORROW_FIELD_GENERIC = 0x37
	CALL_GENERIC = 0x38
	PACK_GENERIC = 0x39
	UNPACK_GENERIC = 0x3A
	EXISTS_GENERIC = 0x3B
	MUT_BORROW_GLOBAL_GENERIC = 0x3C
	IMM_BORROW_GLOBAL_GENERIC = 0x3D
	MOVE_FROM_GENERIC = 0x3E
	MOVE_TO_GENERIC = 0x3F
	VEC_PACK = 0x40
	VEC_LEN = 0x41
	VEC_IMM_BORROW = 0x42
	VEC_MUT_BORROW = 0x43
	VEC_PUSH_BACK = 0x44
	VEC_POP_BACK = 0x45
	VEC_UNPACK = 0x46
	VEC_SWAP = 0x47
	LD_U16 = 0x48
	LD_U32 = 0x49
	LD_U256 = 0x4A
	CAST_U16 = 0x4B
	CAST_U32 = 0x4C
	CAST_U256 = 0x4D


BRANCH_OPCODES = frozenset({Opcode.BR_TRUE, Opcode.BR_FALSE, Opcode.BRANCH})


class Visibility(IntEnum):
	PRIVATE = 0x0
	PUBLIC = 0x1
	# Only valid before binary version 5; rewritten to PUBLIC + entry on load.
	SCRIPT = 0x2
	FRIEND = 0x3

	@property
	def tag(self) -> str:
		return self.name.capitalize()


class TokenKind(Enum):
	BOOL = "Bool"
	U8 = "U8"
	U16 = "U16"
	U32 = "U32"
	U64 = "U64"
	U128 = "U128"
	U256 = "U256"
	ADDRESS = "Address"
	SIGNER = "Signer"
	VECTOR = "Vector"
	REFERENCE = "Reference"
	MUTABLE_REFERENCE = "MutableReference"
	STRUCT = "Struct"
	STRUCT_INSTANTIATION = "StructInstantiation"
	TYPE_PARAMETER = "TypeParameter"


PRIMITIVE_KINDS = frozenset(
	{
		TokenKind.BOOL,
		TokenKind.U8,
		TokenKind.U16,
		TokenKind.U32,
		TokenKind.U64,
		TokenKind.U128,
		TokenKind.U256,
		TokenKind.ADDRESS,
		TokenKind.SIGNER,
	}
)
WRAPPER_KINDS = frozenset({TokenKind.VECTOR, TokenKind.REFERENCE, TokenKind.MUTABLE_REFERENCE})


@dataclass(frozen=True)
class SignatureToken:
	"""A type descriptor.

	Primitives carry only their kind. Vector and the two reference kinds wrap
	``inner``. Struct, StructInstantiation and TypeParameter carry a raw table
	``index``; StructInstantiation also carries ``type_args``.
	"""

	kind: TokenKind
	inner: Optional[SignatureToken] = None
	index: Optional[int] = None
	type_args: Tuple[SignatureToken, ...] = ()

	@classmethod
	def vector(cls, inner: SignatureToken) -> SignatureToken:
		return cls(TokenKind.VECTOR, inner=inner)

	@classmethod
	def reference(cls, inner: SignatureToken) -> SignatureToken:
		return cls(TokenKind.REFERENCE, inner=inner)

	@classmethod
	def mutable_reference(cls, inner: SignatureToken) -> SignatureToken:
		return cls(TokenKind.MUTABLE_REFERENCE, inner=inner)

	@classmethod
	def struct(cls, index: int) -> SignatureToken:
		return cls(TokenKind.STRUCT, index=index)

	@classmethod
	def struct_instantiation(cls, index: int, type_args) -> SignatureToken:
		return cls(TokenKind.STRUCT_INSTANTIATION, index=index, type_args=tuple(type_args))

	@classmethod
	def type_parameter(cls, index: int) -> SignatureToken:
		return cls(TokenKind.TYPE_PARAMETER, index=index)


BOOL = SignatureToken(TokenKind.BOOL)
U8 = SignatureToken(TokenKind.U8)
U16 = SignatureToken(TokenKind.U16)
U32 = SignatureToken(TokenKind.U32)
U64 = SignatureToken(TokenKind.U64)
U128 = SignatureToken(TokenKind.U128)
U256 = SignatureToken(TokenKind.U256)
ADDRESS = SignatureToken(TokenKind.ADDRESS)
SIGNER = SignatureToken(TokenKind.SIGNER)


@dataclass(frozen=True)
class Instruction:
	opcode: Opcode
	operands: Tuple[int, ...] = ()

	@property
	def operand(self) -> int:
		return self.operands[0]


@dataclass(frozen=True)
class ModuleHandle:
	address: int
	name: int


@dataclass(frozen=True)
class StructTypeParameter:
	constraints: int
	is_phantom: bool = False


@dataclass(frozen=True)
class StructHandle:
	module: int
	name: int
	abilities: int = 0
	type_parameters: Tuple[StructTypeParameter, ...] = ()


@dataclass(frozen=True)
class FunctionHandle:
	module: int
	name: int
	parameters: int
	return_: int
	type_parameters: Tuple[int, ...] = ()


@dataclass(frozen=True)
class FunctionInstantiation:
	handle: int
	type_parameters: int


@dataclass(frozen=True)
class Constant:
	type_: SignatureToken
	data: bytes


@dataclass(frozen=True)
class FieldDefinition:
	name: int
	signature: SignatureToken


@dataclass(frozen=True)
class StructDefinition:
	struct_handle: int
	# None for native structs.
	fields: Optional[Tuple[FieldDefinition, ...]] = None


@dataclass(frozen=True)
class StructDefInstantiation:
	definition: int
	type_parameters: int


@dataclass(frozen=True)
class FieldHandle:
	owner: int
	field: int


@dataclass(frozen=True)
class FieldInstantiation:
	handle: int
	type_parameters: int


@dataclass(frozen=True)
class CodeUnit:
	locals: int
	code: Tuple[Instruction, ...] = ()


@dataclass(frozen=True)
class FunctionDefinition:
	function: int
	visibility: Visibility = Visibility.PRIVATE
	is_entry: bool = False
	acquires_global_resources: Tuple[int, ...] = ()
	# None for native functions.
	code: Optional[CodeUnit] = None

	@property
	def is_native(self) -> bool:
		return self.code is None


@dataclass(frozen=True)
class Metadata:
	key: bytes
	value: bytes


@dataclass(frozen=True)
class CompiledModule:
	"""An immutable, deserialized bytecode module.

	Every cross reference between tables is a plain integer index into one of
	the tuples below. Indices are not validated on construction.
	"""

	version: int = 6
	self_module_handle_idx: int = 0
	module_handles: Tuple[ModuleHandle, ...] = ()
	struct_handles: Tuple[StructHandle, ...] = ()
	function_handles: Tuple[FunctionHandle, ...] = ()
	function_instantiations: Tuple[FunctionInstantiation, ...] = ()
	signatures: Tuple[Tuple[SignatureToken, ...], ...] = ()
	constant_pool: Tuple[Constant, ...] = ()
	identifiers: Tuple[str, ...] = ()
	address_identifiers: Tuple[bytes, ...] = ()
	struct_defs: Tuple[StructDefinition, ...] = ()
	struct_def_instantiations: Tuple[StructDefInstantiation, ...] = ()
	function_defs: Tuple[FunctionDefinition, ...] = ()
	field_handles: Tuple[FieldHandle, ...] = ()
	field_instantiations: Tuple[FieldInstantiation, ...] = ()
	friend_decls: Tuple[ModuleHandle, ...] = ()
	metadata: Tuple[Metadata, ...] = ()
