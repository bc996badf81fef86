import pytest

from inspector.deserializer import Reader, deserialize_module
from inspector.errors import DeserializationError
from inspector.file_format import U64, Instruction, Opcode, Visibility
from inspector.summarize import summarize_module

from .helpers import ADDR_ABC, ADDR_ABC_HEX


def test_decodes_tables(coin_module_bytes):
	module = deserialize_module(coin_module_bytes)
	assert module.version == 6
	assert module.self_module_handle_idx == 0
	assert module.identifiers == ("coin", "Balance", "transfer", "peek", "hash")
	assert module.address_identifiers == (ADDR_ABC,)
	assert module.struct_handles[0].abilities == 0x8
	assert module.struct_defs[0].fields[0].signature == U64
	assert [len(sig) for sig in module.signatures] == [0, 2, 1, 1]

	transfer, peek, native = module.function_defs
	assert transfer.visibility == Visibility.PUBLIC and not transfer.is_entry
	assert peek.is_entry and peek.acquires_global_resources == (0,)
	assert peek.code.code[5] == Instruction(Opcode.LD_U64, (7,))
	assert peek.code.code[7] == Instruction(Opcode.VEC_PACK, (3, 2))
	assert native.is_native and native.visibility == Visibility.PRIVATE


def test_summaries_from_binary(coin_module_bytes):
	summaries = [s.to_json_dict() for s in summarize_module(deserialize_module(coin_module_bytes))]
	balance = {"module_addr": ADDR_ABC_HEX, "module_name": "coin", "resource_name": "Balance"}
	assert summaries == [
		{
			"name": "transfer",
			"visibility": "Public",
			"is_entry": False,
			"generic_type_params": [],
			"params": ["U64", "Address"],
			"return": [],
			"read_resources": [],
			"write_resources": [balance],
			"called_functions": [],
		},
		{
			"name": "peek",
			"visibility": "Public",
			"is_entry": True,
			"generic_type_params": [],
			"params": [],
			"return": ["Bool"],
			"read_resources": [balance],
			"write_resources": [],
			"called_functions": [f"{ADDR_ABC_HEX}::transfer"],
		},
		{
			"name": "hash",
			"visibility": "Private",
			"is_entry": False,
			"generic_type_params": [],
			"params": ["Vector(Vector(U8))"],
			"return": ["Vector(Vector(U8))"],
			"read_resources": [],
			"write_resources": [],
			"called_functions": [],
		},
	]


def test_flavor_byte_is_ignored(coin_module_bytes):
	flavored = coin_module_bytes[:7] + b"\x05" + coin_module_bytes[8:]
	assert deserialize_module(flavored).version == 6


def test_script_visibility_before_v5_becomes_public_entry(encode_module, encode_identifier):
	data = encode_module(
		[
			(0x1, b"\x00\x00"),
			(0x3, b"\x00\x01\x00\x00\x00"),
			(0x5, b"\x00"),
			(0x7, encode_identifier("m") + encode_identifier("main")),
			(0x8, ADDR_ABC),
			(0xC, b"\x00\x02\x00\x00" + b"\x00\x01\x02"),
		],
		version=4,
	)
	module = deserialize_module(data)
	assert module.self_module_handle_idx == 0
	(main,) = module.function_defs
	assert main.visibility == Visibility.PUBLIC
	assert main.is_entry


def test_short_addresses(encode_module):
	data = encode_module([(0x8, bytes.fromhex("0000000000000000000000000000000a" * 2))])
	module = deserialize_module(data, address_length=16)
	assert len(module.address_identifiers) == 2
	with pytest.raises(DeserializationError):
		deserialize_module(encode_module([(0x8, b"\x01" * 20)]), address_length=16)


def test_rejects_bad_magic(coin_module_bytes):
	with pytest.raises(DeserializationError, match="bad magic"):
		deserialize_module(b"\x00" + coin_module_bytes[1:])


def test_rejects_unsupported_version(encode_module):
	with pytest.raises(DeserializationError, match="unsupported bytecode version 42"):
		deserialize_module(encode_module([], version=42))


def test_rejects_version_7(encode_module, encode_identifier):
	with pytest.raises(DeserializationError, match="unsupported bytecode version 7") as exc:
		deserialize_module(encode_module([(0x7, encode_identifier("x"))], version=7))
	assert exc.value.offset == 4


def test_uleb128_rejects_values_past_u64():
	assert Reader(b"\xff" * 9 + b"\x01").read_uleb128() == 2**64 - 1
	with pytest.raises(DeserializationError, match="overflows u64"):
		Reader(b"\xff" * 9 + b"\x7f").read_uleb128()
	with pytest.raises(DeserializationError, match="overflows u64"):
		Reader(b"\xff" * 10 + b"\x01").read_uleb128()


def test_rejects_truncated_input(coin_module_bytes):
	with pytest.raises(DeserializationError) as exc:
		deserialize_module(coin_module_bytes[:-20])
	assert exc.value.offset is not None


def test_rejects_unknown_opcode(encode_module):
	data = encode_module([(0xC, b"\x00\x01\x00\x00" + b"\x00\x01\xff")])
	with pytest.raises(DeserializationError, match="unknown opcode 0xff"):
		deserialize_module(data)


def test_unknown_tables_are_skipped(encode_module, encode_identifier):
	module = deserialize_module(encode_module([(0x7, encode_identifier("x")), (0x30, b"\x01\x02\x03")]))
	assert module.identifiers == ("x",)
