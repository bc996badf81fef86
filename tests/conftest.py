import logging

import pytest

from inspector import logging as inspector_logging
from inspector.file_format import FunctionDefinition, Opcode, Visibility

from .helpers import ADDR_ABC, code, encode, ident, make_module


@pytest.fixture(autouse=True)
def reset_logging():
	# Handlers bind to the stderr stream of the test that configured them.
	yield
	root = logging.getLogger(inspector_logging.ROOT_LOGGER)
	for handler in list(root.handlers):
		root.removeHandler(handler)
		handler.close()
	inspector_logging._configured = False


@pytest.fixture
def coin_module():
	return make_module(
		[
			FunctionDefinition(
				function=0,
				visibility=Visibility.PUBLIC,
				code=code(
					(Opcode.MUT_BORROW_GLOBAL, 0),
					(Opcode.POP,),
					(Opcode.CALL, 3),
					(Opcode.RET,),
				),
			),
			FunctionDefinition(
				function=1,
				visibility=Visibility.PUBLIC,
				is_entry=True,
				acquires_global_resources=(0,),
				code=code(
					(Opcode.IMM_BORROW_GLOBAL, 0),
					(Opcode.POP,),
					(Opcode.IMM_BORROW_GLOBAL, 0),
					(Opcode.POP,),
					(Opcode.CALL, 0),
					(Opcode.LD_TRUE,),
					(Opcode.RET,),
				),
			),
			FunctionDefinition(function=2, visibility=Visibility.PRIVATE),
		]
	)


@pytest.fixture
def coin_module_bytes():
	"""Binary v6 encoding of a three-function ``coin`` module."""
	identifiers = b"".join(ident(s) for s in ("coin", "Balance", "transfer", "peek", "hash"))
	signatures = (
		b"\x00"  # ()
		+ b"\x02\x03\x05"  # (u64, address)
		+ b"\x01\x01"  # (bool)
		+ b"\x01\x0a\x0a\x02"  # (vector<vector<u8>>)
	)
	function_handles = (
		b"\x00\x02\x01\x00\x00"
		+ b"\x00\x03\x00\x02\x00"
		+ b"\x00\x04\x03\x03\x00"
	)
	peek_code = (
		b"\x2b\x00"
		+ b"\x01"
		+ b"\x2b\x00"
		+ b"\x01"
		+ b"\x11\x00"
		+ b"\x06" + (7).to_bytes(8, "little")
		+ b"\x01"
		+ b"\x40\x03" + (2).to_bytes(8, "little")
		+ b"\x01"
		+ b"\x08"
		+ b"\x02"
	)
	function_defs = (
		# transfer: public, writes Balance
		b"\x00\x01\x00\x00" + b"\x00\x03" + b"\x2a\x00\x01\x02"
		# peek: public entry, acquires Balance
		+ b"\x01\x01\x04\x01\x00" + b"\x00\x0b" + peek_code
		# hash: private native
		+ b"\x02\x00\x02\x00"
	)
	return encode(
		[
			(0x1, b"\x00\x00"),
			(0x2, b"\x00\x01\x08\x00"),
			(0x3, function_handles),
			(0x5, signatures),
			(0x7, identifiers),
			(0x8, ADDR_ABC),
			(0xA, b"\x00\x02\x01\x00\x03"),
			(0xC, function_defs),
		]
	)


@pytest.fixture
def encode_module():
	return encode


@pytest.fixture
def encode_identifier():
	return ident
