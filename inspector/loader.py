from __future__ import annotations

import os
from typing import Optional

from .config import InspectorConfig
from .deserializer import deserialize_module
from .errors import InputError
from .file_format import CompiledModule
from .logging import get_logger

logger = get_logger(__name__)


def read_module_bytes(path: str) -> bytes:
	if not os.path.isfile(path):
		raise InputError(f"Module file not found: {path}", path=path)
	try:
		with open(path, "rb") as fh:
			return fh.read()
	except OSError as e:
		raise InputError(f"Cannot read module file: {e}", path=path) from e


def load_module(path: str, config: Optional[InspectorConfig] = None) -> CompiledModule:
	config = config or InspectorConfig()
	data = read_module_bytes(path)
	logger.info("Loaded %d bytes from %s", len(data), path)
	return deserialize_module(data, address_length=config.address_length)
