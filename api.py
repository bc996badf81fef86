from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from inspector.config import InspectorConfig
from inspector.deserializer import deserialize_module
from inspector.errors import ConfigError, DeserializationError, InputError
from inspector.loader import load_module
from inspector.model import ModuleReport
from inspector.summarize import summarize_module_report


app = FastAPI(title="Move Bytecode Inspector")


class InspectRequest(BaseModel):
	path: str
	address_length: Optional[int] = Field(default=None, gt=0)


def _config(address_length: Optional[int]) -> InspectorConfig:
	try:
		return InspectorConfig.from_env().merged(address_length=address_length)
	except ConfigError as e:
		raise HTTPException(status_code=422, detail=str(e))


def _summarize_bytes(data: bytes, address_length: int) -> ModuleReport:
	return summarize_module_report(deserialize_module(data, address_length=address_length))


@app.post("/inspect", response_model=ModuleReport)
def inspect_path(req: InspectRequest) -> ModuleReport:
	config = _config(req.address_length)
	try:
		module = load_module(req.path, config)
	except InputError as e:
		raise HTTPException(status_code=404, detail=str(e))
	except DeserializationError as e:
		raise HTTPException(status_code=400, detail=str(e))
	return summarize_module_report(module)


@app.post("/inspect/bytes", response_model=ModuleReport)
async def inspect_bytes(request: Request, address_length: Optional[int] = None) -> ModuleReport:
	config = _config(address_length)
	data = await request.body()
	# Decoding is CPU-bound; keep it off the event loop.
	try:
		return await run_in_threadpool(_summarize_bytes, data, config.address_length)
	except DeserializationError as e:
		raise HTTPException(status_code=400, detail=str(e))
