from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Resource(BaseModel):
	model_config = ConfigDict(frozen=True)

	module_addr: str
	module_name: str
	resource_name: str

	def sort_key(self):
		return (self.module_addr, self.module_name, self.resource_name)

	def __lt__(self, other: Resource) -> bool:
		if not isinstance(other, Resource):
			return NotImplemented
		return self.sort_key() < other.sort_key()

	def __le__(self, other: Resource) -> bool:
		if not isinstance(other, Resource):
			return NotImplemented
		return self.sort_key() <= other.sort_key()

	def __gt__(self, other: Resource) -> bool:
		if not isinstance(other, Resource):
			return NotImplemented
		return self.sort_key() > other.sort_key()

	def __ge__(self, other: Resource) -> bool:
		if not isinstance(other, Resource):
			return NotImplemented
		return self.sort_key() >= other.sort_key()


class FunctionSummary(BaseModel):
	model_config = ConfigDict(frozen=True, populate_by_name=True)

	name: str
	visibility: str
	is_entry: bool
	generic_type_params: List[str] = []
	params: List[str] = []
	returns: List[str] = Field(default_factory=list, alias="return")
	read_resources: List[Resource] = []
	write_resources: List[Resource] = []
	called_functions: List[str] = []

	def to_json_dict(self) -> dict:
		return self.model_dump(by_alias=True)


class SkippedFunction(BaseModel):
	index: int
	name: Optional[str] = None
	reason: str


class ModuleReport(BaseModel):
	functions: List[FunctionSummary] = []
	skipped: List[SkippedFunction] = []
