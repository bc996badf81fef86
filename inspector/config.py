"""Inspector configuration.

Defaults can be overridden from ``MOVE_INSPECTOR_*`` environment variables,
and the CLI applies its flags on top of that. Invalid values surface as
``ConfigError``.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

ENV_PREFIX = "MOVE_INSPECTOR_"


def _config_error(source: str, e: ValidationError) -> ConfigError:
	first = e.errors()[0]
	field = ".".join(str(part) for part in first["loc"]) or None
	return ConfigError(f"invalid {source} setting {field}: {first['msg']}", field=field)


class InspectorConfig(BaseModel):
	# 16 for early Diem/Libra modules, 20 for some EVM-flavoured chains.
	address_length: int = Field(default=32, gt=0)
	log_level: str = "WARNING"
	log_file: Optional[str] = None

	@field_validator("log_level")
	@classmethod
	def _upper_level(cls, v: str) -> str:
		return v.upper()

	@classmethod
	def from_env(cls, environ=None) -> InspectorConfig:
		env = os.environ if environ is None else environ
		data = {}
		for name in cls.model_fields:
			value = env.get(ENV_PREFIX + name.upper())
			if value:
				data[name] = value
		try:
			return cls(**data)
		except ValidationError as e:
			raise _config_error("environment", e) from e

	def merged(self, **overrides) -> InspectorConfig:
		"""Return a copy with every non-None override applied."""
		updates = {k: v for k, v in overrides.items() if v is not None}
		try:
			return self.model_validate({**self.model_dump(), **updates})
		except ValidationError as e:
			raise _config_error("override", e) from e
