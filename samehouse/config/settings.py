# (c) Copyright Datacraft, 2026
"""Application settings configuration."""
from pathlib import Path
from typing import Any, Callable, Literal
from uuid import UUID

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Packaged default, published into the host config directory on boot
DEFAULT_CONFIG_FILE = Path(__file__).parent / "samehouse.yaml"

TENANT_ID_TYPES: dict[str, Callable[[str], Any]] = {
	'str': str,
	'int': int,
	'uuid': UUID,
}


class Settings(BaseSettings):
	# Tenant columns used by models without __tenant_columns__
	default_tenant_columns: list[str] = Field(default_factory=lambda: ['company_id'])

	# Host config directory; enables config publishing when set
	config_dir: Path | None = None
	config_file: Path | None = None
	log_config: Path | None = None

	# Request tenant resolution
	tenant_resolution: str = 'header'
	tenant_header: str = 'X-Tenant-ID'
	tenant_column: str | None = None
	tenant_base_domain: str = 'localhost'
	tenant_path_prefix: str = '/tenant'
	# Type the resolved id is converted to before scoping
	tenant_id_type: Literal['str', 'int', 'uuid'] = 'int'
	require_tenant: bool = False
	excluded_paths: list[str] = Field(default_factory=lambda: [
		'/health',
		'/ready',
		'/version',
		'/openapi.json',
		'/docs',
		'/redoc',
	])

	@field_validator('default_tenant_columns', mode='before')
	@classmethod
	def split_columns(cls, value):
		if isinstance(value, str):
			return [c.strip() for c in value.split(',') if c.strip()]
		return value

	@property
	def resolution_strategies(self) -> list[str]:
		return [s.strip() for s in self.tenant_resolution.split(',') if s.strip()]

	@property
	def request_tenant_column(self) -> str:
		if self.tenant_column:
			return self.tenant_column
		return self.default_tenant_columns[0]

	@property
	def tenant_id_cast(self) -> Callable[[str], Any]:
		return TENANT_ID_TYPES[self.tenant_id_type]

	model_config = SettingsConfigDict(
		env_prefix='samehouse_',
		env_file='.env',
		env_file_encoding='utf-8',
		extra='ignore',
	)


def load_settings(path: Path | str) -> Settings:
	"""Build settings from a YAML file; environment fills the remaining fields."""
	with open(path, "r") as stream:
		data = yaml.safe_load(stream) or {}
	if not isinstance(data, dict):
		raise ValueError(f"{path}: expected a mapping at the top level")
	return Settings(**data)


_settings: Settings | None = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		settings = Settings()
		if settings.config_file is not None and settings.config_file.is_file():
			settings = load_settings(settings.config_file)
		_settings = settings
	return _settings


def reset_settings() -> None:
	global _settings
	_settings = None
