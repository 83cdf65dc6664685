# (c) Copyright Datacraft, 2026
"""
Service provider registering the tenant manager with a container.

register() binds the TenantManager singleton; boot() publishes the
default samehouse.yaml into the host config directory when the host
provides a way to locate it.
"""
import logging
import shutil
from pathlib import Path
from typing import Callable

from fastapi import FastAPI

from .config import DEFAULT_CONFIG_FILE, Settings, get_settings
from .container import Container, get_container
from .log import setup_logging
from .manager import TenantManager
from .middleware import TenantMiddleware, build_strategy

logger = logging.getLogger(__name__)

ConfigPath = Callable[[str], Path]


class TenantServiceProvider:
	config_name = "samehouse.yaml"

	def __init__(
		self,
		container: Container,
		settings: Settings | None = None,
		config_path: ConfigPath | None = None,
	):
		self.container = container
		self.settings = settings or get_settings()
		if config_path is None and self.settings.config_dir is not None:
			config_dir = self.settings.config_dir
			config_path = lambda name: config_dir / name  # noqa: E731
		self.config_path = config_path

	def register(self) -> None:
		"""Bind one shared TenantManager for the lifetime of the container."""
		settings = self.settings
		self.container.singleton(TenantManager, lambda container: TenantManager(settings))

	def boot(self) -> None:
		if self.config_path is None:
			logger.debug("No config path available, not publishing %s", self.config_name)
			return
		try:
			self.publish()
		except OSError as e:
			logger.warning("Failed to publish %s: %s", self.config_name, e)

	def publishes(self) -> dict[Path, Path]:
		"""Map of packaged file to its published location."""
		if self.config_path is None:
			return {}
		return {DEFAULT_CONFIG_FILE.resolve(): Path(self.config_path(self.config_name))}

	def publish(self, force: bool = False) -> list[Path]:
		"""
		Copy packaged files to their published locations.

		Existing targets are kept unless `force` is set. Returns the paths
		that were written.
		"""
		copied = []
		for source, target in self.publishes().items():
			if target.exists() and not force:
				logger.debug("%s already exists, leaving it alone", target)
				continue
			target.parent.mkdir(parents=True, exist_ok=True)
			shutil.copyfile(source, target)
			logger.info("Published %s to %s", source.name, target)
			copied.append(target)
		return copied


def init_app(
	app: FastAPI,
	settings: Settings | None = None,
	container: Container | None = None,
) -> TenantServiceProvider:
	"""
	Wire samehouse into a FastAPI application.

	Registers and boots the provider, exposes the container on
	``app.state.container`` and adds TenantMiddleware when request tenant
	resolution is configured.
	"""
	settings = settings or get_settings()
	setup_logging(settings.log_config)

	container = container or get_container()
	provider = TenantServiceProvider(container, settings)
	provider.register()
	provider.boot()
	container.instance(TenantServiceProvider, provider)
	app.state.container = container

	if settings.resolution_strategies:
		app.add_middleware(
			TenantMiddleware,
			manager=container.make(TenantManager),
			column=settings.request_tenant_column,
			strategy=build_strategy(settings),
			require_tenant=settings.require_tenant,
			cast=settings.tenant_id_cast,
			excluded_paths=settings.excluded_paths,
		)
	else:
		logger.info("Tenant resolution disabled, TenantMiddleware not installed")

	return provider
