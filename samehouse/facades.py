# (c) Copyright Datacraft, 2026
"""
Static-style accessors for container services.

A facade holds no state of its own: each attribute access resolves the
service from the container and forwards to it.

Example:
	from samehouse import Landlord

	Landlord.add_tenant("company_id", 1)
"""
from typing import Any, Hashable

from .container import Container, get_container
from .manager import TenantManager


class Facade:
	_container: Container | None = None

	def __init__(self, container: Container | None = None):
		# Bypass __setattr__ forwarding
		object.__setattr__(self, "_container", container)

	def get_facade_accessor(self) -> Hashable:
		"""Container key of the service behind this facade."""
		raise NotImplementedError(f"{type(self).__name__} does not define an accessor")

	def get_facade_root(self) -> Any:
		container = self._container or get_container()
		return container.make(self.get_facade_accessor())

	def __getattr__(self, name: str) -> Any:
		if name.startswith("__") and name.endswith("__"):
			raise AttributeError(name)
		return getattr(self.get_facade_root(), name)

	def __setattr__(self, name: str, value: Any) -> None:
		setattr(self.get_facade_root(), name, value)

	def __repr__(self):
		return f"<{type(self).__name__} facade>"


class LandlordFacade(Facade):
	def get_facade_accessor(self) -> Hashable:
		return TenantManager


Landlord = LandlordFacade()
