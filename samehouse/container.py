# (c) Copyright Datacraft, 2026
"""
Minimal dependency-injection container.

Bindings are keyed by any hashable, usually the class being provided.
Shared bindings are built on first resolution and cached for the
lifetime of the container.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from .exceptions import BindingResolutionError

logger = logging.getLogger(__name__)

Factory = Callable[["Container"], Any]


@dataclass(frozen=True, slots=True)
class Binding:
	factory: Factory
	shared: bool = False


class Container:
	def __init__(self):
		self._bindings: dict[Hashable, Binding] = {}
		self._instances: dict[Hashable, Any] = {}
		self._lock = threading.RLock()

	def bind(self, key: Hashable, factory: Factory, shared: bool = False) -> None:
		"""Register a factory called with the container on resolution."""
		with self._lock:
			self._instances.pop(key, None)
			self._bindings[key] = Binding(factory=factory, shared=shared)
		logger.debug("Bound %s (shared=%s)", _key_name(key), shared)

	def singleton(self, key: Hashable, factory: Factory | None = None) -> None:
		if factory is None:
			if not callable(key):
				raise TypeError(f"No factory given and {key!r} is not callable")
			factory = lambda container: key()  # noqa: E731
		self.bind(key, factory, shared=True)

	def instance(self, key: Hashable, obj: Any) -> Any:
		with self._lock:
			self._bindings.pop(key, None)
			self._instances[key] = obj
		return obj

	def bound(self, key: Hashable) -> bool:
		return key in self._instances or key in self._bindings

	def __contains__(self, key: Hashable) -> bool:
		return self.bound(key)

	def make(self, key: Hashable) -> Any:
		"""
		Resolve `key`.

		Raises BindingResolutionError when nothing is registered for it.
		"""
		try:
			return self._instances[key]
		except KeyError:
			pass

		binding = self._bindings.get(key)
		if binding is None:
			raise BindingResolutionError(key)
		if not binding.shared:
			return binding.factory(self)

		with self._lock:
			# Another thread may have built it while we waited
			if key in self._instances:
				return self._instances[key]
			obj = binding.factory(self)
			self._instances[key] = obj
			logger.debug("Resolved shared instance of %s", _key_name(key))
			return obj

	def forget(self, key: Hashable) -> None:
		with self._lock:
			self._bindings.pop(key, None)
			self._instances.pop(key, None)

	def flush(self) -> None:
		with self._lock:
			self._bindings.clear()
			self._instances.clear()


def _key_name(key: Hashable) -> str:
	return getattr(key, "__qualname__", None) or repr(key)


_container: Container | None = None
_container_lock = threading.Lock()


def get_container() -> Container:
	"""Return the process-wide default container, creating it if needed."""
	global _container
	if _container is None:
		with _container_lock:
			if _container is None:
				_container = Container()
	return _container


def set_container(container: Container | None) -> None:
	global _container
	_container = container
