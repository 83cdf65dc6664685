# (c) Copyright Datacraft, 2026
"""Exceptions raised by samehouse."""


class SamehouseError(Exception):
	"""Base class for all samehouse errors."""


class BindingResolutionError(SamehouseError, LookupError):
	"""Raised when a container key has no binding."""

	def __init__(self, key):
		self.key = key
		name = getattr(key, "__qualname__", None) or repr(key)
		super().__init__(f"Target [{name}] is not bound in the container")


class TenantColumnUnknownError(SamehouseError, KeyError):
	"""Raised when asking for the id of a tenant column that is not set."""

	def __init__(self, column: str):
		self.column = column
		super().__init__(f"{column!r}: tenant column unknown")

	def __str__(self) -> str:
		return self.args[0]


class TenantModelNotFoundError(SamehouseError, LookupError):
	"""Raised when a lookup finds nothing under the current tenant scope."""

	def __init__(self, model: type, ident=None):
		self.model = model
		self.ident = ident
		super().__init__(
			f"No query results for model [{model.__name__}] when scoped by tenant."
		)
