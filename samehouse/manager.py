# (c) Copyright Datacraft, 2026
"""
Tenant manager.

Keeps the set of current tenants (tenant column -> tenant id) and applies
it to SQLAlchemy ORM statements and new objects. State lives in context
variables so every request or task sees only the tenants it set.
"""
import contextvars
import logging
import re
from typing import Any, Mapping, Protocol, runtime_checkable

from sqlalchemy import and_, event, inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from .config import Settings, get_settings
from .exceptions import TenantColumnUnknownError, TenantModelNotFoundError
from .scopes import ALL_TENANTS, BelongsToTenants, tenant_models

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@runtime_checkable
class SupportsTenants(Protocol):
	"""What request handling needs from a tenant manager."""

	def add_tenant(self, tenant: Any, id: Any = None) -> None: ...

	def remove_tenant(self, tenant: Any) -> None: ...

	def has_tenant(self, tenant: Any) -> bool: ...

	def get_tenant_id(self, tenant: Any) -> Any: ...

	def get_tenants(self) -> dict[str, Any]: ...


class TenantManager:
	def __init__(self, settings: Settings | None = None):
		self.settings = settings or get_settings()
		self._tenants: contextvars.ContextVar[Mapping[str, Any]] = contextvars.ContextVar(
			f"samehouse_tenants_{id(self):x}", default={}
		)
		self._enabled: contextvars.ContextVar[bool] = contextvars.ContextVar(
			f"samehouse_enabled_{id(self):x}", default=True
		)

	def __repr__(self):
		return f"TenantManager(tenants={self.get_tenants()}, enabled={self.enabled})"

	# -- switches

	@property
	def enabled(self) -> bool:
		return self._enabled.get()

	def enable(self) -> None:
		self._enabled.set(True)

	def disable(self) -> None:
		self._enabled.set(False)

	# -- current tenants

	def add_tenant(self, tenant: Any, id: Any = None) -> None:
		"""
		Add a tenant to scope by.

		`tenant` is either a column name, in which case `id` is required,
		or a mapped tenant object whose foreign key name becomes the column
		and whose primary key becomes the id.
		"""
		if id is None:
			if isinstance(tenant, str):
				raise ValueError(f"A tenant id is required for column {tenant!r}")
			id = _primary_key_value(tenant)

		column = self.get_tenant_key(tenant)
		tenants = dict(self._tenants.get())
		tenants[column] = id
		self._tenants.set(tenants)
		logger.debug("Scoping by %s=%r", column, id)

	def remove_tenant(self, tenant: Any) -> None:
		column = self.get_tenant_key(tenant)
		tenants = dict(self._tenants.get())
		if column in tenants:
			del tenants[column]
			self._tenants.set(tenants)

	def has_tenant(self, tenant: Any) -> bool:
		return self.get_tenant_key(tenant) in self._tenants.get()

	def get_tenants(self) -> dict[str, Any]:
		return dict(self._tenants.get())

	def get_tenant_id(self, tenant: Any) -> Any:
		column = self.get_tenant_key(tenant)
		tenants = self._tenants.get()
		if column not in tenants:
			raise TenantColumnUnknownError(column)
		return tenants[column]

	def get_tenant_key(self, tenant: Any) -> str:
		"""Column name for a tenant given as a name or a mapped object."""
		if isinstance(tenant, str):
			return tenant

		foreign_key = getattr(tenant, "__tenant_foreign_key__", None)
		if foreign_key:
			return foreign_key

		cls = tenant if isinstance(tenant, type) else type(tenant)
		mapper = sa_inspect(cls, raiseerr=False)
		if mapper is None:
			raise TypeError(
				f"Tenant must be a column name or a mapped object, got {cls.__name__}"
			)
		name = _CAMEL_BOUNDARY.sub("_", cls.__name__).lower()
		return f"{name}_{mapper.primary_key[0].name}"

	def scope(self, *tenants: Any, **columns: Any) -> "TenantScope":
		"""
		Context manager that replaces the current tenants for a block.

		Example:
			with manager.scope(company_id=1):
				session.scalars(select(Project)).all()
		"""
		mapping = {}
		for tenant in tenants:
			mapping[self.get_tenant_key(tenant)] = _primary_key_value(tenant)
		mapping.update(columns)
		return TenantScope(self, tenants=mapping)

	def without_tenants(self) -> "TenantScope":
		"""Context manager that disables scoping for a block."""
		return TenantScope(self, enabled=False)

	# -- models and statements

	def get_tenant_columns(self, model: Any) -> list[str]:
		columns = getattr(model, "__tenant_columns__", None)
		if columns:
			return list(columns)
		return list(self.settings.default_tenant_columns)

	def tenant_criteria(self, model: type) -> list:
		"""WHERE expressions limiting `model` to the current tenants."""
		if not self.enabled:
			return []

		tenants = self._tenants.get()
		criteria = []
		for column in self.get_tenant_columns(model):
			if column not in tenants:
				continue
			attr = getattr(model, column, None)
			if attr is None:
				logger.warning(
					"%s has no tenant column %r, not scoping it", model.__name__, column
				)
				continue
			criteria.append(attr == tenants[column])
		return criteria

	def apply_tenant_scopes(self, statement):
		"""Limit every tenant-owned entity in an ORM statement to the current tenants."""
		if statement.get_execution_options().get(ALL_TENANTS, False):
			return statement

		options = []
		for model in tenant_models():
			criteria = self.tenant_criteria(model)
			if criteria:
				options.append(
					with_loader_criteria(model, and_(*criteria), include_aliases=True)
				)
		if options:
			statement = statement.options(*options)
		return statement

	def new_model(self, instance: Any) -> None:
		"""Fill unset tenant columns of a new object from the current tenants."""
		if not self.enabled:
			return

		tenants = self._tenants.get()
		for column in self.get_tenant_columns(instance):
			if column in tenants and getattr(instance, column, None) is None:
				setattr(instance, column, tenants[column])

	def new_query_without_tenants(self, model: type):
		return select(model).execution_options(**{ALL_TENANTS: True})

	def find_or_fail(self, session: Session, model: type, ident: Any) -> Any:
		"""
		Load `model` by primary key under the current tenant scope.

		The identity map is bypassed so an object loaded earlier for another
		tenant is never returned.
		"""
		obj = session.execute(self._find_statement(model, ident)).scalars().first()
		if obj is None:
			raise TenantModelNotFoundError(model, ident)
		return obj

	async def afind_or_fail(self, session, model: type, ident: Any) -> Any:
		"""AsyncSession variant of find_or_fail."""
		result = await session.execute(self._find_statement(model, ident))
		obj = result.scalars().first()
		if obj is None:
			raise TenantModelNotFoundError(model, ident)
		return obj

	def _find_statement(self, model: type, ident: Any):
		primary_key = sa_inspect(model).primary_key
		idents = ident if isinstance(ident, tuple) else (ident,)
		if len(idents) != len(primary_key):
			raise ValueError(
				f"{model.__name__} has {len(primary_key)} primary key column(s), "
				f"got {len(idents)} value(s)"
			)
		stmt = select(model).where(
			*[column == value for column, value in zip(primary_key, idents)]
		)
		return self.apply_tenant_scopes(stmt)

	# -- session integration

	def install(self, target: Any) -> Any:
		"""
		Hook a Session class, sessionmaker, Session, AsyncSession or
		async_sessionmaker.

		SELECT statements are scoped and new tenant-owned objects are
		filled before each flush. An async_sessionmaker gets its own sync
		session subclass so other factories stay unscoped.
		"""
		target = self._event_target(target, create=True)
		event.listen(target, "do_orm_execute", self._on_do_orm_execute)
		event.listen(target, "before_flush", self._on_before_flush)
		logger.debug("Tenant scoping installed on %r", target)
		return target

	def uninstall(self, target: Any) -> None:
		target = self._event_target(target)
		event.remove(target, "do_orm_execute", self._on_do_orm_execute)
		event.remove(target, "before_flush", self._on_before_flush)

	def _event_target(self, target: Any, create: bool = False) -> Any:
		if isinstance(target, async_sessionmaker):
			sync_class = target.kw.get("sync_session_class") or target.class_.sync_session_class
			if create and not getattr(sync_class, "_samehouse_scoped", False):
				sync_class = type(
					f"Tenant{sync_class.__name__}", (sync_class,), {"_samehouse_scoped": True}
				)
				target.kw["sync_session_class"] = sync_class
			return sync_class
		return getattr(target, "sync_session", target)

	def _on_do_orm_execute(self, execute_state: ORMExecuteState) -> None:
		if (
			execute_state.is_select
			and not execute_state.is_column_load
			and not execute_state.is_relationship_load
			and not execute_state.execution_options.get(ALL_TENANTS, False)
		):
			execute_state.statement = self.apply_tenant_scopes(execute_state.statement)

	def _on_before_flush(self, session: Session, flush_context, instances) -> None:
		for obj in session.new:
			if isinstance(obj, BelongsToTenants):
				self.new_model(obj)


class TenantScope:
	"""
	Temporarily set the tenants and/or the enabled switch of a manager.

	Works as both a sync and an async context manager.
	"""

	def __init__(
		self,
		manager: TenantManager,
		tenants: Mapping[str, Any] | None = None,
		enabled: bool | None = None,
	):
		self.manager = manager
		self.tenants = tenants
		self.enabled = enabled
		self._tokens: list[tuple[contextvars.ContextVar, contextvars.Token]] = []

	def __enter__(self) -> TenantManager:
		if self.tenants is not None:
			var = self.manager._tenants
			self._tokens.append((var, var.set(dict(self.tenants))))
		if self.enabled is not None:
			var = self.manager._enabled
			self._tokens.append((var, var.set(self.enabled)))
		return self.manager

	def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
		while self._tokens:
			var, token = self._tokens.pop()
			var.reset(token)

	async def __aenter__(self) -> TenantManager:
		return self.__enter__()

	async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
		self.__exit__(exc_type, exc_val, exc_tb)


def _primary_key_value(tenant: Any) -> Any:
	mapper = sa_inspect(type(tenant), raiseerr=False)
	if mapper is None:
		raise TypeError(f"Cannot take a tenant id from {type(tenant).__name__}")
	column = mapper.primary_key[0]
	value = getattr(tenant, mapper.get_property_by_column(column).key)
	if value is None:
		raise ValueError(f"{type(tenant).__name__} has no primary key value yet")
	return value
