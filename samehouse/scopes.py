# (c) Copyright Datacraft, 2026
"""Marking models as tenant-owned and opting statements out of scoping."""
from typing import ClassVar, TypeVar

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.sql.expression import Executable

# Execution option that disables tenant scoping for a statement
ALL_TENANTS = "samehouse_all_tenants"

StatementT = TypeVar("StatementT", bound=Executable)


class BelongsToTenants:
	"""
	Mixin for declarative models whose rows belong to a tenant.

	Queries for these models are limited to the current tenants and new
	instances get their tenant columns filled on flush. Set
	``__tenant_columns__`` to override the configured default columns.

	Example:
		class Project(BelongsToTenants, Base):
			__tablename__ = "projects"
			__tenant_columns__ = ["company_id"]
	"""
	__tenant_columns__: ClassVar[list[str] | None] = None

	@classmethod
	def all_tenants(cls):
		"""SELECT for this model that ignores the tenant scope."""
		return all_tenants(select(cls))


def all_tenants(statement: StatementT) -> StatementT:
	return statement.execution_options(**{ALL_TENANTS: True})


def tenant_models() -> list[type]:
	"""Return every mapped subclass of BelongsToTenants."""
	models = []
	pending = list(BelongsToTenants.__subclasses__())
	while pending:
		cls = pending.pop()
		pending.extend(cls.__subclasses__())
		if cls in models:
			continue
		if sa_inspect(cls, raiseerr=False) is not None:
			models.append(cls)
	return models
