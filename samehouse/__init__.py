# (c) Copyright Datacraft, 2026
"""
Column-based multi-tenancy for SQLAlchemy and FastAPI.

Provides the tenant manager, its service provider and the Landlord facade.
"""
from .container import Container, get_container, set_container
from .exceptions import (
	BindingResolutionError,
	SamehouseError,
	TenantColumnUnknownError,
	TenantModelNotFoundError,
)
from .facades import Facade, Landlord
from .manager import SupportsTenants, TenantManager, TenantScope
from .middleware import TenantMiddleware, get_tenant_manager
from .provider import TenantServiceProvider, init_app
from .scopes import ALL_TENANTS, BelongsToTenants, all_tenants

__version__ = "0.1.0"

__all__ = [
	'ALL_TENANTS',
	'BelongsToTenants',
	'BindingResolutionError',
	'Container',
	'Facade',
	'Landlord',
	'SamehouseError',
	'SupportsTenants',
	'TenantColumnUnknownError',
	'TenantManager',
	'TenantMiddleware',
	'TenantModelNotFoundError',
	'TenantScope',
	'TenantServiceProvider',
	'all_tenants',
	'get_container',
	'get_tenant_manager',
	'init_app',
	'set_container',
]
