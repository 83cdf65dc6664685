# (c) Copyright Datacraft, 2026
"""
Tenant middleware for FastAPI.

Resolves the tenant id from the request and runs the request inside a
tenant scope of the TenantManager.
"""
import logging
from typing import Any, Awaitable, Callable

from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .config import Settings
from .manager import TenantManager

logger = logging.getLogger(__name__)


class TenantResolutionStrategy:
	"""Base class for tenant resolution strategies."""

	async def resolve(self, request: Request) -> str | None:
		"""Resolve tenant id from request. Returns None if no tenant found."""
		raise NotImplementedError


class HeaderStrategy(TenantResolutionStrategy):
	"""Resolve tenant from a request header."""

	def __init__(self, header: str = "X-Tenant-ID"):
		self.header = header

	async def resolve(self, request: Request) -> str | None:
		return request.headers.get(self.header) or None


class HostHeaderStrategy(TenantResolutionStrategy):
	"""Resolve tenant from the Host header: <tenant>.base_domain or a known custom domain."""

	def __init__(self, base_domain: str = "localhost", domains: dict[str, str] | None = None):
		self.base_domain = base_domain
		self.domains = domains or {}

	async def resolve(self, request: Request) -> str | None:
		host = request.headers.get("host", "")
		# Remove port if present
		host = host.split(":")[0]

		if host.endswith(f".{self.base_domain}"):
			subdomain = host[:-len(self.base_domain) - 1]
			if subdomain:
				return subdomain

		return self.domains.get(host)


class PathPrefixStrategy(TenantResolutionStrategy):
	"""Resolve tenant from URL path prefix: /tenant/<id>/..."""

	def __init__(self, prefix: str = "/tenant"):
		self.prefix = prefix.rstrip("/")

	async def resolve(self, request: Request) -> str | None:
		path = request.url.path
		if not path.startswith(f"{self.prefix}/"):
			return None

		tenant_id = path[len(self.prefix) + 1:].split("/")[0]
		return tenant_id or None


class TokenClaimStrategy(TenantResolutionStrategy):
	"""Resolve tenant from the user set on request.state by auth middleware."""

	def __init__(self, claim_name: str = "tenant_id"):
		self.claim_name = claim_name

	async def resolve(self, request: Request) -> str | None:
		user = getattr(request.state, "user", None)
		if not user:
			return None

		if isinstance(user, dict):
			tenant_id = user.get(self.claim_name)
		else:
			tenant_id = getattr(user, self.claim_name, None)
		return str(tenant_id) if tenant_id else None


class ChainedStrategy(TenantResolutionStrategy):
	"""Try multiple strategies in order until one succeeds."""

	def __init__(self, strategies: list[TenantResolutionStrategy]):
		self.strategies = strategies

	async def resolve(self, request: Request) -> str | None:
		for strategy in self.strategies:
			tenant_id = await strategy.resolve(request)
			if tenant_id:
				return tenant_id
		return None


def build_strategy(settings: Settings) -> TenantResolutionStrategy:
	"""Build the resolution strategy named by settings.tenant_resolution."""
	strategies = []
	for name in settings.resolution_strategies:
		if name == 'token':
			strategies.append(TokenClaimStrategy())
		elif name == 'header':
			strategies.append(HeaderStrategy(settings.tenant_header))
		elif name == 'host':
			strategies.append(HostHeaderStrategy(base_domain=settings.tenant_base_domain))
		elif name == 'path':
			strategies.append(PathPrefixStrategy(settings.tenant_path_prefix))
		else:
			raise ValueError(f"Unknown tenant resolution strategy: {name!r}")

	if len(strategies) == 1:
		return strategies[0]
	return ChainedStrategy(strategies)


class TenantMiddleware(BaseHTTPMiddleware):
	"""
	Scope each request to the tenant resolved from it.

	The resolved id is assigned to `column` in the manager for the
	duration of the request and stored on ``request.state.tenant_id``.
	"""

	def __init__(
		self,
		app: ASGIApp,
		manager: TenantManager,
		column: str = "company_id",
		strategy: TenantResolutionStrategy | None = None,
		require_tenant: bool = False,
		excluded_paths: list[str] | None = None,
		cast: Callable[[str], Any] | None = None,
	):
		super().__init__(app)
		self.manager = manager
		self.column = column
		self.strategy = strategy or HeaderStrategy()
		self.require_tenant = require_tenant
		self.excluded_paths = excluded_paths or []
		self.cast = cast

	async def dispatch(
		self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
	) -> Response:
		request.state.tenant_id = None

		# Skip tenant resolution for excluded paths
		if self._is_excluded_path(request.url.path):
			return await call_next(request)

		tenant_id: Any = await self.strategy.resolve(request)

		if tenant_id is None:
			if self.require_tenant:
				return JSONResponse(
					status_code=400,
					content={"detail": "Tenant not found or not specified"},
				)
			return await call_next(request)

		if self.cast is not None:
			try:
				tenant_id = self.cast(tenant_id)
			except (TypeError, ValueError):
				logger.warning("Invalid tenant id in request: %r", tenant_id)
				return JSONResponse(
					status_code=400,
					content={"detail": "Invalid tenant id"},
				)

		request.state.tenant_id = tenant_id
		async with self.manager.scope(**{self.column: tenant_id}):
			return await call_next(request)

	def _is_excluded_path(self, path: str) -> bool:
		"""Check if path should be excluded from tenant resolution."""
		for excluded in self.excluded_paths:
			if path.startswith(excluded):
				return True
		return False


def get_tenant_manager(request: Request) -> TenantManager:
	"""FastAPI dependency returning the application's TenantManager."""
	return request.app.state.container.make(TenantManager)


def get_tenant_from_request(request: Request) -> Any:
	"""Get the resolved tenant id from request state."""
	return getattr(request.state, "tenant_id", None)


def require_tenant_from_request(request: Request) -> Any:
	"""Get the resolved tenant id, raising if not present."""
	tenant_id = get_tenant_from_request(request)
	if tenant_id is None:
		raise HTTPException(status_code=400, detail="Tenant context required")
	return tenant_id
